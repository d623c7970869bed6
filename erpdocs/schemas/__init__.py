"""
Pydantic schemas for API request and response validation.

Monetary values are Decimal internally and fixed-point strings on the wire.
"""
