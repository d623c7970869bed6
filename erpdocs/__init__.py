"""
erpdocs: financial document engine for quotations, proforma invoices and
purchase orders (line amounts, GST, totals, amount in words, markup).
"""

__version__ = "0.1.0"
