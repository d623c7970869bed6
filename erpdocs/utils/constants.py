"""
Constants shared by the schemas, the engine and the routes.

Document kinds double as the `kind` column of the document table and the
`{kind}` path parameter of the document routes.
"""

DOCUMENT_KINDS = {
    'QUOTATION': 'quotation',
    'PROFORMA': 'proforma',
    'PURCHASE_ORDER': 'purchaseOrder',
}

DISCOUNT_KINDS = {
    'AMOUNT': 'amount',
    'PERCENTAGE': 'percentage',
}

# Outcomes of the jurisdiction decision
TAX_REGIMES = {
    # Counterparty in another country: no GST
    'EXEMPT': 'exempt',
    # Same region as the company: CGST + SGST
    'SPLIT': 'split',
    # Same country, other region: IGST
    'UNIFIED': 'unified',
    # Region not captured yet: zero tax until it is
    'PENDING': 'pending',
}

DEFAULT_UNIT = "nos"
