"""
Markup fragments for rendered documents.

Every document kind is assembled from these same fragments by
renderer.render(); there is no per-kind template. Placeholders are filled
with str.format and all values are HTML-escaped by the renderer before
substitution.
"""

DOCUMENT_STYLES = """
:root{--accent:#8b0000;--muted:#666;--border:#333}
body{font-family:'Inter','Segoe UI','Roboto','Helvetica Neue',Arial,sans-serif;margin:0;padding:0;font-size:8pt;color:#222}
.document-container{border:1px solid var(--border);background:#fff}
table{width:100%;border-collapse:collapse}
td,th{border:1px solid var(--border);padding:4px;vertical-align:top}
th{background:#f0f0f0;font-weight:600}
.doc-title{text-align:center;font-size:14px;font-weight:700;color:var(--accent);padding:6px}
.company-name{font-size:16px;font-weight:700}
.company-addr,.muted{color:var(--muted);line-height:1.3}
.c{text-align:center}
.r{text-align:right}
.grand-total td{font-weight:700;background:#f8f8f8}
.section-title{font-weight:600;margin-bottom:2px}
.signature{text-align:right;padding-top:32px}
.disclaimer{text-align:center;font-size:7pt;color:var(--muted)}
"""

DOCUMENT_HTML_FORMAT = """<!doctype html>
<html>
<head>
<meta charset="utf-8" />
<title>{title}</title>
<style>{styles}</style>
</head>
<body>
<div class="document-container {kind}">
<div class="doc-title">{heading}</div>
{body}
</div>
</body>
</html>
"""

HEADER_FORMAT = """<table class="header-table">
<tr><td class="company-cell">
<div class="company-name">{company_name}</div>
<div class="company-addr">{company_lines}</div>
</td></tr>
</table>"""

META_FORMAT = """<table class="meta-table">
<tr>{cells}</tr>
</table>"""

META_CELL_FORMAT = "<td><b>{label}:</b> {value}</td>"

PARTY_FORMAT = """<table class="party-table">
<tr><td>
<div class="section-title">{heading}</div>
<div>{lines}</div>
</td></tr>
</table>"""

ITEMS_TABLE_FORMAT = """<table class="items-table">
<thead><tr>{header_cells}</tr></thead>
<tbody>
{rows}
</tbody>
</table>"""

TOTALS_TABLE_FORMAT = """<table class="totals-table">
{rows}
</table>"""

TOTALS_ROW_FORMAT = '<tr><td>{label}</td><td class="r">{value}</td></tr>'

GRAND_TOTAL_ROW_FORMAT = '<tr class="grand-total"><td>{label}</td><td class="r">{value}</td></tr>'

AMOUNT_IN_WORDS_FORMAT = """<table class="amount-words-table">
<tr><td><b>Amount in Words:</b> {words}</td></tr>
</table>"""

BANK_DETAILS_FORMAT = """<table class="bank-table">
<tr><td>
<div class="section-title">Bank Details:</div>
<div>{lines}</div>
</td></tr>
</table>"""

TERMS_FORMAT = """<table class="terms-table">
<tr><td>
<div class="section-title">Terms &amp; Conditions:</div>
<ol>{items}</ol>
</td></tr>
</table>"""

NOTES_FORMAT = """<table class="notes-table">
<tr><td><div class="section-title">Notes:</div><div>{notes}</div></td></tr>
</table>"""

FOOTER_FORMAT = """<table class="footer-table">
<tr><td class="signature">
<div>For {company_name}</div>
{digital_signature}
<div>Authorised Signatory</div>
</td></tr>
</table>"""

DIGITAL_SIGNATURE_FORMAT = '<div class="digital-signature">Digitally signed by {company_name}</div>'

DISCLAIMER_TEXT = "This is a computer generated document and does not require a physical signature."

DISCLAIMER_FORMAT = '<div class="disclaimer">{text}</div>'

# Tax component labels for the Indian GST regime
SPLIT_TAX_A_LABEL = "CGST"
SPLIT_TAX_B_LABEL = "SGST"
UNIFIED_TAX_LABEL = "IGST"
