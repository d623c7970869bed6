"""
Quick demo script for the document endpoints.

This script starts a local server and shows how to make requests to the endpoints.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting ERP Documents Demo")
    print("=" * 60)
    print()
    print("📌 API Endpoints:")
    print("   - Health Check:  GET  http://localhost:8000/health")
    print("   - Calculate:     POST http://localhost:8000/documents/calculate")
    print("   - Preview:       POST http://localhost:8000/documents/{kind}/preview")
    print("   - Commit:        POST http://localhost:8000/documents/{kind}")
    print("   - API Docs:           http://localhost:8000/docs")
    print("   - ReDoc:              http://localhost:8000/redoc")
    print()
    print("   kind is one of: quotation, proforma, purchaseOrder")
    print()
    print("🔐 Authentication:")
    print("   All endpoints (except /health) require:")
    print("   Authorization: Bearer <token>")
    print()
    print("📝 Test with curl:")
    print('   curl -X POST "http://localhost:8000/documents/calculate" \\')
    print('     -H "Authorization: Bearer <token>" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"items": [{"description": "Press", "quantity": 2, "rate": 500}],')
    print('          "counterparty": {"region": "Maharashtra", "country": "India"}}\'')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "erpdocs.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
