"""
Quick demo script to run the sheet endpoints locally.

This script starts a local server and shows how to make requests to it.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting SheetGrid Demo")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print("   - Health Check:  GET  http://localhost:8000/health")
    print("   - Open sheet:    POST http://localhost:8000/sheets")
    print("   - Window:        GET  http://localhost:8000/sheets/{id}/rows?start_row=0&end_row=100")
    print("   - API Docs:           http://localhost:8000/docs")
    print()
    print("Test with curl:")
    print('   curl -X POST "http://localhost:8000/sheets" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"row_count": 100000, "col_count": 10}\'')
    print('   curl -X PUT "http://localhost:8000/sheets/<id>/cells/42/3" \\')
    print('     -H "Content-Type: application/json" -d \'{"value": "hello"}\'')
    print('   curl "http://localhost:8000/sheets/<id>/rows?start_row=40&end_row=45"')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "sheetgrid.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
