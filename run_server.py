#!/usr/bin/env python3
"""
Run script for the claim intake API.

Usage:
    python run_server.py

Make sure to:
1. Copy .env.example to .env and pick a STORAGE_BACKEND
2. Fill in MONGODB_URI or SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY if needed
3. Point the intake form's /api proxy at http://localhost:{PORT}
"""

import logging
import os
import sys

# Suppress noisy debug output from third-party libraries
logging.getLogger("pymongo").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def main():
    """Run the API server."""
    import uvicorn
    from src.api.app import configure_logging
    from src.utils.config import get_settings

    settings = get_settings()
    configure_logging(settings)

    print("=" * 60)
    print("Claim Intake Service")
    print("=" * 60)
    print(f"Server: http://{settings.host}:{settings.port}")
    print(f"Storage backend: {settings.storage_backend}")
    print("=" * 60)
    print()
    print("Endpoints:")
    print(f"  - Health: http://{settings.host}:{settings.port}/health")
    print(f"  - Datasets: GET /api/datasets")
    print(f"  - Submit: POST /api/submit")
    print(f"  - Export: GET /api/export[?dataset=name]")
    print()

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
