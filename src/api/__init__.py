"""
HTTP API for the claim intake form.

Dataset/entry CRUD and Excel export over FastAPI.
"""

from .app import create_app, get_store, main

__all__ = ["create_app", "get_store", "main"]
