"""
FastAPI application for the claim intake service.

Provides:
- Dataset and entry CRUD endpoints used by the intake form
- Excel export of one or all datasets
- Health check and status endpoints
"""

# Configure noisy third-party loggers before they're imported
import logging

logging.getLogger("pymongo").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("hpack").setLevel(logging.WARNING)

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..export import build_export
from ..intake import RecordStoreError
from ..storage import RecordStore, create_record_store
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# =============================================================================
# Request Bodies
# =============================================================================


class SubmitRequest(BaseModel):
    """Body of POST /api/submit. Presence is checked by the store."""
    dataset: Optional[Any] = None
    data: Optional[Any] = None


class UpdateRequest(BaseModel):
    """Body of PUT /api/datasets/{name}/entries/{id}."""
    data: Optional[Any] = None


# =============================================================================
# Application Factory
# =============================================================================


def get_store(request: Request) -> RecordStore:
    """Record store owned by the running application."""
    return request.app.state.store


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        settings: Settings to use (default: loaded from environment)
        store: Pre-built record store; built from settings at startup when None
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting claim intake server...")
        app.state.store = store or create_record_store(settings)
        logger.info(f"Storage backend: {app.state.store.backend_name}")
        yield
        logger.info("Shutting down claim intake server...")
        app.state.store.close()

    app = FastAPI(
        title="Claim Intake Service",
        description="Data entry and Excel export for claim intimation records",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Error Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RecordStoreError)
    async def record_store_error(request: Request, exc: RecordStoreError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(status_code=exc.status_code, content={"error": "Database error"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.debug(f"Malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Malformed request body"})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} failed")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------

    @app.get("/")
    def root(store: RecordStore = Depends(get_store)):
        """Root endpoint - basic health check."""
        return {
            "service": "Claim Intake Service",
            "status": "running",
            "storage": store.backend_name,
        }

    @app.get("/health")
    def health_check(store: RecordStore = Depends(get_store)):
        """Detailed health check endpoint."""
        return {
            "status": "healthy",
            "storage": store.backend_name,
            "datasets": len(store.list_dataset_names()),
        }

    # -------------------------------------------------------------------------
    # Dataset & Entry Endpoints
    # -------------------------------------------------------------------------

    @app.get("/api/datasets")
    def list_datasets(store: RecordStore = Depends(get_store)) -> Dict[str, Any]:
        """Names of every dataset holding at least one entry."""
        return {"datasets": store.list_dataset_names()}

    @app.post("/api/submit")
    def submit_entry(body: SubmitRequest, store: RecordStore = Depends(get_store)) -> Dict[str, Any]:
        """Append an entry, creating the dataset on first use."""
        result = store.submit(body.dataset, body.data)
        return {
            "success": True,
            "message": "Data submitted successfully",
            "dataset": result.entry.dataset,
            "rowCount": result.row_count,
        }

    @app.get("/api/datasets/{dataset_name}/entries")
    def list_entries(dataset_name: str, store: RecordStore = Depends(get_store)) -> Dict[str, Any]:
        """Entries of a dataset in creation order."""
        return {"entries": [entry.to_api() for entry in store.list_entries(dataset_name)]}

    @app.put("/api/datasets/{dataset_name}/entries/{entry_id}")
    def update_entry(
        dataset_name: str,
        entry_id: str,
        body: UpdateRequest,
        store: RecordStore = Depends(get_store),
    ) -> Dict[str, Any]:
        """Replace every field of an entry."""
        store.update_entry(dataset_name, entry_id, body.data)
        return {"success": True, "message": "Entry updated successfully"}

    @app.delete("/api/datasets/{dataset_name}/entries/{entry_id}")
    def delete_entry(
        dataset_name: str,
        entry_id: str,
        store: RecordStore = Depends(get_store),
    ) -> Dict[str, Any]:
        """Remove an entry."""
        store.delete_entry(dataset_name, entry_id)
        return {"success": True, "message": "Entry deleted successfully"}

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    @app.get("/api/export")
    def export_datasets(dataset: Optional[str] = None, store: RecordStore = Depends(get_store)):
        """Download one dataset (``?dataset=name``) or all datasets as .xlsx."""
        export = build_export(store, dataset)
        disposition = f"attachment; filename*=UTF-8''{quote(export.filename)}"
        return Response(
            content=export.content,
            media_type=export.media_type,
            headers={"Content-Disposition": disposition},
        )

    return app


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Run the FastAPI server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
