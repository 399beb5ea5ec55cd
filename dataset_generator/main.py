"""FastAPI application entrypoint for the dataset generator."""

from fastapi import FastAPI

from dataset_generator.api.cache import router as cache_router
from dataset_generator.api.datasets import router as datasets_router
from dataset_generator.core.errors import register_error_handlers
from dataset_generator.db import models as _models  # noqa: F401

app = FastAPI(title="Dataset Generator")
register_error_handlers(app)
app.include_router(datasets_router)
app.include_router(cache_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint for service readiness."""
    return {"status": "ok"}
