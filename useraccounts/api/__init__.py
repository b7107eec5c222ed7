"""HTTP API - FastAPI application, dependencies, and endpoint routers."""
