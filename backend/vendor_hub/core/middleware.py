"""
CORS middleware — lets the admin portal frontend call the API.
"""
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def apply_cors(app: FastAPI) -> None:
    """Apply CORS middleware; origins come from CORS_ALLOWED_ORIGINS (default "*")."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
