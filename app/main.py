"""
Name: Backend ASGI Entrypoint (app.main)

Responsibilities:
  - Re-export the logistics back-office app for ASGI servers and tooling
  - Keep the import path stable for uvicorn (`uvicorn app.main:app`) and tests

Collaborators:
  - app.api.main: builds the FastAPI app and wraps it with the global rate limiter

Notes/Constraints:
  - No configuration or IO here; importing this module only imports app.api.main
"""

from app.api.main import app

__all__ = ["app"]
