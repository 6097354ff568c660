"""Entry point for the backend service.

Exposes the FastAPI `app` from api/main.py at the repository root so that
`uvicorn main:app` works regardless of the working directory.
"""

from api.main import app  # re-export for uvicorn
