"""CORS middleware and headers for publicly served uploads."""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from portfolio_api.config import settings

UPLOADS_PATH = "/Uploads"


def setup_cors(app: FastAPI) -> None:
    """Register CORS middleware with allowed origins from settings."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )


class UploadsHeadersMiddleware(BaseHTTPMiddleware):
    """Let any origin embed uploaded images and allow long-lived caching.

    Upload filenames carry a random prefix, so a URL never changes content.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        if request.url.path.startswith(UPLOADS_PATH + "/"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
            response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
        return response


def setup_uploads_headers(app: FastAPI) -> None:
    app.add_middleware(UploadsHeadersMiddleware)
