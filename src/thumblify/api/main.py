"""Thumblify — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :mod:`thumblify.core.config`.
- **Sessions** are server-side: the browser holds an opaque id in a cookie
  and :func:`require_user` resolves it to the owner id, which is passed
  explicitly to every thumbnail operation.
- **Image generation** is performed by
  :class:`~thumblify.core.generator.ThumbnailGenerator` (Gemini) and the
  result is uploaded by :class:`~thumblify.core.media_host.MediaHost`
  (Cloudinary).
- **Records** are persisted by
  :class:`~thumblify.core.thumbnail_store.ThumbnailStore` (SQLite).

Endpoints
---------
========  ================================  ================================
Method    Path                              Purpose
========  ================================  ================================
GET       ``/``                             Liveness check
POST      ``/api/auth/register``            Create an account and log in
POST      ``/api/auth/login``               Log in
POST      ``/api/auth/logout``              Log out
GET       ``/api/auth/verify``              Current user for the session
POST      ``/api/thumbnail/generate``       Generate one thumbnail
DELETE    ``/api/thumbnail/delete/{id}``    Delete a thumbnail (idempotent)
GET       ``/api/user/thumbnail/{id}``      Single thumbnail (polling)
GET       ``/api/user/thumbnails``          All thumbnails of the user
========  ================================  ================================

Usage
-----
CLI (installed entry point)::

    thumblify

Direct invocation::

    python -m thumblify.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from thumblify import __version__
from thumblify.api.models import GenerateRequest, LoginRequest, RegisterRequest
from thumblify.core.auth_store import EmailAlreadyRegistered, SessionStore, UserStore
from thumblify.core.config import config
from thumblify.core.generation import GenerationFailed, generate_thumbnail
from thumblify.core.generator import ThumbnailGenerator
from thumblify.core.media_host import MediaHost
from thumblify.core.thumbnail_store import ThumbnailStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Application lifecycle: stores and external service clients.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Opens the SQLite stores, creates the provider and media host
        wrappers (neither contacts its service until first use) and fails
        any records that were abandoned while the server was down.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    db_path = config.database_path
    app.state.thumbnail_store = ThumbnailStore(db_path)
    app.state.user_store = UserStore(db_path)
    app.state.session_store = SessionStore(db_path)
    app.state.generator = ThumbnailGenerator(config)
    app.state.media_host = MediaHost(config)

    app.state.thumbnail_store.expire_stale(config.generation_timeout_seconds)
    logger.info("Thumblify %s ready (database %s).", __version__, db_path)

    yield


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Thumblify",
    description="AI thumbnail generation API.",
    version=__version__,
    lifespan=lifespan,
)

# The frontend is served from another origin and sends the session cookie,
# so credentials must be allowed and origins listed explicitly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------------------------------------------------------------------
# Session helpers.
# ---------------------------------------------------------------------------


def require_user(request: Request) -> str:
    """Resolve the session cookie to the authenticated user id.

    Args:
        request: The incoming request.

    Returns:
        The owner id for the live session.

    Raises:
        HTTPException: 401 if there is no live session.
    """
    session_id = request.cookies.get(config.session_cookie_name)
    user_id = request.app.state.session_store.resolve(session_id)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def _start_session(request: Request, response: Response, user_id: str) -> None:
    """Open a server-side session and attach its cookie to ``response``."""
    session_id = request.app.state.session_store.create(
        user_id, config.session_max_age_seconds
    )
    response.set_cookie(
        key=config.session_cookie_name,
        value=session_id,
        max_age=config.session_max_age_seconds,
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_samesite,
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/", response_class=PlainTextResponse)
async def index() -> str:
    """Liveness check."""
    return "Server is Live!"


@app.post("/api/auth/register")
def register(req: RegisterRequest, request: Request, response: Response) -> dict:
    """Create an account and log the new user in.

    Raises:
        HTTPException: 400 if the email is already registered.
    """
    try:
        user = request.app.state.user_store.create_user(req.name, req.email, req.password)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=400, detail="User already exists")

    _start_session(request, response, user["_id"])
    return {"message": "Account created successfully", "user": user}


@app.post("/api/auth/login")
def login(req: LoginRequest, request: Request, response: Response) -> dict:
    """Log in with email and password.

    Raises:
        HTTPException: 400 for unknown email or wrong password.
    """
    user = request.app.state.user_store.authenticate(req.email, req.password)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid email or password")

    _start_session(request, response, user["_id"])
    return {"message": "Login successful", "user": user}


@app.post("/api/auth/logout")
def logout(request: Request, response: Response) -> dict:
    """Destroy the current session, if any, and clear the cookie."""
    request.app.state.session_store.destroy(request.cookies.get(config.session_cookie_name))
    response.delete_cookie(
        key=config.session_cookie_name,
        path="/",
        secure=config.cookie_secure,
        httponly=True,
        samesite=config.cookie_samesite,
    )
    return {"message": "Logout successful"}


@app.get("/api/auth/verify")
def verify(request: Request, user_id: str = Depends(require_user)) -> dict:
    """Return the user behind the current session.

    Raises:
        HTTPException: 401 without a session, 404 if the account is gone.
    """
    user = request.app.state.user_store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": user}


@app.post("/api/thumbnail/generate")
def generate(
    req: GenerateRequest,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict:
    """Generate one thumbnail for the current user.

    Declared as a plain ``def`` so FastAPI runs the blocking provider and
    upload calls in its thread pool.

    Returns:
        Dictionary with ``success`` and the completed ``thumbnail`` record.

    Raises:
        HTTPException: 401 without a session; 500 with the provider or
            upload error message when generation fails.
    """
    state = request.app.state
    try:
        thumbnail = generate_thumbnail(
            user_id,
            title=req.title,
            style=req.style,
            aspect_ratio=req.aspect_ratio,
            color_scheme=req.color_scheme,
            user_prompt=req.prompt,
            text_overlay=req.text_overlay,
            store=state.thumbnail_store,
            generator=state.generator,
            media_host=state.media_host,
        )
    except GenerationFailed as exc:
        raise HTTPException(status_code=500, detail=exc.message)

    return {"success": True, "thumbnail": thumbnail}


@app.delete("/api/thumbnail/delete/{thumbnail_id}")
def delete_thumbnail(
    thumbnail_id: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict:
    """Delete one of the user's thumbnails.

    Missing ids and ids owned by other users produce the same success
    message; nothing is removed in those cases.
    """
    request.app.state.thumbnail_store.delete(user_id, thumbnail_id)
    return {"message": "Thumbnail deleted successfully"}


@app.get("/api/user/thumbnail/{thumbnail_id}")
def get_thumbnail(
    thumbnail_id: str,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict:
    """Return one of the user's thumbnails.

    Raises:
        HTTPException: 404 if the id is unknown or owned by another user.
    """
    store: ThumbnailStore = request.app.state.thumbnail_store
    store.expire_stale(config.generation_timeout_seconds, user_id=user_id)

    thumbnail = store.get(user_id, thumbnail_id)
    if thumbnail is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")
    return {"thumbnail": thumbnail}


@app.get("/api/user/thumbnails")
def list_thumbnails(request: Request, user_id: str = Depends(require_user)) -> dict:
    """Return every thumbnail owned by the user, in storage order."""
    store: ThumbnailStore = request.app.state.thumbnail_store
    store.expire_stale(config.generation_timeout_seconds, user_id=user_id)
    return {"thumbnails": store.list_for_owner(user_id)}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~thumblify.core.config.config`
    (``THUMBLIFY_SERVER_HOST``, ``THUMBLIFY_SERVER_PORT`` and
    ``THUMBLIFY_LOG_LEVEL``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``thumblify`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    uvicorn.run(
        "thumblify.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level,
        proxy_headers=True,
        reload=False,
    )


if __name__ == "__main__":
    main()
