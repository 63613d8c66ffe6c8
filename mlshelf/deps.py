# mlshelf/deps.py
from __future__ import annotations
from typing import Any, Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request, Response, UploadFile

from .core import backend
from .core.config import Settings
from .domain.auth import AuthGateway
from .domain.models import ModelFile
from .domain.repos import ModelRepo
from .domain.session import SessionContext, SessionTokens
from .domain.shelf import ModelShelf
from .domain.storage import BlobStore, SupabaseBlobStore

ACCESS_COOKIE = "mlshelf_access_token"
REFRESH_COOKIE = "mlshelf_refresh_token"


def app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend_client(settings: Settings = Depends(app_settings)) -> Any:
    return backend.create_backend_client(settings)


def request_tokens(
    request: Request,
    authorization: str | None = Header(default=None),
    x_refresh_token: str | None = Header(default=None),
) -> Optional[SessionTokens]:
    """Bearer header first (API clients), then the session cookies (browser)."""
    if authorization and authorization.lower().startswith("bearer "):
        return SessionTokens(authorization.split(" ", 1)[1], x_refresh_token or "")
    access = request.cookies.get(ACCESS_COOKIE)
    if access:
        return SessionTokens(access, request.cookies.get(REFRESH_COOKIE, ""))
    return None


def get_session_context(
    request: Request,
    client: Any = Depends(get_backend_client),
    tokens: Optional[SessionTokens] = Depends(request_tokens),
) -> Iterator[SessionContext]:
    with SessionContext(client) as ctx:
        ctx.start(tokens)
        # Read back by SessionCookieMiddleware once the response is built.
        request.state.session_context = ctx
        yield ctx


def require_user(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_authenticated:
        raise HTTPException(status_code=401, detail="Sign in required")
    return ctx


def get_repo(
    ctx: SessionContext = Depends(get_session_context),
    settings: Settings = Depends(app_settings),
) -> ModelRepo:
    return ModelRepo(ctx.client, settings.MODELS_TABLE)


def get_blob_store(
    ctx: SessionContext = Depends(get_session_context),
    settings: Settings = Depends(app_settings),
) -> BlobStore:
    return SupabaseBlobStore(ctx.client, settings.MODELS_BUCKET)


def get_shelf(
    repo: ModelRepo = Depends(get_repo),
    blobs: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(app_settings),
) -> ModelShelf:
    return ModelShelf.from_settings(repo, blobs, settings)


def get_auth_gateway(ctx: SessionContext = Depends(get_session_context)) -> AuthGateway:
    return AuthGateway(ctx.client)


# ---- session cookies ----
def set_session_cookies(response: Response, session: Any, settings: Settings) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        session.access_token,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        session.refresh_token,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)


def rotated_session(request: Request, ctx: Optional[SessionContext]) -> Any:
    """Session whose tokens differ from the caller's cookies, or None.

    The backend rotates the refresh token when it renews an expired access
    token; the browser must receive the new pair or its next renewal fails.
    """
    if ctx is None or ctx.session is None:
        return None
    access = request.cookies.get(ACCESS_COOKIE)
    if not access:
        return None
    current = (ctx.session.access_token, ctx.session.refresh_token)
    if current == (access, request.cookies.get(REFRESH_COOKIE, "")):
        return None
    return ctx.session


# ---- uploads ----
async def read_model_file(file: Optional[UploadFile], max_bytes: int) -> Optional[ModelFile]:
    """Read at most one byte past the limit; the reported size stays the real one."""
    if file is None or not file.filename:
        return None
    content = await file.read(max_bytes + 1)
    return ModelFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        reported_size=max(len(content), file.size or 0),
    )
