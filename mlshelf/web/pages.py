# mlshelf/web/pages.py
"""Server-rendered pages: home grid, dashboard, upload form and sign-in."""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger

from .. import deps
from ..core.config import Settings
from ..domain.auth import AuthGateway
from ..domain.errors import ModelValidationError, UploadError
from ..domain.models import ModelMetadata
from ..domain.session import SessionContext
from ..domain.shelf import ModelShelf
from ..domain.validation import (
    ACCEPTED_EXTENSIONS,
    FRAMEWORKS,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    default_model_name,
    parse_tags,
    validate_credentials,
)
from .filters import format_date, format_size

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["filesize"] = format_size
templates.env.filters["shortdate"] = format_date

router = APIRouter()

EMPTY_FORM = {"name": "", "description": "", "framework": "", "format": "", "tags": ""}


def render(
    request: Request,
    name: str,
    ctx: Optional[SessionContext] = None,
    status_code: int = 200,
    **context: Any,
):
    context.setdefault("session", ctx)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _safe_next(target: str | None) -> str:
    if not target or not target.startswith("/") or target.startswith("//"):
        return "/dashboard"
    return target


def _upload_context(form: Dict[str, str], error: str | None = None) -> Dict[str, Any]:
    return {
        "form": form,
        "upload_error": error,
        "show_upload": True,
        "frameworks": FRAMEWORKS,
        "accept": ",".join(ACCEPTED_EXTENSIONS),
        "max_name": MAX_NAME_LENGTH,
        "max_description": MAX_DESCRIPTION_LENGTH,
    }


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


@router.get("/")
def home(
    request: Request,
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.get_session_context),
):
    shelf.refresh()
    return render(request, "home.html", ctx, models=shelf.models, error=shelf.error)


@router.get("/dashboard")
def dashboard(
    request: Request,
    upload: bool = False,
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.get_session_context),
):
    if not ctx.is_authenticated:
        return RedirectResponse("/auth?next=/dashboard", status_code=303)
    context = _upload_context(dict(EMPTY_FORM))
    context["show_upload"] = upload
    return render(
        request,
        "dashboard.html",
        ctx,
        models=shelf.user_models(ctx.user_id),
        **context,
    )


@router.post("/models/{id}/download")
def download(
    id: str,
    request: Request,
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.get_session_context),
):
    record = shelf.find(id)
    if record is None:
        shelf.refresh()
        return render(
            request,
            "home.html",
            ctx,
            status_code=404,
            models=shelf.models,
            error=shelf.error,
            notice="That model no longer exists.",
        )

    link = shelf.download(record, refresh=False)
    if link is None:
        shelf.refresh()
        return render(
            request,
            "home.html",
            ctx,
            status_code=502,
            models=shelf.models,
            error=shelf.error,
            failed_download=record,
        )
    # The browser follows the redirect and saves the file under link.filename.
    return RedirectResponse(link.url, status_code=303)


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


@router.post("/dashboard/upload")
async def upload_model(
    request: Request,
    file: Optional[UploadFile] = File(default=None),
    name: str = Form(default=""),
    description: str = Form(default=""),
    framework: str = Form(default=""),
    format: str = Form(default=""),
    tags: str = Form(default=""),
    shelf: ModelShelf = Depends(deps.get_shelf),
    ctx: SessionContext = Depends(deps.get_session_context),
):
    if not ctx.is_authenticated:
        return RedirectResponse("/auth?next=/dashboard", status_code=303)

    model_file = await deps.read_model_file(file, shelf.max_upload_bytes)
    if model_file is not None and not name.strip():
        name = default_model_name(model_file.filename)

    form = {
        "name": name,
        "description": description,
        "framework": framework,
        "format": format,
        "tags": tags,
    }
    metadata = ModelMetadata(
        name=name,
        description=description,
        framework=framework,
        format=format,
        tags=parse_tags(tags),
    )

    try:
        shelf.upload(model_file, metadata, ctx.user_id)
    except (ModelValidationError, UploadError) as e:
        status_code = 400 if isinstance(e, ModelValidationError) else 502
        return render(
            request,
            "dashboard.html",
            ctx,
            status_code=status_code,
            models=shelf.user_models(ctx.user_id),
            **_upload_context(form, str(e)),
        )

    return RedirectResponse("/dashboard", status_code=303)


# ---------------------------------------------------------------------------
# Sign-in / sign-up / sign-out
# ---------------------------------------------------------------------------


@router.get("/auth")
def auth_page(
    request: Request,
    mode: str = "signin",
    next: str = "/dashboard",
    ctx: SessionContext = Depends(deps.get_session_context),
):
    return render(
        request,
        "auth.html",
        ctx,
        mode="signup" if mode == "signup" else "signin",
        next=_safe_next(next),
        email="",
    )


@router.post("/auth")
def auth_submit(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    mode: str = Form(default="signin"),
    next: str = Form(default="/dashboard"),
    gateway: AuthGateway = Depends(deps.get_auth_gateway),
    ctx: SessionContext = Depends(deps.get_session_context),
    settings: Settings = Depends(deps.app_settings),
):
    mode = "signup" if mode == "signup" else "signin"
    target = _safe_next(next)

    problem = validate_credentials(email, password)
    if problem:
        return render(
            request, "auth.html", ctx, status_code=400,
            mode=mode, next=target, email=email, error=problem,
        )

    result = gateway.sign_up(email, password) if mode == "signup" else gateway.sign_in(email, password)
    if result.error:
        return render(
            request, "auth.html", ctx, status_code=401 if mode == "signin" else 400,
            mode=mode, next=target, email=email, error=result.error,
        )

    session = result.session
    if session is None:
        # Sign-up succeeded but the project requires e-mail confirmation first.
        logger.info("Account created for {}; no session issued", email)
        return render(
            request, "auth.html", ctx,
            mode="signin", next=target, email=email,
            notice="Account created. Confirm your e-mail address, then sign in.",
        )

    response = RedirectResponse(target, status_code=303)
    deps.set_session_cookies(response, session, settings)
    return response


@router.post("/auth/sign-out")
def sign_out(
    gateway: AuthGateway = Depends(deps.get_auth_gateway),
    ctx: SessionContext = Depends(deps.get_session_context),
):
    if ctx.is_authenticated:
        gateway.sign_out()
    response = RedirectResponse("/", status_code=303)
    deps.clear_session_cookies(response)
    return response
