# mlshelf/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, status

from ... import deps
from ...domain.auth import AuthGateway
from ...domain.schemas import CredentialsRequest, SessionOut, SessionTokensOut, SignUpResult
from ...domain.session import SessionContext
from ...domain.validation import validate_credentials

router = APIRouter()


def _tokens(session) -> SessionTokensOut:
    return SessionTokensOut(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user_id=str(session.user.id),
        email=session.user.email,
    )


@router.post("/sign-in", response_model=SessionTokensOut)
def sign_in(req: CredentialsRequest, gateway: AuthGateway = Depends(deps.get_auth_gateway)):
    problem = validate_credentials(req.email, req.password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    result = gateway.sign_in(req.email, req.password)
    if result.error or result.session is None:
        raise HTTPException(status_code=401, detail=result.error or "Invalid credentials")
    return _tokens(result.session)


@router.post("/sign-up", response_model=SignUpResult, status_code=status.HTTP_201_CREATED)
def sign_up(req: CredentialsRequest, gateway: AuthGateway = Depends(deps.get_auth_gateway)):
    problem = validate_credentials(req.email, req.password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    result = gateway.sign_up(req.email, req.password)
    if result.error:
        raise HTTPException(status_code=400, detail=result.error)
    user = getattr(result.data, "user", None)
    session = result.session
    return SignUpResult(
        user_id=str(user.id) if user else None,
        email=getattr(user, "email", None),
        session=_tokens(session) if session else None,
    )


@router.post("/sign-out")
def sign_out(
    ctx: SessionContext = Depends(deps.require_user),
    gateway: AuthGateway = Depends(deps.get_auth_gateway),
):
    result = gateway.sign_out()
    if result.error:
        raise HTTPException(status_code=502, detail=result.error)
    return {"detail": "signed out"}


@router.get("/session", response_model=SessionOut)
def whoami(ctx: SessionContext = Depends(deps.get_session_context)):
    return SessionOut(state=ctx.state.value, user_id=ctx.user_id, email=ctx.email)
