# mlshelf/domain/auth.py
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger


@dataclass
class AuthResult:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def session(self) -> Any:
        return getattr(self.data, "session", None)


class AuthGateway:
    """Pass-through to the backend identity service.

    Calls never raise; failures come back in `AuthResult.error`.
    """

    def __init__(self, client: Any):
        self.client = client

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            data = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            logger.warning("Sign-in failed for {}: {}", email, exc)
            return AuthResult(error=str(exc))
        return AuthResult(data=data)

    def sign_up(self, email: str, password: str) -> AuthResult:
        try:
            data = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            logger.warning("Sign-up failed for {}: {}", email, exc)
            return AuthResult(error=str(exc))
        return AuthResult(data=data)

    def sign_out(self) -> AuthResult:
        try:
            self.client.auth.sign_out()
        except Exception as exc:
            logger.warning("Sign-out failed: {}", exc)
            return AuthResult(error=str(exc))
        return AuthResult()

    def get_current_session(self) -> Any:
        return self.client.auth.get_session()
