# mlshelf/domain/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ModelRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: str | None = None
    file_path: str
    size_bytes: int
    framework: str | None = None
    format: str | None = None
    tags: List[str] | None = None
    downloads: int = 0
    created_at: datetime | None = None


class DownloadLinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    filename: str
    expires_in: int


class CredentialsRequest(BaseModel):
    email: str
    password: str


class SessionTokensOut(BaseModel):
    access_token: str
    refresh_token: str
    user_id: str
    email: str | None = None


class SignUpResult(BaseModel):
    user_id: Optional[str] = None
    email: Optional[str] = None
    session: Optional[SessionTokensOut] = None


class SessionOut(BaseModel):
    state: str
    user_id: Optional[str] = None
    email: Optional[str] = None
