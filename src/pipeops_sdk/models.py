"""Pydantic models for PipeOps API payloads."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S",
)

# strptime's %f takes at most six digits; servers may send nanoseconds.
_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip().strip('"')
    if text in ("", "null"):
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(r"\1", text, count=1)
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"could not parse time: {value}")


Timestamp = Annotated[Optional[datetime], BeforeValidator(parse_timestamp)]


class APIModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Envelope(APIModel):
    status: str = ""
    message: str = ""


class User(APIModel):
    id: Optional[str] = None
    uuid: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = False
    email_verified: bool = False
    created_at: Timestamp = None
    updated_at: Timestamp = None


# -- auth ---------------------------------------------------------------


class LoginRequest(APIModel):
    email: str
    password: str


class LoginData(APIModel):
    token: str = ""
    user: User = Field(default_factory=User)


class LoginResponse(Envelope):
    data: LoginData = Field(default_factory=LoginData)


class SignupRequest(APIModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SignupData(APIModel):
    user: User = Field(default_factory=User)


class SignupResponse(Envelope):
    data: SignupData = Field(default_factory=SignupData)


class ChangePasswordRequest(APIModel):
    old_password: str
    new_password: str


class VerifyLoginRequest(APIModel):
    email: str
    code: str


class ResetPasswordRequest(APIModel):
    token: str
    new_password: str


# -- oauth --------------------------------------------------------------


class AuthorizeOptions(APIModel):
    client_id: str
    redirect_uri: str
    response_type: str = "code"
    scope: Optional[str] = None
    state: Optional[str] = None


class TokenRequest(APIModel):
    grant_type: str
    client_id: str
    client_secret: str
    code: Optional[str] = None
    redirect_uri: Optional[str] = None
    refresh_token: Optional[str] = None


class TokenResponse(APIModel):
    access_token: str = ""
    token_type: str = ""
    expires_in: int = 0
    refresh_token: Optional[str] = None
    scope: Optional[str] = None


class UserInfo(APIModel):
    sub: str = ""
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None


class UserInfoResponse(Envelope):
    data: UserInfo = Field(default_factory=UserInfo)


# -- projects -----------------------------------------------------------


class Project(APIModel):
    id: Optional[str] = None
    uuid: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    server_id: Optional[str] = None
    environment_id: Optional[str] = None
    workspace_id: Optional[str] = None
    repository: Optional[str] = None
    branch: Optional[str] = None
    build_command: Optional[str] = None
    start_command: Optional[str] = None
    port: Optional[int] = None
    framework: Optional[str] = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class ProjectListOptions(APIModel):
    workspace_id: Optional[str] = None
    server_id: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None


class ProjectsData(APIModel):
    projects: List[Project] = Field(default_factory=list)


class ProjectsResponse(Envelope):
    data: ProjectsData = Field(default_factory=ProjectsData)


class ProjectData(APIModel):
    project: Project = Field(default_factory=Project)


class ProjectResponse(Envelope):
    data: ProjectData = Field(default_factory=ProjectData)


class CreateProjectRequest(APIModel):
    name: str
    server_id: str
    environment_id: str
    repository: str
    branch: str
    description: Optional[str] = None
    build_command: Optional[str] = None
    start_command: Optional[str] = None
    port: Optional[int] = None
    framework: Optional[str] = None
    env_vars: Optional[Dict[str, Any]] = None


class UpdateProjectRequest(APIModel):
    name: Optional[str] = None
    description: Optional[str] = None
    build_command: Optional[str] = None
    start_command: Optional[str] = None
    port: Optional[int] = None


# -- service account tokens ---------------------------------------------


class ServiceAccountToken(APIModel):
    uuid: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    token: Optional[str] = None
    workspace_id: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
    expires_at: Timestamp = None
    created_at: Timestamp = None
    updated_at: Timestamp = None
    last_used_at: Timestamp = None
    is_active: bool = False


class ServiceAccountTokenRequest(APIModel):
    name: str
    description: Optional[str] = None
    permissions: Optional[List[str]] = None
    expires_at: Optional[str] = None


class ServiceAccountTokenUpdateRequest(APIModel):
    name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ServiceAccountTokenData(APIModel):
    token: ServiceAccountToken = Field(default_factory=ServiceAccountToken)


class ServiceAccountTokenResponse(Envelope):
    data: ServiceAccountTokenData = Field(default_factory=ServiceAccountTokenData)


class ServiceAccountTokenListData(APIModel):
    tokens: List[ServiceAccountToken] = Field(default_factory=list)
    total: int = 0


class ServiceAccountTokenListResponse(Envelope):
    data: ServiceAccountTokenListData = Field(default_factory=ServiceAccountTokenListData)
