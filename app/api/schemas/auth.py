"""Schemas de autenticación (Sign in with Apple + refresh)."""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class AppleUserHint(BaseModel):
    email: Optional[str] = None


class AppleSignInIn(BaseModel):
    identityToken: str
    authorizationCode: Optional[str] = None
    user: Optional[AppleUserHint] = None


class RefreshIn(BaseModel):
    refreshToken: str


class UserOut(BaseModel):
    id: str
    appleUserId: str
    email: Optional[str] = None
    settings: Dict[str, Any] = {}


class TokenPairOut(BaseModel):
    accessToken: str
    refreshToken: str


class AppleSignInOut(TokenPairOut):
    user: UserOut
