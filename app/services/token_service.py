"""
Emisión y verificación de JWTs.

- Tokens propios de Maple: HS256 con `jwt_secret`, claim `type` = access|refresh.
- Tokens de Auth0: RS256 verificados contra el JWKS del tenant.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

import jwt as pyjwt
from jwt import PyJWKClient

from app.core.config import settings
from app.core.exceptions import AppError, Unauthorized

_log = logging.getLogger("maple.auth")
_auth0_jwks: Optional[PyJWKClient] = None


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _encode(user_id: str, token_type: str, expires: timedelta, extra: Optional[Dict[str, Any]] = None) -> str:
    if not settings.jwt_secret:
        raise AppError("JWT_SECRET is not configured")
    now = _now_utc()
    payload = {
        "sub": user_id,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires).timestamp()),
        "jti": str(uuid4()),
    }
    if extra:
        payload.update(extra)
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(*, user_id: str, email: Optional[str] = None) -> str:
    """Access token válido por `access_token_expire_days`; `sub` es el userId."""
    return _encode(user_id, "access", timedelta(days=settings.access_token_expire_days), {"email": email})


def create_refresh_token(*, user_id: str) -> str:
    return _encode(user_id, "refresh", timedelta(days=settings.refresh_token_expire_days))


def _decode_maple(token: str, expected_type: str) -> Dict[str, Any]:
    if not settings.jwt_secret:
        raise Unauthorized("Invalid token")
    try:
        payload = pyjwt.decode(token, key=settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except pyjwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except pyjwt.InvalidTokenError:
        raise Unauthorized("Invalid token")
    if payload.get("type") != expected_type or not payload.get("sub"):
        raise Unauthorized("Invalid token type")
    return payload


def verify_refresh_token(token: str) -> Dict[str, Any]:
    return _decode_maple(token, "refresh")


def _get_auth0_jwks() -> PyJWKClient:
    global _auth0_jwks
    if _auth0_jwks is None:
        url = f"https://{settings.auth0_domain}/.well-known/jwks.json"
        _log.info("Inicializando JWKS de Auth0: %s", url)
        _auth0_jwks = PyJWKClient(url, cache_keys=True)
    return _auth0_jwks


def _decode_auth0(token: str) -> Dict[str, Any]:
    if not settings.auth0_configured:
        raise Unauthorized("Auth0 is not configured")
    try:
        signing_key = _get_auth0_jwks().get_signing_key_from_jwt(token)
        return pyjwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=f"https://{settings.auth0_domain}/",
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except (pyjwt.InvalidTokenError, pyjwt.PyJWKClientError) as e:
        _log.warning("Token de Auth0 inválido: %s", e)
        raise Unauthorized("Invalid token")


def verify_access_token(token: str) -> Dict[str, Any]:
    """Valida un access token (Auth0 RS256 o Maple HS256) y devuelve sus claims."""
    try:
        alg = pyjwt.get_unverified_header(token).get("alg")
    except pyjwt.DecodeError:
        raise Unauthorized("Invalid token format")
    if alg == "RS256":
        return _decode_auth0(token)
    if alg == settings.jwt_algorithm:
        return _decode_maple(token, "access")
    raise Unauthorized(f"Unsupported token algorithm: {alg}")
