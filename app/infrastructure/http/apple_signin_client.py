"""
Verificación de identity tokens de Sign in with Apple.

Valida firma RS256 contra el JWKS público de Apple, emisor
`https://appleid.apple.com` y audiencia `apple_client_id` (bundle id).
"""
import logging
from typing import Any, Dict, Optional

import jwt as pyjwt
from jwt import PyJWKClient

from app.core.config import settings

APPLE_ISSUER = "https://appleid.apple.com"
APPLE_JWKS_URL = "https://appleid.apple.com/auth/keys"

_log = logging.getLogger("maple.auth")
_jwks: Optional[PyJWKClient] = None


class AppleTokenError(Exception):
    pass


def _get_jwks() -> PyJWKClient:
    global _jwks
    if _jwks is None:
        _jwks = PyJWKClient(APPLE_JWKS_URL, cache_keys=True)
    return _jwks


def verify_identity_token(identity_token: str) -> Dict[str, Any]:
    """
    Verifica el identity token y devuelve sus claims (`sub` = Apple user id).
    Requiere `settings.apple_client_id` configurado.
    """
    if not settings.apple_client_id:
        raise AppleTokenError("Falta APPLE_CLIENT_ID en configuración")
    try:
        signing_key = _get_jwks().get_signing_key_from_jwt(identity_token)
        return pyjwt.decode(
            identity_token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.apple_client_id,
            issuer=APPLE_ISSUER,
            options={"require": ["sub", "exp"]},
        )
    except (pyjwt.InvalidTokenError, pyjwt.PyJWKClientError) as e:
        _log.warning("Identity token de Apple inválido: %s", e)
        raise AppleTokenError("Invalid identity token")
