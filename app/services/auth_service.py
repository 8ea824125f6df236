"""
Sign in with Apple y refresh de tokens propios.

El `sub` de los tokens emitidos es el Apple user id; es el `userId` con el que
trabajan tags, papers y prompts.
"""
import logging
from typing import Any, Callable, Dict, Optional

from pymongo.database import Database

from app.core.exceptions import NotFound, Unauthorized, ValidationError
from app.infrastructure.http.apple_signin_client import AppleTokenError, verify_identity_token
from app.repositories import user_repo
from app.services import token_service
from app.services.prompt_service import PromptService

_log = logging.getLogger("maple.auth")


class AuthService:
    def __init__(
        self,
        db: Database,
        prompts: PromptService,
        verify_apple_token: Callable[[str], Dict[str, Any]] = verify_identity_token,
    ):
        self.db = db
        self.prompts = prompts
        self.verify_apple_token = verify_apple_token

    def apple_sign_in(self, identity_token: str, user_email: Optional[str] = None) -> Dict[str, Any]:
        if not identity_token:
            raise ValidationError("Missing identityToken")
        try:
            claims = self.verify_apple_token(identity_token)
        except AppleTokenError:
            raise Unauthorized("Invalid identity token")

        apple_user_id = claims["sub"]
        email = claims.get("email") or user_email
        user = user_repo.find_by_apple_id(self.db, apple_user_id)
        if not user:
            if not email:
                raise ValidationError("Email is required for first-time sign in")
            user = user_repo.insert_user(self.db, apple_user_id, email)
            self.prompts.initialize_built_in_prompts(apple_user_id)
            _log.info("usuario nuevo apple=%s", apple_user_id)
        elif email and user.get("email") != email.strip().lower():
            user_repo.set_email(self.db, apple_user_id, email)
            user = user_repo.find_by_apple_id(self.db, apple_user_id)

        return {
            "accessToken": token_service.create_access_token(user_id=apple_user_id, email=user.get("email")),
            "refreshToken": token_service.create_refresh_token(user_id=apple_user_id),
            "user": user_repo.public_user(user),
        }

    def refresh(self, refresh_token: str) -> Dict[str, str]:
        if not refresh_token:
            raise ValidationError("Missing refreshToken")
        claims = token_service.verify_refresh_token(refresh_token)
        user = user_repo.find_by_apple_id(self.db, claims["sub"])
        if not user:
            raise NotFound("User not found")
        return {
            "accessToken": token_service.create_access_token(user_id=user["appleUserId"], email=user.get("email")),
            "refreshToken": token_service.create_refresh_token(user_id=user["appleUserId"]),
        }
