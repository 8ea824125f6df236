"""Autenticación: Sign in with Apple y refresh de tokens."""
from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service
from app.api.schemas.auth import AppleSignInIn, AppleSignInOut, RefreshIn, TokenPairOut
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/apple", response_model=AppleSignInOut, summary="Sign in with Apple")
def apple_sign_in(payload: AppleSignInIn, svc: AuthService = Depends(get_auth_service)):
    hint = payload.user.email if payload.user else None
    return svc.apple_sign_in(payload.identityToken, hint)


@router.post("/refresh", response_model=TokenPairOut, summary="Renovar tokens")
def refresh(payload: RefreshIn, svc: AuthService = Depends(get_auth_service)):
    return svc.refresh(payload.refreshToken)
