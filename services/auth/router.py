"""
services/auth/router.py
Session endpoints for the console.
Sign-in happens at the identity service; the console only reads the
current admin and signs out by deny-listing the token.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from config.redis_client import get_redis, revoke_token
from config.settings import settings
from shared.middleware.auth import TokenData, get_token_data, require_admin
from shared.models.models import User
from shared.utils.rows import row_to_dict
from shared.utils.security import get_token_remaining_ttl

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/logout", summary="Sign out")
async def logout(
    token_data: TokenData = Depends(get_token_data),
    redis=Depends(get_redis),
):
    """
    Add the token's JTI to the Redis deny-list for the rest of its lifetime,
    then send the browser to the login page.
    """
    ttl = get_token_remaining_ttl(token_data.payload)
    if token_data.jti and ttl > 0:
        await revoke_token(redis, token_data.jti, ttl)
    logger.info(f"User {token_data.user_id} signed out")
    return RedirectResponse(url=settings.LOGIN_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/me", summary="Get current admin")
async def get_me(current_user: User = Depends(require_admin)):
    return row_to_dict(current_user)
