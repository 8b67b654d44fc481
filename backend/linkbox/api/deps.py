"""
认证依赖

所有资源路由第一步都要解析调用者身份，未登录直接返回 401：
- 会话 Cookie（登录时签发的 JWT）
- Authorization: Bearer <JWT>
- x-api-key 请求头（仅资源路由，供启动器客户端使用）
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models import ApiKey, User
from ..utils.security import decode_token, hash_api_key

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)
api_key_scheme = APIKeyHeader(name=settings.API_KEY_HEADER, auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_session_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    db: AsyncSession,
) -> Optional[User]:
    """从 Cookie 或 Bearer 令牌解析会话用户，解析失败返回 None"""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        return None

    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        logger.info("无效的会话令牌")
        return None

    result = await db.execute(select(User).where(User.id == payload.get("sub")))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None
    return user


async def resolve_api_key_user(key: str, db: AsyncSession) -> Optional[User]:
    """
    校验 API Key 并返回所属用户

    Key 必须启用、未过期、剩余次数为空或大于 0；设置了剩余次数的每次使用扣减 1
    """
    result = await db.execute(select(ApiKey).where(ApiKey.key_hash == hash_api_key(key)))
    api_key = result.scalar_one_or_none()
    if api_key is None:
        logger.info("未知的 API Key")
        return None

    now = datetime.utcnow()
    if not api_key.enabled:
        logger.info("API Key 已禁用: %s", api_key.id)
        return None
    if api_key.expires_at is not None and api_key.expires_at <= now:
        logger.info("API Key 已过期: %s", api_key.id)
        return None
    if api_key.remaining is not None:
        if api_key.remaining <= 0:
            logger.info("API Key 次数已用完: %s", api_key.id)
            return None
        api_key.remaining -= 1

    api_key.last_used_at = now

    result = await db.execute(select(User).where(User.id == api_key.user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None

    await db.flush()
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """只接受会话（Cookie / Bearer）"""
    user = await resolve_session_user(request, credentials, db)
    if user is None:
        raise _unauthorized()
    return user


async def get_current_user_or_api_key(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    api_key: Optional[str] = Depends(api_key_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """会话优先，其次 API Key"""
    user = await resolve_session_user(request, credentials, db)
    if user is None and api_key:
        user = await resolve_api_key_user(api_key, db)
    if user is None:
        raise _unauthorized()
    return user
