"""API Key 路由（只接受会话认证，不能用 API Key 管理 API Key）"""
import logging
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...models import User, ApiKey
from ...schemas import ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse, ApiKeyCreated
from ...utils.security import API_KEY_START_LENGTH, generate_api_key, hash_api_key
from ..deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_key(db: AsyncSession, user_id: str, key_id: str) -> ApiKey:
    result = await db.execute(
        select(ApiKey).where(ApiKey.id == key_id, ApiKey.user_id == user_id)
    )
    api_key = result.scalar_one_or_none()
    if not api_key:
        raise HTTPException(status_code=404, detail="API key not found")
    return api_key


@router.get("", response_model=List[ApiKeyResponse])
async def get_api_keys(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取 API Key 列表（不含明文）"""
    result = await db.execute(
        select(ApiKey)
        .where(ApiKey.user_id == current_user.id)
        .order_by(ApiKey.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ApiKeyCreated)
async def create_api_key(
    key_in: ApiKeyCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """创建 API Key，明文只在本次响应中返回"""
    plain_key = generate_api_key(key_in.prefix)
    expires_at = None
    if key_in.expires_in is not None:
        expires_at = datetime.utcnow() + timedelta(seconds=key_in.expires_in)

    api_key = ApiKey(
        user_id=current_user.id,
        name=key_in.name,
        prefix=key_in.prefix,
        start=plain_key[:API_KEY_START_LENGTH],
        key_hash=hash_api_key(plain_key),
        remaining=key_in.remaining,
        expires_at=expires_at,
        permissions=key_in.permissions,
        meta=key_in.metadata,
    )
    db.add(api_key)
    await db.flush()
    await db.refresh(api_key)
    logger.info("用户 %s 创建 API Key %s", current_user.id, api_key.id)

    response = ApiKeyCreated.model_validate(
        {**ApiKeyResponse.model_validate(api_key).model_dump(), "key": plain_key}
    )
    return response


@router.put("/{key_id}", response_model=ApiKeyResponse)
async def update_api_key(
    key_id: str,
    key_in: ApiKeyUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """更新 API Key 名称或启用状态"""
    api_key = await _get_owned_key(db, current_user.id, key_id)

    if key_in.name is not None:
        api_key.name = key_in.name
    if key_in.enabled is not None:
        api_key.enabled = key_in.enabled

    await db.flush()
    await db.refresh(api_key)
    return api_key


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(
    key_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """删除 API Key"""
    api_key = await _get_owned_key(db, current_user.id, key_id)

    await db.delete(api_key)
    await db.flush()
    logger.info("用户 %s 删除 API Key %s", current_user.id, key_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
