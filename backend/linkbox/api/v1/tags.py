"""标签路由"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...models import User, Tag
from ...models.link import DEFAULT_COLOR
from ...schemas import TagCreate, TagUpdate, TagResponse
from ...services import link_service
from ..deps import get_current_user_or_api_key

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_tag(db: AsyncSession, user_id: str, tag_id: str) -> Tag:
    result = await db.execute(
        select(Tag).where(Tag.id == tag_id, Tag.user_id == user_id)
    )
    tag = result.scalar_one_or_none()
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


async def _ensure_name_available(db: AsyncSession, user_id: str, name: str) -> None:
    result = await db.execute(
        select(Tag.id).where(Tag.user_id == user_id, Tag.name == name)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tag with this name already exists"
        )


@router.get("", response_model=List[TagResponse])
async def get_tags(
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取标签列表（按名称升序）"""
    result = await db.execute(
        select(Tag).where(Tag.user_id == current_user.id).order_by(Tag.name.asc())
    )
    return result.scalars().all()


@router.post("", response_model=TagResponse)
async def create_tag(
    tag_in: TagCreate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """创建标签"""
    await _ensure_name_available(db, current_user.id, tag_in.name)

    tag = Tag(
        user_id=current_user.id,
        name=tag_in.name,
        color=tag_in.color or DEFAULT_COLOR,
    )
    db.add(tag)
    await db.flush()
    await db.refresh(tag)
    logger.info("用户 %s 创建标签 %s", current_user.id, tag.id)
    return tag


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取单个标签"""
    return await _get_owned_tag(db, current_user.id, tag_id)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: str,
    tag_in: TagUpdate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """更新标签"""
    tag = await _get_owned_tag(db, current_user.id, tag_id)

    if tag_in.name is not None and tag_in.name != tag.name:
        await _ensure_name_available(db, current_user.id, tag_in.name)
        tag.name = tag_in.name
    if tag_in.color is not None:
        tag.color = tag_in.color

    await db.flush()
    await db.refresh(tag)
    return tag


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """删除标签及其关联行，链接本身保留"""
    tag = await _get_owned_tag(db, current_user.id, tag_id)

    await link_service.remove_tag_links(db, tag.id)
    await db.delete(tag)
    await db.flush()
    logger.info("用户 %s 删除标签 %s", current_user.id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
