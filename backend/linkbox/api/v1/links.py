"""链接路由"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...models import User, Link
from ...schemas import LinkCreate, LinkUpdate, LinkFavoriteUpdate, LinkResponse
from ...services import link_service
from ...utils.url import favicon_for
from ..deps import get_current_user_or_api_key

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_references(
    db: AsyncSession,
    user_id: str,
    category_id: Optional[str],
    tag_ids: Optional[List[str]],
) -> None:
    """分类、标签必须属于当前用户，任一不满足整体失败"""
    if category_id and not await link_service.category_belongs_to(db, user_id, category_id):
        raise HTTPException(
            status_code=404,
            detail="Category not found or does not belong to user"
        )
    if tag_ids and not await link_service.tags_belong_to(db, user_id, tag_ids):
        raise HTTPException(
            status_code=404,
            detail="One or more tags not found or do not belong to user"
        )


@router.get("", response_model=List[LinkResponse])
async def get_links(
    search: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    tag_id: Optional[str] = Query(None, alias="tagId"),
    favorites_only: bool = Query(False, alias="favoritesOnly"),
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取链接列表（按创建时间倒序）"""
    return await link_service.search_links(
        db,
        current_user.id,
        search=search,
        category_id=category_id,
        tag_id=tag_id,
        favorites_only=favorites_only,
    )


@router.post("", response_model=LinkResponse)
async def create_link(
    link_in: LinkCreate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """创建链接及其标签关联"""
    category_id = link_in.category_id or None
    await _check_references(db, current_user.id, category_id, link_in.tag_ids)

    link = Link(
        user_id=current_user.id,
        title=link_in.title,
        url=link_in.url,
        description=link_in.description,
        favicon=favicon_for(link_in.url),
        category_id=category_id,
    )
    db.add(link)
    await db.flush()

    await link_service.add_link_tags(db, link.id, link_in.tag_ids or [])
    logger.info("用户 %s 创建链接 %s", current_user.id, link.id)
    return await link_service.reload_link(db, link.id)


@router.get("/{link_id}", response_model=LinkResponse)
async def get_link(
    link_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取单个链接"""
    link = await link_service.get_link(db, current_user.id, link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    return link


@router.put("/{link_id}", response_model=LinkResponse)
async def update_link(
    link_id: str,
    link_in: LinkUpdate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """
    全量更新链接

    未传 categoryId 会清空分类；未传 tagIds 保留原标签，传入则整体替换
    """
    link = await link_service.get_link(db, current_user.id, link_id, with_relations=False)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")

    category_id = link_in.category_id or None
    await _check_references(db, current_user.id, category_id, link_in.tag_ids)

    if link_in.title is not None:
        link.title = link_in.title
    if link_in.url is not None:
        link.url = link_in.url
        link.favicon = favicon_for(link_in.url) or link.favicon
    if link_in.description is not None:
        link.description = link_in.description
    if link_in.is_favorite is not None:
        link.is_favorite = link_in.is_favorite
    link.category_id = category_id
    link.updated_at = datetime.utcnow()

    await db.flush()
    if link_in.tag_ids is not None:
        await link_service.replace_link_tags(db, link.id, link_in.tag_ids)

    return await link_service.reload_link(db, link.id)


@router.patch("/{link_id}", response_model=LinkResponse)
async def toggle_favorite(
    link_id: str,
    favorite_in: LinkFavoriteUpdate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """只更新收藏状态"""
    link = await link_service.get_link(db, current_user.id, link_id, with_relations=False)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")

    link.is_favorite = favorite_in.is_favorite
    await db.flush()
    return await link_service.reload_link(db, link.id)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """删除链接"""
    link = await link_service.get_link(db, current_user.id, link_id, with_relations=False)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")

    await link_service.delete_link(db, link)
    await db.flush()
    logger.info("用户 %s 删除链接 %s", current_user.id, link_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
