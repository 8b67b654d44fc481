"""分类路由"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...models import User, Category
from ...models.link import DEFAULT_COLOR
from ...schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from ...services import link_service
from ..deps import get_current_user_or_api_key

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_category(db: AsyncSession, user_id: str, category_id: str) -> Category:
    result = await db.execute(
        select(Category).where(
            Category.id == category_id,
            Category.user_id == user_id
        )
    )
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


async def _ensure_name_available(db: AsyncSession, user_id: str, name: str) -> None:
    result = await db.execute(
        select(Category.id).where(Category.user_id == user_id, Category.name == name)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category with this name already exists"
        )


@router.get("", response_model=List[CategoryResponse])
async def get_categories(
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取分类列表（按名称升序）"""
    result = await db.execute(
        select(Category)
        .where(Category.user_id == current_user.id)
        .order_by(Category.name.asc())
    )
    return result.scalars().all()


@router.post("", response_model=CategoryResponse)
async def create_category(
    category_in: CategoryCreate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """创建分类，同名冲突返回 409"""
    await _ensure_name_available(db, current_user.id, category_in.name)

    category = Category(
        user_id=current_user.id,
        name=category_in.name,
        description=category_in.description,
        color=category_in.color or DEFAULT_COLOR,
    )
    db.add(category)
    await db.flush()
    await db.refresh(category)
    logger.info("用户 %s 创建分类 %s", current_user.id, category.id)
    return category


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """获取单个分类"""
    return await _get_owned_category(db, current_user.id, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """更新分类，改名时重新检查唯一性（排除自身）"""
    category = await _get_owned_category(db, current_user.id, category_id)

    if category_in.name is not None and category_in.name != category.name:
        await _ensure_name_available(db, current_user.id, category_in.name)
        category.name = category_in.name
    if category_in.description is not None:
        category.description = category_in.description
    if category_in.color is not None:
        category.color = category_in.color

    await db.flush()
    await db.refresh(category)
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    current_user: User = Depends(get_current_user_or_api_key),
    db: AsyncSession = Depends(get_db)
):
    """删除分类，使用该分类的链接只解除关联"""
    category = await _get_owned_category(db, current_user.id, category_id)

    await link_service.detach_category(db, category.id)
    await db.delete(category)
    await db.flush()
    logger.info("用户 %s 删除分类 %s", current_user.id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
