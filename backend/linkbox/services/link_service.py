"""链接存储操作：查询过滤、归属校验、标签集合原子替换"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, exists, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Category, Link, LinkTag, Tag

logger = logging.getLogger(__name__)


def _with_relations(query):
    """预加载分类和标签（异步会话不能懒加载）"""
    return query.options(
        selectinload(Link.category),
        selectinload(Link.tags).selectinload(LinkTag.tag),
    )


def escape_like(value: str) -> str:
    """转义 LIKE 通配符"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_links(
    db: AsyncSession,
    user_id: str,
    search: Optional[str] = None,
    category_id: Optional[str] = None,
    tag_id: Optional[str] = None,
    favorites_only: bool = False,
) -> Sequence[Link]:
    """
    按条件列出用户的链接，条件之间为 AND

    search 对标题、描述、URL 做不区分大小写的子串匹配（三者 OR）
    """
    query = select(Link).where(Link.user_id == user_id)

    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.where(
            or_(
                Link.title.ilike(pattern, escape="\\"),
                Link.description.ilike(pattern, escape="\\"),
                Link.url.ilike(pattern, escape="\\"),
            )
        )

    if category_id:
        query = query.where(Link.category_id == category_id)

    if tag_id:
        query = query.where(
            exists().where(LinkTag.link_id == Link.id, LinkTag.tag_id == tag_id)
        )

    if favorites_only:
        query = query.where(Link.is_favorite.is_(True))

    query = query.order_by(Link.created_at.desc())
    result = await db.execute(_with_relations(query))
    return result.scalars().all()


async def get_link(
    db: AsyncSession, user_id: str, link_id: str, with_relations: bool = True
) -> Optional[Link]:
    """获取用户自己的链接，不存在或不属于该用户返回 None"""
    query = select(Link).where(Link.id == link_id, Link.user_id == user_id)
    if with_relations:
        query = _with_relations(query)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def reload_link(db: AsyncSession, link_id: str) -> Link:
    """写入后重新查询，刷新关联数据"""
    result = await db.execute(
        _with_relations(select(Link).where(Link.id == link_id)).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def category_belongs_to(db: AsyncSession, user_id: str, category_id: str) -> bool:
    """分类是否属于该用户"""
    result = await db.execute(
        select(Category.id).where(Category.id == category_id, Category.user_id == user_id)
    )
    return result.scalar_one_or_none() is not None


async def tags_belong_to(db: AsyncSession, user_id: str, tag_ids: List[str]) -> bool:
    """所有标签都属于该用户才返回 True"""
    if not tag_ids:
        return True
    result = await db.execute(
        select(func.count(Tag.id)).where(Tag.id.in_(tag_ids), Tag.user_id == user_id)
    )
    return result.scalar_one() == len(set(tag_ids))


async def replace_link_tags(db: AsyncSession, link_id: str, tag_ids: List[str]) -> None:
    """
    用新集合整体替换链接的标签

    删除旧关联和插入新关联在同一个 SAVEPOINT 中完成，任一步失败都会回滚到替换前的状态
    """
    rows = [{"link_id": link_id, "tag_id": tag_id} for tag_id in dict.fromkeys(tag_ids)]
    async with db.begin_nested():
        await db.execute(LinkTag.__table__.delete().where(LinkTag.link_id == link_id))
        if rows:
            await db.execute(insert(LinkTag.__table__), rows)
    logger.info("链接 %s 标签已替换为 %d 个", link_id, len(tag_ids))


async def detach_category(db: AsyncSession, category_id: str) -> None:
    """删除分类前解除链接上的引用（链接本身保留）"""
    await db.execute(
        update(Link.__table__).where(Link.category_id == category_id).values(category_id=None)
    )


async def remove_tag_links(db: AsyncSession, tag_id: str) -> None:
    """删除标签前移除其关联行"""
    await db.execute(delete(LinkTag.__table__).where(LinkTag.tag_id == tag_id))


async def add_link_tags(db: AsyncSession, link_id: str, tag_ids: List[str]) -> None:
    """为新建链接写入标签关联"""
    rows = [{"link_id": link_id, "tag_id": tag_id} for tag_id in dict.fromkeys(tag_ids)]
    if rows:
        await db.execute(insert(LinkTag.__table__), rows)


async def delete_link(db: AsyncSession, link: Link) -> None:
    """删除链接及其标签关联"""
    await db.execute(delete(LinkTag.__table__).where(LinkTag.link_id == link.id))
    await db.delete(link)
