"""链接、分类、标签相关 Schema"""
from pydantic import Field, StrictBool, field_validator
from datetime import datetime
from typing import Any, List, Optional
from urllib.parse import urlparse
import re

from .base import CamelModel

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")


def validate_absolute_url(url: str) -> str:
    """校验 URL 为带协议和主机名的绝对地址（原样保存，不做规范化）"""
    try:
        parsed = urlparse(url)
    except ValueError:
        raise ValueError("Invalid URL")
    if not parsed.scheme or not _SCHEME_RE.match(parsed.scheme) or not parsed.netloc:
        raise ValueError("Invalid URL")
    return url


def dedupe_ids(ids: Optional[List[str]]) -> Optional[List[str]]:
    """去重并保持顺序"""
    if ids is None:
        return None
    return list(dict.fromkeys(ids))


# ==================== 分类 ====================

class CategoryCreate(CamelModel):
    """创建分类"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CategoryUpdate(CamelModel):
    """更新分类（部分字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CategoryResponse(CamelModel):
    """分类响应"""
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    color: str
    created_at: datetime
    updated_at: datetime


# ==================== 标签 ====================

class TagCreate(CamelModel):
    """创建标签"""
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=20)


class TagUpdate(CamelModel):
    """更新标签（部分字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=20)


class TagResponse(CamelModel):
    """标签响应"""
    id: str
    user_id: str
    name: str
    color: str
    created_at: datetime
    updated_at: datetime


# ==================== 链接 ====================

class LinkCreate(CamelModel):
    """创建链接"""
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., max_length=2000)
    description: Optional[str] = None
    category_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate_absolute_url(v)

    @field_validator("tag_ids")
    @classmethod
    def unique_tag_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return dedupe_ids(v)


class LinkUpdate(CamelModel):
    """
    全量更新链接

    - tag_ids 缺省：保留原有标签；传入（包括空列表）：整体替换
    - category_id 缺省：清空分类
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[str] = Field(None, max_length=2000)
    description: Optional[str] = None
    category_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None
    is_favorite: Optional[StrictBool] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_absolute_url(v)

    @field_validator("tag_ids")
    @classmethod
    def unique_tag_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return dedupe_ids(v)


class LinkFavoriteUpdate(CamelModel):
    """收藏状态切换"""
    is_favorite: StrictBool


class LinkResponse(CamelModel):
    """链接响应（含分类和标签）"""
    id: str
    user_id: str
    title: str
    url: str
    description: Optional[str] = None
    favicon: Optional[str] = None
    is_favorite: bool
    category_id: Optional[str] = None
    category: Optional[CategoryResponse] = None
    tags: List[TagResponse] = []
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def unwrap_link_tags(cls, v: Any) -> Any:
        """LinkTag 关联行 -> Tag，按名称排序"""
        if v is None:
            return []
        tags = [getattr(item, "tag", item) for item in v]
        return sorted(tags, key=lambda t: t["name"] if isinstance(t, dict) else t.name)
