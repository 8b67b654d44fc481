"""数据模型"""
from .user import User
from .link import Category, Tag, LinkTag, Link
from .api_key import ApiKey

__all__ = [
    "User",
    "Category", "Tag", "LinkTag", "Link",
    "ApiKey",
]
