"""Pydantic Schemas"""
from .user import UserCreate, UserLogin, UserResponse, Token
from .link import (
    CategoryCreate, CategoryUpdate, CategoryResponse,
    TagCreate, TagUpdate, TagResponse,
    LinkCreate, LinkUpdate, LinkFavoriteUpdate, LinkResponse,
)
from .api_key import ApiKeyCreate, ApiKeyUpdate, ApiKeyResponse, ApiKeyCreated

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "Token",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse",
    "TagCreate", "TagUpdate", "TagResponse",
    "LinkCreate", "LinkUpdate", "LinkFavoriteUpdate", "LinkResponse",
    "ApiKeyCreate", "ApiKeyUpdate", "ApiKeyResponse", "ApiKeyCreated",
]
