"""API Key 相关 Schema"""
from pydantic import AliasChoices, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import CamelModel
from ..config import settings


class ApiKeyCreate(CamelModel):
    """创建 API Key"""
    name: Optional[str] = Field(None, max_length=100)
    expires_in: Optional[int] = Field(settings.API_KEY_DEFAULT_EXPIRES_IN, ge=1)  # 秒，null 表示永不过期
    prefix: Optional[str] = Field(None, max_length=32, pattern=r"^[A-Za-z0-9_\-]+$")
    remaining: Optional[int] = Field(None, ge=0)
    permissions: Optional[Dict[str, List[str]]] = None
    metadata: Optional[Dict[str, Any]] = None


class ApiKeyUpdate(CamelModel):
    """更新 API Key"""
    name: Optional[str] = Field(None, max_length=100)
    enabled: Optional[bool] = None


class ApiKeyResponse(CamelModel):
    """API Key 响应（不含明文和哈希）"""
    id: str
    user_id: str
    name: Optional[str] = None
    prefix: Optional[str] = None
    start: str
    enabled: bool
    remaining: Optional[int] = None
    expires_at: Optional[datetime] = None
    permissions: Optional[Dict[str, List[str]]] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )
    last_used_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ApiKeyCreated(ApiKeyResponse):
    """创建成功响应，明文 key 只返回这一次"""
    key: str
