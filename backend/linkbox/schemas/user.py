"""用户相关 Schema"""
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional

from .base import CamelModel


class UserCreate(CamelModel):
    """用户注册"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    name: Optional[str] = Field(None, max_length=100)


class UserLogin(CamelModel):
    """用户登录"""
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    """用户响应"""
    id: str
    email: str
    name: Optional[str] = None
    is_active: bool
    created_at: datetime


class Token(CamelModel):
    """Token 响应"""
    access_token: str
    token_type: str = "bearer"

