"""API 路由"""
from fastapi import APIRouter
from .v1 import auth, categories, tags, links, api_keys

api_router = APIRouter()

# 注册路由
api_router.include_router(auth.router, prefix="/auth", tags=["认证"])
api_router.include_router(categories.router, prefix="/categories", tags=["分类"])
api_router.include_router(tags.router, prefix="/tags", tags=["标签"])
api_router.include_router(links.router, prefix="/links", tags=["链接"])
api_router.include_router(api_keys.router, prefix="/api-keys", tags=["API Key"])
