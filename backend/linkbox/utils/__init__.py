"""工具函数"""
from .security import (
    hash_password, verify_password, create_access_token, decode_token,
    generate_api_key, hash_api_key,
)
from .url import url_origin, favicon_for

__all__ = [
    "hash_password", "verify_password", "create_access_token", "decode_token",
    "generate_api_key", "hash_api_key",
    "url_origin", "favicon_for",
]
