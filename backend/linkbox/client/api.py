"""
Linkbox API 客户端

基于 httpx 的异步客户端，读取走查询缓存，写操作等服务端确认后再使相关缓存失效。
失败时抛出 ApiError，缓存保持原状。
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .query_cache import QueryCache

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

# 写操作影响的资源族：分类、标签变化会影响链接列表里的关联数据
LINK_FAMILIES = ("links",)
CATEGORY_FAMILIES = ("categories", "links")
TAG_FAMILIES = ("tags", "links")
API_KEY_FAMILIES = ("api-keys",)


class ApiError(Exception):
    """API 请求失败"""

    def __init__(self, status_code: int, detail: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or []

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        detail = response.reason_phrase or "Request failed"
        errors = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = str(body.get("detail") or body.get("error") or detail)
            errors = body.get("errors")
        elif response.text:
            detail = response.text
        return cls(response.status_code, detail, errors)


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class LinkboxClient:
    """Linkbox REST API 客户端"""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        session_token: Optional[str] = None,
        cache: Optional[QueryCache] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {}
        if api_key:
            headers[settings.API_KEY_HEADER] = api_key
        if session_token:
            headers["Authorization"] = f"Bearer {session_token}"

        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self.cache = cache if cache is not None else QueryCache()

    async def __aenter__(self) -> "LinkboxClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, **kwargs)
        if response.is_error:
            error = ApiError.from_response(response)
            logger.info("请求失败: %s %s -> %s", method, path, error.status_code)
            raise error
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ==================== 认证 ====================

    async def login(self, email: str, password: str) -> str:
        """登录并在后续请求中携带会话令牌"""
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        token = data["accessToken"]
        self._http.headers["Authorization"] = f"Bearer {token}"
        self.cache.clear()
        return token

    # ==================== 链接 ====================

    async def list_links(
        self,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        favorites_only: bool = False,
    ) -> List[Dict[str, Any]]:
        key = ("links", search or "", category_id, tag_id, favorites_only)
        params = _drop_none({
            "search": search or None,
            "categoryId": category_id,
            "tagId": tag_id,
            "favoritesOnly": "true" if favorites_only else None,
        })
        return await self.cache.fetch(key, lambda: self._request("GET", "/api/links", params=params))

    async def get_link(self, link_id: str) -> Dict[str, Any]:
        return await self.cache.fetch(
            ("links", "detail", link_id),
            lambda: self._request("GET", f"/api/links/{link_id}"),
        )

    async def create_link(
        self,
        title: str,
        url: str,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
        tag_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        payload = _drop_none({
            "title": title,
            "url": url,
            "description": description,
            "categoryId": category_id,
            "tagIds": tag_ids,
        })
        link = await self._request("POST", "/api/links", json=payload)
        self.cache.invalidate(*LINK_FAMILIES)
        return link

    async def update_link(
        self,
        link_id: str,
        title: Optional[str] = None,
        url: Optional[str] = None,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
        tag_ids: Optional[List[str]] = None,
        is_favorite: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        全量更新链接

        服务端语义：不传 category_id 会清空分类；不传 tag_ids 保留原标签
        """
        payload = _drop_none({
            "title": title,
            "url": url,
            "description": description,
            "categoryId": category_id,
            "tagIds": tag_ids,
            "isFavorite": is_favorite,
        })
        link = await self._request("PUT", f"/api/links/{link_id}", json=payload)
        self.cache.invalidate(*LINK_FAMILIES)
        return link

    async def set_favorite(self, link_id: str, is_favorite: bool) -> Dict[str, Any]:
        link = await self._request("PATCH", f"/api/links/{link_id}", json={"isFavorite": is_favorite})
        self.cache.invalidate(*LINK_FAMILIES)
        return link

    async def delete_link(self, link_id: str) -> None:
        await self._request("DELETE", f"/api/links/{link_id}")
        self.cache.invalidate(*LINK_FAMILIES)

    # ==================== 分类 ====================

    async def list_categories(self) -> List[Dict[str, Any]]:
        return await self.cache.fetch(("categories",), lambda: self._request("GET", "/api/categories"))

    async def create_category(
        self, name: str, description: Optional[str] = None, color: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = _drop_none({"name": name, "description": description, "color": color})
        category = await self._request("POST", "/api/categories", json=payload)
        self.cache.invalidate("categories")
        return category

    async def update_category(self, category_id: str, **fields: Any) -> Dict[str, Any]:
        category = await self._request("PUT", f"/api/categories/{category_id}", json=_drop_none(fields))
        self.cache.invalidate(*CATEGORY_FAMILIES)
        return category

    async def delete_category(self, category_id: str) -> None:
        await self._request("DELETE", f"/api/categories/{category_id}")
        self.cache.invalidate(*CATEGORY_FAMILIES)

    # ==================== 标签 ====================

    async def list_tags(self) -> List[Dict[str, Any]]:
        return await self.cache.fetch(("tags",), lambda: self._request("GET", "/api/tags"))

    async def create_tag(self, name: str, color: Optional[str] = None) -> Dict[str, Any]:
        tag = await self._request("POST", "/api/tags", json=_drop_none({"name": name, "color": color}))
        self.cache.invalidate("tags")
        return tag

    async def update_tag(self, tag_id: str, **fields: Any) -> Dict[str, Any]:
        tag = await self._request("PUT", f"/api/tags/{tag_id}", json=_drop_none(fields))
        self.cache.invalidate(*TAG_FAMILIES)
        return tag

    async def delete_tag(self, tag_id: str) -> None:
        await self._request("DELETE", f"/api/tags/{tag_id}")
        self.cache.invalidate(*TAG_FAMILIES)

    # ==================== API Key ====================

    async def list_api_keys(self) -> List[Dict[str, Any]]:
        return await self.cache.fetch(("api-keys",), lambda: self._request("GET", "/api/api-keys"))

    async def create_api_key(
        self,
        name: Optional[str] = None,
        expires_in: Optional[int] = settings.API_KEY_DEFAULT_EXPIRES_IN,
        prefix: Optional[str] = None,
        permissions: Optional[Dict[str, List[str]]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """创建 API Key，返回值中的 key 字段是唯一一次拿到明文的机会"""
        payload = _drop_none({
            "name": name,
            "prefix": prefix,
            "permissions": permissions,
            "metadata": metadata,
        })
        payload["expiresIn"] = expires_in
        api_key = await self._request("POST", "/api/api-keys", json=payload)
        self.cache.invalidate(*API_KEY_FAMILIES)
        return api_key

    async def update_api_key(self, key_id: str, name: Optional[str] = None, enabled: Optional[bool] = None) -> Dict[str, Any]:
        api_key = await self._request(
            "PUT", f"/api/api-keys/{key_id}", json=_drop_none({"name": name, "enabled": enabled})
        )
        self.cache.invalidate(*API_KEY_FAMILIES)
        return api_key

    async def delete_api_key(self, key_id: str) -> None:
        await self._request("DELETE", f"/api/api-keys/{key_id}")
        self.cache.invalidate(*API_KEY_FAMILIES)
