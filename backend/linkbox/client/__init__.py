"""客户端数据层"""
from .api import ApiError, LinkboxClient
from .query_cache import QueryCache
from .search import filter_links, fuzzy_match

__all__ = ["ApiError", "LinkboxClient", "QueryCache", "filter_links", "fuzzy_match"]
