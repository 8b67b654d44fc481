"""搜索面板的客户端过滤"""
from typing import Any, Dict, Iterable, List


def fuzzy_match(query: str, text: str) -> bool:
    """
    模糊匹配（不区分大小写）

    子串包含，或 query 的字符按顺序出现在 text 中（如 "pydc" 匹配 "Python Docs"）
    """
    if not query:
        return True
    query_lower = query.lower()
    text_lower = text.lower()

    if query_lower in text_lower:
        return True

    index = 0
    for char in text_lower:
        if index < len(query_lower) and char == query_lower[index]:
            index += 1
    return index == len(query_lower)


def link_matches(link: Dict[str, Any], query: str, fuzzy: bool = False) -> bool:
    """
    标题、URL、描述、分类名、标签名任一包含 query 即匹配

    fuzzy 为 True 时标题额外按字符序列模糊匹配
    """
    if not query:
        return True
    q = query.lower()
    category = link.get("category") or {}
    fields = [
        link.get("title") or "",
        link.get("url") or "",
        link.get("description") or "",
        category.get("name") or "",
    ]
    fields.extend(tag.get("name") or "" for tag in link.get("tags") or [])
    if any(q in field.lower() for field in fields):
        return True
    return fuzzy and fuzzy_match(query, link.get("title") or "")


def filter_links(links: Iterable[Dict[str, Any]], query: str, fuzzy: bool = False) -> List[Dict[str, Any]]:
    """按 query 过滤链接列表，保持原顺序"""
    return [link for link in links if link_matches(link, query, fuzzy)]
