"""URL 工具"""
from typing import Optional
from urllib.parse import urlparse

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def url_origin(url: str) -> Optional[str]:
    """
    计算 URL 的 origin（scheme://host[:port]）

    主机名小写，默认端口省略，去掉用户信息；无主机名时返回 None
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return None

    hostname = parsed.hostname
    if not parsed.scheme or not hostname:
        return None

    scheme = parsed.scheme.lower()
    if ":" in hostname:
        hostname = f"[{hostname}]"  # IPv6

    origin = f"{scheme}://{hostname}"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        origin += f":{port}"
    return origin


def favicon_for(url: str) -> Optional[str]:
    """根据 URL 推导 favicon 地址，不做网络请求"""
    origin = url_origin(url)
    return f"{origin}/favicon.ico" if origin else None
