#!/usr/bin/env python3
"""
Linkbox 命令行快速录入

使用 API Key 调用与 Web 端相同的 REST 接口：
- 创建链接 / 分类 / 标签
- 搜索链接
"""
import argparse
import asyncio
import os
import sys
from typing import Dict, List, Optional

import httpx

from .client import ApiError, LinkboxClient, filter_links

DEFAULT_URL = "http://localhost:8000"


def _resolve_ids(items: List[Dict], names: List[str], kind: str) -> List[str]:
    """按名称查找 id（不区分大小写），找不到直接报错"""
    by_name = {item["name"].lower(): item["id"] for item in items}
    ids = []
    for name in names:
        item_id = by_name.get(name.lower())
        if item_id is None:
            raise ApiError(404, f"{kind} not found: {name}")
        ids.append(item_id)
    return ids


async def create_link(client: LinkboxClient, args: argparse.Namespace) -> str:
    category_id: Optional[str] = None
    if args.category:
        category_id = _resolve_ids(await client.list_categories(), [args.category], "Category")[0]
    tag_ids = None
    if args.tag:
        tag_ids = _resolve_ids(await client.list_tags(), args.tag, "Tag")

    link = await client.create_link(
        title=args.title.strip(),
        url=args.url.strip(),
        description=(args.description or "").strip() or None,
        category_id=category_id,
        tag_ids=tag_ids,
    )
    return f'Link "{link["title"]}" created ({link["id"]})'


async def create_category(client: LinkboxClient, args: argparse.Namespace) -> str:
    category = await client.create_category(args.name.strip(), args.description, args.color)
    return f'Category "{category["name"]}" created ({category["id"]})'


async def create_tag(client: LinkboxClient, args: argparse.Namespace) -> str:
    tag = await client.create_tag(args.name.strip(), args.color)
    return f'Tag "{tag["name"]}" created ({tag["id"]})'


def _format_link(link: Dict) -> str:
    star = "*" if link.get("isFavorite") else " "
    tags = ", ".join(tag["name"] for tag in link.get("tags") or [])
    category = (link.get("category") or {}).get("name")
    extras = " ".join(part for part in (f"[{category}]" if category else "", f"#{tags}" if tags else "") if part)
    return f"{star} {link['title']}  {link['url']}  {extras}".rstrip()


async def list_links(client: LinkboxClient, args: argparse.Namespace) -> str:
    links = await client.list_links(favorites_only=args.favorites)
    if args.query:
        links = filter_links(links, args.query, fuzzy=args.fuzzy)
    if not links:
        return "No links found"
    return "\n".join(_format_link(link) for link in links)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkbox",
        description="Linkbox 快速录入工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  linkbox link "Example" https://example.com --category Work --tag docs --tag ref
  linkbox category Work --color "#3b82f6"
  linkbox tag docs
  linkbox links python --favorites
  linkbox links pydc --fuzzy

环境变量: LINKBOX_URL（默认 http://localhost:8000）、LINKBOX_API_KEY
"""
    )
    parser.add_argument("--url", dest="base_url", default=os.environ.get("LINKBOX_URL", DEFAULT_URL),
                        help="服务地址")
    parser.add_argument("--api-key", default=os.environ.get("LINKBOX_API_KEY"),
                        help="API Key")

    sub = parser.add_subparsers(dest="command", required=True)

    link = sub.add_parser("link", help="创建链接")
    link.add_argument("title")
    link.add_argument("url")
    link.add_argument("--description")
    link.add_argument("--category", help="分类名称")
    link.add_argument("--tag", action="append", help="标签名称，可重复")
    link.set_defaults(handler=create_link)

    category = sub.add_parser("category", help="创建分类")
    category.add_argument("name")
    category.add_argument("--description")
    category.add_argument("--color")
    category.set_defaults(handler=create_category)

    tag = sub.add_parser("tag", help="创建标签")
    tag.add_argument("name")
    tag.add_argument("--color")
    tag.set_defaults(handler=create_tag)

    links = sub.add_parser("links", help="搜索链接")
    links.add_argument("query", nargs="?", default="")
    links.add_argument("--favorites", action="store_true", help="只看收藏")
    links.add_argument("--fuzzy", action="store_true", help="标题按字符顺序模糊匹配")
    links.set_defaults(handler=list_links)

    return parser


async def run(args: argparse.Namespace) -> str:
    async with LinkboxClient(args.base_url, api_key=args.api_key) as client:
        return await args.handler(client, args)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.api_key:
        parser.error("缺少 API Key：使用 --api-key 或设置 LINKBOX_API_KEY")

    try:
        output = asyncio.run(run(args))
    except ApiError as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
