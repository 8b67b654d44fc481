"""Tests for link storage operations called outside a request."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from linkbox.models import LinkTag
from linkbox.services import link_service


async def _link_tag_ids(session, link_id: str) -> list[str]:
    result = await session.execute(select(LinkTag.tag_id).where(LinkTag.link_id == link_id))
    return sorted(result.scalars().all())


async def test_replace_link_tags_rolls_back_on_failure(
    client: AsyncClient, session_factory,
) -> None:
    """A failed insert restores the tags the delete removed."""
    web = (await client.post("/api/tags", json={"name": "web"})).json()
    link = (await client.post(
        "/api/links",
        json={"title": "Ex", "url": "https://example.com", "tagIds": [web["id"]]},
    )).json()

    async with session_factory() as session:
        with pytest.raises(IntegrityError):
            await link_service.replace_link_tags(session, link["id"], ["does-not-exist"])

        # same transaction: the savepoint undid the delete
        assert await _link_tag_ids(session, link["id"]) == [web["id"]]
        await session.commit()

    async with session_factory() as session:
        assert await _link_tag_ids(session, link["id"]) == [web["id"]]


async def test_replace_link_tags_replaces_exactly(
    client: AsyncClient, session_factory,
) -> None:
    """The new set fully replaces the old one."""
    web = (await client.post("/api/tags", json={"name": "web"})).json()
    api = (await client.post("/api/tags", json={"name": "api"})).json()
    link = (await client.post(
        "/api/links",
        json={"title": "Ex", "url": "https://example.com", "tagIds": [web["id"]]},
    )).json()

    async with session_factory() as session:
        await link_service.replace_link_tags(session, link["id"], [api["id"], api["id"]])
        await session.commit()

    async with session_factory() as session:
        assert await _link_tag_ids(session, link["id"]) == [api["id"]]
