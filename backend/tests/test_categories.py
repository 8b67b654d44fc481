"""Tests for category endpoints."""
from httpx import AsyncClient

from linkbox.models.link import DEFAULT_COLOR


async def test_list_categories_empty(client: AsyncClient) -> None:
    """A new user has no categories."""
    response = await client.get("/api/categories")
    assert response.status_code == 200
    assert response.json() == []


async def test_create_category(client: AsyncClient) -> None:
    """Creating a category returns the stored record with the default color."""
    response = await client.post(
        "/api/categories",
        json={"name": "Work", "description": "Things for work"},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Work"
    assert data["description"] == "Things for work"
    assert data["color"] == DEFAULT_COLOR
    assert data["id"]
    assert "createdAt" in data
    assert "updatedAt" in data


async def test_create_category_with_color(client: AsyncClient) -> None:
    """An explicit color is kept."""
    response = await client.post("/api/categories", json={"name": "Fun", "color": "#ff0000"})
    assert response.status_code == 200
    assert response.json()["color"] == "#ff0000"


async def test_create_category_requires_name(client: AsyncClient) -> None:
    """Missing or empty names are validation errors."""
    response = await client.post("/api/categories", json={})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"

    response = await client.post("/api/categories", json={"name": ""})
    assert response.status_code == 400


async def test_create_category_duplicate_name(client: AsyncClient) -> None:
    """Names are unique per user."""
    await client.post("/api/categories", json={"name": "Work"})

    response = await client.post("/api/categories", json={"name": "Work"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Category with this name already exists"


async def test_same_name_allowed_for_different_users(
    client: AsyncClient, other_client: AsyncClient,
) -> None:
    """Uniqueness is scoped to the owning user."""
    assert (await client.post("/api/categories", json={"name": "Work"})).status_code == 200
    assert (await other_client.post("/api/categories", json={"name": "Work"})).status_code == 200


async def test_list_categories_sorted_by_name(client: AsyncClient) -> None:
    """Categories are listed by name ascending."""
    for name in ["Zeta", "Alpha", "Mid"]:
        await client.post("/api/categories", json={"name": name})

    response = await client.get("/api/categories")
    assert [c["name"] for c in response.json()] == ["Alpha", "Mid", "Zeta"]


async def test_get_category(client: AsyncClient) -> None:
    """A single category can be fetched by id."""
    created = (await client.post("/api/categories", json={"name": "Work"})).json()

    response = await client.get(f"/api/categories/{created['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Work"


async def test_update_category(client: AsyncClient) -> None:
    """Partial updates change only the supplied fields."""
    created = (await client.post(
        "/api/categories", json={"name": "Work", "description": "desc"},
    )).json()

    response = await client.put(f"/api/categories/{created['id']}", json={"color": "#00ff00"})
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Work"
    assert data["description"] == "desc"
    assert data["color"] == "#00ff00"


async def test_update_category_rename_conflict(client: AsyncClient) -> None:
    """Renaming onto another category's name is a conflict."""
    await client.post("/api/categories", json={"name": "Work"})
    home = (await client.post("/api/categories", json={"name": "Home"})).json()

    response = await client.put(f"/api/categories/{home['id']}", json={"name": "Work"})
    assert response.status_code == 409


async def test_update_category_keep_own_name(client: AsyncClient) -> None:
    """Sending the current name is not a conflict with itself."""
    work = (await client.post("/api/categories", json={"name": "Work"})).json()

    response = await client.put(
        f"/api/categories/{work['id']}", json={"name": "Work", "description": "new"},
    )
    assert response.status_code == 200
    assert response.json()["description"] == "new"


async def test_other_users_category_is_not_found(
    client: AsyncClient, other_client: AsyncClient,
) -> None:
    """Another user's category behaves as if it does not exist."""
    created = (await client.post("/api/categories", json={"name": "Work"})).json()
    path = f"/api/categories/{created['id']}"

    assert (await other_client.get(path)).status_code == 404
    assert (await other_client.put(path, json={"name": "Mine"})).status_code == 404
    assert (await other_client.delete(path)).status_code == 404
    assert (await other_client.get("/api/categories")).json() == []

    # still intact for the owner
    assert (await client.get(path)).json()["name"] == "Work"


async def test_delete_category(client: AsyncClient) -> None:
    """Deleting returns 204 with no body."""
    created = (await client.post("/api/categories", json={"name": "Work"})).json()

    response = await client.delete(f"/api/categories/{created['id']}")
    assert response.status_code == 204
    assert response.content == b""
    assert (await client.get(f"/api/categories/{created['id']}")).status_code == 404


async def test_delete_missing_category(client: AsyncClient) -> None:
    """Deleting an unknown id is a 404."""
    response = await client.delete("/api/categories/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"


async def test_delete_category_detaches_links(client: AsyncClient) -> None:
    """Links in a deleted category survive without a category."""
    category = (await client.post("/api/categories", json={"name": "Work"})).json()
    link = (await client.post(
        "/api/links",
        json={"title": "Docs", "url": "https://docs.example.com", "categoryId": category["id"]},
    )).json()
    assert link["categoryId"] == category["id"]

    assert (await client.delete(f"/api/categories/{category['id']}")).status_code == 204

    response = await client.get(f"/api/links/{link['id']}")
    assert response.status_code == 200
    assert response.json()["categoryId"] is None
    assert response.json()["category"] is None
