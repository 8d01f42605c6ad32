import pytest

from store_admin.db import Product
from tests.conftest import login_full

CATEGORIES_URL = "/api/admin/categories"


@pytest.fixture
async def admin_client(client, sender):
    await login_full(client, sender)
    return client


async def create(client, name, **extra):
    response = await client.post(CATEGORIES_URL, json={"name": name, **extra})
    assert response.status_code == 200, response.text
    return response.json()


async def test_requires_session(client):
    response = await client.get(CATEGORIES_URL)

    assert response.status_code == 401


async def test_create_and_list(admin_client):
    root = await create(admin_client, "  Электроника ", description="Гаджеты")
    child = await create(admin_client, "Смартфоны", parentId=root["id"])

    assert root["name"] == "Электроника"
    assert root["description"] == "Гаджеты"
    assert root["parentId"] is None
    assert child["parent"] == {"id": root["id"], "name": "Электроника"}

    response = await admin_client.get(CATEGORIES_URL)

    assert response.status_code == 200
    listed = {item["id"]: item for item in response.json()}
    assert response.json()[0]["id"] == root["id"]
    assert listed[root["id"]]["childrenCount"] == 1
    assert listed[child["id"]]["childrenCount"] == 0
    assert listed[root["id"]]["productsCount"] == 0


async def test_create_validation(admin_client):
    blank = await admin_client.post(CATEGORIES_URL, json={"name": "   "})
    orphan = await admin_client.post(CATEGORIES_URL, json={"name": "X", "parentId": "missing"})

    assert blank.status_code == 400
    assert orphan.status_code == 400


async def test_update_renames_and_moves(admin_client):
    first = await create(admin_client, "Одежда")
    second = await create(admin_client, "Обувь")

    response = await admin_client.put(
        f"{CATEGORIES_URL}/{second['id']}",
        json={"name": "Кроссовки", "parentId": first["id"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Кроссовки"
    assert body["parentId"] == first["id"]


async def test_update_to_root(admin_client):
    parent = await create(admin_client, "Дом")
    child = await create(admin_client, "Кухня", parentId=parent["id"])

    response = await admin_client.put(
        f"{CATEGORIES_URL}/{child['id']}",
        json={"name": "Кухня", "parentId": None},
    )

    assert response.status_code == 200
    assert response.json()["parentId"] is None
    assert response.json()["parent"] is None


async def test_update_errors(admin_client):
    category = await create(admin_client, "Книги")
    url = f"{CATEGORIES_URL}/{category['id']}"

    assert (await admin_client.put(url, json={"name": ""})).status_code == 400
    assert (await admin_client.put(f"{CATEGORIES_URL}/missing", json={"name": "A"})).status_code == 404
    assert (await admin_client.put(url, json={"name": "A", "parentId": category["id"]})).status_code == 400
    assert (await admin_client.put(url, json={"name": "A", "parentId": "missing"})).status_code == 400


async def test_update_rejects_cycle(admin_client):
    top = await create(admin_client, "A")
    middle = await create(admin_client, "B", parentId=top["id"])
    bottom = await create(admin_client, "C", parentId=middle["id"])

    response = await admin_client.put(
        f"{CATEGORIES_URL}/{top['id']}",
        json={"name": "A", "parentId": bottom["id"]},
    )

    assert response.status_code == 400


async def test_delete_empty_category(admin_client):
    category = await create(admin_client, "Временная")

    response = await admin_client.delete(f"{CATEGORIES_URL}/{category['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert (await admin_client.get(CATEGORIES_URL)).json() == []


async def test_delete_missing(admin_client):
    response = await admin_client.delete(f"{CATEGORIES_URL}/missing")

    assert response.status_code == 404


async def test_delete_with_children_rejected(admin_client):
    parent = await create(admin_client, "Спорт")
    await create(admin_client, "Велосипеды", parentId=parent["id"])

    response = await admin_client.delete(f"{CATEGORIES_URL}/{parent['id']}")

    assert response.status_code == 400


async def test_delete_with_products_rejected(admin_client, session_factory):
    category = await create(admin_client, "Игрушки")
    async with session_factory() as db:
        db.add(Product(name="Мяч", category_id=category["id"]))
        await db.commit()

    listed = (await admin_client.get(CATEGORIES_URL)).json()
    response = await admin_client.delete(f"{CATEGORIES_URL}/{category['id']}")

    assert listed[0]["productsCount"] == 1
    assert response.status_code == 400
