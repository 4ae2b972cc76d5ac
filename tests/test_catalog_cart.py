"""
Tests for the product catalog, search and the shopping cart.
"""
import pytest


@pytest.fixture
async def catalog(create_product):
    return {
        "mixer": await create_product("Concrete Mixer", "5000", "Construction", "Nairobi"),
        "drill": await create_product("Hammer Drill", "1000", "Power Tools", "Mombasa",
                                      description="Heavy duty SDS drill"),
        "tent": await create_product("Wedding Tent", "15000", "Events", "Nairobi"),
        "crane": await create_product("Mobile Crane", "90000", "Construction", "Kisumu", available=False),
    }


@pytest.mark.asyncio
async def test_list_only_shows_available_products(client, catalog):
    response = await client.get("/api/products")

    assert response.status_code == 200
    names = [product["name"] for product in response.json()]
    assert names == ["Concrete Mixer", "Hammer Drill", "Wedding Tent"]


@pytest.mark.asyncio
async def test_list_sorted_by_price_descending(client, catalog):
    response = await client.get("/api/products", params={"sortBy": "price", "sortOrder": "desc"})

    assert [product["price"] for product in response.json()] == [15000.0, 5000.0, 1000.0]


@pytest.mark.asyncio
async def test_search_matches_description_and_filters(client, catalog):
    response = await client.get("/api/products/search", params={"q": "sds"})

    body = response.json()
    assert body["total"] == 1
    assert body["results"][0]["name"] == "Hammer Drill"

    nairobi = await client.get("/api/products/search", params={"location": "nairobi", "maxPrice": 10000})
    assert [p["name"] for p in nairobi.json()["results"]] == ["Concrete Mixer"]


@pytest.mark.asyncio
async def test_search_paging_reports_full_total(client, catalog):
    response = await client.get("/api/products/search", params={"limit": 1, "offset": 1})

    body = response.json()
    assert body["total"] == 3
    assert len(body["results"]) == 1


@pytest.mark.asyncio
async def test_search_rejects_inverted_price_range(client, catalog):
    response = await client.get("/api/products/search", params={"minPrice": 500, "maxPrice": 100})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_filter_options(client, catalog):
    response = await client.get("/api/products/filters")

    body = response.json()
    assert body["categories"] == ["Construction", "Events", "Power Tools"]
    assert body["locations"] == ["Mombasa", "Nairobi"]
    assert body["priceRange"] == {"min": 1000.0, "max": 15000.0}


@pytest.mark.asyncio
async def test_products_by_category(client, catalog):
    response = await client.get("/api/products/category/construction")

    assert [p["name"] for p in response.json()] == ["Concrete Mixer"]


@pytest.mark.asyncio
async def test_get_product(client, catalog):
    found = await client.get(f"/api/products/{catalog['tent']}")
    missing = await client.get("/api/products/9999")

    assert found.json()["name"] == "Wedding Tent"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_suggestions_need_two_characters(client, catalog):
    short = await client.get("/api/search/suggestions", params={"q": "c"})
    longer = await client.get("/api/search/suggestions", params={"q": "co"})

    assert short.json()["suggestions"] == []
    assert longer.json()["suggestions"] == ["Concrete Mixer"]


@pytest.mark.asyncio
async def test_admin_manages_products(client, admin_headers, user_headers):
    payload = {"name": "Scaffolding Set", "price": "250.50", "category": "Construction"}

    forbidden = await client.post("/api/products", json=payload, headers=user_headers)
    assert forbidden.status_code == 403

    created = await client.post("/api/products", json=payload, headers=admin_headers)
    assert created.status_code == 201
    product = created.json()
    assert product["price"] == 250.5

    updated = await client.put(
        f"/api/products/{product['id']}", json={"price": "300", "available": False}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 300.0
    assert updated.json()["available"] is False


@pytest.mark.asyncio
async def test_cart_add_accumulates_quantity(client, catalog, user_headers):
    for quantity in (1, 2):
        response = await client.post(
            "/api/cart/add", json={"productId": catalog["mixer"], "quantity": quantity}, headers=user_headers
        )
        assert response.status_code == 200

    cart = (await client.get("/api/cart", headers=user_headers)).json()
    assert len(cart) == 1
    assert cart[0]["quantity"] == 3
    assert cart[0]["subtotal"] == 15000.0


@pytest.mark.asyncio
async def test_cart_add_multiple_is_all_or_nothing(client, catalog, user_headers):
    response = await client.post(
        "/api/cart/add-multiple",
        json={"items": [
            {"productId": catalog["drill"], "quantity": 1},
            {"productId": catalog["crane"], "quantity": 1},
        ]},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert (await client.get("/api/cart", headers=user_headers)).json() == []

    ok = await client.post(
        "/api/cart/add-multiple",
        json={"items": [
            {"productId": catalog["drill"], "quantity": 2},
            {"productId": catalog["tent"]},
        ]},
        headers=user_headers,
    )
    assert ok.status_code == 200
    assert len((await client.get("/api/cart", headers=user_headers)).json()) == 2


@pytest.mark.asyncio
async def test_cart_rejects_bad_input(client, catalog, user_headers):
    unknown = await client.post("/api/cart/add", json={"productId": 9999, "quantity": 1}, headers=user_headers)
    zero = await client.post(
        "/api/cart/add", json={"productId": catalog["mixer"], "quantity": 0}, headers=user_headers
    )

    assert unknown.status_code == 404
    assert zero.status_code == 400


@pytest.mark.asyncio
async def test_cart_remove_is_scoped_to_owner(client, catalog, user_headers, create_user, login):
    await client.post("/api/cart/add", json={"productId": catalog["mixer"]}, headers=user_headers)
    item_id = (await client.get("/api/cart", headers=user_headers)).json()[0]["id"]

    await create_user(email="kamau@hireme.co.ke")
    other_headers = await login("kamau@hireme.co.ke")
    assert (await client.delete(f"/api/cart/{item_id}", headers=other_headers)).status_code == 404

    assert (await client.delete(f"/api/cart/{item_id}", headers=user_headers)).status_code == 200
    assert (await client.get("/api/cart", headers=user_headers)).json() == []


@pytest.mark.asyncio
async def test_cart_requires_login(client):
    assert (await client.get("/api/cart")).status_code == 401


@pytest.mark.asyncio
async def test_contact_form(client):
    response = await client.post(
        "/api/contact",
        json={"name": "Achieng", "email": "achieng@gmail.com", "message": "Do you deliver to Nakuru?"},
    )

    assert response.status_code == 201
    assert response.json()["id"] > 0
