"""Integration tests for the product catalog and credential pool."""

import uuid

import pytest
from services.store_service.models import Product, ProductStatus
from services.store_service.services.catalog import slugify
from tests.factories import ProductFactory
from tests.helpers import persist


# ---------------------------------------------------------------------------
# Public catalog
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_products_hides_inactive_from_public(client, db_session):
    """GET /api/products: anonymous callers only see ACTIVE products."""
    active = ProductFactory.create(name="Disney Plus")
    hidden = ProductFactory.create(name="Old Service", status=ProductStatus.INACTIVE)
    await persist(db_session, active, hidden)

    response = await client.get("/api/products")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["total"] == 1
    assert data["products"][0]["name"] == "Disney Plus"
    assert data["products"][0]["price_usd"] == 4.0

    response = await client.get(f"/api/products/{hidden.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_sees_inactive_products(client, db_session, admin_headers):
    hidden = await persist(
        db_session, ProductFactory.create(status=ProductStatus.INACTIVE)
    )

    response = await client.get(
        "/api/products", params={"status": "INACTIVE"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert [p["id"] for p in response.json()["products"]] == [str(hidden.id)]

    response = await client.get(f"/api/products/{hidden.id}", headers=admin_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_products_filters(client, db_session):
    await persist(
        db_session,
        ProductFactory.create(name="Spotify Family", provider="Spotify", category="music"),
        ProductFactory.create(name="HBO Max", provider="HBO", category="video", featured=True),
    )

    response = await client.get("/api/products", params={"category": "music"})
    assert [p["name"] for p in response.json()["products"]] == ["Spotify Family"]

    response = await client.get("/api/products", params={"search": "hbo"})
    assert [p["name"] for p in response.json()["products"]] == ["HBO Max"]

    response = await client.get("/api/products", params={"featured": "true"})
    assert [p["name"] for p in response.json()["products"]] == ["HBO Max"]


# ---------------------------------------------------------------------------
# Admin product management
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_derives_slug_and_pen_price(client, admin_headers):
    """POST /api/products: slug from name, PEN from the exchange rate."""
    response = await client.post(
        "/api/products",
        json={
            "name": "Netflix Premium 4K",
            "provider": "Netflix",
            "price_usd": 3.10,
            "stock": 0,
            "delivery_type": "AUTOMATIC",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["slug"] == "netflix-premium-4k"
    assert data["price_pen"] == 11.35
    assert data["status"] == "ACTIVE"
    assert data["sold"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_duplicate_slug(client, db_session, admin_headers):
    await persist(db_session, ProductFactory.create(slug="netflix"))

    response = await client.post(
        "/api/products",
        json={"name": "Netflix", "provider": "Netflix", "price_usd": 4},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_requires_admin(client, customer_headers):
    response = await client.post(
        "/api/products",
        json={"name": "Free", "provider": "Me", "price_usd": 1},
        headers=customer_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_price_recomputes_pen(client, product, admin_headers):
    """PUT /api/products/{id}: partial update."""
    response = await client.put(
        f"/api/products/{product.id}",
        json={"price_usd": 5, "featured": True},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["price_usd"] == 5.0
    assert data["price_pen"] == 18.3
    assert data["featured"] is True
    assert data["name"] == product.name


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_unordered_product(client, db_session, product, admin_headers):
    """DELETE /api/products/{id}: hard delete when never ordered."""
    product_id = product.id
    response = await client.delete(f"/api/products/{product_id}", headers=admin_headers)
    assert response.status_code == 200, response.text
    assert response.json()["archived"] is False

    db_session.expunge_all()
    assert await db_session.get(Product, product_id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_ordered_product_archives(
    client, db_session, product, customer, customer_headers, admin_headers
):
    """Products that appear on orders are archived instead of deleted."""
    order = await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(product.id), "quantity": 1}]},
        headers=customer_headers,
    )
    assert order.status_code == 201, order.text

    response = await client.delete(f"/api/products/{product.id}", headers=admin_headers)
    assert response.status_code == 200, response.text
    assert response.json()["archived"] is True

    await db_session.refresh(product)
    assert product.status == ProductStatus.INACTIVE


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_unknown_product(client, admin_headers):
    response = await client.put(
        f"/api/products/{uuid.uuid4()}", json={"stock": 1}, headers=admin_headers
    )
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Credential pool
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_accounts_increases_stock(client, db_session, admin_headers):
    """POST /api/products/{id}/accounts: stock grows by the number added."""
    product = await persist(db_session, ProductFactory.create(stock=0))

    response = await client.post(
        f"/api/products/{product.id}/accounts",
        json={"credentials": ["a@mail.com:1", "  ", "b@mail.com:2"]},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    assert response.json()["total"] == 2

    await db_session.refresh(product)
    assert product.stock == 2

    listing = await client.get(
        f"/api/products/{product.id}/accounts", headers=admin_headers
    )
    assert listing.status_code == 200
    assert listing.json()["available"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pool_is_admin_only(client, product, customer_headers):
    response = await client.get(
        f"/api/products/{product.id}/accounts", headers=customer_headers
    )
    assert response.status_code == 403


@pytest.mark.unit
def test_slugify_strips_accents_and_symbols():
    assert slugify("  Crunchyroll Mega Fan!  ") == "crunchyroll-mega-fan"
    assert slugify("Música Ñandú") == "musica-nandu"
