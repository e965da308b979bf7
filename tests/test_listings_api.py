"""
Listing API tests - REST catalog contract, validation and browse semantics.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select, text

from cityshare.config import get_settings
from cityshare.db.models import Category, Listing
from cityshare.db.repositories.listing_repository import ListingRepository
from cityshare.schemas.listing_filter import ListingFilter


def _sale(**overrides) -> dict:
    body = {
        "item_name": "Blue Denim Jacket",
        "description": "Gently used, size M",
        "kind": "sell",
        "condition": "good",
        "price_cents": 2500,
    }
    body.update(overrides)
    return body


# --- GET /listings -----------------------------------------------------------


@pytest.mark.asyncio
async def test_list_listings_empty(client: AsyncClient):
    """Empty catalog is a normal 200 page, not an error."""
    response = await client.get("/api/v1/listings")
    assert response.status_code == 200
    data = response.json()
    assert data["listings"] == []
    assert data["pagination"] == {"total": 0, "limit": 20, "offset": 0, "has_more": False}


@pytest.mark.asyncio
async def test_list_defaults_to_active_only(client: AsyncClient, make_listing):
    await make_listing(item_name="Active chair")
    await make_listing(item_name="Paused chair", status="paused")
    await make_listing(item_name="Sold chair", status="sold")

    response = await client.get("/api/v1/listings")
    names = [l["item_name"] for l in response.json()["listings"]]
    assert names == ["Active chair"]

    response = await client.get("/api/v1/listings", params={"status": "paused"})
    data = response.json()
    assert [l["item_name"] for l in data["listings"]] == ["Paused chair"]
    assert all(l["status"] == "paused" for l in data["listings"])


@pytest.mark.asyncio
async def test_unrecognized_filter_values_are_ignored(client: AsyncClient, make_listing):
    await make_listing(item_name="Active chair")
    await make_listing(item_name="Paused chair", status="paused")

    response = await client.get(
        "/api/v1/listings", params={"kind": "rent", "usage_status": "lost", "status": "archived"}
    )
    assert response.status_code == 200
    assert [l["item_name"] for l in response.json()["listings"]] == ["Active chair"]


@pytest.mark.asyncio
async def test_pagination_25_matches(client: AsyncClient, make_listing):
    for i in range(25):
        await make_listing(item_name=f"Item {i}")

    first = (await client.get("/api/v1/listings", params={"limit": 20, "offset": 0})).json()
    assert len(first["listings"]) == 20
    assert first["pagination"]["total"] == 25
    assert first["pagination"]["has_more"] is True
    # Newest first: the last inserted row leads
    assert first["listings"][0]["item_name"] == "Item 24"

    second = (await client.get("/api/v1/listings", params={"limit": 20, "offset": 20})).json()
    assert len(second["listings"]) == 5
    assert second["pagination"]["total"] == 25
    assert second["pagination"]["has_more"] is False
    assert second["listings"][-1]["item_name"] == "Item 0"

    seen = {l["id"] for l in first["listings"]} | {l["id"] for l in second["listings"]}
    assert len(seen) == 25


@pytest.mark.asyncio
async def test_limit_is_clamped(client: AsyncClient, make_listing):
    await make_listing()
    data = (await client.get("/api/v1/listings", params={"limit": 500})).json()
    assert data["pagination"]["limit"] == get_settings().max_page_size


@pytest.mark.asyncio
async def test_negative_offset_is_invalid(client: AsyncClient):
    response = await client.get("/api/v1/listings", params={"offset": -1})
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_non_numeric_limit_is_400(client: AsyncClient):
    response = await client.get("/api/v1/listings", params={"limit": "lots"})
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_text_search_matches_name_or_description(client: AsyncClient, make_listing):
    await make_listing(item_name="Cordless DRILL")
    await make_listing(item_name="Toolbox", description="Comes with a drill bit set")
    await make_listing(item_name="Sofa", description="Comfy")
    await make_listing(item_name="100% cotton shirt")

    data = (await client.get("/api/v1/listings", params={"q": "drill"})).json()
    assert sorted(l["item_name"] for l in data["listings"]) == ["Cordless DRILL", "Toolbox"]
    assert data["pagination"]["total"] == 2

    # LIKE wildcards in the query are literal
    data = (await client.get("/api/v1/listings", params={"q": "100%"})).json()
    assert [l["item_name"] for l in data["listings"]] == ["100% cotton shirt"]
    data = (await client.get("/api/v1/listings", params={"q": "%"})).json()
    assert [l["item_name"] for l in data["listings"]] == ["100% cotton shirt"]


@pytest.mark.asyncio
async def test_kind_and_usage_filters_combine(client: AsyncClient, make_listing):
    await make_listing(item_name="Drill", kind="borrow", usage_status="borrowed")
    await make_listing(item_name="Ladder", kind="borrow")
    await make_listing(item_name="Coat", kind="donate")
    await make_listing(item_name="Lamp", kind="sell", price_cents=1000)

    data = (await client.get("/api/v1/listings", params={"kind": "borrow"})).json()
    assert sorted(l["item_name"] for l in data["listings"]) == ["Drill", "Ladder"]

    data = (
        await client.get("/api/v1/listings", params={"kind": "borrow", "usage_status": "borrowed"})
    ).json()
    # active + borrowed at once: the two status axes are independent
    assert [(l["item_name"], l["status"], l["usage_status"]) for l in data["listings"]] == [
        ("Drill", "active", "borrowed")
    ]


@pytest.mark.asyncio
async def test_category_filter_by_id_or_name(
    client: AsyncClient, auth_headers: dict
):
    tools = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category="Tools"))
    await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category="Books"))
    tools_id = tools.json()["category"]["id"]

    by_id = (await client.get("/api/v1/listings", params={"category": str(tools_id)})).json()
    assert [l["category"]["name"] for l in by_id["listings"]] == ["Tools"]

    by_name = (await client.get("/api/v1/listings", params={"category": "tOOls"})).json()
    assert [l["category"]["id"] for l in by_name["listings"]] == [tools_id]


@pytest.mark.asyncio
async def test_list_view_has_owner_fields_and_primary_image_only(
    client: AsyncClient, make_listing
):
    await make_listing(image_urls=["a.png", "b.png", "c.png"], image_url="a.png")
    listing = (await client.get("/api/v1/listings")).json()["listings"][0]
    assert [i["url"] for i in listing["images"]] == ["a.png"]
    assert listing["owner"]["display_name"] == "Test User"
    assert listing["owner"]["username"] == "testuser"
    assert listing["owner"]["avatar_url"] == "https://cdn.example.com/avatars/test.png"
    assert "location" not in listing["owner"]


# --- POST /listings ----------------------------------------------------------


@pytest.mark.asyncio
async def test_create_listing_requires_auth(client: AsyncClient):
    response = await client.post("/api/v1/listings", json=_sale())
    assert response.status_code == 401
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_create_listing_rejects_bad_token(client: AsyncClient):
    response = await client.post(
        "/api/v1/listings", headers={"Authorization": "Bearer not-a-jwt"}, json=_sale()
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_sale_listing(client: AsyncClient, auth_headers: dict, test_user):
    response = await client.post("/api/v1/listings", headers=auth_headers, json=_sale())
    assert response.status_code == 201
    data = response.json()
    assert data["item_name"] == "Blue Denim Jacket"
    assert data["kind"] == "sell"
    assert data["price_cents"] == 2500
    assert data["status"] == "active"
    assert data["usage_status"] == "available"
    assert data["owner"]["id"] == test_user.id
    assert data["owner"]["location"] == "San Jose, CA"
    assert data["listing_number"] == get_settings().listing_number_offset + data["id"]
    assert data["created_at"] is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("item_name", [None, "", "   "])
async def test_create_requires_item_name(client: AsyncClient, auth_headers: dict, item_name):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(item_name=item_name)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "item name required"}


@pytest.mark.asyncio
async def test_empty_item_name_checked_before_kind_and_price(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/listings",
        headers=auth_headers,
        json={"item_name": " ", "kind": "barter", "price_cents": -5},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "item name required"}


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", [None, "", "rent", "SELLING"])
async def test_create_rejects_invalid_kind(client: AsyncClient, auth_headers: dict, kind):
    response = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(kind=kind))
    assert response.status_code == 400
    assert response.json() == {"error": "invalid listing kind"}


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [None, 0, -100, "abc", "", 12.5])
async def test_sale_requires_positive_price(client: AsyncClient, auth_headers: dict, price):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(price_cents=price)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "price required for sale"}


@pytest.mark.asyncio
async def test_sale_price_accepts_digit_string(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(price_cents="3000")
    )
    assert response.status_code == 201
    assert response.json()["price_cents"] == 3000


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["donate", "borrow"])
async def test_non_sale_price_is_forced_null(client: AsyncClient, auth_headers: dict, kind):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(kind=kind, price_cents=999)
    )
    assert response.status_code == 201
    assert response.json()["kind"] == kind
    assert response.json()["price_cents"] is None


@pytest.mark.asyncio
async def test_images_round_trip_in_order(client: AsyncClient, auth_headers: dict):
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(images=["a.png", "b.png"])
    )
    assert created.status_code == 201
    listing_id = created.json()["id"]

    fetched = await client.get(f"/api/v1/listings/{listing_id}")
    assert fetched.status_code == 200
    data = fetched.json()
    assert [i["url"] for i in data["images"]] == ["a.png", "b.png"]
    assert data["image_url"] == "a.png"


@pytest.mark.asyncio
async def test_explicit_image_url_used_without_images(client: AsyncClient, auth_headers: dict):
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(image_url="cover.jpg")
    )
    data = created.json()
    assert data["image_url"] == "cover.jpg"
    assert data["images"] == []


@pytest.mark.asyncio
async def test_category_get_or_create_ignores_case(client: AsyncClient, auth_headers: dict):
    first = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category="Tools"))
    second = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category="tools"))
    assert first.status_code == 201 and second.status_code == 201
    assert first.json()["category"] == second.json()["category"]
    assert first.json()["category"]["name"] == "Tools"

    categories = (await client.get("/api/v1/categories")).json()
    assert [c["name"] for c in categories] == ["Tools"]


@pytest.mark.asyncio
async def test_category_by_id(client: AsyncClient, auth_headers: dict):
    first = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category="Books"))
    category_id = first.json()["category"]["id"]
    second = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(category=category_id)
    )
    assert second.json()["category"] == {"id": category_id, "name": "Books"}


@pytest.mark.asyncio
async def test_unknown_category_id_is_invalid(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/v1/listings", headers=auth_headers, json=_sale(category=999))
    assert response.status_code == 400
    assert response.json() == {"error": "unknown category"}


@pytest.mark.asyncio
async def test_condition_is_normalized_with_freeform_fallback(client: AsyncClient, auth_headers: dict):
    canonical = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(condition="Like New")
    )
    assert canonical.json()["condition"] == "like_new"
    freeform = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(condition="vintage, minor scuffs")
    )
    assert freeform.json()["condition"] == "vintage, minor scuffs"


# --- GET /listings/{id} ------------------------------------------------------


@pytest.mark.asyncio
async def test_get_listing_not_found(client: AsyncClient):
    response = await client.get("/api/v1/listings/12345")
    assert response.status_code == 404
    assert response.json() == {"error": "listing not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_id", ["abc", "0", "-3", "1.5"])
async def test_get_listing_invalid_id(client: AsyncClient, raw_id):
    response = await client.get(f"/api/v1/listings/{raw_id}")
    assert response.status_code == 400
    assert response.json() == {"error": "invalid listing id"}


@pytest.mark.asyncio
async def test_get_listing_returns_any_status(client: AsyncClient, make_listing):
    listing = await make_listing(status="closed")
    response = await client.get(f"/api/v1/listings/{listing.id}")
    assert response.status_code == 200
    assert response.json()["status"] == "closed"


# --- GET /profile/listings ---------------------------------------------------


@pytest.mark.asyncio
async def test_owned_listings_requires_auth(client: AsyncClient):
    response = await client.get("/api/v1/profile/listings")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_owned_listings_include_every_status(
    client: AsyncClient, auth_headers: dict, make_listing, other_user
):
    await make_listing(item_name="Mine active")
    await make_listing(item_name="Mine paused", status="paused")
    await make_listing(item_name="Mine deleted", status="deleted")
    await make_listing(item_name="Not mine", owner_id=other_user.id)

    response = await client.get("/api/v1/profile/listings", headers=auth_headers)
    assert response.status_code == 200
    names = [l["item_name"] for l in response.json()["listings"]]
    assert names == ["Mine deleted", "Mine paused", "Mine active"]


# --- owner edits -------------------------------------------------------------


@pytest.mark.asyncio
async def test_owner_updates_status_category_and_usage(
    client: AsyncClient, auth_headers: dict, make_listing
):
    listing = await make_listing(kind="borrow")
    response = await client.patch(
        f"/api/v1/listings/{listing.id}",
        headers=auth_headers,
        json={"status": "paused", "usage_status": "reserved", "category": "Tools"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "paused"
    assert data["usage_status"] == "reserved"
    assert data["category"]["name"] == "Tools"


@pytest.mark.asyncio
async def test_update_rejects_invalid_status(client: AsyncClient, auth_headers: dict, make_listing):
    listing = await make_listing()
    response = await client.patch(
        f"/api/v1/listings/{listing.id}", headers=auth_headers, json={"status": "archived"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "invalid listing status"}


@pytest.mark.asyncio
async def test_borrower_only_on_borrow_listings(
    client: AsyncClient, auth_headers: dict, make_listing, other_user
):
    donation = await make_listing(kind="donate")
    response = await client.patch(
        f"/api/v1/listings/{donation.id}",
        headers=auth_headers,
        json={"borrowed_by_user_id": other_user.id},
    )
    assert response.status_code == 400

    loan = await make_listing(kind="borrow")
    response = await client.patch(
        f"/api/v1/listings/{loan.id}",
        headers=auth_headers,
        json={"borrowed_by_user_id": other_user.id, "usage_status": "borrowed"},
    )
    assert response.status_code == 200
    assert response.json()["borrowed_by_user_id"] == other_user.id
    assert response.json()["usage_status"] == "borrowed"


@pytest.mark.asyncio
async def test_non_owner_cannot_update(client: AsyncClient, other_headers: dict, make_listing):
    listing = await make_listing()
    response = await client.patch(
        f"/api/v1/listings/{listing.id}", headers=other_headers, json={"status": "closed"}
    )
    assert response.status_code == 403
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_delete_is_soft(client: AsyncClient, auth_headers: dict, make_listing):
    listing = await make_listing(item_name="Old bike")
    response = await client.delete(f"/api/v1/listings/{listing.id}", headers=auth_headers)
    assert response.status_code == 204

    browse = (await client.get("/api/v1/listings")).json()
    assert browse["listings"] == []
    detail = (await client.get(f"/api/v1/listings/{listing.id}")).json()
    assert detail["status"] == "deleted"


@pytest.mark.asyncio
async def test_add_and_remove_images(client: AsyncClient, auth_headers: dict):
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(images=["a.png"])
    )
    listing_id = created.json()["id"]

    added = await client.post(
        f"/api/v1/listings/{listing_id}/images",
        headers=auth_headers,
        json={"urls": ["b.png", "c.png"]},
    )
    assert added.status_code == 201
    images = added.json()["images"]
    assert [i["url"] for i in images] == ["a.png", "b.png", "c.png"]

    removed = await client.delete(
        f"/api/v1/listings/{listing_id}/images/{images[0]['id']}", headers=auth_headers
    )
    assert removed.status_code == 200
    data = removed.json()
    assert [i["url"] for i in data["images"]] == ["b.png", "c.png"]
    assert data["image_url"] == "b.png"


@pytest.mark.asyncio
async def test_remove_last_image_clears_primary(client: AsyncClient, auth_headers: dict):
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(images=["only.png"])
    )
    data = created.json()
    removed = await client.delete(
        f"/api/v1/listings/{data['id']}/images/{data['images'][0]['id']}", headers=auth_headers
    )
    assert removed.json()["images"] == []
    assert removed.json()["image_url"] is None


@pytest.mark.asyncio
async def test_remove_unknown_image_is_404(client: AsyncClient, auth_headers: dict, make_listing):
    listing = await make_listing()
    response = await client.delete(
        f"/api/v1/listings/{listing.id}/images/999", headers=auth_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "image not found"}


# --- Values beyond what the store can hold -----------------------------------

HUGE = "100000000000000000000"


@pytest.mark.asyncio
async def test_oversized_price_is_invalid(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(price_cents=HUGE)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "price too large"}

    largest = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(price_cents=2**31 - 1)
    )
    assert largest.status_code == 201
    assert largest.json()["price_cents"] == 2**31 - 1


@pytest.mark.asyncio
async def test_out_of_range_listing_id_is_not_found(client: AsyncClient, auth_headers: dict):
    response = await client.get(f"/api/v1/listings/{HUGE}")
    assert response.status_code == 404
    assert response.json() == {"error": "listing not found"}

    deleted = await client.delete(f"/api/v1/listings/{HUGE}", headers=auth_headers)
    assert deleted.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("category", [HUGE, 2**40])
async def test_out_of_range_category_id_on_create(
    client: AsyncClient, auth_headers: dict, category
):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(category=category)
    )
    assert response.status_code == 400
    assert response.json() == {"error": "unknown category"}


@pytest.mark.asyncio
async def test_out_of_range_ids_on_update(client: AsyncClient, auth_headers: dict, make_listing):
    listing = await make_listing(kind="borrow")
    category = await client.patch(
        f"/api/v1/listings/{listing.id}", headers=auth_headers, json={"category": HUGE}
    )
    assert category.status_code == 400
    assert category.json() == {"error": "unknown category"}

    borrower = await client.patch(
        f"/api/v1/listings/{listing.id}",
        headers=auth_headers,
        json={"borrowed_by_user_id": 2**40},
    )
    assert borrower.status_code == 400
    assert borrower.json() == {"error": "unknown borrower"}


@pytest.mark.asyncio
async def test_out_of_range_browse_parameters(client: AsyncClient, make_listing):
    await make_listing()
    response = await client.get("/api/v1/listings", params={"offset": HUGE})
    assert response.status_code == 400
    assert "error" in response.json()

    too_far = await client.get("/api/v1/listings", params={"offset": 2**31})
    assert too_far.status_code == 400

    by_category = await client.get("/api/v1/listings", params={"category": HUGE})
    assert by_category.status_code == 200
    assert by_category.json()["listings"] == []


# --- Text longer than its column ---------------------------------------------


@pytest.mark.asyncio
async def test_overlong_item_name_is_invalid(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(item_name="x" * 256)
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("item name too long")


@pytest.mark.asyncio
async def test_long_freeform_condition_is_stored(client: AsyncClient, auth_headers: dict):
    condition = "works but the left drawer sticks a little"
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(condition=condition)
    )
    assert response.status_code == 201
    assert response.json()["condition"] == condition


@pytest.mark.asyncio
async def test_overlong_category_name_is_invalid(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(category="c" * 101)
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("category name too long")


@pytest.mark.asyncio
async def test_overlong_image_url_is_invalid(
    client: AsyncClient, auth_headers: dict, make_listing
):
    long_url = "https://cdn.example.com/" + "a" * 1024
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(images=[long_url])
    )
    assert created.status_code == 400
    assert created.json()["error"].startswith("image url too long")

    listing = await make_listing()
    added = await client.post(
        f"/api/v1/listings/{listing.id}/images", headers=auth_headers, json={"urls": [long_url]}
    )
    assert added.status_code == 400


# --- Atomicity and list-view loading -----------------------------------------


@pytest.mark.asyncio
async def test_failed_image_insert_leaves_nothing_behind(
    client: AsyncClient, auth_headers: dict, session
):
    await session.execute(
        text(
            "CREATE TRIGGER reject_listing_images BEFORE INSERT ON listing_images "
            "BEGIN SELECT RAISE(ABORT, 'image store unavailable'); END"
        )
    )
    response = await client.post(
        "/api/v1/listings",
        headers=auth_headers,
        json=_sale(category="Garden", images=["a.png"]),
    )
    assert response.status_code == 500
    assert response.json() == {"error": "failed to create listing"}

    assert await session.scalar(select(func.count()).select_from(Listing)) == 0
    assert await session.scalar(select(func.count()).select_from(Category)) == 0


@pytest.mark.asyncio
async def test_list_views_load_only_the_primary_image(
    client: AsyncClient, auth_headers: dict, session
):
    created = await client.post(
        "/api/v1/listings", headers=auth_headers, json=_sale(images=["a.png", "b.png", "c.png"])
    )
    data = created.json()
    await client.delete(
        f"/api/v1/listings/{data['id']}/images/{data['images'][0]['id']}", headers=auth_headers
    )

    # Start from an empty identity map so the collection comes from the browse query
    session.expunge_all()
    listings, total = await ListingRepository(session).search(ListingFilter())
    assert total == 1
    assert [i.url for i in listings[0].images] == ["b.png"]

    session.expunge_all()
    owned = await ListingRepository(session).list_all(ListingFilter(status=None))
    assert [i.url for i in owned[0].images] == ["b.png"]
