"""
Component tests for the admin catalog endpoints (brands, categories,
products, variants) and the public catalog reads that depend on them
"""
import pytest


@pytest.fixture
def admin(test_client, admin_headers):
    """Klient z naglowkiem admina."""

    class _Admin:
        def get(self, url, **kw):
            return test_client.get(url, headers=admin_headers, **kw)

        def post(self, url, **kw):
            return test_client.post(url, headers=admin_headers, **kw)

        def patch(self, url, **kw):
            return test_client.patch(url, headers=admin_headers, **kw)

        def delete(self, url, **kw):
            return test_client.delete(url, headers=admin_headers, **kw)

    return _Admin()


def _brand(admin, name="Acme", slug="acme", **extra):
    return admin.post("/admin/brands", json={"name": name, "slug": slug, **extra})


def _category(admin, name="Phones", slug="phones", parent_id=None):
    return admin.post("/admin/categories", json={"name": name, "slug": slug, "parent_id": parent_id})


def _product(admin, n=1, **extra):
    body = {
        "name": f"Phone {n}",
        "slug": f"phone-{n}",
        "sku": f"PHN-{n}",
        "price": 49900,
        "stock_quantity": 10,
        "status": "published",
    }
    body.update(extra)
    return admin.post("/admin/products", json=body)


class TestAdminAccess:

    def test_requires_token(self, test_client):
        assert test_client.get("/admin/brands").status_code == 401

    def test_regular_user_is_forbidden(self, test_client, make_user, auth_headers):
        response = test_client.post(
            "/admin/brands", json={"name": "Acme", "slug": "acme"}, headers=auth_headers(make_user())
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_admin_is_allowed(self, admin):
        assert admin.get("/admin/brands").status_code == 200


class TestBrands:

    def test_create_and_update(self, admin):
        created = _brand(admin, website="https://acme.example")

        assert created.status_code == 201
        brand_id = created.json()["id"]

        response = admin.patch(f"/admin/brands/{brand_id}", json={"is_featured": True, "website": None})

        assert response.status_code == 200
        assert response.json()["is_featured"] is True
        assert response.json()["website"] is None
        assert response.json()["name"] == "Acme"

    def test_duplicate_slug(self, admin):
        _brand(admin)

        response = _brand(admin, name="Other", slug="acme")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "CATALOG_CONFLICT"

    def test_invalid_slug_rejected_by_schema(self, admin):
        assert _brand(admin, slug="Not A Slug").status_code == 422

    def test_delete_brand(self, admin):
        brand_id = _brand(admin).json()["id"]

        assert admin.delete(f"/admin/brands/{brand_id}").status_code == 204
        assert admin.get(f"/admin/brands/{brand_id}").status_code == 404

    def test_cannot_delete_brand_with_products(self, admin):
        brand_id = _brand(admin).json()["id"]
        _product(admin, brand_id=brand_id)

        response = admin.delete(f"/admin/brands/{brand_id}")

        assert response.status_code == 409
        assert response.json()["detail"]["message"] == "Cannot delete brand with products."

    def test_public_brand_list_counts_published_products(self, test_client, admin):
        brand_id = _brand(admin).json()["id"]
        _brand(admin, name="Hidden", slug="hidden", is_active=False)
        _product(admin, 1, brand_id=brand_id)
        _product(admin, 2, brand_id=brand_id, status="draft")

        response = test_client.get("/brands")

        assert response.status_code == 200
        assert response.json() == [{"id": brand_id, "name": "Acme", "slug": "acme", "product_count": 1}]


class TestCategories:

    def test_create_child_category(self, admin):
        parent_id = _category(admin).json()["id"]

        response = _category(admin, name="Smartphones", slug="smartphones", parent_id=parent_id)

        assert response.status_code == 201
        assert response.json()["parent_id"] == parent_id
        children = admin.get("/admin/categories", params={"parent_id": parent_id}).json()
        assert [c["slug"] for c in children] == ["smartphones"]

    def test_missing_parent(self, admin):
        response = _category(admin, parent_id=999)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PARENT"

    def test_cannot_move_category_under_its_child(self, admin):
        parent_id = _category(admin).json()["id"]
        child_id = _category(admin, name="Smartphones", slug="smartphones", parent_id=parent_id).json()["id"]

        response = admin.patch(f"/admin/categories/{parent_id}", json={"parent_id": child_id})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PARENT"

    def test_name_with_invalid_characters(self, admin):
        assert _category(admin, name="Phones<script>").status_code == 422

    def test_cannot_delete_category_with_children(self, admin):
        parent_id = _category(admin).json()["id"]
        child_id = _category(admin, name="Smartphones", slug="smartphones", parent_id=parent_id).json()["id"]

        blocked = admin.delete(f"/admin/categories/{parent_id}")

        assert blocked.status_code == 409
        assert blocked.json()["detail"]["message"] == "Cannot delete category with subcategories."

        assert admin.delete(f"/admin/categories/{child_id}").status_code == 204
        assert admin.delete(f"/admin/categories/{parent_id}").status_code == 204

    def test_cannot_delete_category_with_products(self, admin):
        category_id = _category(admin).json()["id"]
        _product(admin, category_ids=[category_id])

        response = admin.delete(f"/admin/categories/{category_id}")

        assert response.status_code == 409
        assert response.json()["detail"]["message"] == "Cannot delete category with products."

    def test_public_list_hides_inactive(self, test_client, admin):
        _category(admin)
        hidden_id = admin.post(
            "/admin/categories", json={"name": "Old", "slug": "old", "is_active": False}
        ).json()["id"]

        slugs = [c["slug"] for c in test_client.get("/categories").json()]

        assert slugs == ["phones"]
        assert hidden_id is not None


class TestProducts:

    def test_create_product_with_brand_and_categories(self, test_client, admin):
        brand_id = _brand(admin).json()["id"]
        category_id = _category(admin).json()["id"]

        response = _product(admin, brand_id=brand_id, category_ids=[category_id])

        assert response.status_code == 201
        data = response.json()
        assert data["brand_id"] == brand_id
        assert data["category_ids"] == [category_id]

        by_brand = test_client.get("/products/", params={"brand_id": brand_id}).json()
        by_category = test_client.get("/products/", params={"category_id": category_id}).json()
        assert [p["id"] for p in by_brand] == [data["id"]]
        assert [p["id"] for p in by_category] == [data["id"]]

    def test_unknown_brand(self, admin):
        response = _product(admin, brand_id=999)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_BRAND"

    def test_unknown_category(self, admin):
        response = _product(admin, category_ids=[999])

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_CATEGORY"

    def test_duplicate_sku(self, admin):
        _product(admin, 1)

        response = _product(admin, 2, sku="PHN-1")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "CATALOG_CONFLICT"

    def test_unknown_status_rejected_by_schema(self, admin):
        assert _product(admin, status="bogus").status_code == 422

    def test_publish_draft_product(self, test_client, admin):
        product_id = _product(admin, status="draft").json()["id"]
        assert test_client.get(f"/products/{product_id}").status_code == 404

        response = admin.patch(f"/admin/products/{product_id}", json={"status": "published", "price": 45000})

        assert response.status_code == 200
        assert test_client.get(f"/products/{product_id}").json()["price"] == 45000

    def test_delete_archives_and_cart_reports_it(self, test_client, admin):
        product_id = _product(admin).json()["id"]
        item_id = test_client.post(
            "/cart/items", json={"product_id": product_id, "quantity": 1}
        ).json()["data"]["id"]

        response = admin.delete(f"/admin/products/{product_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "archived"
        assert test_client.get(f"/products/{product_id}").status_code == 404
        errors = test_client.get("/cart/validate").json()["validation_errors"]
        assert errors == {str(item_id): ["Product is no longer available"]}


class TestVariants:

    def test_create_variant_generates_sku(self, admin):
        product_id = _product(admin).json()["id"]

        response = admin.post(
            f"/admin/products/{product_id}/variants", json={"name": "128 GB", "price": 52900}
        )

        assert response.status_code == 201
        assert response.json()["sku"] == "PHN-1-V1"

    def test_duplicate_variant_sku(self, admin):
        product_id = _product(admin).json()["id"]
        admin.post(f"/admin/products/{product_id}/variants", json={"name": "A", "sku": "X-1", "price": 1})

        response = admin.post(
            f"/admin/products/{product_id}/variants", json={"name": "B", "sku": "X-1", "price": 1}
        )

        assert response.status_code == 400

    def test_update_and_delete_variant(self, admin):
        product_id = _product(admin).json()["id"]
        variant_id = admin.post(
            f"/admin/products/{product_id}/variants", json={"name": "128 GB", "price": 52900}
        ).json()["id"]

        updated = admin.patch(
            f"/admin/products/{product_id}/variants/{variant_id}", json={"is_active": False}
        )
        deleted = admin.delete(f"/admin/products/{product_id}/variants/{variant_id}")

        assert updated.json()["is_active"] is False
        assert deleted.status_code == 204
        assert admin.get(f"/admin/products/{product_id}/variants").json() == []

    def test_variant_of_other_product_is_not_found(self, admin):
        first = _product(admin, 1).json()["id"]
        second = _product(admin, 2).json()["id"]
        variant_id = admin.post(
            f"/admin/products/{first}/variants", json={"name": "A", "price": 100}
        ).json()["id"]

        response = admin.patch(f"/admin/products/{second}/variants/{variant_id}", json={"price": 1})

        assert response.status_code == 404
