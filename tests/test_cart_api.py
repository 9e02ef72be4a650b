"""
Component tests for the cart endpoints

Requests go through FastAPI routing, the session cookie dependency, CartService
and the repositories against an in-memory database.
"""
from datetime import timedelta

from fastapi.testclient import TestClient

from storefront.main import app
from storefront.utils.settings import SESSION_COOKIE_NAME


def _add(client, product_id, quantity=1, variant_id=None, headers=None, **params):
    body = {"product_id": product_id, "quantity": quantity}
    if variant_id is not None:
        body["variant_id"] = variant_id
    return client.post("/cart/items", json=body, params=params, headers=headers)


class TestGuestCartFlow:

    def test_first_request_issues_session_cookie(self, test_client):
        response = test_client.get("/cart/summary")

        assert response.status_code == 200
        assert SESSION_COOKIE_NAME in response.cookies
        data = response.json()
        assert data["success"] is True
        assert data["cart_summary"]["is_empty"] is True

    def test_session_cookie_keeps_same_cart(self, test_client):
        first = test_client.get("/cart/summary").json()["cart_summary"]["id"]
        second = test_client.get("/cart/summary").json()["cart_summary"]["id"]

        assert first == second

    def test_add_item(self, test_client, make_product):
        product = make_product(price=1999)

        response = _add(test_client, product.id, 2)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Item added to cart successfully"
        assert data["data"]["quantity"] == 2
        assert data["data"]["price"] == 1999
        assert data["data"]["formatted_total"] == "$39.98"
        assert data["cart_summary"]["total_quantity"] == 2
        assert data["cart_summary"]["total_price"] == 3998

    def test_add_same_product_twice_merges(self, test_client, make_product):
        product = make_product()

        _add(test_client, product.id, 2)
        response = _add(test_client, product.id, 3)

        assert response.status_code == 201
        summary = response.json()["cart_summary"]
        assert summary["items_count"] == 1
        assert summary["total_quantity"] == 5

    def test_add_over_maximum_returns_error_envelope(self, test_client, make_product):
        product = make_product(stock=100)

        response = _add(test_client, product.id, 11)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "CART_LIMIT_EXCEEDED"
        assert data["errors"]["max_quantity"] == 10

    def test_add_over_maximum_and_stock_reports_limit(self, test_client, make_product):
        product = make_product(stock=5)

        response = _add(test_client, product.id, 11)

        assert response.status_code == 400
        assert response.json()["code"] == "CART_LIMIT_EXCEEDED"

    def test_add_over_stock(self, test_client, make_product):
        product = make_product(stock=2)

        response = _add(test_client, product.id, 3)

        assert response.status_code == 400
        assert response.json()["code"] == "STOCK_INSUFFICIENT"
        assert response.json()["message"] == "Only 2 items available in stock"

    def test_add_unpublished_product(self, test_client, make_product):
        product = make_product(status="draft")

        response = _add(test_client, product.id, 1)

        assert response.status_code == 400
        assert response.json()["code"] == "PRODUCT_UNAVAILABLE"

    def test_add_missing_product(self, test_client):
        response = _add(test_client, 999, 1)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_add_with_variant(self, test_client, make_product, make_variant):
        product = make_product(price=1000)
        variant = make_variant(product, price=1300)

        response = _add(test_client, product.id, 1, variant_id=variant.id)

        assert response.status_code == 201
        assert response.json()["data"]["price"] == 1300
        assert response.json()["data"]["product_variant_id"] == variant.id

    def test_zero_quantity_is_rejected_by_schema(self, test_client, make_product):
        product = make_product()

        response = _add(test_client, product.id, 0)

        assert response.status_code == 422

    def test_show_cart_lists_items(self, test_client, make_product):
        product = make_product(price=500)
        _add(test_client, product.id, 2)

        response = test_client.get("/cart")

        assert response.status_code == 200
        cart = response.json()["cart"]
        assert cart["total_quantity"] == 2
        assert cart["total_price"] == 1000
        assert cart["items"][0]["display_name"] == product.name
        assert response.json()["validation_errors"] == {}


class TestItemMutations:

    def test_update_quantity(self, test_client, make_product):
        product = make_product()
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.patch(f"/cart/items/{item_id}", json={"quantity": 4})

        assert response.status_code == 200
        assert response.json()["message"] == "Cart updated successfully"
        assert response.json()["cart_summary"]["total_quantity"] == 4

    def test_update_to_zero_removes_item(self, test_client, make_product):
        product = make_product()
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.patch(f"/cart/items/{item_id}", json={"quantity": 0})

        assert response.status_code == 200
        assert response.json()["message"] == "Item removed from cart"
        assert response.json()["cart_summary"]["is_empty"] is True

    def test_update_over_maximum(self, test_client, make_product):
        product = make_product(stock=100)
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.patch(f"/cart/items/{item_id}", json={"quantity": 11})

        assert response.status_code == 400
        assert response.json()["code"] == "CART_LIMIT_EXCEEDED"

    def test_update_over_maximum_and_stock_reports_limit(self, test_client, make_product):
        product = make_product(stock=5)
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.patch(f"/cart/items/{item_id}", json={"quantity": 11})

        assert response.status_code == 400
        assert response.json()["code"] == "CART_LIMIT_EXCEEDED"
        assert response.json()["errors"]["max_quantity"] == 10

    def test_update_within_maximum_over_stock(self, test_client, make_product):
        product = make_product(stock=5)
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.patch(f"/cart/items/{item_id}", json={"quantity": 6})

        assert response.status_code == 400
        assert response.json()["code"] == "STOCK_INSUFFICIENT"

    def test_update_missing_item(self, test_client):
        response = test_client.patch("/cart/items/12345", json={"quantity": 1})

        assert response.status_code == 404

    def test_other_session_cannot_update_or_delete(self, test_client, make_product):
        product = make_product()
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        stranger = TestClient(app)
        update = stranger.patch(f"/cart/items/{item_id}", json={"quantity": 3})
        delete = stranger.delete(f"/cart/items/{item_id}")

        assert update.status_code == 403
        assert update.json()["code"] == "CART_UNAUTHORIZED"
        assert delete.status_code == 403

    def test_remove_item(self, test_client, make_product):
        product = make_product()
        item_id = _add(test_client, product.id, 1).json()["data"]["id"]

        response = test_client.delete(f"/cart/items/{item_id}")

        assert response.status_code == 200
        assert response.json()["cart_summary"]["is_empty"] is True

    def test_clear_cart_keeps_cart_id(self, test_client, make_product):
        cart_id = test_client.get("/cart/summary").json()["cart_summary"]["id"]
        _add(test_client, make_product().id, 1)
        _add(test_client, make_product().id, 2)

        response = test_client.delete("/cart")

        assert response.status_code == 200
        summary = response.json()["cart_summary"]
        assert summary["is_empty"] is True
        assert summary["id"] == cart_id


class TestValidateEndpoint:

    def test_reports_stock_shortage(self, db, test_client, make_product):
        product = make_product(stock=10)
        item_id = _add(test_client, product.id, 5).json()["data"]["id"]
        product.stock_quantity = 1
        db.commit()

        response = test_client.get("/cart/validate")

        assert response.status_code == 200
        data = response.json()
        assert data["has_errors"] is True
        assert data["validation_errors"] == {str(item_id): ["Only 1 items available in stock"]}

    def test_no_errors(self, test_client, make_product):
        _add(test_client, make_product().id, 1)

        data = test_client.get("/cart/validate").json()

        assert data == {"success": True, "validation_errors": {}, "has_errors": False}


class TestUserScope:

    def test_user_cart_by_bearer_token(self, test_client, make_user, make_product, auth_headers):
        user = make_user()
        product = make_product()

        response = _add(test_client, product.id, 2, headers=auth_headers(user))
        guest = test_client.get("/cart/summary").json()["cart_summary"]

        assert response.status_code == 201
        assert response.json()["cart_summary"]["total_quantity"] == 2
        assert guest["is_empty"] is True

    def test_user_id_query_param_does_not_grant_access(
        self, test_client, make_user, make_product, auth_headers
    ):
        victim = make_user()
        item_id = _add(test_client, make_product().id, 1, headers=auth_headers(victim)).json()["data"]["id"]

        stranger = TestClient(app)
        cart = stranger.get("/cart", params={"user_id": victim.id})
        delete = stranger.delete(f"/cart/items/{item_id}", params={"user_id": victim.id})

        assert cart.status_code == 200
        assert cart.json()["cart"]["items"] == []
        assert delete.status_code == 403
        owner_summary = test_client.get("/cart/summary", headers=auth_headers(victim)).json()
        assert owner_summary["cart_summary"]["total_quantity"] == 1

    def test_other_user_token_cannot_touch_item(self, test_client, make_user, make_product, auth_headers):
        owner, other = make_user(), make_user()
        item_id = _add(test_client, make_product().id, 1, headers=auth_headers(owner)).json()["data"]["id"]

        response = test_client.patch(
            f"/cart/items/{item_id}", json={"quantity": 2}, headers=auth_headers(other)
        )

        assert response.status_code == 403

    def test_invalid_token_is_rejected(self, test_client):
        response = test_client.get("/cart/summary", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_expired_token_is_rejected(self, test_client, make_user, auth_headers):
        headers = auth_headers(make_user(), expires_delta=timedelta(minutes=-5))

        response = test_client.get("/cart/summary", headers=headers)

        assert response.status_code == 401
