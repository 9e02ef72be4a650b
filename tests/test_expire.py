"""
Tests for the cart expiry job
"""
from datetime import datetime, timedelta, timezone

from storefront.data.models import CartModel
from storefront.domain.scope import CartScope
from storefront.tasks.expire import expire_stale_carts


def _cart(db, session_id, expires_at, status="active"):
    cart = CartModel(session_id=session_id, status=status, expires_at=expires_at)
    db.add(cart)
    db.commit()
    return cart


class TestExpireStaleCarts:

    def test_expired_active_carts_are_abandoned(self, db):
        now = datetime.now(timezone.utc)
        stale = _cart(db, "stale", now - timedelta(minutes=1))
        fresh = _cart(db, "fresh", now + timedelta(days=1))
        converted = _cart(db, "done", now - timedelta(days=1), status="converted")

        assert expire_stale_carts(db, now) == 1

        db.refresh(stale)
        db.refresh(fresh)
        db.refresh(converted)
        assert stale.status == "abandoned"
        assert fresh.status == "active"
        assert converted.status == "converted"

    def test_expired_cart_is_replaced_on_next_access(self, db, cart_service):
        now = datetime.now(timezone.utc)
        stale = _cart(db, "returning-guest", now - timedelta(hours=1))

        cart = cart_service.get_or_create_cart(CartScope.for_guest("returning-guest"))

        assert cart.id != stale.id
        db.refresh(stale)
        assert stale.status == "abandoned"


class TestCartModel:

    def test_is_expired(self):
        now = datetime.now(timezone.utc)

        assert CartModel(expires_at=now - timedelta(seconds=1)).is_expired(now)
        assert not CartModel(expires_at=now + timedelta(seconds=1)).is_expired(now)
        assert not CartModel(expires_at=None).is_expired(now)

    def test_status_transitions(self):
        cart = CartModel(status="active")
        cart.convert()
        assert cart.status == "converted"

        cart = CartModel(status="active")
        cart.abandon()
        assert cart.status == "abandoned"
