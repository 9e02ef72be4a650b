# storefront/repos/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import select, delete, update, func, or_
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.scope import CartScope


def _not_expired(now: datetime):
    return or_(CartModel.expires_at.is_(None), CartModel.expires_at > now)


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    #carts
    def get_active_cart_by_user(self, user_id: int) -> CartModel | None:
        now = datetime.now(timezone.utc)
        stmt = select(CartModel).where(
            CartModel.user_id == user_id,
            CartModel.status == "active",
            _not_expired(now),
        )
        return self.db.execute(stmt).scalars().first()

    def get_active_cart_by_session(self, session_id: str) -> CartModel | None:
        now = datetime.now(timezone.utc)
        stmt = select(CartModel).where(
            CartModel.session_id == session_id,
            CartModel.status == "active",
            _not_expired(now),
        )
        return self.db.execute(stmt).scalars().first()

    def get_active_cart(self, scope: CartScope) -> CartModel | None:
        if scope.is_authenticated:
            return self.get_active_cart_by_user(scope.user_id)
        return self.get_active_cart_by_session(scope.session_id)

    def get_cart_with_items(self, cart_id: int) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.id == cart_id)
            .options(
                selectinload(CartModel.items).selectinload(CartItemModel.product),
                selectinload(CartModel.items).selectinload(CartItemModel.variant),
            )
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalars().first()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_expired_active_carts(self, now: datetime) -> list[CartModel]:
        stmt = select(CartModel).where(
            CartModel.status == "active",
            CartModel.expires_at.is_not(None),
            CartModel.expires_at <= now,
        )
        return list(self.db.execute(stmt).scalars().all())

    def abandon_expired_carts(self, scope: CartScope, now: datetime) -> int:
        stmt = update(CartModel).where(
            CartModel.status == "active",
            CartModel.expires_at.is_not(None),
            CartModel.expires_at <= now,
        )
        if scope.is_authenticated:
            stmt = stmt.where(CartModel.user_id == scope.user_id)
        else:
            stmt = stmt.where(CartModel.session_id == scope.session_id)
        result = self.db.execute(stmt.values(status="abandoned").execution_options(synchronize_session=False))
        return result.rowcount

    def delete_cart(self, cart: CartModel):
        self.db.delete(cart)

    #cart items
    def get_cart_item_by_id(self, item_id: int, for_update: bool = False) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id, with_for_update=for_update or None)

    def get_cart_item(
        self,
        cart_id: int,
        product_id: int,
        variant_id: int | None,
        for_update: bool = False,
    ) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.product_id == product_id,
        )
        if variant_id is None:
            stmt = stmt.where(CartItemModel.product_variant_id.is_(None))
        else:
            stmt = stmt.where(CartItemModel.product_variant_id == variant_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_cart_items(self, cart_id: int) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_cart_items(self, cart_id: int) -> int:
        stmt = select(func.count(CartItemModel.id)).where(CartItemModel.cart_id == cart_id)
        return self.db.execute(stmt).scalar_one()

    def get_cart_totals(self, cart_id: int) -> tuple[int, int, int]:
        """(liczba pozycji, suma ilosci, suma cen) jednym zapytaniem."""
        stmt = select(
            func.count(CartItemModel.id),
            func.coalesce(func.sum(CartItemModel.quantity), 0),
            func.coalesce(func.sum(CartItemModel.price * CartItemModel.quantity), 0),
        ).where(CartItemModel.cart_id == cart_id)
        count, quantity, price = self.db.execute(stmt).one()
        return int(count), int(quantity), int(price)

    def add_cart_item(self, item: CartItemModel):
        self.db.add(item)

    def delete_cart_item(self, item: CartItemModel):
        self.db.delete(item)

    def delete_cart_items(self, cart_id: int) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        return result.rowcount

    def expire(self, obj):
        self.db.expire(obj)

    def flush(self):
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
