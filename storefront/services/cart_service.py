from datetime import datetime, timezone, timedelta
from typing import Dict, Any, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_variant import ProductVariantModel
from storefront.domain.errors import (
    CartItemLimitExceeded,
    CartItemNotFound,
    InvalidQuantity,
    ProductUnavailable,
    QuantityExceedsMaximum,
)
from storefront.domain.scope import CartScope
from storefront.repos.cart_repo import CartRepo
from storefront.utils.money import format_cents
from storefront.utils.retry import db_retry
from storefront.utils.settings import (
    CART_MAX_ITEMS,
    CART_MAX_ITEM_QUANTITY,
    GUEST_CART_TTL_SECONDS,
    USER_CART_TTL_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka dla goscia (sesja) i zalogowanego usera.
    Scope przekazujemy jawnie do kazdej operacji, serwis nie czyta stanu globalnego.
    Jedna instancja na request - trzyma cache rozwiazanego koszyka.
    """

    def __init__(
        self,
        db: Session,
        max_items: int = CART_MAX_ITEMS,
        max_item_quantity: int = CART_MAX_ITEM_QUANTITY,
    ):
        self.repo = CartRepo(db)
        self.max_items = max_items
        self.max_item_quantity = max_item_quantity
        self._cached_cart: CartModel | None = None

    #query - odczyt
    def get_or_create_cart(self, scope: CartScope) -> CartModel:
        if self._cached_cart is not None and self._is_cart_valid(self._cached_cart, scope):
            return self._cached_cart

        cart = self._find_or_create(scope)

        self._cached_cart = cart
        return cart

    def get_cart_with_items(self, scope: CartScope) -> CartModel:
        cart = self.get_or_create_cart(scope)
        return self.repo.get_cart_with_items(cart.id)

    def get_item(self, item_id: int) -> CartItemModel:
        item = self.repo.get_cart_item_by_id(item_id)
        if not item:
            raise CartItemNotFound(f"Cart item {item_id} not found")
        return item

    def get_cart_summary(self, scope: CartScope) -> Dict[str, Any]:
        cart = self.get_or_create_cart(scope)
        items_count, total_quantity, total_price = self.repo.get_cart_totals(cart.id)

        return {
            "id": cart.id,
            "items_count": items_count,
            "total_quantity": total_quantity,
            "total_price": total_price,
            "formatted_total": format_cents(total_price),
            "is_empty": items_count == 0,
        }

    def validate_cart_item(self, item: CartItemModel) -> List[str]:
        product = item.product
        variant = item.variant
        errors = []

        if product is None or not product.is_published:
            errors.append("Product is no longer available")

        stock_source = variant if variant is not None else product
        if stock_source is not None and item.quantity > stock_source.stock_quantity:
            errors.append(f"Only {stock_source.stock_quantity} items available in stock")

        if item.product_variant_id is not None and (variant is None or not variant.is_active):
            errors.append("Selected variant is no longer available")

        return errors

    def validate_cart(self, scope: CartScope, cart: CartModel | None = None) -> Dict[int, List[str]]:
        cart = self.repo.get_cart_with_items(cart.id) if cart else self.get_cart_with_items(scope)

        errors = {}
        for item in cart.items:
            item_errors = self.validate_cart_item(item)
            if item_errors:
                errors[item.id] = item_errors

        return errors

    def ensure_available(
        self,
        product: ProductModel,
        variant: ProductVariantModel | None,
        quantity: int,
    ):
        """Walidacja przy dodawaniu: produkt opublikowany, wariant aktywny, stan magazynowy."""
        if not product.is_published:
            raise ProductUnavailable("Product is not available", data={"product_id": product.id})

        if variant is not None:
            if variant.product_id != product.id:
                raise ProductUnavailable(
                    "Selected variant does not belong to this product",
                    data={"product_id": product.id, "variant_id": variant.id},
                )
            if not variant.is_active:
                raise ProductUnavailable(
                    "Selected variant is no longer available",
                    data={"variant_id": variant.id},
                )

        available = variant.stock_quantity if variant is not None else product.stock_quantity
        if quantity > available:
            raise ProductUnavailable(
                f"Only {available} items available in stock",
                code="STOCK_INSUFFICIENT",
                data={"available_stock": available, "requested_quantity": quantity},
            )

    def ensure_quantity_allowed(self, quantity: int):
        if quantity > self.max_item_quantity:
            raise QuantityExceedsMaximum(
                f"Maximum quantity per item is {self.max_item_quantity}",
                data={
                    "max_quantity": self.max_item_quantity,
                    "requested_quantity": quantity,
                },
            )

    #commands
    def add_to_cart(
        self,
        scope: CartScope,
        product: ProductModel,
        quantity: int = 1,
        variant: ProductVariantModel | None = None,
    ) -> CartItemModel:
        if quantity <= 0:
            raise InvalidQuantity("Quantity must be greater than 0", data={"requested_quantity": quantity})

        self.ensure_quantity_allowed(quantity)

        cart = self.get_or_create_cart(scope)
        item = self._upsert_line(cart.id, product, variant, quantity)

        self._clear_cart_cache()
        return item

    def update_quantity(self, item: CartItemModel, quantity: int) -> bool:
        # 0 (i mniej) = usuniecie pozycji, nie blad
        self.ensure_quantity_allowed(quantity)

        locked = self.repo.get_cart_item_by_id(item.id, for_update=True)
        if not locked:
            return False

        if quantity <= 0:
            logger.info(f"Usuwanie pozycji {locked.id} z koszyka {locked.cart_id} (ilosc 0)")
            self.repo.delete_cart_item(locked)
        else:
            logger.info(
                f"Zmiana ilosci pozycji {locked.id} z {locked.quantity} na {quantity}"
            )
            #cena zostaje ta z momentu dodania
            locked.quantity = quantity

        self.repo.commit()
        self._clear_cart_cache()
        return True

    def remove_from_cart(self, item: CartItemModel) -> bool:
        logger.info(f"Usuwanie pozycji {item.id} z koszyka {item.cart_id}")

        self.repo.delete_cart_item(item)
        self.repo.commit()

        self._clear_cart_cache()
        return True

    def clear_cart(self, scope: CartScope, cart: CartModel | None = None):
        cart = cart or self.get_or_create_cart(scope)

        removed = self.repo.delete_cart_items(cart.id)
        self.repo.commit()
        self.repo.expire(cart)

        logger.info(f"Koszyk {cart.id} wyczyszczony, usunieto {removed} pozycji")
        self._clear_cart_cache()

    def transfer_guest_cart(self, session_id: str, user_id: int):
        """
        Przepiecie koszyka goscia na usera po logowaniu/rejestracji.

        - brak koszyka goscia (albo pusty) -> nic nie robimy
        - user nie ma aktywnego koszyka -> koszyk goscia zmienia wlasciciela
        - user ma koszyk -> scalamy pozycje po (produkt, wariant), ilosci sumujemy
          do limitu na pozycje, koszyk goscia usuwamy
        """
        guest_cart = self.repo.get_active_cart_by_session(session_id)
        if not guest_cart:
            return

        guest_items = self.repo.get_cart_items(guest_cart.id)
        if not guest_items:
            return

        guest_cart_id = guest_cart.id

        now = datetime.now(timezone.utc)
        user_cart = self.repo.get_active_cart_by_user(user_id)

        if not user_cart:
            self._abandon_stale_carts(CartScope.for_user(user_id), now)

            guest_cart.user_id = user_id
            guest_cart.session_id = None
            guest_cart.expires_at = now + timedelta(seconds=USER_CART_TTL_SECONDS)
            self.repo.commit()

            logger.info(f"Koszyk goscia {guest_cart_id} przypisany do uzytkownika {user_id}")
            self._clear_cart_cache()
            return

        line_count = self.repo.count_cart_items(user_cart.id)
        for guest_item in guest_items:
            existing = self.repo.get_cart_item(
                user_cart.id, guest_item.product_id, guest_item.product_variant_id
            )

            if existing:
                existing.quantity = min(existing.quantity + guest_item.quantity, self.max_item_quantity)
                self.repo.delete_cart_item(guest_item)
            elif line_count < self.max_items:
                guest_item.cart = user_cart
                line_count += 1
            else:
                logger.warning(
                    f"Koszyk {user_cart.id} ma juz {self.max_items} pozycji, "
                    f"pomijam produkt {guest_item.product_id} z koszyka goscia {guest_cart_id}"
                )
                self.repo.delete_cart_item(guest_item)

        #przeniesione pozycje musza byc w bazie zanim kaskada usunie koszyk goscia
        self.repo.flush()
        self.repo.expire(guest_cart)
        self.repo.delete_cart(guest_cart)
        self.repo.commit()

        logger.info(f"Koszyk goscia {guest_cart_id} scalony z koszykiem {user_cart.id} uzytkownika {user_id}")
        self._clear_cart_cache()

    #helpers
    @db_retry()
    def _find_or_create(self, scope: CartScope) -> CartModel:
        if not scope.is_authenticated and not scope.session_id:
            raise ValueError("Cart scope requires a user id or a session id")

        cart = self.repo.get_active_cart(scope)
        if cart:
            return cart

        now = datetime.now(timezone.utc)
        self._abandon_stale_carts(scope, now)

        if scope.is_authenticated:
            new_cart = CartModel(
                user_id=scope.user_id,
                status="active",
                expires_at=now + timedelta(seconds=USER_CART_TTL_SECONDS),
            )
        else:
            new_cart = CartModel(
                session_id=scope.session_id,
                status="active",
                expires_at=now + timedelta(seconds=GUEST_CART_TTL_SECONDS),
            )

        try:
            created = self.repo.create_cart(new_cart)
        except IntegrityError:
            #rownolegly request utworzyl koszyk dla tego scope, retry go znajdzie
            self.repo.rollback()
            logger.warning(f"Konflikt przy tworzeniu koszyka dla {scope}, ponawiam")
            raise

        logger.info(f"Utworzono nowy koszyk {created.id} dla {scope}")
        return created

    @db_retry()
    def _upsert_line(
        self,
        cart_id: int,
        product: ProductModel,
        variant: ProductVariantModel | None,
        quantity: int,
    ) -> CartItemModel:
        variant_id = variant.id if variant is not None else None
        existing = self.repo.get_cart_item(cart_id, product.id, variant_id, for_update=True)

        if existing:
            new_quantity = existing.quantity + quantity
            if new_quantity > self.max_item_quantity:
                current = existing.quantity
                self.repo.rollback()
                raise QuantityExceedsMaximum(
                    f"Maximum quantity per item is {self.max_item_quantity}",
                    data={
                        "max_quantity": self.max_item_quantity,
                        "current_quantity": current,
                        "requested_quantity": quantity,
                        "total_quantity": new_quantity,
                    },
                )

            logger.info(
                f"Produkt {product.id} juz jest w koszyku {cart_id}, zwiekszam ilosc "
                f"z {existing.quantity} do {new_quantity}"
            )
            existing.quantity = new_quantity
            self.repo.commit()
            return existing

        current_items = self.repo.count_cart_items(cart_id)
        if current_items >= self.max_items:
            self.repo.rollback()
            raise CartItemLimitExceeded(
                f"Maximum cart items exceeded ({self.max_items})",
                data={"max_items": self.max_items, "current_items": current_items},
            )

        #cena z wariantu albo produktu, zapamietana na pozycji
        price = variant.price if variant is not None else product.price
        item = CartItemModel(
            cart_id=cart_id,
            product_id=product.id,
            product_variant_id=variant_id,
            quantity=quantity,
            price=price,
            product_snapshot={
                "name": product.name,
                "slug": product.slug,
                "sku": variant.sku if variant is not None else product.sku,
            },
        )

        try:
            self.repo.add_cart_item(item)
            self.repo.commit()
        except IntegrityError:
            #ta sama pozycja wstawiona rownolegle, retry zwiekszy jej ilosc
            self.repo.rollback()
            logger.warning(f"Konflikt przy dodawaniu produktu {product.id} do koszyka {cart_id}, ponawiam")
            raise

        logger.info(f"Dodano produkt {product.id} (wariant {variant_id}) do koszyka {cart_id}")
        return item

    def _abandon_stale_carts(self, scope: CartScope, now: datetime):
        #wygasly, ale wciaz active koszyk blokowalby unikalny indeks
        abandoned = self.repo.abandon_expired_carts(scope, now)
        if abandoned:
            logger.info(f"Oznaczono {abandoned} wygaslych koszykow jako abandoned dla {scope}")

    def _is_cart_valid(self, cart: CartModel, scope: CartScope) -> bool:
        if cart.status != "active":
            return False
        if scope.is_authenticated:
            return cart.user_id == scope.user_id
        return cart.session_id == scope.session_id

    def _clear_cart_cache(self):
        self._cached_cart = None
