#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.api.identity import get_scope
from storefront.data.database import get_db
from storefront.data.models.cart import CartModel
from storefront.domain.errors import CartError, NotFound
from storefront.domain.policies import CartItemPolicy
from storefront.domain.schemas import (
    CartErrorOut,
    CartItemOut,
    CartOut,
    CartPageOut,
    CartSuccessOut,
    CartSummaryOut,
    CartValidationOut,
    ItemIn,
    ItemUpdateIn,
)
from storefront.domain.scope import CartScope
from storefront.services.cart_service import CartService
from storefront.services.product_service import ProductService
from storefront.utils.money import format_cents
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])
policy = CartItemPolicy()

ERROR_RESPONSES = {
    400: {"model": CartErrorOut},
    403: {"model": CartErrorOut},
    404: {"model": CartErrorOut},
    500: {"model": CartErrorOut},
}


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db=db)


def _error(response: Response, status_code: int, message: str, code: str, errors: dict | None = None) -> CartErrorOut:
    response.status_code = status_code
    return CartErrorOut(message=message, code=code, errors=errors or {})


def _cart_out(cart: CartModel) -> CartOut:
    items = [CartItemOut.model_validate(i) for i in cart.items]
    total_price = sum(i.total_price for i in items)
    return CartOut(
        id=cart.id,
        status=cart.status,
        total_quantity=sum(i.quantity for i in items),
        total_price=total_price,
        formatted_total=format_cents(total_price),
        items=items,
        expires_at=cart.expires_at,
    )


@router.get("", response_model=CartPageOut)
def show_cart(scope: CartScope = Depends(get_scope), svc: CartService = Depends(get_service)):
    cart = svc.get_cart_with_items(scope)
    errors = svc.validate_cart(scope, cart)
    return CartPageOut(cart=_cart_out(cart), validation_errors=errors)


@router.get("/summary", response_model=CartSuccessOut)
def cart_summary(scope: CartScope = Depends(get_scope), svc: CartService = Depends(get_service)):
    return CartSuccessOut(
        message="Cart summary",
        cart_summary=CartSummaryOut(**svc.get_cart_summary(scope)),
    )


@router.get("/validate", response_model=CartValidationOut)
def validate_cart(scope: CartScope = Depends(get_scope), svc: CartService = Depends(get_service)):
    errors = svc.validate_cart(scope)
    return CartValidationOut(validation_errors=errors, has_errors=bool(errors))


@router.post("/items", status_code=201, responses=ERROR_RESPONSES)
def add_item(
    payload: ItemIn,
    response: Response,
    scope: CartScope = Depends(get_scope),
    svc: CartService = Depends(get_service),
    db: Session = Depends(get_db),
):
    logger.info(
        f"Dodanie do koszyka: produkt {payload.product_id}, wariant {payload.variant_id}, "
        f"ilosc {payload.quantity}"
    )
    catalog = ProductService(db)

    try:
        product = catalog.get_product(payload.product_id)
        variant = catalog.get_variant(payload.variant_id) if payload.variant_id else None

        #limit na pozycje ma pierwszenstwo przed stanem magazynowym
        svc.ensure_quantity_allowed(payload.quantity)
        svc.ensure_available(product, variant, payload.quantity)
        item = svc.add_to_cart(scope, product, payload.quantity, variant)

        return CartSuccessOut(
            message="Item added to cart successfully",
            data=CartItemOut.model_validate(item),
            cart_summary=CartSummaryOut(**svc.get_cart_summary(scope)),
        )
    except NotFound as e:
        return _error(response, 404, str(e), "NOT_FOUND")
    except CartError as e:
        logger.warning(f"Blad koszyka przy dodawaniu: {e.message} ({e.code}) {e.data}")
        return _error(response, 400, e.message, e.code, e.data)
    except Exception:
        logger.exception("Nieoczekiwany blad przy dodawaniu do koszyka")
        return _error(response, 500, "Failed to add item to cart", "INTERNAL_ERROR")


@router.patch("/items/{item_id}", responses=ERROR_RESPONSES)
def update_item(
    item_id: int,
    payload: ItemUpdateIn,
    response: Response,
    scope: CartScope = Depends(get_scope),
    svc: CartService = Depends(get_service),
):
    try:
        item = svc.get_item(item_id)
        if not policy.update(scope, item):
            return _error(response, 403, "Unauthorized cart access", "CART_UNAUTHORIZED")

        svc.ensure_quantity_allowed(payload.quantity)
        if payload.quantity > 0:
            svc.ensure_available(item.product, item.variant, payload.quantity)

        svc.update_quantity(item, payload.quantity)

        return CartSuccessOut(
            message="Cart updated successfully" if payload.quantity > 0 else "Item removed from cart",
            cart_summary=CartSummaryOut(**svc.get_cart_summary(scope)),
        )
    except NotFound as e:
        return _error(response, 404, str(e), "NOT_FOUND")
    except CartError as e:
        logger.warning(f"Blad koszyka przy zmianie ilosci: {e.message} ({e.code})")
        return _error(response, 400, e.message, e.code, e.data)
    except Exception:
        logger.exception(f"Nieoczekiwany blad przy zmianie pozycji {item_id}")
        return _error(response, 500, "Failed to update cart", "INTERNAL_ERROR")


@router.delete("/items/{item_id}", responses=ERROR_RESPONSES)
def remove_item(
    item_id: int,
    response: Response,
    scope: CartScope = Depends(get_scope),
    svc: CartService = Depends(get_service),
):
    try:
        item = svc.get_item(item_id)
        if not policy.delete(scope, item):
            return _error(response, 403, "Unauthorized cart access", "CART_UNAUTHORIZED")

        svc.remove_from_cart(item)

        return CartSuccessOut(
            message="Item removed from cart",
            cart_summary=CartSummaryOut(**svc.get_cart_summary(scope)),
        )
    except NotFound as e:
        return _error(response, 404, str(e), "NOT_FOUND")
    except Exception:
        logger.exception(f"Nieoczekiwany blad przy usuwaniu pozycji {item_id}")
        return _error(response, 500, "Failed to remove item from cart", "INTERNAL_ERROR")


@router.delete("", responses=ERROR_RESPONSES)
def clear_cart(
    response: Response,
    scope: CartScope = Depends(get_scope),
    svc: CartService = Depends(get_service),
):
    try:
        svc.clear_cart(scope)
        return CartSuccessOut(
            message="Cart cleared successfully",
            cart_summary=CartSummaryOut(**svc.get_cart_summary(scope)),
        )
    except Exception:
        logger.exception("Nieoczekiwany blad przy czyszczeniu koszyka")
        return _error(response, 500, "Failed to clear cart", "INTERNAL_ERROR")
