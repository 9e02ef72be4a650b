# storefront/domain/policies.py
from storefront.data.models.brand import BrandModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.user import UserModel
from storefront.domain.scope import CartScope


class CartItemPolicy:
    """
    Kto moze ogladac/modyfikowac pozycje koszyka.
    Kazdy widzi tylko swoj koszyk (get_or_create_cart), wiec view_any i create sa otwarte.
    """

    def view_any(self, scope: CartScope) -> bool:
        return True

    def create(self, scope: CartScope) -> bool:
        return True

    def view(self, scope: CartScope, item: CartItemModel) -> bool:
        return self.owns(scope, item)

    def update(self, scope: CartScope, item: CartItemModel) -> bool:
        return self.owns(scope, item)

    def delete(self, scope: CartScope, item: CartItemModel) -> bool:
        return self.owns(scope, item)

    @staticmethod
    def owns(scope: CartScope, item: CartItemModel) -> bool:
        cart = item.cart

        if scope.is_authenticated and cart.user_id is not None:
            return cart.user_id == scope.user_id
        if not scope.is_authenticated and cart.session_id is not None:
            return scope.session_id is not None and cart.session_id == scope.session_id

        return False


class CatalogPolicy:
    """
    Panel katalogu (marki, kategorie, produkty, warianty) tylko dla admina.
    deny_* zwraca powod odmowy usuniecia albo None.
    """

    def manage(self, user: UserModel | None) -> bool:
        return user is not None and bool(user.is_admin)

    @staticmethod
    def deny_brand_delete(brand: BrandModel) -> str | None:
        if brand.products:
            return "Cannot delete brand with products."
        return None

    @staticmethod
    def deny_category_delete(category: CategoryModel) -> str | None:
        if category.children:
            return "Cannot delete category with subcategories."
        if category.products:
            return "Cannot delete category with products."
        return None
