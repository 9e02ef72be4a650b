#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.brand import BrandModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_variant import ProductVariantModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel

__all__ = [
    "UserModel",
    "BrandModel",
    "CategoryModel",
    "ProductModel",
    "ProductVariantModel",
    "CartModel",
    "CartItemModel",
]
