# storefront/services/product_service.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.product_variant import ProductVariantModel
from storefront.domain.errors import ProductNotFound
from storefront.repos.product_repo import ProductRepo


class ProductService:
    """Odczyt katalogu. Koszyk czyta cene i stan, niczego tu nie zmienia."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(
        self,
        limit: int = 50,
        offset: int = 0,
        brand_id: int | None = None,
        category_id: int | None = None,
    ) -> list[ProductModel]:
        return self.repo.list_published(limit=limit, offset=offset, brand_id=brand_id, category_id=category_id)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")
        return product

    def get_variant(self, variant_id: int) -> ProductVariantModel:
        variant = self.repo.get_variant(variant_id)
        if not variant:
            raise ProductNotFound(f"Product variant {variant_id} not found")
        return variant
