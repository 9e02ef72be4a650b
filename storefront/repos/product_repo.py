# storefront/repos/product_repo.py
from sqlalchemy import select, or_
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_variant import ProductVariantModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_variant(self, variant_id: int) -> ProductVariantModel | None:
        return self.db.get(ProductVariantModel, variant_id)

    def list_published(
        self,
        limit: int = 50,
        offset: int = 0,
        brand_id: int | None = None,
        category_id: int | None = None,
    ) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.status == "published")
        if brand_id is not None:
            stmt = stmt.where(ProductModel.brand_id == brand_id)
        if category_id is not None:
            stmt = stmt.where(ProductModel.categories.any(CategoryModel.id == category_id))
        stmt = (
            stmt.options(selectinload(ProductModel.variants), selectinload(ProductModel.categories))
            .order_by(ProductModel.id)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_all(self, limit: int = 50, offset: int = 0, status: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel)
        if status is not None:
            stmt = stmt.where(ProductModel.status == status)
        stmt = (
            stmt.options(selectinload(ProductModel.variants), selectinload(ProductModel.categories))
            .order_by(ProductModel.id)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars().all())

    def slug_or_sku_taken(self, slug: str | None, sku: str | None, exclude_id: int | None = None) -> bool:
        conditions = []
        if slug is not None:
            conditions.append(ProductModel.slug == slug)
        if sku is not None:
            conditions.append(ProductModel.sku == sku)
        if not conditions:
            return False
        stmt = select(ProductModel.id).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(ProductModel.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def variant_sku_taken(self, sku: str, exclude_id: int | None = None) -> bool:
        stmt = select(ProductVariantModel.id).where(ProductVariantModel.sku == sku)
        if exclude_id is not None:
            stmt = stmt.where(ProductVariantModel.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, obj):
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def rollback(self):
        self.db.rollback()
