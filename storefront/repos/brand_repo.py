# storefront/repos/brand_repo.py
from sqlalchemy import select, func, and_, or_
from sqlalchemy.orm import Session

from storefront.data.models.brand import BrandModel
from storefront.data.models.product import ProductModel


class BrandRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_brand(self, brand_id: int) -> BrandModel | None:
        return self.db.get(BrandModel, brand_id)

    def list_brands(self) -> list[BrandModel]:
        stmt = select(BrandModel).order_by(BrandModel.sort_order, BrandModel.name)
        return list(self.db.execute(stmt).scalars().all())

    def list_active_with_counts(self) -> list[tuple[BrandModel, int]]:
        """Aktywne marki z liczba opublikowanych produktow."""
        stmt = (
            select(BrandModel, func.count(ProductModel.id))
            .outerjoin(
                ProductModel,
                and_(ProductModel.brand_id == BrandModel.id, ProductModel.status == "published"),
            )
            .where(BrandModel.is_active.is_(True))
            .group_by(BrandModel.id)
            .order_by(BrandModel.sort_order, BrandModel.name)
        )
        return [(brand, int(count)) for brand, count in self.db.execute(stmt).all()]

    def name_or_slug_taken(self, name: str | None, slug: str | None, exclude_id: int | None = None) -> bool:
        conditions = []
        if name is not None:
            conditions.append(BrandModel.name == name)
        if slug is not None:
            conditions.append(BrandModel.slug == slug)
        if not conditions:
            return False
        stmt = select(BrandModel.id).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(BrandModel.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def add(self, brand: BrandModel) -> BrandModel:
        self.db.add(brand)
        self.db.commit()
        self.db.refresh(brand)
        return brand

    def save(self, brand: BrandModel) -> BrandModel:
        self.db.commit()
        self.db.refresh(brand)
        return brand

    def delete(self, brand: BrandModel):
        self.db.delete(brand)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
