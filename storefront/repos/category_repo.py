# storefront/repos/category_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_categories(self, category_ids: list[int]) -> list[CategoryModel]:
        if not category_ids:
            return []
        stmt = select(CategoryModel).where(CategoryModel.id.in_(category_ids)).order_by(CategoryModel.id)
        return list(self.db.execute(stmt).scalars().all())

    def list_categories(self, parent_id: int | None = None, active_only: bool = False) -> list[CategoryModel]:
        stmt = select(CategoryModel)
        if active_only:
            stmt = stmt.where(CategoryModel.is_active.is_(True))
        if parent_id is not None:
            stmt = stmt.where(CategoryModel.parent_id == parent_id)
        stmt = stmt.order_by(CategoryModel.sort_order, CategoryModel.name)
        return list(self.db.execute(stmt).scalars().all())

    def slug_taken(self, slug: str, exclude_id: int | None = None) -> bool:
        stmt = select(CategoryModel.id).where(CategoryModel.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(CategoryModel.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def add(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def save(self, category: CategoryModel) -> CategoryModel:
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category: CategoryModel):
        self.db.delete(category)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
