from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.data.models.category import product_categories

PRODUCT_STATUSES = ("draft", "published", "archived")


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    sku = Column(String(100), nullable=False, unique=True)

    price = Column(Integer, nullable=False)  # w centach
    stock_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft")
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    brand = relationship("BrandModel", back_populates="products")
    categories = relationship(
        "CategoryModel",
        secondary=product_categories,
        back_populates="products",
        order_by="CategoryModel.id",
    )
    variants = relationship(
        "ProductVariantModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariantModel.id",
    )

    __table_args__ = (
        Index("ix_products_brand_status", "brand_id", "status"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    @property
    def category_ids(self) -> list[int]:
        return [c.id for c in self.categories]
