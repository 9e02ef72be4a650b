from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, JSON, DateTime, CheckConstraint, Index, text
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.utils.money import format_cents


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    product_variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=True
    )

    quantity = Column(Integer, nullable=False, default=1)
    #cena z momentu dodania do koszyka, nie przeliczamy jej przy odczycie
    price = Column(Integer, nullable=False)
    product_snapshot = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel")
    variant = relationship("ProductVariantModel")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity_positive"),
        #NULL != NULL w unique, wiec osobny indeks dla pozycji bez wariantu
        Index(
            "uq_cart_product_no_variant",
            "cart_id",
            "product_id",
            unique=True,
            postgresql_where=text("product_variant_id IS NULL"),
            sqlite_where=text("product_variant_id IS NULL"),
        ),
        Index(
            "uq_cart_product_variant",
            "cart_id",
            "product_id",
            "product_variant_id",
            unique=True,
            postgresql_where=text("product_variant_id IS NOT NULL"),
            sqlite_where=text("product_variant_id IS NOT NULL"),
        ),
    )

    @property
    def total_price(self) -> int:
        return self.price * self.quantity

    @property
    def formatted_price(self) -> str:
        return format_cents(self.price)

    @property
    def formatted_total(self) -> str:
        return format_cents(self.total_price)

    @property
    def display_name(self) -> str:
        snapshot = self.product_snapshot or {}
        name = self.product.name if self.product else snapshot.get("name", "Unknown Product")
        if self.variant and self.variant.name:
            name = f"{name} - {self.variant.name}"
        return name
