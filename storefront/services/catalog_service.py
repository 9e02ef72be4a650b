# storefront/services/catalog_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.brand import BrandModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.product_variant import ProductVariantModel
from storefront.domain.errors import (
    BrandNotFound,
    CatalogConflict,
    CatalogError,
    CategoryNotFound,
    DeletionConstraint,
    InvalidParentCategory,
    ProductNotFound,
)
from storefront.domain.policies import CatalogPolicy
from storefront.domain.schemas import (
    BrandIn,
    BrandUpdate,
    CategoryIn,
    CategoryUpdate,
    ProductIn,
    ProductUpdate,
    VariantIn,
    VariantUpdate,
)
from storefront.repos.brand_repo import BrandRepo
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _changes(payload, nullable: tuple = ()) -> dict:
    #null czysci tylko kolumny nullable, dla reszty znaczy "bez zmian"
    return {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in nullable
    }


class CatalogService:
    """
    Zarzadzanie katalogiem z panelu admina: marki, kategorie, produkty, warianty.
    Uprawnienia sprawdza router (require_admin), tu tylko reguly danych.
    """

    def __init__(self, db: Session):
        self.brands = BrandRepo(db)
        self.categories = CategoryRepo(db)
        self.products = ProductRepo(db)
        self.policy = CatalogPolicy()

    #brands
    def list_brands(self) -> list[BrandModel]:
        return self.brands.list_brands()

    def list_active_brands(self) -> list[dict]:
        return [
            {"id": brand.id, "name": brand.name, "slug": brand.slug, "product_count": count}
            for brand, count in self.brands.list_active_with_counts()
        ]

    def get_brand(self, brand_id: int) -> BrandModel:
        brand = self.brands.get_brand(brand_id)
        if not brand:
            raise BrandNotFound(f"Brand {brand_id} not found")
        return brand

    def create_brand(self, payload: BrandIn) -> BrandModel:
        if self.brands.name_or_slug_taken(payload.name, payload.slug):
            raise CatalogConflict("This brand name or slug is already taken.")

        brand = BrandModel(**payload.model_dump())
        try:
            created = self.brands.add(brand)
        except IntegrityError:
            self.brands.rollback()
            raise CatalogConflict("This brand name or slug is already taken.")

        logger.info(f"Utworzono marke {created.id} ({created.slug})")
        return created

    def update_brand(self, brand_id: int, payload: BrandUpdate) -> BrandModel:
        brand = self.get_brand(brand_id)
        data = _changes(payload, nullable=("description", "website"))

        if self.brands.name_or_slug_taken(data.get("name"), data.get("slug"), exclude_id=brand.id):
            raise CatalogConflict("This brand name or slug is already taken.")

        for field, value in data.items():
            setattr(brand, field, value)
        try:
            saved = self.brands.save(brand)
        except IntegrityError:
            self.brands.rollback()
            raise CatalogConflict("This brand name or slug is already taken.")

        logger.info(f"Zaktualizowano marke {brand_id}: {sorted(data)}")
        return saved

    def delete_brand(self, brand_id: int):
        brand = self.get_brand(brand_id)

        reason = self.policy.deny_brand_delete(brand)
        if reason:
            raise DeletionConstraint(reason, data={"brand_id": brand_id, "products_count": len(brand.products)})

        self.brands.delete(brand)
        logger.info(f"Usunieto marke {brand_id}")

    #categories
    def list_categories(self, parent_id: int | None = None, active_only: bool = False) -> list[CategoryModel]:
        return self.categories.list_categories(parent_id=parent_id, active_only=active_only)

    def get_category(self, category_id: int) -> CategoryModel:
        category = self.categories.get_category(category_id)
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found")
        return category

    def create_category(self, payload: CategoryIn) -> CategoryModel:
        if self.categories.slug_taken(payload.slug):
            raise CatalogConflict("This slug is already taken.")
        data = payload.model_dump(exclude={"parent_id"})
        category = CategoryModel(**data)
        #przez relacje, zeby lista children rodzica w sesji byla aktualna
        category.parent = self._resolve_parent(None, payload.parent_id)
        try:
            created = self.categories.add(category)
        except IntegrityError:
            self.categories.rollback()
            raise CatalogConflict("This slug is already taken.")

        logger.info(f"Utworzono kategorie {created.id} ({created.slug}), rodzic {created.parent_id}")
        return created

    def update_category(self, category_id: int, payload: CategoryUpdate) -> CategoryModel:
        category = self.get_category(category_id)
        data = _changes(payload, nullable=("description", "parent_id"))

        if "slug" in data and self.categories.slug_taken(data["slug"], exclude_id=category.id):
            raise CatalogConflict("This slug is already taken.")
        if "parent_id" in data:
            category.parent = self._resolve_parent(category.id, data.pop("parent_id"))

        for field, value in data.items():
            setattr(category, field, value)
        try:
            saved = self.categories.save(category)
        except IntegrityError:
            self.categories.rollback()
            raise CatalogConflict("This slug is already taken.")

        logger.info(f"Zaktualizowano kategorie {category_id}: {sorted(data)}")
        return saved

    def delete_category(self, category_id: int):
        category = self.get_category(category_id)

        reason = self.policy.deny_category_delete(category)
        if reason:
            raise DeletionConstraint(
                reason,
                data={
                    "category_id": category_id,
                    "children_count": len(category.children),
                    "products_count": len(category.products),
                },
            )

        #lista dzieci rodzica jest juz w sesji
        if category.parent is not None:
            category.parent.children.remove(category)
        self.categories.delete(category)
        logger.info(f"Usunieto kategorie {category_id}")

    def _resolve_parent(self, category_id: int | None, parent_id: int | None) -> CategoryModel | None:
        if parent_id is None:
            return None

        parent = self.categories.get_category(parent_id)
        if not parent:
            raise InvalidParentCategory(
                "The selected parent category does not exist.", data={"parent_id": parent_id}
            )

        if category_id is not None:
            #rodzic nie moze byc ta sama kategoria ani jej potomkiem
            current, visited = parent, set()
            while current is not None and current.id not in visited:
                if current.id == category_id:
                    raise InvalidParentCategory(
                        "Category cannot be moved under itself or its subcategory.",
                        data={"category_id": category_id, "parent_id": parent_id},
                    )
                visited.add(current.id)
                current = current.parent
        return parent

    #products
    def list_products(self, limit: int = 50, offset: int = 0, status: str | None = None) -> list[ProductModel]:
        return self.products.list_all(limit=limit, offset=offset, status=status)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")
        return product

    def create_product(self, payload: ProductIn) -> ProductModel:
        if self.products.slug_or_sku_taken(payload.slug, payload.sku):
            raise CatalogConflict("This slug or SKU is already taken.")

        #najpierw walidacja referencji, potem podpinanie do sesji
        brand = self._get_brand_ref(payload.brand_id)
        categories = self._resolve_categories(payload.category_ids)

        product = ProductModel(**payload.model_dump(exclude={"category_ids", "brand_id"}))
        product.brand = brand
        product.categories = categories

        try:
            created = self.products.add_product(product)
        except IntegrityError:
            self.products.rollback()
            raise CatalogConflict("This slug or SKU is already taken.")

        logger.info(f"Utworzono produkt {created.id} ({created.sku}), status {created.status}")
        return created

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductModel:
        product = self.get_product(product_id)
        data = _changes(payload, nullable=("brand_id",))
        category_ids = data.pop("category_ids", None)

        if self.products.slug_or_sku_taken(data.get("slug"), data.get("sku"), exclude_id=product.id):
            raise CatalogConflict("This slug or SKU is already taken.")
        change_brand = "brand_id" in data
        brand = self._get_brand_ref(data.pop("brand_id")) if change_brand else None
        categories = self._resolve_categories(category_ids) if category_ids is not None else None

        for field, value in data.items():
            setattr(product, field, value)
        if change_brand:
            product.brand = brand
        if categories is not None:
            product.categories = categories

        try:
            saved = self.products.save(product)
        except IntegrityError:
            self.products.rollback()
            raise CatalogConflict("This slug or SKU is already taken.")

        logger.info(f"Zaktualizowano produkt {product_id}: {sorted(data)}")
        return saved

    def delete_product(self, product_id: int) -> ProductModel:
        """
        Produkt moze wisiec w koszykach, wiec nie kasujemy wiersza:
        status archived zdejmuje go z katalogu, a walidacja koszyka zglasza
        "Product is no longer available".
        """
        product = self.get_product(product_id)
        product.status = "archived"
        saved = self.products.save(product)

        logger.info(f"Produkt {product_id} zarchiwizowany")
        return saved

    def _get_brand_ref(self, brand_id: int | None) -> BrandModel | None:
        if brand_id is None:
            return None
        brand = self.brands.get_brand(brand_id)
        if not brand:
            raise CatalogError(
                "The selected brand does not exist.", code="INVALID_BRAND", data={"brand_id": brand_id}
            )
        return brand

    def _resolve_categories(self, category_ids: list[int]) -> list[CategoryModel]:
        wanted = sorted(set(category_ids))
        categories = self.categories.get_categories(wanted)
        missing = sorted(set(wanted) - {c.id for c in categories})
        if missing:
            raise CatalogError(
                "The selected category does not exist.", code="INVALID_CATEGORY", data={"category_ids": missing}
            )
        return categories

    #variants
    def list_variants(self, product_id: int) -> list[ProductVariantModel]:
        return list(self.get_product(product_id).variants)

    def get_variant(self, product_id: int, variant_id: int) -> ProductVariantModel:
        variant = self.products.get_variant(variant_id)
        #wariant innego produktu traktujemy jak brak
        if not variant or variant.product_id != product_id:
            raise ProductNotFound(f"Product variant {variant_id} not found")
        return variant

    def create_variant(self, product_id: int, payload: VariantIn) -> ProductVariantModel:
        product = self.get_product(product_id)
        data = payload.model_dump()

        if data["sku"] is None:
            data["sku"] = self._generate_variant_sku(product)
        elif self.products.variant_sku_taken(data["sku"]):
            raise CatalogConflict("This SKU is already taken.")

        variant = ProductVariantModel(**data)
        product.variants.append(variant)
        try:
            self.products.save(product)
        except IntegrityError:
            self.products.rollback()
            raise CatalogConflict("This SKU is already taken.")

        logger.info(f"Dodano wariant {variant.id} ({variant.sku}) do produktu {product_id}")
        return variant

    def update_variant(self, product_id: int, variant_id: int, payload: VariantUpdate) -> ProductVariantModel:
        variant = self.get_variant(product_id, variant_id)
        data = _changes(payload)

        if data.get("sku") is not None and self.products.variant_sku_taken(data["sku"], exclude_id=variant.id):
            raise CatalogConflict("This SKU is already taken.")

        for field, value in data.items():
            setattr(variant, field, value)
        try:
            saved = self.products.save(variant)
        except IntegrityError:
            self.products.rollback()
            raise CatalogConflict("This SKU is already taken.")

        logger.info(f"Zaktualizowano wariant {variant_id} produktu {product_id}: {sorted(data)}")
        return saved

    def delete_variant(self, product_id: int, variant_id: int):
        variant = self.get_variant(product_id, variant_id)
        product = variant.product

        #delete-orphan kasuje wiersz, kolekcja produktu zostaje aktualna
        product.variants.remove(variant)
        self.products.save(product)
        logger.info(f"Usunieto wariant {variant_id} produktu {product_id}")

    def _generate_variant_sku(self, product: ProductModel) -> str:
        base = f"{product.sku}-V{len(product.variants) + 1}"
        sku, counter = base, 1
        while self.products.variant_sku_taken(sku):
            sku = f"{base}-{counter}"
            counter += 1
        return sku
