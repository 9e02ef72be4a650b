# storefront/domain/schemas.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from storefront.data.models.product import PRODUCT_STATUSES


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, gt=0, description="Ilość produktu (musi być > 0)")
    variant_id: int | None = Field(None, gt=0, description="ID wariantu produktu")


class ItemUpdateIn(BaseModel):
    """Schema dla zmiany ilości. 0 usuwa pozycję."""

    quantity: int = Field(..., ge=0, description="Nowa ilość (0 usuwa pozycję)")


class VariantOut(BaseModel):
    id: int
    name: str
    sku: str
    price: int
    stock_quantity: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    sku: str
    price: int
    stock_quantity: int
    status: str
    brand_id: int | None = None
    category_ids: List[int] = []
    variants: List[VariantOut] = []

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    """Schema dla pozycji w koszyku (response)."""

    id: int
    product_id: int
    product_variant_id: int | None = None
    quantity: int
    price: int
    total_price: int
    formatted_price: str
    formatted_total: str
    display_name: str

    model_config = ConfigDict(from_attributes=True)


class CartSummaryOut(BaseModel):
    id: int
    items_count: int
    total_quantity: int
    total_price: int
    formatted_total: str
    is_empty: bool


class CartOut(BaseModel):
    """Schema dla koszyka z pozycjami (response)."""

    id: int
    status: str
    total_quantity: int
    total_price: int
    formatted_total: str
    items: List[CartItemOut]
    expires_at: datetime | None = None


class CartSuccessOut(BaseModel):
    success: bool = True
    message: str = "Operation completed successfully"
    data: Any = None
    cart_summary: CartSummaryOut | None = None
    timestamp: datetime = Field(default_factory=_now)


class CartErrorOut(BaseModel):
    success: bool = False
    message: str = "An error occurred"
    errors: Dict[str, Any] = {}
    code: str = "CART_ERROR"
    timestamp: datetime = Field(default_factory=_now)


class CartPageOut(BaseModel):
    success: bool = True
    cart: CartOut
    validation_errors: Dict[int, List[str]] = {}


class CartValidationOut(BaseModel):
    success: bool = True
    validation_errors: Dict[int, List[str]]
    has_errors: bool


class UserCreate(BaseModel):
    """Schema dla rejestracji użytkownika."""

    name: str = Field(..., min_length=1, max_length=255, description="Imię użytkownika")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class UserLogin(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    email: str
    is_admin: bool = False

    model_config = ConfigDict(from_attributes=True)


class TokenOut(BaseModel):
    """Odpowiedz logowania/rejestracji: token Bearer + profil."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead


#panel katalogu
SLUG_PATTERN = r"^[a-z0-9\-]+$"


class BrandIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = None
    website: str | None = Field(None, max_length=255, pattern=r"^https?://\S+$")
    is_active: bool = True
    is_featured: bool = False
    sort_order: int = Field(0, ge=0)


class BrandUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = None
    website: str | None = Field(None, max_length=255, pattern=r"^https?://\S+$")
    is_active: bool | None = None
    is_featured: bool | None = None
    sort_order: int | None = Field(None, ge=0)


class BrandOut(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    website: str | None = None
    is_active: bool
    is_featured: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class BrandListOut(BaseModel):
    """Marka w publicznej liscie z liczba opublikowanych produktow."""

    id: int
    name: str
    slug: str
    product_count: int


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9\s\-_&()]+$")
    slug: str = Field(..., min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = Field(None, max_length=2000)
    parent_id: int | None = Field(None, gt=0)
    is_active: bool = True
    is_featured: bool = False
    sort_order: int = Field(0, ge=0, le=9999)


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100, pattern=r"^[a-zA-Z0-9\s\-_&()]+$")
    slug: str | None = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = Field(None, max_length=2000)
    parent_id: int | None = Field(None, gt=0)
    is_active: bool | None = None
    is_featured: bool | None = None
    sort_order: int | None = Field(None, ge=0, le=9999)


class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    parent_id: int | None = None
    is_active: bool
    is_featured: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


def _check_status(v: str | None) -> str | None:
    if v is not None and v not in PRODUCT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(PRODUCT_STATUSES)}")
    return v


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    sku: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0, description="Cena w centach")
    stock_quantity: int = Field(0, ge=0)
    status: str = "draft"
    brand_id: int | None = Field(None, gt=0)
    category_ids: List[int] = []

    @field_validator("status")
    @classmethod
    def status_known(cls, v: str | None) -> str | None:
        return _check_status(v)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    sku: str | None = Field(None, min_length=1, max_length=100)
    price: int | None = Field(None, ge=0)
    stock_quantity: int | None = Field(None, ge=0)
    status: str | None = None
    brand_id: int | None = Field(None, gt=0)
    category_ids: List[int] | None = None

    @field_validator("status")
    @classmethod
    def status_known(cls, v: str | None) -> str | None:
        return _check_status(v)


class VariantIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: str | None = Field(None, min_length=1, max_length=100, description="Generowany z SKU produktu gdy brak")
    price: int = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)
    is_active: bool = True


class VariantUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    sku: str | None = Field(None, min_length=1, max_length=100)
    price: int | None = Field(None, ge=0)
    stock_quantity: int | None = Field(None, ge=0)
    is_active: bool | None = None
