# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import ProductNotFound
from storefront.domain.schemas import ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    limit: int = Query(50, gt=0, le=100),
    offset: int = Query(0, ge=0),
    brand_id: int | None = Query(None, gt=0),
    category_id: int | None = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(
        limit=limit, offset=offset, brand_id=brand_id, category_id=category_id
    )


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        product = ProductService(db).get_product(product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not product.is_published:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
