# storefront/api/routers/catalog.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import BrandListOut, CategoryOut
from storefront.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


@router.get("/brands", response_model=List[BrandListOut])
def list_brands(db: Session = Depends(get_db)):
    return CatalogService(db).list_active_brands()


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(parent_id: int | None = Query(None, gt=0), db: Session = Depends(get_db)):
    return CatalogService(db).list_categories(parent_id=parent_id, active_only=True)
