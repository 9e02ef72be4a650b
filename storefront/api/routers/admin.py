# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from storefront.api.identity import require_admin
from storefront.data.database import get_db
from storefront.domain.errors import CatalogError, DeletionConstraint, NotFound
from storefront.domain.schemas import (
    BrandIn,
    BrandOut,
    BrandUpdate,
    CategoryIn,
    CategoryOut,
    CategoryUpdate,
    ProductIn,
    ProductOut,
    ProductUpdate,
    VariantIn,
    VariantOut,
    VariantUpdate,
)
from storefront.services.catalog_service import CatalogService

#caly router za require_admin: 401 bez tokenu, 403 dla nie-admina
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DeletionConstraint):
        return HTTPException(status_code=409, detail={"message": e.message, "code": e.code, "errors": e.data})
    return HTTPException(status_code=400, detail={"message": e.message, "code": e.code, "errors": e.data})


#brands
@router.get("/brands", response_model=List[BrandOut])
def list_brands(svc: CatalogService = Depends(get_service)):
    return svc.list_brands()


@router.post("/brands", response_model=BrandOut, status_code=201)
def create_brand(payload: BrandIn, svc: CatalogService = Depends(get_service)):
    try:
        return svc.create_brand(payload)
    except CatalogError as e:
        raise _http_error(e)


@router.get("/brands/{brand_id}", response_model=BrandOut)
def get_brand(brand_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.get_brand(brand_id)
    except NotFound as e:
        raise _http_error(e)


@router.patch("/brands/{brand_id}", response_model=BrandOut)
def update_brand(brand_id: int, payload: BrandUpdate, svc: CatalogService = Depends(get_service)):
    try:
        return svc.update_brand(brand_id, payload)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)


@router.delete("/brands/{brand_id}", status_code=204)
def delete_brand(brand_id: int, svc: CatalogService = Depends(get_service)):
    try:
        svc.delete_brand(brand_id)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)
    return Response(status_code=204)


#categories
@router.get("/categories", response_model=List[CategoryOut])
def list_categories(
    parent_id: int | None = Query(None, gt=0),
    svc: CatalogService = Depends(get_service),
):
    return svc.list_categories(parent_id=parent_id)


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, svc: CatalogService = Depends(get_service)):
    try:
        return svc.create_category(payload)
    except CatalogError as e:
        raise _http_error(e)


@router.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.get_category(category_id)
    except NotFound as e:
        raise _http_error(e)


@router.patch("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryUpdate, svc: CatalogService = Depends(get_service)):
    try:
        return svc.update_category(category_id, payload)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, svc: CatalogService = Depends(get_service)):
    try:
        svc.delete_category(category_id)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)
    return Response(status_code=204)


#products
@router.get("/products", response_model=List[ProductOut])
def list_products(
    limit: int = Query(50, gt=0, le=100),
    offset: int = Query(0, ge=0),
    status: str | None = Query(None),
    svc: CatalogService = Depends(get_service),
):
    return svc.list_products(limit=limit, offset=offset, status=status)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, svc: CatalogService = Depends(get_service)):
    try:
        return svc.create_product(payload)
    except CatalogError as e:
        raise _http_error(e)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except NotFound as e:
        raise _http_error(e)


@router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, svc: CatalogService = Depends(get_service)):
    try:
        return svc.update_product(product_id, payload)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)


@router.delete("/products/{product_id}", response_model=ProductOut)
def archive_product(product_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.delete_product(product_id)
    except NotFound as e:
        raise _http_error(e)


#variants
@router.get("/products/{product_id}/variants", response_model=List[VariantOut])
def list_variants(product_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.list_variants(product_id)
    except NotFound as e:
        raise _http_error(e)


@router.post("/products/{product_id}/variants", response_model=VariantOut, status_code=201)
def create_variant(product_id: int, payload: VariantIn, svc: CatalogService = Depends(get_service)):
    try:
        return svc.create_variant(product_id, payload)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)


@router.patch("/products/{product_id}/variants/{variant_id}", response_model=VariantOut)
def update_variant(
    product_id: int,
    variant_id: int,
    payload: VariantUpdate,
    svc: CatalogService = Depends(get_service),
):
    try:
        return svc.update_variant(product_id, variant_id, payload)
    except (NotFound, CatalogError) as e:
        raise _http_error(e)


@router.delete("/products/{product_id}/variants/{variant_id}", status_code=204)
def delete_variant(product_id: int, variant_id: int, svc: CatalogService = Depends(get_service)):
    try:
        svc.delete_variant(product_id, variant_id)
    except NotFound as e:
        raise _http_error(e)
    return Response(status_code=204)
