"""
License Storefront - Products Router
Handles: catalog listing and product lookup
"""
from fastapi import APIRouter, Depends

from storefront.exceptions import NotFoundError
from storefront.repositories import Repositories, get_repositories
from storefront.services.catalog import CatalogStore

router = APIRouter()


def get_catalog(repos: Repositories = Depends(get_repositories)) -> CatalogStore:
    return CatalogStore(repos.products)


@router.get("")
async def list_products(catalog: CatalogStore = Depends(get_catalog)):
    """All active products"""
    return [product.to_dict() for product in catalog.list_products()]


@router.get("/{product_id}")
async def get_product(product_id: str, catalog: CatalogStore = Depends(get_catalog)):
    product = catalog.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product.to_dict()
