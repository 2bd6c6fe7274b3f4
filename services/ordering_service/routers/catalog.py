"""Product customization catalog router."""

from fastapi import APIRouter, Depends, HTTPException, status
from services.ordering_service.checkout import CatalogLookup
from services.ordering_service.dependencies import get_catalog
from services.ordering_service.schemas import ProductCustomizationsResponse

router = APIRouter(tags=["catalog"])


@router.get(
    "/products/{product_id}/customizations",
    response_model=ProductCustomizationsResponse,
)
async def get_product_customizations(
    product_id: str,
    catalog: CatalogLookup = Depends(get_catalog),
):
    """Option categories (with their options) a product can be configured with."""
    product = await catalog.get_product(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )

    categories = await catalog.get_customization_categories(product.id)
    return ProductCustomizationsResponse(
        product_id=product.id,
        product_name=product.name,
        base_price=product.base_price,
        categories=categories,
    )
