"""Catalog lookups: products and their customization categories.

This is the boundary where loosely shaped rows become the validated
``OptionCategory`` / ``Option`` structures the selector works with.
"""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.ordering_service.checkout import ProductInfo
from services.ordering_service.customization import (
    CategoryWithOptions,
    Option,
    OptionCategory,
)
from services.ordering_service.models import (
    OptionCategory as OptionCategoryRow,
    Product,
    ProductAvailableOption,
    ProductOption,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

REMOVE_INGREDIENT_PREFIX = "remove-ingredient"


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def ingredient_removal_category(product: ProductInfo) -> Optional[CategoryWithOptions]:
    """Free "leave it out" options built from a product's ingredient list."""
    if not product.ingredients:
        return None

    category_id = f"{REMOVE_INGREDIENT_PREFIX}:{product.id}"
    category = OptionCategory(
        id=category_id,
        name="Malzeme Çıkar",
        name_en="Remove Ingredients",
        display_order=10_000,
    )
    options = tuple(
        Option(
            id=f"{category_id}:{index}",
            category_id=category_id,
            name=f"{ingredient} olmasın",
            name_en=f"No {ingredient}",
            display_order=index,
        )
        for index, ingredient in enumerate(product.ingredients)
    )
    return CategoryWithOptions(category=category, options=options)


class SqlCatalog:
    """CatalogLookup backed by the products / product_options tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: str) -> Optional[ProductInfo]:
        pk = _parse_uuid(product_id)
        if pk is None:
            return None
        product = await self.db.get(Product, pk)
        if product is None:
            return None
        return ProductInfo(
            id=str(product.id),
            name=product.name,
            name_en=product.name_en,
            base_price=product.price,
            ingredients=tuple(str(i) for i in (product.ingredients or [])),
            is_available=product.is_available,
        )

    async def get_customization_categories(
        self, product_id: str
    ) -> list[CategoryWithOptions]:
        pk = _parse_uuid(product_id)
        if pk is None:
            return []

        query = (
            select(ProductAvailableOption)
            .join(OptionCategoryRow, OptionCategoryRow.id == ProductAvailableOption.category_id)
            .where(
                ProductAvailableOption.product_id == pk,
                OptionCategoryRow.is_active.is_(True),
            )
            .options(
                selectinload(ProductAvailableOption.category).selectinload(
                    OptionCategoryRow.options
                )
            )
            .order_by(OptionCategoryRow.display_order)
        )
        result = await self.db.execute(query)
        links = result.scalars().all()

        categories = [_to_category(link) for link in links]

        product = await self.get_product(product_id)
        if product is not None:
            removal = ingredient_removal_category(product)
            if removal is not None:
                categories.append(removal)
        return categories


def _to_category(link: ProductAvailableOption) -> CategoryWithOptions:
    row = link.category
    category = OptionCategory(
        id=str(row.id),
        name=row.name,
        name_en=row.name_en,
        description=row.description,
        max_selections=link.max_selections,
        is_required=link.is_required,
        display_order=row.display_order,
    )
    options = tuple(
        _to_option(opt)
        for opt in sorted(row.options, key=lambda o: o.display_order)
        if opt.is_active
    )
    return CategoryWithOptions(category=category, options=options)


def _to_option(row: ProductOption) -> Option:
    return Option(
        id=str(row.id),
        category_id=str(row.category_id),
        name=row.name,
        name_en=row.name_en,
        price=row.price,
        display_order=row.display_order,
    )
