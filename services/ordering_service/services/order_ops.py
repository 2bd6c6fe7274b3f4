"""Order sink on Postgres."""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.ordering_service.checkout import OrderDraft, OrderRecord
from services.ordering_service.models import (
    Order,
    OrderItem,
    OrderItemCustomization,
    OrderStatus,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _uuid_or_none(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class SqlOrderSink:
    """Stages an order with its lines and customization snapshots.

    Rows are flushed so the order id exists for the points ledger entry;
    committing is left to the request's unit of work.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit_order(self, draft: OrderDraft) -> OrderRecord:
        order = Order(
            id=draft.order_id,
            order_number=Order.generate_order_number(),
            user_id=draft.user_id,
            status=OrderStatus.PENDING,
            subtotal=draft.subtotal,
            points_used=draft.points_used,
            total_amount=draft.final_total,
            delivery_address=draft.delivery_address,
            address_id=draft.address_id,
            phone=draft.phone,
            notes=draft.notes,
        )
        self.db.add(order)
        await self.db.flush()

        for line in draft.lines:
            product_uuid = _uuid_or_none(line.product_id)
            item = OrderItem(
                order_id=order.id,
                product_id=product_uuid,
                product_name=line.product_name,
                quantity=line.quantity,
                price=line.unit_price,
                subtotal=line.line_total,
                special_instructions=line.special_instructions,
            )
            self.db.add(item)
            await self.db.flush()

            for snapshot in line.customizations:
                self.db.add(
                    OrderItemCustomization(
                        order_id=order.id,
                        order_item_id=item.id,
                        product_id=product_uuid,
                        product_name=line.product_name,
                        option_id=snapshot.option_id,
                        option_name=snapshot.option_name,
                        option_price=snapshot.option_price,
                        quantity=1,
                        special_instructions=line.special_instructions,
                    )
                )
        await self.db.flush()

        logger.info("Staged order %s (%s lines)", order.order_number, len(draft.lines))
        return OrderRecord(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            subtotal=order.subtotal,
            points_used=order.points_used,
            final_total=order.total_amount,
            created_at=order.created_at,
        )
