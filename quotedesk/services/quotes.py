"""
Quote Calculation Service

Handles:
- Line item total calculation (qty × unit_price)
- Quote rollup totals by charge type (MRC, NRC, total)
- Quote approval and order creation
"""

import logging
import random
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from quotedesk.models.order import Order
from quotedesk.models.quote import Quote

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def calculate_line_item_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """
    Calculate line item total from quantity and unit price.

    Args:
        quantity: The quantity
        unit_price: Price per unit

    Returns:
        Total (quantity × unit_price), rounded to 2 decimal places
    """
    if quantity is None or unit_price is None:
        return Decimal("0")

    total = quantity * unit_price
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_totals_by_charge_type(items: List[dict]) -> dict:
    """
    Sum line items by charge type.

    Args:
        items: Line items with 'charge_type' and 'total_price' keys

    Returns:
        Dictionary with mrc_total, nrc_total and total_amount.
        Items with any other charge type are ignored.
    """
    mrc_total = sum(
        (
            Decimal(str(item.get("total_price", 0) or 0))
            for item in items
            if item.get("charge_type") == "MRC"
        ),
        Decimal("0"),
    )
    nrc_total = sum(
        (
            Decimal(str(item.get("total_price", 0) or 0))
            for item in items
            if item.get("charge_type") == "NRC"
        ),
        Decimal("0"),
    )

    return {
        "mrc_total": mrc_total.quantize(CENTS, rounding=ROUND_HALF_UP),
        "nrc_total": nrc_total.quantize(CENTS, rounding=ROUND_HALF_UP),
        "total_amount": (mrc_total + nrc_total).quantize(CENTS, rounding=ROUND_HALF_UP),
    }


def recalculate_quote(quote: Quote) -> dict:
    """
    Recalculate line totals and the quote amount from its line items.

    Returns:
        The charge-type totals that were applied
    """
    for item in quote.line_items:
        item.total_price = calculate_line_item_total(
            Decimal(str(item.quantity or 0)), Decimal(str(item.unit_price or 0))
        )

    totals = calculate_totals_by_charge_type(
        [
            {"charge_type": item.charge_type, "total_price": item.total_price}
            for item in quote.line_items
        ]
    )
    quote.amount = totals["total_amount"]
    return totals


def generate_order_number(now: Optional[datetime] = None) -> str:
    """ORD-{year}-{day of year}-{HHMM}{3 random digits}."""
    now = now or datetime.utcnow()
    day_of_year = now.timetuple().tm_yday
    return f"ORD-{now.year}-{day_of_year:03d}-{now:%H%M}{random.randint(0, 999):03d}"


def approve_quote(quote: Quote, accepted_by: Optional[str], db) -> Order:
    """
    Approve a quote and create its order.

    The order is created before the quote status changes, and only once per
    quote: approving an already-approved quote returns the existing order.

    Args:
        quote: The quote being accepted
        accepted_by: Name of the person who accepted
        db: Database session

    Returns:
        The order for this quote
    """
    order = db.query(Order).filter(Order.quote_id == quote.id).first()
    if order:
        logger.info("Quote %s already has order %s", quote.quote_number, order.order_number)
    else:
        order = Order(
            quote_id=quote.id,
            order_number=generate_order_number(),
            user_id=quote.user_id,
            agent_id=quote.agent_id,
            client_info_id=quote.client_info_id,
            amount=quote.amount,
            status="pending",
            commission=quote.commission,
            commission_override=quote.commission_override,
            billing_address=quote.billing_address,
            service_address=quote.service_address,
            notes=quote.notes,
        )
        db.add(order)
        db.flush()
        logger.info("Created order %s for quote %s", order.order_number, quote.quote_number)

    quote.status = "approved"
    quote.acceptance_status = "accepted"
    quote.accepted_at = datetime.utcnow()
    if accepted_by:
        quote.accepted_by = accepted_by
    db.flush()
    return order
