"""
Circuit Tracking Service

Builds the tracking board from stored tracking rows plus "virtual" rows for
ordered circuits nobody has started tracking yet. Virtual rows are computed
on read and are never written to directly: any change first inserts a real
row carrying the virtual row's fields, then applies the change to it.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import selectinload

from quotedesk.models.circuit_tracking import CircuitMilestone, CircuitTracking
from quotedesk.models.item import Item
from quotedesk.models.order import Order
from quotedesk.models.quote import Quote, QuoteItem

logger = logging.getLogger(__name__)

VIRTUAL_PREFIX = "virtual-"
DEFAULT_STAGE = "Ready to Order"
DEFAULT_CIRCUIT_TYPE = "Circuit"


class TrackingEntry(BaseModel):
    """One card on the tracking board, real or virtual."""

    id: str
    is_virtual: bool = False
    order_id: int
    order_number: Optional[str] = None
    quote_item_id: Optional[int] = None
    quote_number: Optional[str] = None
    client_company: Optional[str] = None
    circuit_type: str = DEFAULT_CIRCUIT_TYPE
    stage: Optional[str] = DEFAULT_STAGE
    progress_percentage: int = 0
    item_name: Optional[str] = None
    item_description: Optional[str] = None
    estimated_completion_date: Optional[date] = None
    actual_completion_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def virtual_id(quote_item_id: int) -> str:
    return f"{VIRTUAL_PREFIX}{quote_item_id}"


def parse_tracking_id(tracking_id: str) -> Tuple[bool, int]:
    """
    Split a board id into (is_virtual, numeric id).

    Raises:
        LookupError: if the id is not a tracking id or a virtual id
    """
    raw = str(tracking_id)
    is_virtual = raw.startswith(VIRTUAL_PREFIX)
    if is_virtual:
        raw = raw[len(VIRTUAL_PREFIX):]
    try:
        return is_virtual, int(raw)
    except ValueError:
        raise LookupError(f"Unknown circuit tracking id '{tracking_id}'")


def is_trackable_item(name: Optional[str], category_name: Optional[str]) -> bool:
    """
    Whether a quote item is specific enough to get a virtual tracking row.

    Drops placeholder lines: blank names, "broadband", names that only repeat
    the category, names of 3 characters or fewer, and anything "general".
    """
    if not name:
        return False
    lowered = name.lower()
    if lowered == "broadband":
        return False
    if category_name and lowered == category_name.lower():
        return False
    if len(name.strip()) <= 3:
        return False
    if "general" in lowered:
        return False
    return True


def _client_company(quote: Optional[Quote]) -> Optional[str]:
    if quote is not None and quote.client_info is not None:
        return quote.client_info.company_name
    return None


def entry_from_row(row: CircuitTracking) -> TrackingEntry:
    """Board entry for a stored tracking row."""
    quote_item = row.quote_item
    order = row.order
    quote = order.quote if order is not None else None
    return TrackingEntry(
        id=str(row.id),
        is_virtual=False,
        order_id=row.order_id,
        order_number=order.order_number if order is not None else None,
        quote_item_id=row.quote_item_id,
        quote_number=quote.quote_number if quote is not None else None,
        client_company=_client_company(quote),
        circuit_type=row.circuit_type or DEFAULT_CIRCUIT_TYPE,
        stage=row.stage,
        progress_percentage=row.progress_percentage or 0,
        item_name=row.item_name or (quote_item.display_name if quote_item is not None else None),
        item_description=row.item_description,
        estimated_completion_date=row.estimated_completion_date,
        actual_completion_date=row.actual_completion_date,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def virtual_entry(quote_item: QuoteItem, order: Order) -> TrackingEntry:
    """Synthesized board entry for a quote item without a tracking row."""
    quote = order.quote
    description = quote_item.description
    if quote_item.item is not None and quote_item.item.description:
        description = quote_item.item.description
    return TrackingEntry(
        id=virtual_id(quote_item.id),
        is_virtual=True,
        order_id=order.id,
        order_number=order.order_number,
        quote_item_id=quote_item.id,
        quote_number=quote.quote_number if quote is not None else None,
        client_company=_client_company(quote),
        circuit_type=quote_item.category_name or DEFAULT_CIRCUIT_TYPE,
        stage=DEFAULT_STAGE,
        progress_percentage=0,
        item_name=quote_item.display_name,
        item_description=description,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def materialize(
    existing_tracking: Iterable[CircuitTracking], orders: Iterable[Order]
) -> List[TrackingEntry]:
    """
    Merge stored tracking rows with virtual rows for untracked quote items.

    Args:
        existing_tracking: Stored tracking rows; all of them are kept
        orders: Orders with their quote and quote items loaded

    Returns:
        Real entries first, then virtual entries in order/line order
    """
    entries = [entry_from_row(row) for row in existing_tracking]
    tracked_ids = {e.quote_item_id for e in entries if e.quote_item_id is not None}

    for order in orders:
        quote = order.quote
        if quote is None:
            continue
        for quote_item in quote.line_items:
            if quote_item.id in tracked_ids:
                continue
            if not is_trackable_item(quote_item.display_name, quote_item.category_name):
                logger.debug(
                    "Skipping virtual tracking for %r on order %s",
                    quote_item.display_name,
                    order.order_number,
                )
                continue
            entries.append(virtual_entry(quote_item, order))
            tracked_ids.add(quote_item.id)

    return entries


def load_tracking_board(db) -> List[TrackingEntry]:
    """Fetch tracking rows and orders and build the full board."""
    rows = (
        db.query(CircuitTracking)
        .options(
            selectinload(CircuitTracking.quote_item)
            .selectinload(QuoteItem.item)
            .selectinload(Item.category),
            selectinload(CircuitTracking.order)
            .selectinload(Order.quote)
            .selectinload(Quote.client_info),
        )
        .order_by(CircuitTracking.created_at.desc(), CircuitTracking.id.desc())
        .all()
    )
    orders = (
        db.query(Order)
        .options(
            selectinload(Order.quote)
            .selectinload(Quote.line_items)
            .selectinload(QuoteItem.item)
            .selectinload(Item.category),
            selectinload(Order.quote).selectinload(Quote.client_info),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return materialize(rows, orders)


def promote_virtual(quote_item_id: int, db) -> CircuitTracking:
    """
    Insert the real tracking row behind a virtual entry and return it.

    The row is flushed so it has an id before anything else touches it. If a
    row for the quote item already exists it is returned instead.

    Raises:
        LookupError: if the quote item or its order does not exist
    """
    existing = (
        db.query(CircuitTracking)
        .filter(CircuitTracking.quote_item_id == quote_item_id)
        .first()
    )
    if existing:
        logger.info("Quote item %s is already tracked as %s", quote_item_id, existing.id)
        return existing

    quote_item = db.query(QuoteItem).filter(QuoteItem.id == quote_item_id).first()
    if not quote_item:
        raise LookupError(f"Quote item {quote_item_id} not found")
    order = db.query(Order).filter(Order.quote_id == quote_item.quote_id).first()
    if not order:
        raise LookupError(f"No order for quote item {quote_item_id}")

    entry = virtual_entry(quote_item, order)
    row = CircuitTracking(
        order_id=entry.order_id,
        quote_item_id=entry.quote_item_id,
        circuit_type=entry.circuit_type,
        stage=entry.stage,
        progress_percentage=entry.progress_percentage,
        item_name=entry.item_name,
        item_description=entry.item_description,
    )
    db.add(row)
    db.flush()
    logger.info("Promoted %s to circuit tracking %s", entry.id, row.id)
    return row


def get_or_promote(tracking_id: str, db) -> CircuitTracking:
    """Resolve a board id to a stored row, promoting virtual ids first."""
    is_virtual, numeric_id = parse_tracking_id(tracking_id)
    if is_virtual:
        return promote_virtual(numeric_id, db)

    row = db.query(CircuitTracking).filter(CircuitTracking.id == numeric_id).first()
    if not row:
        raise LookupError(f"Circuit tracking {tracking_id} not found")
    return row


def update_stage(tracking_id: str, stage: str, db) -> CircuitTracking:
    """Set a tracking row's stage. Any string is accepted."""
    if not stage or not stage.strip():
        raise ValueError("Stage is required")

    row = get_or_promote(tracking_id, db)
    row.stage = stage.strip()
    db.flush()
    return row


def update_progress(tracking_id: str, progress: int, db) -> CircuitTracking:
    """Set a tracking row's progress percentage (0-100)."""
    if progress is None or progress < 0 or progress > 100:
        raise ValueError("Progress must be between 0 and 100")

    row = get_or_promote(tracking_id, db)
    row.progress_percentage = progress
    db.flush()
    return row


def add_milestone(tracking_id: str, milestone: dict, db) -> CircuitMilestone:
    """
    Add a milestone to a tracking row.

    Args:
        tracking_id: Real or virtual board id
        milestone: milestone_name plus optional milestone_description,
            target_date, completed_date, status, notes
        db: Database session
    """
    if not milestone.get("milestone_name"):
        raise ValueError("Milestone name is required")
    status = milestone.get("status") or "pending"
    if status not in CircuitMilestone.STATUSES:
        raise ValueError(f"Invalid milestone status '{status}'")

    row = get_or_promote(tracking_id, db)
    new_milestone = CircuitMilestone(
        circuit_tracking_id=row.id,
        milestone_name=milestone["milestone_name"],
        milestone_description=milestone.get("milestone_description"),
        target_date=milestone.get("target_date"),
        completed_date=milestone.get("completed_date"),
        status=status,
        notes=milestone.get("notes"),
    )
    db.add(new_milestone)
    db.flush()
    return new_milestone
