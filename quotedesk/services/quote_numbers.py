"""
Quote Number Allocation

Handles:
- Next sequential quote number per user (never below the floor)
- Next revision suffix for a base quote number (3500 -> 3500.1 -> 3500.2)
- Copying a quote into a new revision

Numbers are computed from what is already stored; nothing is reserved ahead
of time, so two simultaneous submissions by one user can collide.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from quotedesk.config import QUOTE_NUMBER_FLOOR
from quotedesk.models.quote import Quote, QuoteItem

logger = logging.getLogger(__name__)


def _parse_base_number(quote_number: Optional[str]) -> Optional[int]:
    """Integer part of a quote number ("3500.2" -> 3500), or None."""
    if not quote_number:
        return None
    try:
        return int(quote_number.strip().split(".", 1)[0])
    except ValueError:
        return None


def next_quote_number(user_id: int, db) -> str:
    """
    Get the next quote number for a user.

    Args:
        user_id: Owner of the new quote
        db: Database session

    Returns:
        Next number as a string, at least QUOTE_NUMBER_FLOOR
    """
    # Revisions ("3500.2") reuse their base number, so they never advance the sequence
    latest = (
        db.query(Quote.quote_number)
        .filter(
            Quote.user_id == user_id,
            Quote.quote_number.isnot(None),
            ~Quote.quote_number.contains("."),
        )
        .order_by(Quote.created_at.desc(), Quote.id.desc())
        .first()
    )

    parsed = _parse_base_number(latest[0]) if latest else None
    if parsed is None:
        return str(QUOTE_NUMBER_FLOOR)
    return str(max(parsed + 1, QUOTE_NUMBER_FLOOR))


def next_version(base_quote_number: str, user_id: int, db) -> str:
    """
    Get the next revision number for a base quote number.

    Only numeric suffixes count, and the highest one wins, so gaps and
    ordering do not matter. Falls back to "{base}.1" if the lookup fails.
    """
    base = base_quote_number.split(".", 1)[0]
    prefix = f"{base}."

    # Savepoint so a failed lookup leaves the outer transaction usable
    try:
        with db.begin_nested():
            rows = (
                db.query(Quote.quote_number)
                .filter(
                    Quote.user_id == user_id,
                    Quote.quote_number.startswith(prefix, autoescape=True),
                )
                .all()
            )
    except SQLAlchemyError:
        logger.warning("Version lookup failed for quote %s; starting at .1", base, exc_info=True)
        return f"{base}.1"

    suffixes = []
    for (number,) in rows:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            suffixes.append(int(suffix))

    if not suffixes:
        return f"{base}.1"
    return f"{base}.{max(suffixes) + 1}"


def create_quote_revision(quote: Quote, user_id: int, db) -> Quote:
    """
    Create a new revision of a quote by copying it.

    Args:
        quote: The source Quote to copy
        user_id: Owner of the revision
        db: Database session

    Returns:
        New Quote numbered "{base}.{n}" with copied line items
    """
    base = quote.base_number or next_quote_number(user_id, db)
    revision_number = next_version(base, user_id, db)

    revision = Quote(
        user_id=user_id,
        agent_id=quote.agent_id,
        client_info_id=quote.client_info_id,
        quote_number=revision_number,
        description=quote.description,
        amount=quote.amount,
        commission_override=quote.commission_override,
        commission=quote.commission,
        status="pending",
        date=quote.date,
        expires_at=quote.expires_at,
        billing_address=quote.billing_address,
        service_address=quote.service_address,
        notes=quote.notes,
    )
    db.add(revision)
    db.flush()  # Get the new ID

    for item in quote.line_items:
        db.add(
            QuoteItem(
                quote_id=revision.id,
                item_id=item.item_id,
                name=item.name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                cost_override=item.cost_override,
                total_price=item.total_price,
                charge_type=item.charge_type,
                address=item.address,
                sort_order=item.sort_order,
            )
        )

    db.flush()
    db.refresh(revision)
    logger.info("Created revision %s from quote %s", revision_number, quote.quote_number)
    return revision
