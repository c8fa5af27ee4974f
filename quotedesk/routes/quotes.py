import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from quotedesk.auth import get_current_user
from quotedesk.database import get_db
from quotedesk.dependencies import get_notifier, get_rate_limiter
from quotedesk.models import Agent, ClientInfo, Item, Quote, QuoteItem, User
from quotedesk.services.commission import (
    calculate_commission,
    calculate_markup_and_commission,
    get_markup_validation_message,
)
from quotedesk.services.notifications import NotificationEvent, Notifier
from quotedesk.services.quote_numbers import create_quote_revision, next_quote_number
from quotedesk.services.quotes import calculate_totals_by_charge_type, approve_quote, recalculate_quote
from quotedesk.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


class QuoteItemRequest(BaseModel):
    item_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("1"), ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    cost_override: Optional[Decimal] = Field(default=None, ge=0)
    charge_type: str = Field(default="MRC", pattern="^(MRC|NRC)$")
    address: Optional[str] = None


class QuoteCreateRequest(BaseModel):
    agent_id: Optional[int] = None
    client_info_id: Optional[int] = None
    quote_number: Optional[str] = None
    description: Optional[str] = None
    commission_override: Optional[Decimal] = Field(default=None, ge=0, le=100)
    quote_date: Optional[date] = None
    expires_at: Optional[date] = None
    billing_address: Optional[str] = None
    service_address: Optional[str] = None
    notes: Optional[str] = None
    items: List[QuoteItemRequest] = []


class QuoteUpdateRequest(BaseModel):
    agent_id: Optional[int] = None
    client_info_id: Optional[int] = None
    description: Optional[str] = None
    commission_override: Optional[Decimal] = Field(default=None, ge=0, le=100)
    status: Optional[str] = None
    expires_at: Optional[date] = None
    billing_address: Optional[str] = None
    service_address: Optional[str] = None
    notes: Optional[str] = None


class QuoteItemsUpdateRequest(BaseModel):
    items: List[QuoteItemRequest]


class ApproveRequest(BaseModel):
    accepted_by: Optional[str] = None


def _line_markup(line: QuoteItem, agent_rate) -> dict:
    """Commission rate left on a line after any markup shortfall, plus a warning."""
    cost = line.cost_override
    if cost is None and line.item is not None:
        cost = line.item.cost
    if cost is None or agent_rate is None:
        return {"final_commission_rate": None, "markup_warning": None}

    category = line.item.category if line.item is not None else None
    minimum = category.minimum_markup if category is not None else None
    calc = calculate_markup_and_commission(cost, line.unit_price, agent_rate, minimum)
    return {
        "final_commission_rate": float(calc["final_commission_rate"]),
        "markup_warning": get_markup_validation_message(
            cost, line.unit_price, agent_rate, minimum
        ),
    }


def serialize_quote(quote: Quote) -> dict:
    agent_rate = quote.agent.commission_rate if quote.agent is not None else None
    totals = calculate_totals_by_charge_type(
        [
            {"charge_type": item.charge_type, "total_price": item.total_price}
            for item in quote.line_items
        ]
    )
    return {
        "id": quote.id,
        "quote_number": quote.quote_number,
        "agent_id": quote.agent_id,
        "client_info_id": quote.client_info_id,
        "client_company": quote.client_info.company_name if quote.client_info else None,
        "description": quote.description,
        "status": quote.status,
        "amount": float(quote.amount or 0),
        "mrc_total": float(totals["mrc_total"]),
        "nrc_total": float(totals["nrc_total"]),
        "commission": float(quote.commission or 0),
        "commission_override": (
            float(quote.commission_override)
            if quote.commission_override is not None
            else None
        ),
        "accepted_by": quote.accepted_by,
        "accepted_at": quote.accepted_at,
        "date": quote.date,
        "expires_at": quote.expires_at,
        "notes": quote.notes,
        "order_number": quote.order.order_number if quote.order else None,
        "items": [
            {
                "id": item.id,
                "item_id": item.item_id,
                "name": item.display_name,
                "description": item.description,
                "quantity": float(item.quantity or 0),
                "unit_price": float(item.unit_price or 0),
                "total_price": float(item.total_price or 0),
                "charge_type": item.charge_type,
                "address": item.address,
                **_line_markup(item, agent_rate),
            }
            for item in quote.line_items
        ],
    }


def _get_quote_or_404(quote_id: int, user: User, db: Session) -> Quote:
    quote = (
        db.query(Quote)
        .options(
            selectinload(Quote.line_items)
            .selectinload(QuoteItem.item)
            .selectinload(Item.category)
        )
        .filter(Quote.id == quote_id)
        .first()
    )
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    if not user.can_edit_quote(quote):
        raise HTTPException(status_code=403, detail="Not allowed to access this quote")
    return quote


def _check_references(agent_id: Optional[int], client_info_id: Optional[int], db: Session):
    if agent_id is not None and not db.query(Agent).filter(Agent.id == agent_id).first():
        raise HTTPException(status_code=400, detail="Agent not found")
    if client_info_id is not None and not db.query(ClientInfo).filter(ClientInfo.id == client_info_id).first():
        raise HTTPException(status_code=400, detail="Client not found")


def _build_line_items(items: List[QuoteItemRequest], db: Session) -> List[QuoteItem]:
    line_items = []
    for index, data in enumerate(items):
        if data.item_id is not None and not db.query(Item).filter(Item.id == data.item_id).first():
            raise HTTPException(status_code=400, detail=f"Item {data.item_id} not found")
        if data.item_id is None and not (data.name or "").strip():
            raise HTTPException(status_code=400, detail="Each line needs an item or a name")
        line_items.append(
            QuoteItem(
                item_id=data.item_id,
                name=(data.name or "").strip() or None,
                description=data.description,
                quantity=data.quantity,
                unit_price=data.unit_price,
                cost_override=data.cost_override,
                charge_type=data.charge_type,
                address=data.address,
                sort_order=index,
            )
        )
    return line_items


def _apply_commission(quote: Quote, db: Session, notifier: Notifier):
    """
    Store the resolved commission on the quote.
    A failed lookup rolls back and aborts the request; it never saves 0.
    """
    try:
        quote.commission = calculate_commission(
            quote.amount,
            quote.agent_id,
            db,
            client_info_id=quote.client_info_id,
            quote_override=quote.commission_override,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Commission lookup failed for quote %s: %s", quote.quote_number, e)
        notifier.notify(
            NotificationEvent(
                title="Error",
                description="Could not calculate commission. The quote was not saved.",
                variant="destructive",
                context={"quote_number": quote.quote_number},
            )
        )
        raise HTTPException(
            status_code=503,
            detail="Could not calculate commission. The quote was not saved.",
        )


@router.get("")
async def list_quotes(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List the current user's quotes (admins see all)."""
    query = db.query(Quote).options(
        selectinload(Quote.line_items)
        .selectinload(QuoteItem.item)
        .selectinload(Item.category)
    )
    if not user.is_admin:
        query = query.filter(Quote.user_id == user.id)
    if status:
        query = query.filter(Quote.status == status)
    quotes = query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
    return [serialize_quote(q) for q in quotes]


@router.get("/next-number")
async def get_next_quote_number(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Preview the number the next new quote will get."""
    return {"quote_number": next_quote_number(user.id, db)}


@router.post("", status_code=201)
async def create_quote(
    data: QuoteCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Create a quote, assigning its number and commission."""
    if not rate_limiter.check_rate_limit(f"quote-create:{user.id}"):
        raise HTTPException(status_code=429, detail="Too many quotes created. Try again shortly.")

    _check_references(data.agent_id, data.client_info_id, db)

    quote = Quote(
        user_id=user.id,
        agent_id=data.agent_id,
        client_info_id=data.client_info_id,
        quote_number=(data.quote_number or "").strip() or next_quote_number(user.id, db),
        description=data.description,
        commission_override=data.commission_override,
        status="pending",
        date=data.quote_date or date.today(),
        expires_at=data.expires_at,
        billing_address=data.billing_address,
        service_address=data.service_address,
        notes=data.notes,
    )
    quote.line_items = _build_line_items(data.items, db)
    recalculate_quote(quote)
    _apply_commission(quote, db, notifier)

    db.add(quote)
    db.commit()
    db.refresh(quote)

    notifier.notify(
        NotificationEvent(
            title="Quote created",
            description=f"Quote {quote.quote_number} has been added successfully.",
            variant="success",
        )
    )
    return serialize_quote(quote)


@router.get("/{quote_id}")
async def get_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return serialize_quote(_get_quote_or_404(quote_id, user, db))


@router.patch("/{quote_id}")
async def update_quote(
    quote_id: int,
    data: QuoteUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """Update quote fields; commission is recalculated every time."""
    quote = _get_quote_or_404(quote_id, user, db)
    changes = data.model_dump(exclude_unset=True)

    if "status" in changes and changes["status"] not in Quote.STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    if changes.get("status") == "approved" and quote.status != "approved":
        raise HTTPException(
            status_code=400,
            detail=f"Use POST /quotes/{quote_id}/approve to approve a quote",
        )
    _check_references(changes.get("agent_id"), changes.get("client_info_id"), db)

    for field, value in changes.items():
        setattr(quote, field, value)
    _apply_commission(quote, db, notifier)

    db.commit()
    db.refresh(quote)
    return serialize_quote(quote)


@router.put("/{quote_id}/items")
async def replace_quote_items(
    quote_id: int,
    data: QuoteItemsUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """Replace all line items and recalculate amount and commission."""
    quote = _get_quote_or_404(quote_id, user, db)
    if quote.order is not None:
        raise HTTPException(status_code=400, detail="Ordered quotes cannot be edited")

    quote.line_items = _build_line_items(data.items, db)
    recalculate_quote(quote)
    _apply_commission(quote, db, notifier)

    db.commit()
    db.refresh(quote)
    return serialize_quote(quote)


@router.post("/{quote_id}/revise", status_code=201)
async def revise_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Copy a quote into its next revision (3500 -> 3500.1)."""
    quote = _get_quote_or_404(quote_id, user, db)
    revision = create_quote_revision(quote, user.id, db)
    db.commit()
    db.refresh(revision)
    return serialize_quote(revision)


@router.post("/{quote_id}/approve")
async def approve(
    quote_id: int,
    data: ApproveRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """Accept a quote and create its order."""
    quote = _get_quote_or_404(quote_id, user, db)
    if quote.status in ("declined", "archived"):
        raise HTTPException(status_code=400, detail=f"Cannot approve a {quote.status} quote")

    order = approve_quote(quote, data.accepted_by, db)
    db.commit()

    notifier.notify(
        NotificationEvent(
            title="Quote approved",
            description=f"Order {order.order_number} created for quote {quote.quote_number}.",
            variant="success",
        )
    )
    return {"ok": True, "order_id": order.id, "order_number": order.order_number}


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    quote = _get_quote_or_404(quote_id, user, db)
    if quote.order is not None:
        raise HTTPException(status_code=400, detail="Quotes with orders cannot be deleted")
    db.delete(quote)
    db.commit()
    return Response(status_code=204)
