from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from quotedesk.auth import get_current_user
from quotedesk.database import get_db
from quotedesk.models import ClientInfo, DealRegistration, User

router = APIRouter(prefix="/deals", tags=["deals"])


class DealCreateRequest(BaseModel):
    deal_name: str = Field(min_length=1)
    client_info_id: int
    deal_value: Decimal = Field(default=Decimal("0"), ge=0)
    stage: str = "Prospecting"
    description: Optional[str] = None
    expected_close_date: Optional[date] = None
    probability: Optional[int] = Field(default=None, ge=0, le=100)
    source: Optional[str] = None
    notes: Optional[str] = None


class DealUpdateRequest(BaseModel):
    deal_name: Optional[str] = Field(default=None, min_length=1)
    deal_value: Optional[Decimal] = Field(default=None, ge=0)
    stage: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    expected_close_date: Optional[date] = None
    probability: Optional[int] = Field(default=None, ge=0, le=100)
    source: Optional[str] = None
    notes: Optional[str] = None


def serialize_deal(deal: DealRegistration) -> dict:
    return {
        "id": deal.id,
        "deal_name": deal.deal_name,
        "client_info_id": deal.client_info_id,
        "client_company": deal.client_info.company_name if deal.client_info else None,
        "deal_value": float(deal.deal_value or 0),
        "stage": deal.stage,
        "status": deal.status,
        "description": deal.description,
        "expected_close_date": deal.expected_close_date,
        "probability": deal.probability,
        "source": deal.source,
        "notes": deal.notes,
        "is_closed": deal.is_closed,
    }


def _get_deal_or_404(deal_id: int, user: User, db: Session) -> DealRegistration:
    deal = db.query(DealRegistration).filter(DealRegistration.id == deal_id).first()
    if not deal or (deal.user_id != user.id and not user.is_admin):
        raise HTTPException(status_code=404, detail="Deal not found")
    return deal


@router.get("")
async def list_deals(
    stage: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = db.query(DealRegistration)
    if not user.is_admin:
        query = query.filter(DealRegistration.user_id == user.id)
    if stage:
        query = query.filter(DealRegistration.stage == stage)
    deals = query.order_by(DealRegistration.created_at.desc(), DealRegistration.id.desc()).all()
    return [serialize_deal(d) for d in deals]


@router.post("", status_code=201)
async def create_deal(
    data: DealCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if data.stage not in DealRegistration.STAGES:
        raise HTTPException(status_code=400, detail="Invalid stage")
    if not db.query(ClientInfo).filter(ClientInfo.id == data.client_info_id).first():
        raise HTTPException(status_code=400, detail="Client not found")

    deal = DealRegistration(user_id=user.id, status="active", **data.model_dump())
    deal.deal_name = deal.deal_name.strip()
    db.add(deal)
    db.commit()
    db.refresh(deal)
    return serialize_deal(deal)


@router.patch("/{deal_id}")
async def update_deal(
    deal_id: int,
    data: DealUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deal = _get_deal_or_404(deal_id, user, db)
    changes = data.model_dump(exclude_unset=True)

    if "stage" in changes and changes["stage"] not in DealRegistration.STAGES:
        raise HTTPException(status_code=400, detail="Invalid stage")
    if "status" in changes and changes["status"] not in DealRegistration.STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    for field, value in changes.items():
        if field in ("deal_name", "deal_value") and value is None:
            continue
        setattr(deal, field, value)
    db.commit()
    db.refresh(deal)
    return serialize_deal(deal)


@router.delete("/{deal_id}", status_code=204)
async def delete_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deal = _get_deal_or_404(deal_id, user, db)
    db.delete(deal)
    db.commit()
    return Response(status_code=204)
