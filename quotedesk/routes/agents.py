from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from quotedesk.auth import get_current_user, require_admin
from quotedesk.database import get_db
from quotedesk.models.agent import Agent
from quotedesk.models.user import User

router = APIRouter(prefix="/agents", tags=["agents"])


class AgentCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    company_name: Optional[str] = None
    email: Optional[str] = None
    commission_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class AgentUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    company_name: Optional[str] = None
    email: Optional[str] = None
    commission_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    total_earnings: Optional[Decimal] = Field(default=None, ge=0)
    last_payment_date: Optional[date] = None


def serialize_agent(agent: Agent) -> dict:
    return {
        "id": agent.id,
        "name": agent.name,
        "company_name": agent.company_name,
        "email": agent.email,
        "commission_rate": float(agent.commission_rate or 0),
        "total_earnings": float(agent.total_earnings or 0),
        "last_payment_date": agent.last_payment_date,
    }


@router.get("")
async def list_agents(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    agents = db.query(Agent).order_by(Agent.name).all()
    return [serialize_agent(a) for a in agents]


@router.post("", status_code=201)
async def create_agent(
    data: AgentCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    agent = Agent(
        name=data.name.strip(),
        company_name=(data.company_name or "").strip() or None,
        email=(data.email or "").strip() or None,
        commission_rate=data.commission_rate,
    )
    db.add(agent)
    db.commit()
    db.refresh(agent)
    return serialize_agent(agent)


@router.patch("/{agent_id}")
async def update_agent(
    agent_id: int,
    data: AgentUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        if field in ("name", "commission_rate", "total_earnings") and value is None:
            continue
        setattr(agent, field, value)
    db.commit()
    db.refresh(agent)
    return serialize_agent(agent)
