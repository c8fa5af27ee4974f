from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from quotedesk.auth import get_current_user
from quotedesk.database import get_db
from quotedesk.models.agent import Agent
from quotedesk.models.client_info import ClientInfo
from quotedesk.models.user import User

router = APIRouter(prefix="/clients", tags=["clients"])


class ClientInfoCreateRequest(BaseModel):
    company_name: str = Field(min_length=1)
    agent_id: Optional[int] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    commission_override: Optional[Decimal] = Field(default=None, ge=0, le=100)


class ClientInfoUpdateRequest(BaseModel):
    company_name: Optional[str] = Field(default=None, min_length=1)
    agent_id: Optional[int] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    # Sending null clears the override
    commission_override: Optional[Decimal] = Field(default=None, ge=0, le=100)


def serialize_client_info(client: ClientInfo) -> dict:
    return {
        "id": client.id,
        "company_name": client.company_name,
        "agent_id": client.agent_id,
        "contact_name": client.contact_name,
        "email": client.email,
        "phone": client.phone,
        "notes": client.notes,
        "commission_override": (
            float(client.commission_override)
            if client.commission_override is not None
            else None
        ),
    }


def _check_agent(agent_id: Optional[int], db: Session):
    if agent_id is not None and not db.query(Agent).filter(Agent.id == agent_id).first():
        raise HTTPException(status_code=400, detail="Agent not found")


@router.get("")
async def list_clients(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    clients = db.query(ClientInfo).order_by(ClientInfo.company_name).all()
    return [serialize_client_info(c) for c in clients]


@router.post("", status_code=201)
async def create_client(
    data: ClientInfoCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _check_agent(data.agent_id, db)
    client = ClientInfo(**data.model_dump())
    client.company_name = client.company_name.strip()
    db.add(client)
    db.commit()
    db.refresh(client)
    return serialize_client_info(client)


@router.patch("/{client_id}")
async def update_client(
    client_id: int,
    data: ClientInfoUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    client = db.query(ClientInfo).filter(ClientInfo.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    changes = data.model_dump(exclude_unset=True)
    if "agent_id" in changes:
        _check_agent(changes["agent_id"], db)
    if changes.get("company_name") is None:
        changes.pop("company_name", None)

    for field, value in changes.items():
        setattr(client, field, value)
    db.commit()
    db.refresh(client)
    return serialize_client_info(client)
