import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quotedesk.auth import get_current_user
from quotedesk.database import get_db
from quotedesk.dependencies import get_notifier
from quotedesk.models import CircuitTracking, User
from quotedesk.services import circuit_tracking as tracking_service
from quotedesk.services.notifications import NotificationEvent, Notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/circuit-tracking", tags=["circuit-tracking"])


class StageUpdateRequest(BaseModel):
    stage: str = Field(min_length=1)


class ProgressUpdateRequest(BaseModel):
    progress_percentage: int = Field(ge=0, le=100)


class MilestoneCreateRequest(BaseModel):
    milestone_name: str = Field(min_length=1)
    milestone_description: Optional[str] = None
    target_date: Optional[date] = None
    completed_date: Optional[date] = None
    status: str = "pending"
    notes: Optional[str] = None


def _run_mutation(tracking_id: str, mutate, db: Session, notifier: Notifier):
    """
    Apply a tracking change and commit. Virtual ids are promoted inside
    `mutate`; if that insert fails nothing else is written.
    """
    try:
        result = mutate()
        db.commit()
    except LookupError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Circuit tracking update failed for %s: %s", tracking_id, e)
        notifier.notify(
            NotificationEvent(
                title="Error",
                description="Failed to update circuit tracking.",
                variant="destructive",
                context={"tracking_id": tracking_id},
            )
        )
        raise HTTPException(status_code=503, detail="Failed to update circuit tracking")
    return result


@router.get("")
async def tracking_board(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """All tracked circuits plus ordered circuits not yet tracked."""
    return [entry.model_dump() for entry in tracking_service.load_tracking_board(db)]


@router.get("/stages")
async def list_stages(user: User = Depends(get_current_user)):
    return CircuitTracking.STAGES


@router.post("/{tracking_id}/stage")
async def update_stage(
    tracking_id: str,
    data: StageUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    row = _run_mutation(
        tracking_id,
        lambda: tracking_service.update_stage(tracking_id, data.stage, db),
        db,
        notifier,
    )
    db.refresh(row)
    return tracking_service.entry_from_row(row).model_dump()


@router.post("/{tracking_id}/progress")
async def update_progress(
    tracking_id: str,
    data: ProgressUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    row = _run_mutation(
        tracking_id,
        lambda: tracking_service.update_progress(tracking_id, data.progress_percentage, db),
        db,
        notifier,
    )
    db.refresh(row)
    return tracking_service.entry_from_row(row).model_dump()


@router.post("/{tracking_id}/milestones", status_code=201)
async def add_milestone(
    tracking_id: str,
    data: MilestoneCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    milestone = _run_mutation(
        tracking_id,
        lambda: tracking_service.add_milestone(tracking_id, data.model_dump(), db),
        db,
        notifier,
    )
    db.refresh(milestone)
    return {
        "id": milestone.id,
        "circuit_tracking_id": milestone.circuit_tracking_id,
        "milestone_name": milestone.milestone_name,
        "milestone_description": milestone.milestone_description,
        "target_date": milestone.target_date,
        "completed_date": milestone.completed_date,
        "status": milestone.status,
        "notes": milestone.notes,
    }
