"""Movements API endpoints. Mounted by the app under /api/movements."""

import datetime as dt
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from app.movements.models import MovementCreate, MovementType, MovementUpdate
from app.movements.store import get_movement_store

router = APIRouter(tags=["movements"])

# SQLite INTEGER range; larger ids would overflow the driver
MovementId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def _not_found(movement_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Movement {movement_id} not found")


def _iso(value: dt.date | None) -> str | None:
    return value.isoformat() if value else None


@router.get("")
async def list_movements(
    type: MovementType | None = None,
    category: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
):
    """List movements, newest first. All filters are optional and combine with AND."""
    movements = get_movement_store().list_movements(
        type=type,
        category=category,
        date_from=_iso(date_from),
        date_to=_iso(date_to),
    )
    return {"status": "success", "count": len(movements), "movements": movements}


@router.get("/summary")
async def movements_summary(
    type: MovementType | None = None,
    category: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
):
    """Income and expense totals plus the resulting balance."""
    summary = get_movement_store().summary(
        type=type,
        category=category,
        date_from=_iso(date_from),
        date_to=_iso(date_to),
    )
    return {"status": "success", **summary}


@router.get("/{movement_id}")
async def get_movement(movement_id: MovementId):
    movement = get_movement_store().get(movement_id)
    if movement is None:
        raise _not_found(movement_id)
    return {"status": "success", "movement": movement}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movement(request: MovementCreate):
    """Record a new income or expense."""
    movement = get_movement_store().create(
        description=request.description,
        amount=request.amount,
        type=request.type,
        category=request.category,
        date=request.date.isoformat(),
    )
    return {"status": "success", "movement": movement}


@router.put("/{movement_id}")
async def update_movement(movement_id: MovementId, request: MovementUpdate):
    """Update only the fields present in the body."""
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "date" in changes:
        changes["date"] = changes["date"].isoformat()
    movement = get_movement_store().update(movement_id, changes)
    if movement is None:
        raise _not_found(movement_id)
    return {"status": "success", "movement": movement}


@router.delete("/{movement_id}")
async def delete_movement(movement_id: MovementId):
    if not get_movement_store().delete(movement_id):
        raise _not_found(movement_id)
    return {"status": "success", "movement_id": movement_id}
