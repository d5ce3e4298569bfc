from __future__ import annotations

from typing import Any, Optional, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.orm import Session

T = TypeVar("T")


def get_or_404(db: Session, model: type[T], object_id: int, detail: Optional[str] = None) -> T:
    record = db.get(model, object_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or f"{model.__name__} not found",
        )
    return record


def apply_updates(record: Any, payload: BaseModel, *, skip: tuple[str, ...] = ()) -> list[str]:
    """Copy the fields the client actually sent onto ``record``; returns the changed field names.

    An explicit ``null`` for a NOT NULL column is rejected before anything is assigned.
    """
    data = {field: value for field, value in payload.dict(exclude_unset=True).items() if field not in skip}
    columns = inspect(record).mapper.columns
    for field, value in data.items():
        column = columns.get(field)
        if value is None and column is not None and not column.nullable:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be null")

    changed: list[str] = []
    for field, value in data.items():
        if isinstance(value, str):
            value = value.strip()
        if getattr(record, field) != value:
            setattr(record, field, value)
            changed.append(field)
    return changed
