from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Reading(BaseModel):
    title: Optional[str] = None
    text: Optional[str] = None
    reference: Optional[str] = None


class LiturgyOut(BaseModel):
    date: str
    liturgy: str
    color: str
    first_reading: Optional[Reading] = None
    psalm: Optional[Reading] = None
    second_reading: Optional[Reading] = None
    gospel: Optional[Reading] = None
    fallback: bool = False
