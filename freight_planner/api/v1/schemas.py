"""
Shared Pydantic models for demand and supply payloads.
"""
from typing import Optional
from pydantic import BaseModel, Field


class SlotQuantities(BaseModel):
    """Daily loads (weekly planning) or weekly loads (monthly planning)."""
    day1: Optional[int] = Field(None, ge=0)
    day2: Optional[int] = Field(None, ge=0)
    day3: Optional[int] = Field(None, ge=0)
    day4: Optional[int] = Field(None, ge=0)
    day5: Optional[int] = Field(None, ge=0)
    day6: Optional[int] = Field(None, ge=0)
    day7: Optional[int] = Field(None, ge=0)
    week1: Optional[int] = Field(None, ge=0)
    week2: Optional[int] = Field(None, ge=0)
    week3: Optional[int] = Field(None, ge=0)
    week4: Optional[int] = Field(None, ge=0)
    week5: Optional[int] = Field(None, ge=0)


class SlotValues(BaseModel):
    """Persisted slot values with the recomputed total."""
    day1: int = 0
    day2: int = 0
    day3: int = 0
    day4: int = 0
    day5: int = 0
    day6: int = 0
    day7: int = 0
    week1: int = 0
    week2: int = 0
    week3: int = 0
    week4: int = 0
    week5: int = 0
    total: int = 0


def slot_values(entity) -> dict:
    fields = [f"day{i}" for i in range(1, 8)] + [f"week{i}" for i in range(1, 6)]
    values = {f: int(getattr(entity, f) or 0) for f in fields}
    values['total'] = int(entity.total or 0)
    return values
