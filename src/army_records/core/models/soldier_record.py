"""
SoldierRecord models: the canonical record and its stored form.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

SoldierStatus = Literal["Active", "Retired", "Deceased"]


class SoldierRecord(BaseModel):
    """
    A soldier record that passed every schema rule.

    This is the canonical shape; tree, tabular and stored forms are mapped
    to and from it.

    Attributes:
        id: Service identifier, unique within the store
        name: Full name
        rank: Rank title
        unit: Assigned unit
        service_date: Service start date
        status: "Active", "Retired" or "Deceased"
    """

    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    rank: str = Field(..., min_length=1, max_length=50)
    unit: str = Field(..., min_length=1, max_length=100)
    service_date: date
    status: SoldierStatus

    class Config:
        json_schema_extra = {
            "example": {
                "id": "S-1001",
                "name": "Jane Doe",
                "rank": "Sergeant",
                "unit": "1st Infantry",
                "service_date": "2015-06-01",
                "status": "Active"
            }
        }


class StoredSoldier(SoldierRecord):
    """
    A soldier record as held in the store, with system timestamps.

    Attributes:
        created_at: When the identifier was first stored
        updated_at: When the record was last upserted
    """

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SoldierPage(BaseModel):
    """One page of a filtered soldier listing."""

    soldiers: list[StoredSoldier] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    current_page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)
