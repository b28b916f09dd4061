import uuid
from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from bloodlink.models.types import UTCTimestamp
from bloodlink.utils.time import utcnow

BLOOD_GROUPS: tuple[str, ...] = ("A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-")


def new_id() -> str:
    return uuid.uuid4().hex


class Donor(SQLModel, table=True):
    role: ClassVar[str] = "donor"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(index=True, unique=True)
    name: str
    blood_group: str = Field(max_length=3)  # one of BLOOD_GROUPS
    phone: Optional[str] = None
    available: bool = Field(default=True)

    # Gamification; badge_level always mirrors resolve_badge(donation_count)
    donation_count: int = 0
    badge_level: int = 0
    verified: bool = Field(default=False)  # at least one verified donation
    last_donation: Optional[datetime] = Field(default=None, sa_type=UTCTimestamp)

    # Coordinates are set or cleared together
    lat: Optional[float] = None
    lng: Optional[float] = None
    location_hidden: bool = Field(default=False)
    phone_hidden: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)
