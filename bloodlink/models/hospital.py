from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from bloodlink.models.donor import new_id
from bloodlink.models.types import UTCTimestamp
from bloodlink.utils.time import utcnow


class Hospital(SQLModel, table=True):
    role: ClassVar[str] = "hospital"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(index=True, unique=True)
    name: str  # contact person
    hospital_name: str
    address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)
