from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from bloodlink.models.donor import new_id
from bloodlink.models.types import UTCTimestamp
from bloodlink.utils.time import utcnow

PENDING = "pending"
VERIFIED = "verified"


class Donation(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    donor_id: str = Field(foreign_key="donor.id", index=True)
    hospital_id: str = Field(foreign_key="hospital.id", index=True)
    # Names as they were when the donation was recorded
    donor_name: str
    hospital_name: str
    status: str = Field(default=PENDING, index=True)  # pending | verified
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)
    verified_at: Optional[datetime] = Field(default=None, sa_type=UTCTimestamp)
