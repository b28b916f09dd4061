"""Request bodies (pydantic) and JSON views of the stored records."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from bloodlink.models import Donation, Donor, Hospital, User
from bloodlink.services.badges import badge_to_dict, resolve_badge


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DonorRegistration(_Body):
    email: str
    name: str
    blood_group: str
    phone: Optional[str] = None


class HospitalRegistration(_Body):
    email: str
    name: str
    hospital_name: str
    address: str = ""


class LoginRequest(_Body):
    email: str


class DonorUpdate(_Body):
    name: Optional[str] = None
    phone: Optional[str] = None
    blood_group: Optional[str] = None
    available: Optional[bool] = None
    location_hidden: Optional[bool] = None
    phone_hidden: Optional[bool] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class HospitalUpdate(_Body):
    name: Optional[str] = None
    hospital_name: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class LocationUpdate(_Body):
    lat: Optional[float] = None
    lng: Optional[float] = None


class DonationCreate(_Body):
    donor_id: str
    hospital_id: str


def user_to_dict(user: User) -> dict:
    """Owner's view of an account (includes email and phone)."""
    if isinstance(user, Donor):
        data = user.model_dump(mode="json")
        data["badge"] = badge_to_dict(resolve_badge(user.donation_count))
    elif isinstance(user, Hospital):
        data = user.model_dump(mode="json")
    else:
        raise TypeError(f"not a user record: {type(user).__name__}")
    data["role"] = user.role
    return data


def donation_to_dict(donation: Donation) -> dict:
    return donation.model_dump(mode="json")
