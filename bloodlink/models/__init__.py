from typing import Union

from .donor import BLOOD_GROUPS, Donor
from .hospital import Hospital
from .donation import PENDING, VERIFIED, Donation

User = Union[Donor, Hospital]

__all__ = [
    "BLOOD_GROUPS",
    "Donor",
    "Hospital",
    "Donation",
    "PENDING",
    "VERIFIED",
    "User",
]
