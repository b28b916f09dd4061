"""Donor search for hospitals: text / blood group / distance filters, nearest first.

A linear scan over all donors on every call; fine at demo scale.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bloodlink.errors import NotFoundError
from bloodlink.models import Donor, Hospital
from bloodlink.services.badges import badge_to_dict, resolve_badge
from bloodlink.services.store import list_donors
from bloodlink.utils.geo import coordinates_of, distance_km, has_coordinates


@dataclass(frozen=True)
class DonorQuery:
    text: Optional[str] = None  # substring of name or blood group, any case
    blood_group: Optional[str] = None  # exact match
    max_distance_km: Optional[float] = None
    available_only: bool = False


@dataclass(frozen=True)
class SearchResult:
    donor: Donor
    distance_km: Optional[float] = None

    def to_dict(self) -> dict:
        data = public_profile(self.donor)
        data["distance_km"] = None if self.distance_km is None else round(self.distance_km, 2)
        return data


def is_listed(donor: Donor) -> bool:
    # A donor who hid their location still shows up while coordinates are stored.
    return not donor.location_hidden or has_coordinates(donor)


def public_profile(donor: Donor) -> dict:
    """Donor fields safe to show any hospital: no phone, no email."""
    return {
        "id": donor.id,
        "name": donor.name,
        "blood_group": donor.blood_group,
        "available": donor.available,
        "donation_count": donor.donation_count,
        "badge": badge_to_dict(resolve_badge(donor.donation_count)),
        "verified": donor.verified,
        "last_donation": donor.last_donation.isoformat() if donor.last_donation else None,
    }


def donor_detail(donor: Donor) -> dict:
    """Public profile plus the phone number when the donor shares it."""
    data = public_profile(donor)
    if not donor.phone_hidden and donor.phone:
        data["phone"] = donor.phone
    return data


def search(
    donors: Iterable[Donor],
    hospital_location: Optional[tuple[float, float]],
    query: DonorQuery,
) -> List[SearchResult]:
    candidates = [d for d in donors if is_listed(d)]

    if query.text:
        needle = query.text.lower()
        candidates = [
            d for d in candidates
            if needle in d.name.lower() or needle in d.blood_group.lower()
        ]

    if query.blood_group:
        candidates = [d for d in candidates if d.blood_group == query.blood_group]

    if query.available_only:
        candidates = [d for d in candidates if d.available]

    results = []
    for donor in candidates:
        distance = None
        donor_location = coordinates_of(donor)
        if hospital_location is not None and donor_location is not None:
            distance = distance_km(*hospital_location, *donor_location)
        results.append(SearchResult(donor, distance))

    if query.max_distance_km is not None and hospital_location is not None:
        results = [
            r for r in results
            if r.distance_km is not None and r.distance_km <= query.max_distance_km
        ]

    if hospital_location is not None:
        # stable sort: donors without coordinates keep their order at the end
        results.sort(key=lambda r: (r.distance_km is None, r.distance_km or 0.0))

    return results


async def search_donors(
    session: AsyncSession,
    query: DonorQuery,
    hospital_id: Optional[str] = None,
) -> List[SearchResult]:
    """Run :func:`search` over every stored donor.

    Distances and ordering use the hospital's coordinates when *hospital_id*
    is given and the hospital has a location.
    """
    location = None
    if hospital_id is not None:
        hospital = await session.get(Hospital, hospital_id)
        if hospital is None:
            raise NotFoundError(f"Hospital {hospital_id} not found.")
        location = coordinates_of(hospital)
    donors = await list_donors(session)
    return search(donors, location, query)
