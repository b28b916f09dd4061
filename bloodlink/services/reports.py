import pandas as pd
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bloodlink.errors import NotFoundError, ValidationError
from bloodlink.models import PENDING, VERIFIED, Donation, Donor
from bloodlink.services.badges import badge_to_dict, next_badge, resolve_badge
from bloodlink.services.donations import get_donor_donations
from bloodlink.services.store import list_donations, list_donors


async def get_leaderboard(session: AsyncSession, limit: Optional[int] = None) -> list[tuple[int, Donor]]:
    """Donors with at least one verified donation, most donations first.

    Returns ``[(rank, donor), ...]``; equal counts are ordered by name.
    """
    result = await session.execute(
        select(Donor).where(Donor.donation_count > 0).order_by(Donor.name)
    )
    donors = sorted(result.scalars().all(), key=lambda d: d.donation_count, reverse=True)
    if limit is not None:
        if limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}.")
        donors = donors[:limit]
    return [(rank, donor) for rank, donor in enumerate(donors, start=1)]


async def donor_stats(session: AsyncSession, donor_id: str) -> dict:
    """Donation counters and badge progress for one donor."""
    donor = await session.get(Donor, donor_id) if donor_id else None
    if donor is None:
        raise NotFoundError(f"Donor {donor_id} not found.")

    donations = await get_donor_donations(session, donor_id)
    upcoming = next_badge(donor.donation_count)
    return {
        "donor_id": donor.id,
        "total": len(donations),
        "verified": sum(1 for d in donations if d.status == VERIFIED),
        "pending": sum(1 for d in donations if d.status == PENDING),
        "donation_count": donor.donation_count,
        "badge": badge_to_dict(resolve_badge(donor.donation_count)),
        "next_badge": badge_to_dict(upcoming) if upcoming else None,
        "donations_to_next": upcoming.min_donations - donor.donation_count if upcoming else 0,
    }


# --------- Excel exports ---------


def _excel_time(value: Optional[datetime]) -> Optional[datetime]:
    # Excel cells carry no timezone; write UTC wall time
    return value.replace(tzinfo=None) if value is not None else None


async def export_donors(session: AsyncSession, file_path: str) -> str:
    """Export the donor table to Excel (phone only where the donor shares it)."""
    rows = []
    for d in await list_donors(session):
        rows.append(
            {
                "Name": d.name,
                "Email": d.email,
                "Blood group": d.blood_group,
                "Available": d.available,
                "Donations": d.donation_count,
                "Badge": resolve_badge(d.donation_count).name,
                "Verified": d.verified,
                "Last donation": _excel_time(d.last_donation),
                "Phone": d.phone if not d.phone_hidden else None,
            }
        )
    columns = ["Name", "Email", "Blood group", "Available", "Donations", "Badge", "Verified", "Last donation", "Phone"]
    pd.DataFrame(rows, columns=columns).to_excel(file_path, index=False)
    return file_path


async def export_donations(session: AsyncSession, file_path: str) -> str:
    rows = []
    for d in await list_donations(session):
        rows.append(
            {
                "Donation": d.id,
                "Donor": d.donor_name,
                "Hospital": d.hospital_name,
                "Status": d.status,
                "Recorded": _excel_time(d.created_at),
                "Verified": _excel_time(d.verified_at),
            }
        )
    columns = ["Donation", "Donor", "Hospital", "Status", "Recorded", "Verified"]
    pd.DataFrame(rows, columns=columns).to_excel(file_path, index=False)
    return file_path
