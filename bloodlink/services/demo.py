import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlmodel import select

from bloodlink.models import PENDING, VERIFIED, Donation, Donor, Hospital
from bloodlink.services.badges import resolve_badge

logger = logging.getLogger(__name__)

# (id, email, name, blood group, phone, available, donations, last donation, lat, lng, phone hidden, created)
_DONORS = [
    ("donor1", "john@example.com", "John Smith", "O+", "+1234567890", True, 5, "2024-12-01", 40.7128, -74.0060, False, "2024-01-15"),
    ("donor2", "jane@example.com", "Jane Doe", "A-", "+1234567891", True, 12, "2024-11-20", 40.7580, -73.9855, True, "2023-06-10"),
    ("donor3", "bob@example.com", "Bob Wilson", "B+", None, False, 2, "2024-10-15", 40.6892, -74.0445, True, "2024-03-20"),
    ("donor4", "sarah@example.com", "Sarah Johnson", "AB+", "+1234567893", True, 25, "2024-12-10", 40.7484, -73.9857, False, "2022-01-01"),
    ("donor5", "mike@example.com", "Mike Brown", "O-", None, True, 0, None, 40.7306, -73.9352, True, "2024-12-01"),
]

_HOSPITALS = [
    ("hospital1", "cityhospital@example.com", "City General Hospital", "123 Medical Center Drive, New York, NY", 40.7128, -74.0060, "2023-01-01"),
    ("hospital2", "mercy@example.com", "Mercy Medical Center", "456 Healthcare Ave, Brooklyn, NY", 40.6782, -73.9442, "2023-03-15"),
]


def _ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc) if value else None


async def seed_demo_data(session: AsyncSession) -> bool:
    """Insert the demo donors, hospitals and donations into an empty store.

    Returns True when data was inserted, False if any user already exists.
    """
    donors = (await session.execute(select(func.count()).select_from(Donor))).scalar_one()
    hospitals = (await session.execute(select(func.count()).select_from(Hospital))).scalar_one()
    if donors or hospitals:
        return False

    for (id_, email, name, group, phone, available, count, last, lat, lng, phone_hidden, created) in _DONORS:
        session.add(
            Donor(
                id=id_,
                email=email,
                name=name,
                blood_group=group,
                phone=phone,
                available=available,
                donation_count=count,
                badge_level=resolve_badge(count).level,
                verified=count > 0,
                last_donation=_ts(last),
                lat=lat,
                lng=lng,
                location_hidden=False,
                phone_hidden=phone_hidden,
                created_at=_ts(created),
            )
        )

    for (id_, email, hospital_name, address, lat, lng, created) in _HOSPITALS:
        session.add(
            Hospital(
                id=id_,
                email=email,
                name="Admin",
                hospital_name=hospital_name,
                address=address,
                lat=lat,
                lng=lng,
                created_at=_ts(created),
            )
        )

    session.add(
        Donation(
            id="donation1",
            donor_id="donor1",
            hospital_id="hospital1",
            donor_name="John Smith",
            hospital_name="City General Hospital",
            status=VERIFIED,
            created_at=_ts("2024-12-01T10:00:00"),
            verified_at=_ts("2024-12-01T12:00:00"),
        )
    )
    session.add(
        Donation(
            id="donation2",
            donor_id="donor2",
            hospital_id="hospital1",
            donor_name="Jane Doe",
            hospital_name="City General Hospital",
            status=PENDING,
            created_at=_ts("2024-12-15T14:00:00"),
        )
    )
    await session.commit()
    logger.info("demo data seeded: %d donors, %d hospitals", len(_DONORS), len(_HOSPITALS))
    return True
