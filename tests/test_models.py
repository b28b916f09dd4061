from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import StatementError

from bloodlink.models import Donation, Donor
from bloodlink.services.donations import create_donation, verify_donation


async def test_timestamps_load_back_as_utc(session_factory, session, make_donor, make_hospital):
    donor = await make_donor()
    hospital = await make_hospital()
    donation = await verify_donation(session, (await create_donation(session, donor.id, hospital.id)).id)
    assert donation.verified_at.tzinfo is not None

    async with session_factory() as fresh:
        stored = await fresh.get(Donation, donation.id)
        reloaded = await fresh.get(Donor, donor.id)
    assert stored.created_at.tzinfo == timezone.utc
    assert stored.verified_at == donation.verified_at
    assert reloaded.last_donation == donation.verified_at
    assert reloaded.created_at <= datetime.now(timezone.utc)


async def test_naive_timestamps_are_rejected(session):
    session.add(Donor(email="a@example.com", name="Ann", blood_group="A+", created_at=datetime(2024, 1, 1)))
    with pytest.raises(StatementError):
        await session.commit()
    await session.rollback()
