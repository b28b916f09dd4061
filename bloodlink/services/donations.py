import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bloodlink.errors import NotFoundError
from bloodlink.models import PENDING, VERIFIED, Donation, Donor, Hospital
from bloodlink.services.badges import resolve_badge
from bloodlink.utils.time import utcnow

logger = logging.getLogger(__name__)


async def create_donation(session: AsyncSession, donor_id: str, hospital_id: str) -> Donation:
    """Record a pending donation of *donor_id* at *hospital_id*.

    Donor and hospital names are copied onto the record so the history keeps
    the names used at the time.
    """
    donor = await session.get(Donor, donor_id) if donor_id else None
    if donor is None:
        raise NotFoundError(f"Donor {donor_id} not found.")
    hospital = await session.get(Hospital, hospital_id) if hospital_id else None
    if hospital is None:
        raise NotFoundError(f"Hospital {hospital_id} not found.")

    donation = Donation(
        donor_id=donor.id,
        hospital_id=hospital.id,
        donor_name=donor.name,
        hospital_name=hospital.hospital_name,
        status=PENDING,
    )
    session.add(donation)
    await session.commit()
    await session.refresh(donation)
    logger.info("donation created id=%s donor=%s hospital=%s", donation.id, donor.id, hospital.id)
    return donation


def apply_verified_donation(donor: Donor, when: datetime) -> None:
    """Credit one verified donation to *donor*.

    * increments `donation_count`
    * recomputes `badge_level` from the new count
    * marks the donor verified and stamps `last_donation`

    The caller commits.
    """
    donor.donation_count = (donor.donation_count or 0) + 1
    donor.badge_level = resolve_badge(donor.donation_count).level
    donor.last_donation = when
    donor.verified = True


async def verify_donation(session: AsyncSession, donation_id: str) -> Donation:
    """Move a donation from pending to verified and credit the donor.

    Verifying an already verified donation changes nothing. The status flip
    is a conditional UPDATE, so when two writers race only the one that
    actually flipped it credits the donor. Donation and donor are committed
    together or not at all.
    """
    donation = await session.get(Donation, donation_id) if donation_id else None
    if donation is None:
        raise NotFoundError(f"Donation {donation_id} not found.")
    if donation.status == VERIFIED:
        logger.info("donation %s already verified, nothing to do", donation.id)
        return donation

    now = utcnow()
    try:
        result = await session.execute(
            update(Donation)
            .where(Donation.id == donation.id, Donation.status == PENDING)  # type: ignore[arg-type]
            .values(status=VERIFIED, verified_at=now)
        )
        if result.rowcount != 1:
            await session.rollback()
            await session.refresh(donation)
            logger.info("donation %s was verified concurrently", donation.id)
            return donation

        donor = await session.get(Donor, donation.donor_id)
        if donor is None:
            raise NotFoundError(f"Donor {donation.donor_id} not found.")
        apply_verified_donation(donor, now)
        session.add(donor)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(donation)
    logger.info(
        "donation %s verified, donor %s now has %d donation(s), badge level %d",
        donation.id, donor.id, donor.donation_count, donor.badge_level,
    )
    return donation


async def get_donor_donations(session: AsyncSession, donor_id: str) -> List[Donation]:
    result = await session.execute(
        select(Donation).where(Donation.donor_id == donor_id).order_by(Donation.created_at)
    )
    return list(result.scalars().all())


async def get_hospital_donations(session: AsyncSession, hospital_id: str) -> List[Donation]:
    result = await session.execute(
        select(Donation).where(Donation.hospital_id == hospital_id).order_by(Donation.created_at)
    )
    return list(result.scalars().all())


async def get_pending_donations(session: AsyncSession, hospital_id: Optional[str] = None) -> List[Donation]:
    """Pending donations, optionally only those recorded by one hospital."""
    stmt = select(Donation).where(Donation.status == PENDING)
    if hospital_id is not None:
        stmt = stmt.where(Donation.hospital_id == hospital_id)
    result = await session.execute(stmt.order_by(Donation.created_at))
    return list(result.scalars().all())
