"""Record store: Donor, Hospital and Donation persistence.

Every write commits before returning. The "current user" is not global
state: callers carry a :class:`SessionContext` and pass it in.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bloodlink.errors import ConflictError
from bloodlink.models import Donation, Donor, Hospital, User
from bloodlink.services.badges import resolve_badge


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass
class SessionContext:
    """Who is logged in for one client session (id + role tag)."""

    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


# --------- users ---------


async def list_donors(session: AsyncSession) -> List[Donor]:
    result = await session.execute(select(Donor).order_by(Donor.created_at))
    return list(result.scalars().all())


async def list_hospitals(session: AsyncSession) -> List[Hospital]:
    result = await session.execute(select(Hospital).order_by(Hospital.created_at))
    return list(result.scalars().all())


async def list_users(session: AsyncSession) -> List[User]:
    donors = await list_donors(session)
    hospitals = await list_hospitals(session)
    return [*donors, *hospitals]


async def find_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    email = normalize_email(email)
    if not email:
        return None
    donor = (await session.execute(select(Donor).where(Donor.email == email))).scalars().first()
    if donor:
        return donor
    return (await session.execute(select(Hospital).where(Hospital.email == email))).scalars().first()


async def find_user_by_id(session: AsyncSession, user_id: str) -> Optional[User]:
    if not user_id:
        return None
    donor = await session.get(Donor, user_id)
    if donor:
        return donor
    return await session.get(Hospital, user_id)


async def upsert_user(session: AsyncSession, user: User) -> User:
    """Insert *user* or replace the stored record with the same id.

    Emails stay unique across donors and hospitals, and a donor's badge
    level is always derived from its donation count.
    """
    user.email = normalize_email(user.email)
    owner = await find_user_by_email(session, user.email)
    if owner is not None and (owner.role != user.role or owner.id != user.id):
        raise ConflictError(f"Email {user.email} is already registered.")
    if isinstance(user, Donor):
        user.badge_level = resolve_badge(user.donation_count).level
    merged = await session.merge(user)
    await session.commit()
    return merged


# --------- donations ---------


async def list_donations(session: AsyncSession) -> List[Donation]:
    result = await session.execute(select(Donation).order_by(Donation.created_at))
    return list(result.scalars().all())


async def find_donation_by_id(session: AsyncSession, donation_id: str) -> Optional[Donation]:
    if not donation_id:
        return None
    return await session.get(Donation, donation_id)


async def upsert_donation(session: AsyncSession, donation: Donation) -> Donation:
    merged = await session.merge(donation)
    await session.commit()
    return merged


# --------- session user ---------


async def get_session_user(session: AsyncSession, ctx: SessionContext) -> Optional[User]:
    """Fresh copy of the logged-in user, or None (also when the record vanished)."""
    if not ctx.is_authenticated:
        return None
    user = await find_user_by_id(session, ctx.user_id)  # type: ignore[arg-type]
    if user is None or user.role != ctx.role:
        return None
    return user


def set_session_user(ctx: SessionContext, user: Optional[User]) -> None:
    if user is None:
        ctx.user_id = None
        ctx.role = None
    else:
        ctx.user_id = user.id
        ctx.role = user.role
