import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bloodlink.errors import ConflictError, NotFoundError, ValidationError
from bloodlink.models import BLOOD_GROUPS, Donor, Hospital, User
from bloodlink.services.store import (
    SessionContext,
    find_user_by_email,
    find_user_by_id,
    normalize_email,
    set_session_user,
)

logger = logging.getLogger(__name__)

DONOR_EDITABLE = {"name", "phone", "blood_group", "available", "location_hidden", "phone_hidden", "lat", "lng"}
DONOR_FLAGS = ("available", "location_hidden", "phone_hidden")
HOSPITAL_EDITABLE = {"name", "hospital_name", "address", "lat", "lng"}


def _require(value: Optional[str], label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required.")
    return value


def _check_blood_group(blood_group: Optional[str]) -> str:
    value = (blood_group or "").strip().upper()
    if not value:
        raise ValidationError("Blood group is required.")
    if value not in BLOOD_GROUPS:
        raise ValidationError(f"Unknown blood group: {blood_group}. Allowed: {', '.join(BLOOD_GROUPS)}.")
    return value


async def _ensure_email_free(session: AsyncSession, email: str) -> None:
    if await find_user_by_email(session, email):
        raise ConflictError(f"Email {email} is already registered.")


async def _insert(session: AsyncSession, user: User) -> User:
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # a concurrent registration took the email between check and insert
        await session.rollback()
        raise ConflictError(f"Email {user.email} is already registered.")
    await session.refresh(user)
    return user


async def register_donor(
    session: AsyncSession,
    email: str,
    name: str,
    blood_group: str,
    phone: Optional[str] = None,
    ctx: Optional[SessionContext] = None,
) -> Donor:
    """Create a donor account; logs the donor into *ctx* when given.

    New donors are available, show their location and hide their phone.
    """
    email = normalize_email(_require(email, "Email"))
    name = _require(name, "Name")
    blood_group = _check_blood_group(blood_group)
    await _ensure_email_free(session, email)

    donor = Donor(
        email=email,
        name=name,
        blood_group=blood_group,
        phone=(phone or "").strip() or None,
    )
    donor = await _insert(session, donor)
    logger.info("donor registered id=%s blood_group=%s", donor.id, donor.blood_group)
    if ctx is not None:
        set_session_user(ctx, donor)
    return donor


async def register_hospital(
    session: AsyncSession,
    email: str,
    name: str,
    hospital_name: str,
    address: str,
    ctx: Optional[SessionContext] = None,
) -> Hospital:
    email = normalize_email(_require(email, "Email"))
    hospital = Hospital(
        email=email,
        name=_require(name, "Name"),
        hospital_name=_require(hospital_name, "Hospital name"),
        address=(address or "").strip(),
    )
    await _ensure_email_free(session, email)
    hospital = await _insert(session, hospital)
    logger.info("hospital registered id=%s", hospital.id)
    if ctx is not None:
        set_session_user(ctx, hospital)
    return hospital


async def login(session: AsyncSession, ctx: SessionContext, email: str) -> User:
    """Email-only lookup. There is no credential check: demo use only."""
    user = await find_user_by_email(session, email)
    if user is None:
        raise NotFoundError(f"No account for {normalize_email(email)}.")
    set_session_user(ctx, user)
    return user


def logout(ctx: SessionContext) -> None:
    set_session_user(ctx, None)


def _check_location(lat: Any, lng: Any) -> None:
    if (lat is None) != (lng is None):
        raise ValidationError("Latitude and longitude must be set together.")


def _apply_changes(user: User, changes: dict[str, Any], editable: set[str]) -> None:
    forbidden = sorted(set(changes) - editable)
    if forbidden:
        raise ValidationError(f"Fields cannot be updated: {', '.join(forbidden)}.")
    for key, value in changes.items():
        setattr(user, key, value)
    _check_location(user.lat, user.lng)


async def update_donor(session: AsyncSession, donor_id: str, **changes: Any) -> Donor:
    """Apply a partial update to a donor.

    Donation counters and badges are not editable here; they only move
    through donation verification.
    """
    donor = await session.get(Donor, donor_id) if donor_id else None
    if donor is None:
        raise NotFoundError(f"Donor {donor_id} not found.")

    if "blood_group" in changes:
        changes["blood_group"] = _check_blood_group(changes["blood_group"])
    if "name" in changes:
        changes["name"] = _require(changes["name"], "Name")
    for flag in DONOR_FLAGS:
        if flag in changes and not isinstance(changes[flag], bool):
            raise ValidationError(f"{flag} must be true or false.")

    try:
        _apply_changes(donor, changes, DONOR_EDITABLE)
    except ValidationError:
        await session.refresh(donor)
        raise
    session.add(donor)
    await session.commit()
    return donor


async def update_hospital(session: AsyncSession, hospital_id: str, **changes: Any) -> Hospital:
    hospital = await session.get(Hospital, hospital_id) if hospital_id else None
    if hospital is None:
        raise NotFoundError(f"Hospital {hospital_id} not found.")

    for key, label in (("name", "Name"), ("hospital_name", "Hospital name")):
        if key in changes:
            changes[key] = _require(changes[key], label)

    try:
        _apply_changes(hospital, changes, HOSPITAL_EDITABLE)
    except ValidationError:
        await session.refresh(hospital)
        raise
    session.add(hospital)
    await session.commit()
    return hospital


async def refresh_location(session: AsyncSession, user_id: str, lat: Optional[float], lng: Optional[float]) -> User:
    """Store fresh coordinates (or clear them with None/None) for any role."""
    _check_location(lat, lng)
    user = await find_user_by_id(session, user_id)
    if isinstance(user, Donor):
        return await update_donor(session, user.id, lat=lat, lng=lng)
    if isinstance(user, Hospital):
        return await update_hospital(session, user.id, lat=lat, lng=lng)
    raise NotFoundError(f"User {user_id} not found.")
