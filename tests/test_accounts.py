import pytest

from bloodlink.errors import ConflictError, NotFoundError, ValidationError
from bloodlink.models import Donor, Hospital
from bloodlink.services import accounts, store
from bloodlink.services.store import SessionContext


async def test_register_donor_defaults(session):
    ctx = SessionContext()
    donor = await accounts.register_donor(session, " Jane@Example.com ", "Jane Doe", "o+", "+100", ctx=ctx)

    assert donor.email == "jane@example.com"
    assert donor.blood_group == "O+"
    assert donor.role == "donor"
    assert donor.available is True
    assert donor.location_hidden is False
    assert donor.phone_hidden is True
    assert donor.donation_count == 0
    assert donor.badge_level == 0
    assert donor.verified is False
    assert donor.last_donation is None
    assert donor.lat is None and donor.lng is None
    assert len(donor.id) == 32
    assert ctx.user_id == donor.id


async def test_register_hospital(session):
    hospital = await accounts.register_hospital(session, "h@example.com", "Admin", "Mercy", "456 Ave")
    assert hospital.role == "hospital"
    assert hospital.hospital_name == "Mercy"


async def test_duplicate_email_conflicts(session):
    await accounts.register_donor(session, "jane@example.com", "Jane", "A+")
    with pytest.raises(ConflictError):
        await accounts.register_donor(session, "jane@example.com", "Other Jane", "B+")
    with pytest.raises(ConflictError):
        await accounts.register_hospital(session, "JANE@example.com", "Admin", "Clinic", "")

    users = [u for u in await store.list_users(session) if u.email == "jane@example.com"]
    assert len(users) == 1
    assert users[0].name == "Jane"


@pytest.mark.parametrize("blood_group", [None, "", "C+", "O"])
async def test_register_donor_requires_valid_blood_group(session, blood_group):
    with pytest.raises(ValidationError):
        await accounts.register_donor(session, "x@example.com", "X", blood_group)
    assert await store.list_users(session) == []


async def test_register_requires_email_and_name(session):
    with pytest.raises(ValidationError):
        await accounts.register_donor(session, "", "X", "A+")
    with pytest.raises(ValidationError):
        await accounts.register_hospital(session, "h@example.com", "Admin", " ", "addr")


async def test_login_and_logout(session):
    donor = await accounts.register_donor(session, "jane@example.com", "Jane", "A+")
    ctx = SessionContext()

    with pytest.raises(NotFoundError):
        await accounts.login(session, ctx, "ghost@example.com")
    assert not ctx.is_authenticated

    user = await accounts.login(session, ctx, "Jane@example.com")
    assert user.id == donor.id
    assert (await store.get_session_user(session, ctx)).id == donor.id

    accounts.logout(ctx)
    assert await store.get_session_user(session, ctx) is None


async def test_update_donor_toggles(make_donor, session):
    donor = await make_donor()
    updated = await accounts.update_donor(
        session, donor.id, available=False, location_hidden=True, phone_hidden=False, phone="+200"
    )
    assert (updated.available, updated.location_hidden, updated.phone_hidden) == (False, True, False)
    assert updated.phone == "+200"


async def test_update_donor_cannot_touch_counters(make_donor, session):
    donor = await make_donor()
    with pytest.raises(ValidationError):
        await accounts.update_donor(session, donor.id, donation_count=7, badge_level=3)
    reloaded = await session.get(Donor, donor.id)
    assert reloaded.donation_count == 0
    assert reloaded.badge_level == 0


@pytest.mark.parametrize("flag", ["available", "location_hidden", "phone_hidden"])
async def test_update_donor_rejects_null_flags(make_donor, session, flag):
    donor = await make_donor()
    with pytest.raises(ValidationError):
        await accounts.update_donor(session, donor.id, **{flag: None})
    reloaded = await session.get(Donor, donor.id)
    assert (reloaded.available, reloaded.location_hidden, reloaded.phone_hidden) == (True, False, True)


async def test_update_donor_location_must_be_a_pair(make_donor, session):
    donor = await make_donor()
    with pytest.raises(ValidationError):
        await accounts.update_donor(session, donor.id, lat=40.0)
    reloaded = await session.get(Donor, donor.id)
    assert reloaded.lat is None


async def test_update_unknown_or_wrong_role(make_donor, make_hospital, session):
    donor = await make_donor()
    hospital = await make_hospital()
    with pytest.raises(NotFoundError):
        await accounts.update_donor(session, "missing", available=False)
    with pytest.raises(NotFoundError):
        await accounts.update_donor(session, hospital.id, available=False)
    with pytest.raises(NotFoundError):
        await accounts.update_hospital(session, donor.id, address="x")


async def test_update_hospital(make_hospital, session):
    hospital = await make_hospital()
    updated = await accounts.update_hospital(session, hospital.id, hospital_name="City Hospital", address="2 Main St")
    assert updated.hospital_name == "City Hospital"
    with pytest.raises(ValidationError):
        await accounts.update_hospital(session, hospital.id, email="new@example.com")


async def test_refresh_location(make_donor, make_hospital, session):
    donor = await make_donor()
    hospital = await make_hospital()

    assert (await accounts.refresh_location(session, hospital.id, 40.7, -74.0)).lat == 40.7
    moved = await accounts.refresh_location(session, donor.id, 40.8, -73.9)
    assert isinstance(moved, Donor)
    assert (moved.lat, moved.lng) == (40.8, -73.9)

    cleared = await accounts.refresh_location(session, donor.id, None, None)
    assert cleared.lat is None and cleared.lng is None

    with pytest.raises(ValidationError):
        await accounts.refresh_location(session, hospital.id, None, 1.0)
    with pytest.raises(NotFoundError):
        await accounts.refresh_location(session, "missing", 1.0, 1.0)
    assert isinstance(await session.get(Hospital, hospital.id), Hospital)
