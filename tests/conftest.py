import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bloodlink.db import init_db
from bloodlink.services.accounts import register_donor, register_hospital, update_donor, update_hospital


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_donor(session):
    counter = {"n": 0}

    async def _make(name="Jane Doe", blood_group="O+", lat=None, lng=None, **changes):
        counter["n"] += 1
        donor = await register_donor(session, f"donor{counter['n']}@example.com", name, blood_group)
        if lat is not None or lng is not None:
            changes.update(lat=lat, lng=lng)
        if changes:
            donor = await update_donor(session, donor.id, **changes)
        return donor

    return _make


@pytest.fixture
def make_hospital(session):
    counter = {"n": 0}

    async def _make(hospital_name="City General Hospital", lat=None, lng=None):
        counter["n"] += 1
        hospital = await register_hospital(
            session, f"hospital{counter['n']}@example.com", "Admin", hospital_name, "1 Main St"
        )
        if lat is not None:
            hospital = await update_hospital(session, hospital.id, lat=lat, lng=lng)
        return hospital

    return _make
