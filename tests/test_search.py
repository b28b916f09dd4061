import pytest

from bloodlink.errors import NotFoundError
from bloodlink.models import Donor
from bloodlink.services.search import (
    DonorQuery,
    SearchResult,
    donor_detail,
    is_listed,
    search,
    search_donors,
)

HOSPITAL = (40.7128, -74.0060)


def donor(id_, name, group, lat=None, lng=None, **kwargs):
    return Donor(id=id_, email=f"{id_}@example.com", name=name, blood_group=group, lat=lat, lng=lng, **kwargs)


@pytest.fixture
def donors():
    return [
        donor("far", "Frank Far", "O+", 39.9526, -75.1652),  # Philadelphia, ~130 km
        donor("near", "Mike Brown", "O+", 40.7306, -73.9352),  # ~6 km
        donor("here", "John Smith", "O+", 40.7128, -74.0060),  # at the hospital
        donor("aneg", "Jane Doe", "A-", 40.7580, -73.9855),
        donor("ghost", "Hidden Harry", "O+", location_hidden=True),  # no coordinates
        donor("nocoords", "Olivia Open", "O+"),
    ]


def ids(results):
    return [r.donor.id for r in results]


def test_blood_group_within_radius_sorted_by_distance(donors):
    results = search(donors, HOSPITAL, DonorQuery(blood_group="O+", max_distance_km=10))

    assert ids(results) == ["here", "near"]
    assert results[0].distance_km == pytest.approx(0.0, abs=1e-9)
    assert results[1].distance_km < 10
    assert all(r.donor.blood_group == "O+" for r in results)


def test_hidden_donor_without_coordinates_never_listed(donors):
    assert "ghost" not in ids(search(donors, HOSPITAL, DonorQuery()))
    assert "ghost" not in ids(search(donors, None, DonorQuery()))


def test_hidden_donor_with_coordinates_still_listed():
    shy = donor("shy", "Shy", "B+", 40.72, -74.0, location_hidden=True)
    assert is_listed(shy)
    assert ids(search([shy], HOSPITAL, DonorQuery())) == ["shy"]


def test_donors_without_coordinates_sort_last(donors):
    results = search(donors, HOSPITAL, DonorQuery())
    assert ids(results) == ["here", "aneg", "near", "far", "nocoords"]
    assert results[-1].distance_km is None


def test_without_hospital_location_keeps_input_order(donors):
    results = search(donors, None, DonorQuery(max_distance_km=1))
    assert ids(results) == ["far", "near", "here", "aneg", "nocoords"]
    assert all(r.distance_km is None for r in results)


def test_distance_filter_drops_donors_without_coordinates(donors):
    results = search(donors, HOSPITAL, DonorQuery(max_distance_km=500))
    assert "nocoords" not in ids(results)
    assert len(results) == 4


def test_free_text_matches_name_case_insensitively(donors):
    assert ids(search(donors, HOSPITAL, DonorQuery(text="jane"))) == ["aneg"]
    assert ids(search(donors, HOSPITAL, DonorQuery(text="JOHN"))) == ["here"]


def test_free_text_matches_blood_group(donors):
    results = search(donors, None, DonorQuery(text="o+"))
    assert ids(results) == ["far", "near", "here", "nocoords"]


def test_filters_combine(donors):
    results = search(donors, HOSPITAL, DonorQuery(text="o", blood_group="O+", max_distance_km=10))
    # "o" matches every O+ donor through the blood group
    assert ids(results) == ["here", "near"]


def test_available_only(donors):
    donors[1].available = False
    results = search(donors, HOSPITAL, DonorQuery(blood_group="O+", available_only=True))
    assert "near" not in ids(results)
    assert ids(results)[0] == "here"


def test_results_hide_contact_details():
    d = donor("d", "Pat", "AB+", 40.7, -74.0, phone="+1555", phone_hidden=False)
    data = SearchResult(d, 1.23456).to_dict()
    assert "phone" not in data
    assert "email" not in data
    assert data["distance_km"] == 1.23
    assert data["badge"]["name"] == "New Donor"


def test_detail_shows_phone_only_when_shared():
    shared = donor("a", "Pat", "AB+", phone="+1555", phone_hidden=False)
    private = donor("b", "Sam", "AB+", phone="+1666")
    assert donor_detail(shared)["phone"] == "+1555"
    assert "phone" not in donor_detail(private)
    assert "phone" not in donor_detail(donor("c", "Lee", "A+", phone_hidden=False))


async def test_search_donors_uses_hospital_location(session, make_donor, make_hospital):
    hospital = await make_hospital(lat=40.7128, lng=-74.0060)
    await make_donor(name="Far", blood_group="O+", lat=39.9526, lng=-75.1652)
    await make_donor(name="Near", blood_group="O+", lat=40.7306, lng=-73.9352)
    await make_donor(name="Other", blood_group="B-", lat=40.7306, lng=-73.9352)

    results = await search_donors(session, DonorQuery(blood_group="O+"), hospital.id)
    assert [r.donor.name for r in results] == ["Near", "Far"]

    nearby = await search_donors(session, DonorQuery(max_distance_km=10), hospital.id)
    assert {r.donor.name for r in nearby} == {"Near", "Other"}


async def test_search_donors_without_location(session, make_donor, make_hospital):
    hospital = await make_hospital()
    await make_donor(name="First", lat=39.9526, lng=-75.1652)
    await make_donor(name="Second", lat=40.7306, lng=-73.9352)

    results = await search_donors(session, DonorQuery(max_distance_km=1), hospital.id)
    assert [r.donor.name for r in results] == ["First", "Second"]
    assert await search_donors(session, DonorQuery(text="sec")) != []

    with pytest.raises(NotFoundError):
        await search_donors(session, DonorQuery(), "missing")
