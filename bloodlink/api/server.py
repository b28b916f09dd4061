"""JSON API over the BloodLink services.

`create_app` builds the aiohttp application; `start_api_server` serves it
until the event loop is cancelled.
"""

import asyncio
import logging
from typing import Optional

from aiohttp import web
from sqlalchemy.ext.asyncio import async_sessionmaker

from bloodlink.api.middlewares import (
    SESSION_FACTORY,
    db_session_middleware,
    error_middleware,
    http_error,
    session_context_middleware,
)
from bloodlink.api.schemas import (
    DonationCreate,
    DonorRegistration,
    DonorUpdate,
    HospitalRegistration,
    HospitalUpdate,
    LocationUpdate,
    LoginRequest,
    donation_to_dict,
    user_to_dict,
)
from bloodlink.config import settings
from bloodlink.errors import NotFoundError, ValidationError
from bloodlink.models import Donor
from bloodlink.services import accounts, donations, reports
from bloodlink.services.badges import BADGE_LEVELS, badge_to_dict
from bloodlink.services.search import DonorQuery, donor_detail, public_profile, search_donors
from bloodlink.services.store import get_session_user

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


async def _read_body(request: web.Request, model):
    try:
        data = await request.json()
    except ValueError:
        raise http_error(web.HTTPBadRequest, "bad_request", "Request body must be valid JSON.")
    return model.model_validate(data)


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _parse_query(request: web.Request) -> DonorQuery:
    params = request.query
    # an unencoded "+" in the query string arrives as a space
    blood_group = (params.get("blood_group") or "").strip().replace(" ", "+").upper()
    if blood_group in {"", "ALL"}:
        blood_group = None

    max_distance = params.get("max_distance")
    if max_distance in (None, "", "all"):
        max_distance_km = None
    else:
        try:
            max_distance_km = float(max_distance)
        except ValueError:
            raise ValidationError(f"max_distance must be a number, got {max_distance!r}.")

    text = (params.get("q") or "").lstrip()
    # same for "o+" typed as text: a sign only ever ends a blood group
    if text.endswith(" ") and text.strip():
        text = text.rstrip() + "+"

    return DonorQuery(
        text=text or None,
        blood_group=blood_group,
        max_distance_km=max_distance_km,
        available_only=_parse_bool(params.get("available")),
    )


# --------- accounts ---------


@routes.post("/api/v1/donors")
async def register_donor(request: web.Request) -> web.Response:
    body = await _read_body(request, DonorRegistration)
    donor = await accounts.register_donor(
        request["session"], body.email, body.name, body.blood_group, body.phone, ctx=request["ctx"]
    )
    return web.json_response(user_to_dict(donor), status=201)


@routes.post("/api/v1/hospitals")
async def register_hospital(request: web.Request) -> web.Response:
    body = await _read_body(request, HospitalRegistration)
    hospital = await accounts.register_hospital(
        request["session"], body.email, body.name, body.hospital_name, body.address, ctx=request["ctx"]
    )
    return web.json_response(user_to_dict(hospital), status=201)


@routes.post("/api/v1/login")
async def login(request: web.Request) -> web.Response:
    body = await _read_body(request, LoginRequest)
    user = await accounts.login(request["session"], request["ctx"], body.email)
    return web.json_response(user_to_dict(user))


@routes.post("/api/v1/logout")
async def logout(request: web.Request) -> web.Response:
    accounts.logout(request["ctx"])
    return web.json_response({"ok": True})


@routes.get("/api/v1/me")
async def me(request: web.Request) -> web.Response:
    user = await get_session_user(request["session"], request["ctx"])
    if user is None:
        raise http_error(web.HTTPUnauthorized, "unauthenticated", "Not logged in.")
    return web.json_response(user_to_dict(user))


@routes.get("/api/v1/donors/{donor_id}")
async def get_donor(request: web.Request) -> web.Response:
    donor_id = request.match_info["donor_id"]
    donor = await request["session"].get(Donor, donor_id)
    if donor is None:
        raise NotFoundError(f"Donor {donor_id} not found.")
    return web.json_response(donor_detail(donor))


@routes.patch("/api/v1/donors/{donor_id}")
async def update_donor(request: web.Request) -> web.Response:
    body = await _read_body(request, DonorUpdate)
    donor = await accounts.update_donor(
        request["session"], request.match_info["donor_id"], **body.model_dump(exclude_unset=True)
    )
    return web.json_response(user_to_dict(donor))


@routes.patch("/api/v1/hospitals/{hospital_id}")
async def update_hospital(request: web.Request) -> web.Response:
    body = await _read_body(request, HospitalUpdate)
    hospital = await accounts.update_hospital(
        request["session"], request.match_info["hospital_id"], **body.model_dump(exclude_unset=True)
    )
    return web.json_response(user_to_dict(hospital))


@routes.put("/api/v1/users/{user_id}/location")
async def update_location(request: web.Request) -> web.Response:
    body = await _read_body(request, LocationUpdate)
    user = await accounts.refresh_location(request["session"], request.match_info["user_id"], body.lat, body.lng)
    return web.json_response(user_to_dict(user))


# --------- search ---------


@routes.get("/api/v1/hospitals/{hospital_id}/donors")
async def search(request: web.Request) -> web.Response:
    results = await search_donors(request["session"], _parse_query(request), request.match_info["hospital_id"])
    return web.json_response([r.to_dict() for r in results])


# --------- donations ---------


@routes.post("/api/v1/donations")
async def create_donation(request: web.Request) -> web.Response:
    body = await _read_body(request, DonationCreate)
    donation = await donations.create_donation(request["session"], body.donor_id, body.hospital_id)
    return web.json_response(donation_to_dict(donation), status=201)


@routes.post("/api/v1/donations/{donation_id}/verify")
async def verify_donation(request: web.Request) -> web.Response:
    donation = await donations.verify_donation(request["session"], request.match_info["donation_id"])
    return web.json_response(donation_to_dict(donation))


@routes.get("/api/v1/donations")
async def list_pending(request: web.Request) -> web.Response:
    status = request.query.get("status", "pending")
    if status != "pending":
        raise ValidationError("Only status=pending can be listed.")
    items = await donations.get_pending_donations(request["session"], request.query.get("hospital_id"))
    return web.json_response([donation_to_dict(d) for d in items])


@routes.get("/api/v1/donors/{donor_id}/donations")
async def donor_donations(request: web.Request) -> web.Response:
    items = await donations.get_donor_donations(request["session"], request.match_info["donor_id"])
    return web.json_response([donation_to_dict(d) for d in items])


@routes.get("/api/v1/hospitals/{hospital_id}/donations")
async def hospital_donations(request: web.Request) -> web.Response:
    items = await donations.get_hospital_donations(request["session"], request.match_info["hospital_id"])
    return web.json_response([donation_to_dict(d) for d in items])


# --------- gamification ---------


@routes.get("/api/v1/donors/{donor_id}/stats")
async def donor_stats(request: web.Request) -> web.Response:
    stats = await reports.donor_stats(request["session"], request.match_info["donor_id"])
    return web.json_response(stats)


@routes.get("/api/v1/leaderboard")
async def leaderboard(request: web.Request) -> web.Response:
    try:
        limit = int(request.query.get("limit", settings.DEFAULT_LEADERBOARD_LIMIT))
    except ValueError:
        raise ValidationError("limit must be an integer.")
    board = await reports.get_leaderboard(request["session"], limit=limit)
    return web.json_response([{"rank": rank, **public_profile(donor)} for rank, donor in board])


@routes.get("/api/v1/badges")
async def badges(request: web.Request) -> web.Response:
    return web.json_response([badge_to_dict(tier) for tier in BADGE_LEVELS])


def create_app(session_factory: async_sessionmaker | None = None) -> web.Application:
    if session_factory is None:
        from bloodlink.db import SessionLocal

        session_factory = SessionLocal

    app = web.Application(
        middlewares=[error_middleware, db_session_middleware, session_context_middleware]
    )
    app[SESSION_FACTORY] = session_factory
    app.add_routes(routes)
    return app


async def start_api_server(app: web.Application, host: str | None = None, port: int | None = None) -> None:
    """Serve *app*; blocks until the event loop is cancelled."""
    _host = host or settings.API_HOST
    _port = port or settings.API_PORT

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=_host, port=_port)
    await site.start()

    logger.info("BloodLink API listening on http://%s:%d/", _host, _port)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
