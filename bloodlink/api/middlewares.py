import json
import logging

from aiohttp import web
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from bloodlink.errors import BloodLinkError, ConflictError, NotFoundError, ValidationError
from bloodlink.services.store import SessionContext, find_user_by_id, set_session_user

logger = logging.getLogger(__name__)

SESSION_FACTORY = web.AppKey("session_factory", async_sessionmaker)

USER_HEADER = "X-User-Id"

_STATUS = {
    ConflictError: 409,
    NotFoundError: 404,
    ValidationError: 422,
}


def error_response(kind: str, message: str, status: int) -> web.Response:
    return web.json_response({"error": kind, "message": message}, status=status)


def http_error(exc_class: type[web.HTTPException], kind: str, message: str) -> web.HTTPException:
    return exc_class(
        text=json.dumps({"error": kind, "message": message}),
        content_type="application/json",
    )


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn service errors into JSON failure results."""
    try:
        return await handler(request)
    except BloodLinkError as e:
        return error_response(e.kind, e.message, _STATUS.get(type(e), 400))
    except PydanticValidationError as e:
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        return error_response(ValidationError.kind, message, 422)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response("internal_error", "Internal server error.", 500)


@web.middleware
async def db_session_middleware(request: web.Request, handler):
    """One AsyncSession per request, closed when the handler returns."""
    async with request.app[SESSION_FACTORY]() as session:
        request["session"] = session
        return await handler(request)


@web.middleware
async def session_context_middleware(request: web.Request, handler):
    """Build the caller's SessionContext from the user header."""
    ctx = SessionContext()
    user_id = request.headers.get(USER_HEADER)
    if user_id:
        user = await find_user_by_id(request["session"], user_id)
        if user is not None:
            set_session_user(ctx, user)
    request["ctx"] = ctx
    return await handler(request)
