from __future__ import annotations

import hmac
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable

from fastapi import FastAPI, Form, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from activid.config import ConfigError, Settings
from activid.db.engine import Database
from activid.db.repo import create_wish_once, get_wish_by_name_key, list_wishes
from activid.services.register_session import (
    COOKIE_NAME,
    COOKIE_TTL_SECONDS,
    is_session_valid,
    make_session_cookie,
)
from activid.services.upload_auth import authorize_upload
from activid.services.wishes import WishValidationError, parse_wish_payload, serialize_wish

logger = logging.getLogger(__name__)

def create_web_app(
    *,
    settings: Settings,
    database: Database,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await database.create_all()
        try:
            yield
        finally:
            await database.dispose()

    app = FastAPI(title="activid invitation backend", lifespan=lifespan)

    def _now() -> int:
        return int(clock())

    @app.get("/healthz")
    async def healthz():
        return PlainTextResponse("ok")

    # --- register session ---
    @app.get("/api/invitation/register/session")
    async def register_session_status(request: Request):
        cookie = request.cookies.get(COOKIE_NAME)
        return {"authenticated": is_session_valid(cookie, settings.session_secret, now=_now())}

    @app.post("/api/invitation/register/session")
    async def register_session_login(password: str = Form("")):
        expected = settings.register_password
        if not expected:
            logger.error("INVITATION_REGISTER_PASSWORD is not configured")
            return JSONResponse({"error": "Server is missing INVITATION_REGISTER_PASSWORD."}, status_code=500)

        if not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("Register login rejected: invalid password")
            return JSONResponse({"error": "Invalid password."}, status_code=401)

        try:
            cookie_value = make_session_cookie(settings.session_secret, now=_now())
        except ConfigError as e:
            logger.error("Cannot create register session: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

        resp = JSONResponse({"ok": True})
        resp.set_cookie(
            COOKIE_NAME,
            cookie_value,
            max_age=COOKIE_TTL_SECONDS,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )
        return resp

    # --- ImageKit upload authorization ---
    @app.get("/api/imagekit/auth")
    async def imagekit_auth(request: Request):
        status, body = authorize_upload(
            request.cookies.get(COOKIE_NAME),
            session_secret=settings.session_secret,
            public_key=settings.imagekit_public_key,
            private_key=settings.imagekit_private_key,
            now=_now(),
        )
        return JSONResponse(body, status_code=status)

    # --- wishes ---
    @app.get("/api/wishes")
    async def wishes_get(
        invitation_id: str | None = Query(None, alias="invitationId"),
        name_key: str | None = Query(None, alias="nameKey"),
    ):
        invitation_id = (invitation_id or "").strip()
        name_key = (name_key or "").strip()
        if not invitation_id:
            return JSONResponse({"error": "Missing invitationId"}, status_code=400)

        async with database.sessionmaker() as session:
            if name_key:
                wish = await get_wish_by_name_key(session, invitation_id, name_key)
                return {"wish": serialize_wish(wish) if wish else None}
            wishes = await list_wishes(session, invitation_id)
            return {"wishes": [serialize_wish(w) for w in wishes]}

    @app.post("/api/wishes")
    async def wishes_post(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)

        try:
            invitation_id, name, name_key, message = parse_wish_payload(body)
        except WishValidationError as e:
            return JSONResponse({"error": str(e)}, status_code=400)

        created_at = datetime.fromtimestamp(clock(), tz=timezone.utc)
        async with database.sessionmaker() as session:
            wish, created = await create_wish_once(session, invitation_id, name, name_key, message, created_at)

        if not created:
            return JSONResponse(
                {"error": "already-posted", "wish": serialize_wish(wish) if wish else None},
                status_code=409,
            )
        return JSONResponse({"wish": serialize_wish(wish)}, status_code=201)

    return app
