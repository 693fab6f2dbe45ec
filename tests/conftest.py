import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest
import pytest_asyncio

from activid.config import Settings
from activid.db.engine import Database


@pytest_asyncio.fixture()
async def sessionmaker():
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_all()
    try:
        yield database.sessionmaker
    finally:
        await database.dispose()


@pytest.fixture()
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        log_level="INFO",
        session_secret="topsecret",
        register_password="letmein",
        imagekit_public_key="public_test_key",
        imagekit_private_key="private_test_key",
        cookie_secure=False,
        web_host="127.0.0.1",
        web_port=8080,
    )
