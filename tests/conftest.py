import asyncio
import os
import tempfile

import pytest

# Must be set before config is imported by anything under test
_db_dir = tempfile.mkdtemp(prefix="ledger-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'ledger.db')}"
os.environ["SAVING_ACCOUNTS"] = "SIB,KSFE"
os.environ["LEDGER_WINDOW_MONTHS"] = "6"

from fastapi.testclient import TestClient  # noqa: E402

import main  # noqa: E402
from database import Base, engine  # noqa: E402


async def _reset_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def fresh_db():
    asyncio.run(_reset_tables())


@pytest.fixture
def client(fresh_db):
    with TestClient(main.app) as c:
        yield c
