import os
import tempfile
from pathlib import Path

# Point the module-level engine at a throwaway database before the app is imported
os.environ.setdefault(
    "TRAINING_PLANS_DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp()) / 'training_plans_app.db'}",
)

import pytest  # noqa: E402
from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from training_plans_service.database import create_async_engine_and_session  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parents[1]
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def _alembic_upgrade_head(db_url: str) -> None:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    # Pin script_location so running from another cwd still finds the migrations
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


@pytest.fixture()
def db_url(tmp_path) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'test_training_plans.db'}"
    _alembic_upgrade_head(url)
    return url


@pytest.fixture()
async def session_factory(db_url: str):
    engine, factory = create_async_engine_and_session(db_url, poolclass=NullPool)
    yield factory
    await engine.dispose()


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def client(db_url: str):
    # Import after the database URL is set
    from training_plans_service.dependencies import get_db
    from training_plans_service.main import app

    _, factory = create_async_engine_and_session(db_url, poolclass=NullPool)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app, headers={"X-User-Id": USER_ID}) as c:
        yield c

    app.dependency_overrides.pop(get_db, None)
