import pytest
import pytest_asyncio
from tortoise import Tortoise

from user_registry.infra.tortoise_client.config import build_tortoise_config
from user_registry.infra.tortoise_client.migration_runner import apply_migrations
from user_registry.port.dto.user_dto import UserInfoDTO

CONFIG_ENV_VARS = (
    "RUN_ADDRESS",
    "DATABASE_DSN",
    "DB_POOL_WORKERS",
    "CTX_TIMEOUT",
    "LOG_LEVEL",
    "SERVICE_NAME",
    "MAX_BODY_BYTES",
)


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch, tmp_path):
    """Keep host environment variables and .env files out of Settings."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def user_info():
    return UserInfoDTO(
        username="alice",
        first_name="Alice",
        last_name="Doe",
        email="alice@example.com",
        gender="F",
        age=30,
    )


@pytest_asyncio.fixture
async def tortoise_db():
    """In-memory sqlite database with all migrations applied."""
    await Tortoise.init(config=build_tortoise_config("sqlite://:memory:", 5))
    await apply_migrations("default")
    yield
    await Tortoise.close_connections()
