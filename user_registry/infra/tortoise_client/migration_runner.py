"""
Startup schema migrations.

Migration modules live in the ``migrations`` package next to this file and
are named ``<version>_<label>.py``. Each exposes
``async def upgrade(db) -> str`` returning the SQL for the connection's
dialect. Applied versions are recorded in ``schema_migrations`` so every
migration runs exactly once per database.

Each migration and its history row are applied in one transaction, so a
failed migration leaves no trace and is retried on the next startup.
"""
import importlib
import pkgutil
from dataclasses import dataclass
from types import ModuleType
from typing import List

from tortoise import BaseDBAsyncClient, connections
from tortoise.transactions import in_transaction

from ..logging_config import get_logger
from .models import SchemaMigration

MIGRATIONS_PACKAGE = "user_registry.infra.tortoise_client.migrations"

logger = get_logger("migrations")


class MigrationError(Exception):
    """Raised when the schema cannot be brought up to date."""


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    module: ModuleType


def discover_migrations(package: str = MIGRATIONS_PACKAGE) -> List[Migration]:
    pkg = importlib.import_module(package)
    found = []
    for info in pkgutil.iter_modules(pkg.__path__):
        version, sep, _ = info.name.partition("_")
        if not sep or not version.isdigit():
            continue
        module = importlib.import_module(f"{package}.{info.name}")
        found.append(Migration(version=int(version), name=info.name, module=module))

    found.sort(key=lambda m: m.version)
    versions = [m.version for m in found]
    if len(versions) != len(set(versions)):
        raise MigrationError(f"Duplicate migration versions in {package}: {versions}")
    return found


def split_statements(sql: str) -> List[str]:
    return [statement.strip() for statement in sql.split(";") if statement.strip()]


async def _ensure_history_table(db: BaseDBAsyncClient) -> None:
    timestamp_type = "TIMESTAMPTZ" if db.capabilities.dialect == "postgres" else "TIMESTAMP"
    await db.execute_script(
        f"""
        CREATE TABLE IF NOT EXISTS "schema_migrations" (
    "name" VARCHAR(255) NOT NULL PRIMARY KEY,
    "version" INT NOT NULL,
    "applied_at" {timestamp_type} NOT NULL
);"""
    )


async def apply_migrations(
    connection_name: str = "default",
    package: str = MIGRATIONS_PACKAGE,
) -> List[str]:
    """Apply pending migrations in version order and return the applied names."""
    try:
        db = connections.get(connection_name)
        migrations = discover_migrations(package)
        await _ensure_history_table(db)
        applied = set(await SchemaMigration.all().values_list("version", flat=True))
    except MigrationError:
        raise
    except Exception as e:
        raise MigrationError(f"Failed to prepare migrations: {e}") from e

    newly_applied = []
    for migration in migrations:
        if migration.version in applied:
            continue
        try:
            async with in_transaction(connection_name) as conn:
                # execute_script would commit the open transaction on sqlite
                for statement in split_statements(await migration.module.upgrade(conn)):
                    await conn.execute_query(statement)
                await SchemaMigration.create(
                    name=migration.name, version=migration.version, using_db=conn
                )
        except Exception as e:
            raise MigrationError(f"Migration {migration.name} failed: {e}") from e

        logger.info("migration applied", extra={"migration": migration.name})
        newly_applied.append(migration.name)

    return newly_applied
