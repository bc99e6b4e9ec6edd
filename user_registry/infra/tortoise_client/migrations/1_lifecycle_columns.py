from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    timestamp_type = "TIMESTAMPTZ" if db.capabilities.dialect == "postgres" else "TIMESTAMP"
    return f"""
        ALTER TABLE "users" ADD COLUMN "updated_at" {timestamp_type};
        CREATE INDEX IF NOT EXISTS "idx_users_end_date" ON "users" ("end_date");"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP INDEX IF EXISTS "idx_users_end_date";
        ALTER TABLE "users" DROP COLUMN "updated_at";"""
