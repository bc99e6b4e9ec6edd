from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    if db.capabilities.dialect == "postgres":
        return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "username" VARCHAR(255) NOT NULL UNIQUE,
    "first_name" VARCHAR(255) NOT NULL,
    "middle_name" VARCHAR(255),
    "last_name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) NOT NULL,
    "gender" VARCHAR(1) NOT NULL CHECK (UPPER("gender") IN ('M', 'F', 'O')),
    "age" SMALLINT NOT NULL CHECK ("age" >= 1 AND "age" <= 150),
    "beg_date" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "end_date" TIMESTAMPTZ
);"""
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "username" VARCHAR(255) NOT NULL UNIQUE,
    "first_name" VARCHAR(255) NOT NULL,
    "middle_name" VARCHAR(255),
    "last_name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) NOT NULL,
    "gender" VARCHAR(1) NOT NULL CHECK (UPPER("gender") IN ('M', 'F', 'O')),
    "age" SMALLINT NOT NULL CHECK ("age" >= 1 AND "age" <= 150),
    "beg_date" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "end_date" TIMESTAMP
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "users";"""
