import argparse
from typing import Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    # Server
    run_address: str = Field(default="localhost:3000")

    # Database
    database_dsn: str = Field(default="sqlite://data/user_registry.db")
    db_pool_workers: int = Field(default=50)

    # Per-call deadline for lifecycle operations, in milliseconds (CTX_TIMEOUT)
    ctx_timeout_ms: int = Field(default=5000, validation_alias="ctx_timeout")

    # Logging
    log_level: str = Field(default="info")
    service_name: str = Field(default="user-management")

    # Transport
    max_body_bytes: int = Field(default=1 << 20)

    @field_validator("database_dsn")
    @classmethod
    def validate_database_dsn(cls, v):
        if not v:
            raise ValueError("DATABASE_DSN must be provided")
        return v

    @field_validator("db_pool_workers")
    @classmethod
    def validate_db_pool_workers(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_WORKERS must be at least 1")
        return v

    @field_validator("ctx_timeout_ms")
    @classmethod
    def validate_ctx_timeout(cls, v):
        if v <= 0:
            raise ValueError("CTX_TIMEOUT must be a positive number of milliseconds")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported LOG_LEVEL: {v}")
        return level

    @property
    def ctx_timeout(self) -> float:
        """Per-call deadline in seconds."""
        return self.ctx_timeout_ms / 1000

    @property
    def host(self) -> str:
        host, _, _ = self.run_address.rpartition(":")
        return host or "localhost"

    @property
    def port(self) -> int:
        _, _, port = self.run_address.rpartition(":")
        return int(port)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over command-line flags (passed as init kwargs)
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="user-registry", description="User registry HTTP service")
    parser.add_argument(
        "-a",
        dest="run_address",
        default=None,
        help="run address defines on what port and host the server will be started",
    )
    parser.add_argument(
        "-d",
        dest="database_dsn",
        default=None,
        help="defines the database connection address",
    )
    return parser


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    args = build_arg_parser().parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return Settings(**overrides)
