from typing import Optional

from tortoise import Tortoise, connections

from ..port.user_repository import UserRepository as UserRepositoryPort
from ..usecase.user_management.lifecycle_service import UserLifecycleService
from .config import Settings
from .logging_config import get_logger
from .memory_client.user_repository import InMemoryUserRepository
from .retrier import DEFAULT_DELAYS, do_with_retries
from .tortoise_client.config import build_tortoise_config, ensure_sqlite_directory
from .tortoise_client.migration_runner import apply_migrations
from .tortoise_client.user_repository import TortoiseUserRepository

MEMORY_DSN_SCHEME = "memory://"

logger = get_logger("di")


class DIContainer:
    """依存性注入コンテナ"""

    def __init__(self, settings: Settings, connect_delays=DEFAULT_DELAYS):
        self.settings = settings
        self.connect_delays = connect_delays
        self._user_repository: Optional[UserRepositoryPort] = None
        self._lifecycle_service: Optional[UserLifecycleService] = None

    @property
    def uses_database(self) -> bool:
        return not self.settings.database_dsn.startswith(MEMORY_DSN_SCHEME)

    @property
    def user_repository(self) -> UserRepositoryPort:
        """ユーザーリポジトリのシングルトンインスタンスを取得"""
        if self._user_repository is None:
            if self.uses_database:
                self._user_repository = TortoiseUserRepository(self.settings.db_pool_workers)
            else:
                self._user_repository = InMemoryUserRepository()
        return self._user_repository

    @property
    def lifecycle_service(self) -> UserLifecycleService:
        """ライフサイクルサービスのシングルトンインスタンスを取得"""
        if self._lifecycle_service is None:
            self._lifecycle_service = UserLifecycleService(
                self.user_repository, timeout=self.settings.ctx_timeout
            )
        return self._lifecycle_service

    async def startup(self) -> None:
        """DB接続とスキーマ移行。失敗した場合は例外を送出し起動を中止する"""
        if not self.uses_database:
            logger.info("using in-memory user repository")
            return

        ensure_sqlite_directory(self.settings.database_dsn)
        config = build_tortoise_config(self.settings.database_dsn, self.settings.db_pool_workers)

        async def connect():
            await Tortoise.init(config=config)
            # 接続確認
            await connections.get("default").execute_query("SELECT 1")

        await do_with_retries(connect, delays=self.connect_delays)
        applied = await apply_migrations("default")
        logger.info("database ready", extra={"applied_migrations": applied})

    async def shutdown(self) -> None:
        if self.uses_database:
            await Tortoise.close_connections()
