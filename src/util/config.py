import os
from typing import Callable

from pydantic import SecretStr

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)


class Config:

    DEFAULT_EXPORT_PASSWORD = "admin123"  # only meant for local setups

    log_level: str
    log_keys_with_balance: bool
    version: str
    port: int
    usage_api_endpoint: str
    usage_api_user_agent: str
    fetch_timeout_s: float
    fetch_concurrency: int
    batch_delay_ms: int
    auth_retries: int
    auth_retry_delay_s: float
    refresh_interval_s: float
    display_tz_offset_hours: int

    db_url: SecretStr
    export_password: SecretStr

    def __init__(
        self,
        def_log_level: str = "INFO",
        def_log_keys_with_balance: bool = False,
        def_version: str = "dev",
        def_port: int = 8000,
        def_usage_api_endpoint: str = "https://app.factory.ai/api/organization/members/chat-usage",
        def_usage_api_user_agent: str = DEFAULT_USER_AGENT,
        def_fetch_timeout_s: float = 30,
        def_fetch_concurrency: int = 10,
        def_batch_delay_ms: int = 100,
        def_auth_retries: int = 2,
        def_auth_retry_delay_s: float = 1,
        def_refresh_interval_s: float = 60,
        def_display_tz_offset_hours: int = 8,

        def_db_url: SecretStr = SecretStr("sqlite:///./api_keys.db"),
        def_export_password: SecretStr = SecretStr(DEFAULT_EXPORT_PASSWORD),
    ):
        # @formatter:off
        self.log_level = self.__env("LOG_LEVEL", lambda: def_log_level).lower()
        self.log_keys_with_balance = self.__env("LOG_KEYS_WITH_BALANCE", lambda: str(def_log_keys_with_balance)).lower() == "true"
        self.version = self.__env("VERSION", lambda: def_version)
        self.port = int(self.__env("PORT", lambda: str(def_port)))
        self.usage_api_endpoint = self.__env("USAGE_API_ENDPOINT", lambda: def_usage_api_endpoint)
        self.usage_api_user_agent = self.__env("USAGE_API_USER_AGENT", lambda: def_usage_api_user_agent)
        self.fetch_timeout_s = float(self.__env("FETCH_TIMEOUT_S", lambda: str(def_fetch_timeout_s)))
        self.fetch_concurrency = int(self.__env("FETCH_CONCURRENCY", lambda: str(def_fetch_concurrency)))
        self.batch_delay_ms = int(self.__env("BATCH_DELAY_MS", lambda: str(def_batch_delay_ms)))
        self.auth_retries = int(self.__env("AUTH_RETRIES", lambda: str(def_auth_retries)))
        self.auth_retry_delay_s = float(self.__env("AUTH_RETRY_DELAY_S", lambda: str(def_auth_retry_delay_s)))
        self.refresh_interval_s = float(self.__env("REFRESH_INTERVAL_S", lambda: str(def_refresh_interval_s)))
        self.display_tz_offset_hours = int(self.__env("DISPLAY_TZ_OFFSET_HOURS", lambda: str(def_display_tz_offset_hours)))

        self.db_url = self.__senv("DB_URL", lambda: def_db_url)
        self.export_password = self.__senv("EXPORT_PASSWORD", lambda: def_export_password)
        # @formatter:on

    @property
    def batch_delay_s(self) -> float:
        return self.batch_delay_ms / 1000

    @staticmethod
    def __env(name: str, default: Callable[[], str]) -> str:
        env_value = os.environ.get(name, "").strip()
        return env_value if env_value else default()

    @staticmethod
    def __senv(name: str, default: Callable[[], SecretStr]) -> SecretStr:
        env_value = os.environ.get(name, "").strip()
        return SecretStr(env_value) if env_value else default()


config = Config()
