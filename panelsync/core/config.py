from pydantic_settings import BaseSettings, SettingsConfigDict
import os

DEFAULT_TIMEOUT_SECONDS = 5

class ApiConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PANELSYNC_",
        env_file=os.getenv("ENV_FILE", ".env"),
        extra="ignore",
    )

    APP_NAME: str = "panelsync"

    API_HOST: str
    NODE_ID: int
    KEY: str
    NODE_TYPE: str = "V2ray"

    ENABLE_VLESS: bool = False
    VLESS_FLOW: str = ""

    SPEED_LIMIT: float = 0  # Mbps, 0 = use panel value
    DEVICE_LIMIT: int = 0   # 0 = unlimited

    TIMEOUT: int = 0  # seconds, 0 = default
    RETRY_COUNT: int = 3

    RULE_LIST_PATH: str = ""

    @property
    def request_timeout(self) -> float:
        if self.TIMEOUT > 0:
            return float(self.TIMEOUT)
        return float(DEFAULT_TIMEOUT_SECONDS)

    @property
    def api_base_url(self) -> str:
        return self.API_HOST.rstrip("/")
