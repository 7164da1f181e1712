from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_LOGGING_FORMAT = (
    "%(asctime)s (%(threadName)s) [%(levelname)s] %(message)s (%(filename)s:%(lineno)d)"
)

DEFAULT_BASE_URL = "http://localhost:8112/"
DEFAULT_RPC_PATH = "/json"
DEFAULT_PASSWORD = "deluge"
DEFAULT_TIMEOUT = timedelta(milliseconds=5000)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = DEFAULT_LOGGING_FORMAT


class DelugeSettings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    path: str = DEFAULT_RPC_PATH
    password: SecretStr = SecretStr(DEFAULT_PASSWORD)
    # bare numbers are milliseconds, ex: 5000
    timeout: timedelta = DEFAULT_TIMEOUT
    # forwarded to requests as-is, ex: {"https": "socks5://127.0.0.1:1080"}
    proxies: dict[str, str] | None = None
    verify_tls: bool = True
    # not applied by the client, embedding applications pass it to configure_logging
    logging_settings: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, base_url: str) -> str:
        if not base_url.startswith(("http://", "https://")):
            raise ValueError(f"{base_url} is not an http(s) url")
        return base_url

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_timeout_milliseconds(cls, timeout: Any) -> Any:
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
            return timedelta(milliseconds=timeout)
        return timeout

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, timeout: timedelta) -> timedelta:
        if timeout <= timedelta(0):
            raise ValueError("timeout must be positive")
        return timeout

    @property
    def rpc_url(self) -> str:
        return join_url(self.base_url, self.path)

    @property
    def upload_url(self) -> str:
        return join_url(self.base_url, "/upload")


def join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def load_settings(config_file_path: Path | str) -> DelugeSettings:
    with open(config_file_path) as cf:
        return DelugeSettings.model_validate(yaml.safe_load(cf) or {})
