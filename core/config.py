"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "loyalty-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_ENV_VAR = "LOYALTY_PROXY_CONFIG"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProxySettings(_Frozen):
    host: str = "127.0.0.1"
    port: int = 8080
    mount_path: str = "/api/ext/loyalty"
    trust_forwarded: bool = False
    debug: bool = True


class ApiUrls(_Frozen):
    v1: str = "https://loyalty.yotpo.com/api/v1"
    v2: str = "https://loyalty.yotpo.com/api/v2"


class LoyaltySettings(_Frozen):
    api_url: ApiUrls = Field(default_factory=ApiUrls)
    merchant_id: str = ""
    guid: str = ""
    api_key: str = ""


class StaticUser(_Frozen):
    id: str | int
    email: str


class PlatformSettings(_Frozen):
    name: str = "rest"
    base_url: str = "http://localhost:8080/api"
    me_path: str = "/user/me"
    static_users: dict[str, StaticUser] = Field(default_factory=dict)


class LimitsSettings(_Frozen):
    timeout: float = 30.0
    connect_timeout: float = 5.0
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(_Frozen):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    loyalty: LoyaltySettings = Field(default_factory=LoyaltySettings)
    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def config_path() -> Path:
    """Return the config file location, honouring the env override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


def load_config(path: Path | None = None) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    path = path or config_path()
    if not path.exists():
        return _write_default(path)

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        return _write_default(path)


def _write_default(path: Path) -> Config:
    path.parent.mkdir(parents=True, exist_ok=True)
    default = Config()
    path.write_text(default.model_dump_json(indent=2))
    return default
