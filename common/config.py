"""
Settings for the seller offer tool.

Values come from, in order of precedence: command line flags (applied by
seller.main), environment variables (a .env file is loaded first), the JSON
config file, then the defaults below.
"""
import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from common.errors import ConfigError

BASE_URL = "https://buff.163.com"
SEND_OFFER_PATH = "/api/market/manual_plus/seller_send_offer"
ORDER_STATUS_PATH = "/api/market/bill_order/batch/info"
TIMEOUT = 10.0   # seconds per request
CONFIG_FILE = "config.json"
LOG_LEVEL = "INFO"

# env var -> Settings field
ENV_VARS = {
    "BUFF_BASE_URL": "base_url",
    "BUFF_COOKIE": "buff_cookie",
    "STEAM_COOKIE": "steam_cookie",
    "SELLER_STEAM_ID": "seller_steam_id",
    "BUFF_TIMEOUT": "timeout",
    "BUFF_LOG_LEVEL": "log_level",
}

# config.json key -> Settings field ("cookies" is what the scraping scripts store)
FILE_KEYS = {
    "base_url": "base_url",
    "buff_cookie": "buff_cookie",
    "steam_cookie": "steam_cookie",
    "cookies": "steam_cookie",
    "seller_steam_id": "seller_steam_id",
    "timeout": "timeout",
    "log_level": "log_level",
}


@dataclass(frozen=True)
class Settings:
    base_url: str = BASE_URL
    buff_cookie: Optional[str] = None
    steam_cookie: Optional[str] = None
    seller_steam_id: Optional[str] = None
    timeout: float = TIMEOUT
    log_level: str = LOG_LEVEL

    def merged(self, values: Dict[str, Any]) -> "Settings":
        ''' Copy with every non-empty value applied on top '''
        clean = {k: v for k, v in values.items() if v not in (None, "")}
        if "timeout" in clean:
            clean["timeout"] = _as_timeout(clean["timeout"])
        if "base_url" in clean:
            clean["base_url"] = str(clean["base_url"]).rstrip("/")
        return replace(self, **clean)


def _as_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"timeout must be a number, got {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")
    return timeout


def read_config_file(path: Optional[str]) -> Dict[str, Any]:
    '''
    This function reads the JSON config file.
    Input:
        - path: file path; a missing file yields an empty dict
    Output: dict of Settings field values found in the file
    '''
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot read config file {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {p} must hold a JSON object")
    values: Dict[str, Any] = {}
    for key, name in FILE_KEYS.items():
        if raw.get(key) not in (None, "") and name not in values:
            values[name] = raw[key]
    return values


def read_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    return {name: environ[var] for var, name in ENV_VARS.items() if environ.get(var)}


def load_settings(config_path: Optional[str] = CONFIG_FILE,
                  overrides: Optional[Dict[str, Any]] = None,
                  environ: Optional[Dict[str, str]] = None,
                  use_dotenv: bool = True) -> Settings:
    '''
    Build the effective Settings.
        Input:
            - config_path: JSON config file (missing file is fine)
            - overrides: values from the command line, highest precedence
            - environ: environment mapping (defaults to os.environ)
            - use_dotenv: load a .env file into os.environ first
        Output: Settings
    '''
    if use_dotenv and environ is None:
        load_dotenv(override=False)
    settings = Settings()
    settings = settings.merged(read_config_file(config_path))
    settings = settings.merged(read_env(environ))
    settings = settings.merged(overrides or {})
    return settings
