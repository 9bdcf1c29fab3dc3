"""Runtime configuration.

Settings come from ``storefront.toml`` at the project root: the top-level
table holds defaults and ``[<env>]`` tables hold per-environment overlays,
selected with ``STOREFRONT_ENV`` (``development`` when unset). Individual
environment variables override both, which is how secrets reach production.
"""

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

_CONFIG_FILE = "storefront.toml"

# Environment variable -> Settings attribute
_ENV_OVERRIDES = {
    "DATABASE_URL": "database_url",
    "VNP_TMNCODE": "vnp_tmn_code",
    "VNP_HASHSECRET": "vnp_hash_secret",
    "VNP_URL": "vnp_url",
    "VNP_RETURNURL": "vnp_return_url",
    "URL_CLIENT": "client_url",
    "LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    database_url: str = "sqlite:///storefront.db"
    log_level: str = "INFO"
    log_json: bool = False
    vnp_tmn_code: str = ""
    vnp_hash_secret: str = ""
    vnp_url: str = "https://sandbox.vnpayment.vn/paymentv2/vpcpay.html"
    vnp_return_url: str = "http://localhost:8000/payments/vnpay/return"
    vnp_locale: str = "vn"
    vnp_currency: str = "VND"
    vnp_timezone: str = "Asia/Ho_Chi_Minh"
    client_url: str = "http://localhost:3000"

    def __repr__(self) -> str:
        # Keep the gateway secret out of logs and tracebacks
        shown = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "vnp_hash_secret"}
        return f"Settings({', '.join(f'{k}={v!r}' for k, v in shown.items())})"


def _find_config_file(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / _CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_settings(env: str | None = None, config_path: Path | None = None) -> Settings:
    """Build Settings from the TOML file, the env overlay and env variables."""
    env = env or os.environ.get("STOREFRONT_ENV", "development")
    path = config_path or _find_config_file(Path.cwd())

    values: dict = {}
    if path is not None:
        with path.open("rb") as fp:
            document = tomllib.load(fp)
        overlay = document.get(env, {})
        values.update({k: v for k, v in document.items() if not isinstance(v, dict)})
        values.update(overlay)

    known = {f.name for f in fields(Settings)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")

    settings = replace(Settings(), env=env, **values)

    overrides = {attr: os.environ[var] for var, attr in _ENV_OVERRIDES.items() if var in os.environ}
    if overrides:
        settings = replace(settings, **overrides)
    return settings
