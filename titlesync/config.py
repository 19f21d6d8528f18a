"""Process-wide settings read once from the environment.

Mental model refresher:
- Settings are built a single time at startup and passed into every component.
- Required values are checked here so a missing variable stops the process
  before the first ledger update arrives.
- The Twilio credentials are optional: without them the dispatcher reports a
  configuration failure per send and never touches the network.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

TITLE_NUMBER_PLACEHOLDER = "%titleNumber%"


class ConfigError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    ledger_host: str
    ledger_port: int
    ledger_username: str
    ledger_password: str = field(repr=False)
    case_management_api_url: str
    ui_url_agreement_sign: str
    ui_url_title_transferred: str
    kafka_bootstrap_servers: tuple[str, ...]
    kafka_topic_agreements: str = "ledger.land-agreement-state"
    kafka_topic_instructions: str = "ledger.case-instruction-state"
    kafka_group_id: str = "titlesync-listener"
    kafka_auto_offset_reset: str = "latest"
    kafka_poll_timeout_ms: int = 1000
    kafka_max_records_per_poll: int = 50
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = field(default=None, repr=False)
    twilio_phone_number: str | None = None
    twilio_is_trial: bool = False
    twilio_api_base_url: str = "https://api.twilio.com"
    sms_timeout_seconds: float = 10.0
    case_timeout_seconds: float = 15.0
    ledger_timeout_seconds: float = 15.0
    retry_attempts: int = 3
    retry_min_wait_seconds: float = 1.0
    retry_max_wait_seconds: float = 8.0

    @property
    def ledger_base_url(self) -> str:
        return f"http://{self.ledger_host}:{self.ledger_port}"

    def agreement_sign_url(self, title_number: str) -> str:
        return self.ui_url_agreement_sign.replace(TITLE_NUMBER_PLACEHOLDER, title_number)

    def title_transferred_url(self, title_number: str) -> str:
        return self.ui_url_title_transferred.replace(TITLE_NUMBER_PLACEHOLDER, title_number)


def load_settings_from_env() -> Settings:
    """Build `Settings` from environment variables, failing fast on bad input."""
    return Settings(
        ledger_host=_required_env("CONFIG_RPC_HOST"),
        ledger_port=_env_int("CONFIG_RPC_PORT", default=None),
        ledger_username=_required_env("CONFIG_RPC_USERNAME"),
        ledger_password=_required_env("CONFIG_RPC_PASSWORD"),
        case_management_api_url=_required_env("CASE_MANAGEMENT_API_URL").rstrip("/"),
        ui_url_agreement_sign=_required_env("UI_URL_AGREEMENT_SIGN"),
        ui_url_title_transferred=_required_env("UI_URL_TITLE_TRANSFERRED"),
        kafka_bootstrap_servers=_bootstrap_servers_from_env(),
        kafka_topic_agreements=os.getenv(
            "KAFKA_TOPIC_AGREEMENTS", "ledger.land-agreement-state"
        ),
        kafka_topic_instructions=os.getenv(
            "KAFKA_TOPIC_INSTRUCTIONS", "ledger.case-instruction-state"
        ),
        kafka_group_id=os.getenv("KAFKA_GROUP_ID", "titlesync-listener"),
        kafka_auto_offset_reset=os.getenv("KAFKA_AUTO_OFFSET_RESET", "latest"),
        kafka_poll_timeout_ms=_poll_timeout_ms_from_env(),
        kafka_max_records_per_poll=_env_int("KAFKA_MAX_RECORDS_PER_POLL", default=50),
        twilio_account_sid=_optional_env("TWILIO_ACCOUNT_SID"),
        twilio_auth_token=_optional_env("TWILIO_AUTH_TOKEN"),
        twilio_phone_number=_optional_env("TWILIO_PHONE_NUMBER"),
        twilio_is_trial=_env_bool("TWILIO_IS_TRIAL", default=False),
        twilio_api_base_url=os.getenv(
            "TWILIO_API_BASE_URL", "https://api.twilio.com"
        ).rstrip("/"),
        sms_timeout_seconds=_env_float("SMS_TIMEOUT_SECONDS", default=10.0),
        case_timeout_seconds=_env_float("CASE_TIMEOUT_SECONDS", default=15.0),
        ledger_timeout_seconds=_env_float("LEDGER_TIMEOUT_SECONDS", default=15.0),
        retry_attempts=max(1, _env_int("HTTP_RETRY_ATTEMPTS", default=3)),
        retry_min_wait_seconds=_env_float("HTTP_RETRY_MIN_WAIT_SECONDS", default=1.0),
        retry_max_wait_seconds=_env_float("HTTP_RETRY_MAX_WAIT_SECONDS", default=8.0),
    )


def load_env_file(path: Path) -> None:
    """Populate `os.environ` from a `.env` file without overriding set values."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise ConfigError(f"Missing required environment variable: {name}")
    return value.strip()


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise ConfigError(f"Invalid boolean value for {name}: {raw!r}")


def _env_int(name: str, default: int | None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        if default is None:
            raise ConfigError(f"Missing required environment variable: {name}")
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid integer value for {name}: {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid number value for {name}: {raw!r}") from exc


def _bootstrap_servers_from_env() -> tuple[str, ...]:
    raw = _required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = tuple(item.strip() for item in raw.split(",") if item.strip())
    if not servers:
        raise ConfigError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _poll_timeout_ms_from_env() -> int:
    timeout_seconds = _env_float("KAFKA_POLL_TIMEOUT_SECONDS", default=1.0)
    timeout_ms = int(timeout_seconds * 1000)
    if timeout_ms <= 0:
        raise ConfigError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms
