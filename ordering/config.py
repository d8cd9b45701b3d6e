import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
import json
from typing import Optional

from .services.logging import log_event


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    tax_rate: Decimal
    free_shipping_threshold: Decimal
    flat_shipping_fee: Decimal
    store_retry_attempts: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    mail_sender: str

    @property
    def mail_enabled(self) -> bool:
        return bool(self.smtp_host and self.mail_sender)


def validate_money(value: Optional[str], field: str, default: str) -> Decimal:
    raw = default if value is None or str(value).strip() == "" else str(value).strip()
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{field} must be a decimal number, got {raw!r}")
    if amount < 0:
        raise ValueError(f"{field} must be >= 0")
    return amount


def validate_rate(value: Optional[str], field: str, default: str) -> Decimal:
    rate = validate_money(value, field, default)
    # orders.tax_price is Numeric(6, 4)
    if rate >= 1 or rate != rate.quantize(Decimal("0.0001")):
        raise ValueError(f"{field} must be below 1 with at most 4 decimal places, got {rate}")
    return rate


def validate_count(value: Optional[str], field: str, default: int) -> int:
    if value is None or str(value).strip() == "":
        return default
    try:
        count = int(str(value).strip())
    except ValueError:
        raise ValueError(f"{field} must be an integer, got {value!r}")
    if count < 1:
        raise ValueError(f"{field} must be >= 1")
    return count


def _settings_path() -> Path:
    override = os.getenv("ORDERING_SETTINGS_FILE")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[1] / "data" / "settings.json"


def _load_settings_file() -> dict:
    path = _settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log_event("warning", "config.settings.unreadable", path=str(path), error=str(exc))
        return {}
    return data if isinstance(data, dict) else {}


def load_env() -> AppConfig:
    # data/settings.json wins, environment variables are the fallback
    s = _load_settings_file()

    def pick(key: str) -> Optional[str]:
        value = s.get(key)
        if value is None or value == "":
            return os.getenv(key)
        return str(value)

    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/app.db"),
        secret_key=os.getenv("SECRET_KEY", "dev_secret"),
        log_level=(pick("LOG_LEVEL") or "INFO").upper(),
        tax_rate=validate_rate(pick("TAX_RATE"), "TAX_RATE", "0.18"),
        free_shipping_threshold=validate_money(pick("FREE_SHIPPING_THRESHOLD"), "FREE_SHIPPING_THRESHOLD", "50"),
        flat_shipping_fee=validate_money(pick("FLAT_SHIPPING_FEE"), "FLAT_SHIPPING_FEE", "2"),
        store_retry_attempts=validate_count(pick("STORE_RETRY_ATTEMPTS"), "STORE_RETRY_ATTEMPTS", 3),
        smtp_host=pick("SMTP_HOST") or "",
        smtp_port=validate_count(pick("SMTP_PORT"), "SMTP_PORT", 587),
        smtp_user=os.getenv("SMTP_MAIL", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        mail_sender=pick("MAIL_SENDER") or os.getenv("SMTP_MAIL", ""),
    )
