import json
import sys
from datetime import datetime, timezone


LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40, "critical": 50}

_min_level = LEVELS["info"]


def configure_logging(level: str) -> None:
    global _min_level
    name = (level or "info").lower()
    if name not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    _min_level = LEVELS[name]


def log_event(level: str, event: str, **fields) -> None:
    level = level.lower()
    if LEVELS.get(level, LEVELS["info"]) < _min_level:
        return
    payload = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level,
        "event": event,
    }
    payload.update(fields or {})
    try:
        sys.stdout.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except (OSError, ValueError):
        # stdout closed or unwritable; logging must not take the request down
        pass
