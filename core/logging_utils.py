from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import get_logs_dir, resolve_working_dir

_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": time.time(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in getattr(record, "__dict__", {}).items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            if key in payload:
                continue
            try:
                json.dumps(value)
            except TypeError:
                continue
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def configure_json_logging(
    name: str = "resultpage",
    *,
    working_dir: Optional[Path] = None,
    level: str | int = logging.INFO,
) -> logging.Logger:
    logs_dir = get_logs_dir(working_dir or resolve_working_dir())
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / "resultpage.log.jsonl"
    logger = logging.getLogger(name)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler) and getattr(handler, "baseFilename", None) == str(log_path):
            break
    else:
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(JsonLogFormatter())
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_from_settings(settings: Dict[str, Any], working_dir: Path) -> logging.Logger:
    block = settings.get("logging") if isinstance(settings.get("logging"), dict) else {}
    level = block.get("level") or "INFO"
    if block.get("json", True):
        return configure_json_logging(working_dir=working_dir, level=level)
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")
    return logging.getLogger("resultpage")
