"""로그 설정 - 텍스트 또는 JSON 한 줄 로그."""

import json
import logging
import sys
from datetime import datetime, timezone

# LogRecord에 extra로 붙으면 JSON 로그에 함께 남기는 필드
EXTRA_FIELDS = ("mode", "status", "error_kind")

QUIET_LOGGERS = ("httpx", "httpcore", "psycopg")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_format: bool = False):
    """루트 로거를 설정한다. 여러 번 호출해도 핸들러는 하나만 남는다.

    Args:
        level: 로그 레벨 이름. 알 수 없는 값이면 INFO.
        json_format: True이면 JSON 한 줄 로그.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
