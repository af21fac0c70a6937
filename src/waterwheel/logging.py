import logging
from typing import Any, Iterable, Optional

LOG_EXTRA_FIELDS = (
    "event",
    "resource",
    "method",
    "url",
    "status",
    "duration_ms",
    "count",
    "keys",
    "base",
)


class LogfmtFormatter(logging.Formatter):
    """Small logfmt-style formatter that tolerates missing extras."""

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"msg={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        if isinstance(val, (list, tuple)):
            val = ",".join(str(v) for v in val)
        s = str(val)
        if " " in s or "=" in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def setup_logging(level: str = "INFO") -> None:
    """Initialize root logging with logfmt output."""

    root = logging.getLogger()
    # Avoid duplicate handlers if called twice
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def log_event(
    event: str,
    logger: Optional[logging.Logger] = None,
    *,
    keys: Optional[Iterable[str]] = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Emit a structured event whose fields land on the LogRecord as extras.
    `keys` (registry keys touched by the event) is sorted and counted.
    Fields that clash with LogRecord attributes are dropped.
    """
    log = logger or logging.getLogger("waterwheel")
    extra: dict[str, Any] = {"event": event}
    if keys is not None:
        extra["keys"] = sorted(keys)
        extra["count"] = len(extra["keys"])
    reserved = {*logging.makeLogRecord({}).__dict__, "message", "asctime"}
    extra.update({k: v for k, v in fields.items() if k not in reserved})
    log.log(level, event, extra=extra)


__all__ = ["setup_logging", "log_event", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
