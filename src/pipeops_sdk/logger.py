"""Logging capability used by the SDK core."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol


class Logger(Protocol):
    def debug(self, msg: str, **fields: Any) -> None: ...

    def info(self, msg: str, **fields: Any) -> None: ...

    def warn(self, msg: str, **fields: Any) -> None: ...

    def error(self, msg: str, **fields: Any) -> None: ...


class NullLogger:
    """Discards everything."""

    def debug(self, msg: str, **fields: Any) -> None:
        return None

    def info(self, msg: str, **fields: Any) -> None:
        return None

    def warn(self, msg: str, **fields: Any) -> None:
        return None

    def error(self, msg: str, **fields: Any) -> None:
        return None


class StdlibLogger:
    """Adapts a :class:`logging.Logger` to the four-level capability.

    Fields are rendered as ``key=value`` pairs after the message and also
    attached to the record as ``fields`` for structured handlers.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("pipeops_sdk.client")

    def _log(self, level: int, msg: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if fields:
            rendered = " ".join(f"{key}={value}" for key, value in fields.items())
            self._logger.log(level, "%s %s", msg, rendered, extra={"fields": fields})
        else:
            self._logger.log(level, "%s", msg, extra={"fields": {}})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warn(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, fields)


def safe_url(url: object) -> str:
    return str(url).replace("\n", "").replace("\r", "")


__all__ = ["Logger", "NullLogger", "StdlibLogger", "safe_url"]
