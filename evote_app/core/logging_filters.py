from __future__ import annotations

import logging


class SkipHealthzFilter(logging.Filter):
    """Drop log records produced by liveness and readiness probes."""

    def __init__(self, prefixes: tuple[str, ...] = ("/healthz", "/readyz")) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        path = record_request_path(record)
        if path is not None:
            return not path.startswith(self.prefixes)

        message = record.getMessage()
        return not any(prefix in message for prefix in self.prefixes)


def record_request_path(record: logging.LogRecord) -> str | None:
    # django.request attaches `request`; django.server passes it in args.
    candidates: list[object] = [getattr(record, "request", None)]
    if isinstance(record.args, tuple):
        candidates.extend(record.args)

    for obj in candidates:
        if obj is None:
            continue
        path = getattr(obj, "path", None) or getattr(obj, "path_info", None)
        if isinstance(path, str) and path:
            return path

    return None
