from __future__ import annotations

import os


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse 'Key:Value;Key2:Value2' into a header dict."""

    raw = (raw or "").strip()
    if not raw:
        return {}
    headers: dict[str, str] = {}
    for part in raw.split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip()
        if k:
            headers[k] = v.strip()
    return headers


def env_timeout_s(default: float = 10.0) -> float:
    raw = (os.getenv("OPERATOR_API_TIMEOUT_S") or "").strip()
    return float(raw) if raw else default


def route_code(route_name: str) -> str:
    # The traffic endpoint wants "26A" as "0026A".
    return route_name.strip().lstrip("0").zfill(5)
