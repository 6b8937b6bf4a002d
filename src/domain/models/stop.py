from __future__ import annotations

import re
from dataclasses import dataclass, field

from .geo import GeoPoint

_SEPARATORS = re.compile(r"[-_/]")


def normalize_stop_code(code: str) -> str:
    """Canonical form of an operator stop code ("m11-1", "M11_1" -> "M11/1")."""

    return _SEPARATORS.sub("/", (code or "").strip()).upper()


def base_stop_code(code: str) -> str:
    """Pole-independent part of a stop code ("T309/2" -> "T309")."""

    return normalize_stop_code(code).split("/")[0]


@dataclass(frozen=True, slots=True)
class Stop:
    id: str
    # language code -> display name; insertion order decides the default
    names: dict[str, str] = field(default_factory=dict, hash=False)
    location: GeoPoint | None = None
    route_ids: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        for value in self.names.values():
            if value:
                return value
        return self.id

    def display_name(self, lang: str | None = None) -> str:
        if lang:
            value = self.names.get(lang)
            if value:
                return value
            # "zh-tw" falls back to "zh"
            value = self.names.get(lang.split("-")[0])
            if value:
                return value
        return self.name
