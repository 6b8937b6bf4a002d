from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RequestToken:
    key: str
    generation: int


@dataclass(slots=True)
class RequestTracker:
    """Generation counter per request key (a route, a stop, a search box).

    Issue a token when starting async work; when it completes, drop the
    result unless the token is still current.
    """

    _generations: dict[str, int] = field(default_factory=dict)

    def issue(self, key: str) -> RequestToken:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return RequestToken(key=key, generation=generation)

    def is_current(self, token: RequestToken) -> bool:
        return self._generations.get(token.key) == token.generation
