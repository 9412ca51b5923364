"""Per-actor request throttling."""

from __future__ import annotations

from core.limiter.actor_limiter import ActorRateLimiter

__all__: list[str] = ["ActorRateLimiter"]
