# duobrain/services/cache.py
"""Cache-aside reads and delete-on-write invalidation over Redis.

Every cache key is scoped by the user's email. Which keys a mutation must
purge is decided by INVALIDATION_RULES alone; services name the entities they
touched and never spell out keys themselves.

The cache is best-effort: a Redis failure is logged and the request carries
on against the database (reads) or is still reported as successful (writes),
leaving at most a TTL's worth of staleness.
"""
import enum
import json
import logging
import re
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import redis
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

# TTLs in seconds
LONG_TTL = 3600   # profile, jars, goals, charges
SHORT_TTL = 900   # transaction lists, summaries, insights


class Entity(enum.Enum):
    USER = "user"
    JAR = "jar"
    GOAL = "goal"
    CHARGE = "charge"
    TRANSACTION = "transaction"


def profile_key(email: str) -> str:
    return f"user-profile:{email}"


def jars_key(email: str) -> str:
    return f"jars:{email}"


def goals_key(email: str) -> str:
    return f"goals:{email}"


def goal_key(email: str, goal_id: int) -> str:
    return f"goal:{email}:{goal_id}"


def charges_key(email: str, status: str) -> str:
    return f"charges:{email}:status-{status}"


def transactions_key(email: str, page: int, limit: int, type_: Optional[str], month: Optional[int], year: Optional[int]) -> str:
    return (
        f"transactions:{email}:page-{page}-limit-{limit}-type-{type_ or 'all'}"
        f"-month-{month or 'all'}-year-{year or 'all'}"
    )


def summary_key(email: str, month: int, year: int) -> str:
    return f"summary:{email}:month-{month}-year-{year}"


def insights_key(email: str) -> str:
    return f"insights:{email}"


# entity -> key templates to purge for the owning user; '*' marks a prefix scan
INVALIDATION_RULES: Dict[Entity, Tuple[str, ...]] = {
    Entity.USER: ("user-profile:{email}", "goals:{email}", "insights:{email}"),
    Entity.JAR: ("jars:{email}", "insights:{email}"),
    Entity.GOAL: ("goals:{email}", "goal:{email}:*", "insights:{email}"),
    Entity.CHARGE: ("charges:{email}:*", "insights:{email}"),
    Entity.TRANSACTION: ("transactions:{email}:*", "summary:{email}:*", "insights:{email}"),
}


def _glob_escape(value: str) -> str:
    return re.sub(r"([*?\[\]\\])", r"\\\1", value)


def keys_for(email: str, entities: Iterable[Entity]) -> Tuple[str, ...]:
    """Ordered, de-duplicated keys and SCAN patterns for the given entities."""
    seen = []
    for entity in entities:
        for template in INVALIDATION_RULES[entity]:
            if "*" in template:
                key = template.format(email=_glob_escape(email))
            else:
                key = template.format(email=email)
            if key not in seen:
                seen.append(key)
    return tuple(seen)


class ResponseCache:
    def __init__(self, client: "redis.Redis"):
        self.client = client

    def get_or_load(self, key: str, ttl: int, loader: Callable[[], Any]) -> Any:
        """
        Return the cached JSON for key, or call loader(), store its
        JSON-encoded result with the given TTL and return it.
        """
        cached = self._get(key)
        if cached is not None:
            try:
                return json.loads(cached)
            except ValueError:
                logger.warning("Discarding undecodable cache entry %s", key)

        value = jsonable_encoder(loader())
        self._set(key, ttl, json.dumps(value))
        return value

    def invalidate(self, email: str, *entities: Entity) -> None:
        """Purge every key the given entity changes could have made stale for this user."""
        for key in keys_for(email, entities):
            try:
                if key.endswith(":*"):
                    matched = list(self.client.scan_iter(match=key, count=500))
                    if matched:
                        self.client.delete(*matched)
                else:
                    self.client.delete(key)
            except redis.RedisError:
                logger.warning("Cache invalidation failed for %s", key, exc_info=True)

    def _get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.RedisError:
            logger.warning("Cache read failed for %s; falling back to the database", key, exc_info=True)
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def _set(self, key: str, ttl: int, payload: str) -> None:
        try:
            self.client.set(key, payload, ex=ttl)
        except redis.RedisError:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError:
            logger.warning("Error while closing the cache client", exc_info=True)
