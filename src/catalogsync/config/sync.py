"""Reconciliation and integration-test defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from .env import env_float, env_int, env_list, optional_env
from .errors import InvalidConfigurationError
from .http_resilience import CacheConfig

DEFAULT_ACTOR: Final[str] = "service"
DEFAULT_TEST_CONCURRENCY: Final[int] = 5
DEFAULT_TEST_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_TEST_SAMPLE_SIZE: Final[int] = 5

DuplicatePolicyName = Literal["last_wins", "first_wins"]
_DUPLICATE_POLICIES: Final[frozenset[str]] = frozenset({"last_wins", "first_wins"})

HttpCacheBackend = Literal["memory", "sqlite"]
_HTTP_CACHE_CHOICES: Final[frozenset[str]] = frozenset({"off", "memory", "sqlite"})


@dataclass(frozen=True, slots=True)
class SyncConfig:
    default_actor: str = DEFAULT_ACTOR
    test_concurrency: int = DEFAULT_TEST_CONCURRENCY
    test_timeout_seconds: float = DEFAULT_TEST_TIMEOUT_SECONDS
    test_sample_size: int = DEFAULT_TEST_SAMPLE_SIZE
    duplicate_policy: DuplicatePolicyName = "last_wins"
    # None waits for an in-flight apply of the same vendor indefinitely
    lock_timeout_seconds: float | None = None
    canonical_vendors: tuple[str, ...] = ()
    http_cache: HttpCacheBackend | None = None
    http_cache_ttl_seconds: float | None = None

    def http_cache_config(self) -> CacheConfig | None:
        """Response cache for partner API pulls, or ``None`` when caching is off."""

        if self.http_cache is None:
            return None
        return CacheConfig(backend=self.http_cache, default_ttl_seconds=self.http_cache_ttl_seconds)


def _duplicate_policy() -> DuplicatePolicyName:
    raw = optional_env("CATALOGSYNC_DUPLICATE_POLICY")
    if raw is None:
        return "last_wins"
    value = raw.lower()
    if value == "last_wins":
        return "last_wins"
    if value == "first_wins":
        return "first_wins"
    raise InvalidConfigurationError(
        "CATALOGSYNC_DUPLICATE_POLICY", raw, " or ".join(sorted(_DUPLICATE_POLICIES))
    )


def _http_cache() -> HttpCacheBackend | None:
    raw = optional_env("CATALOGSYNC_HTTP_CACHE")
    if raw is None:
        return None
    value = raw.lower()
    if value == "off":
        return None
    if value == "memory":
        return "memory"
    if value == "sqlite":
        return "sqlite"
    raise InvalidConfigurationError(
        "CATALOGSYNC_HTTP_CACHE", raw, ", ".join(sorted(_HTTP_CACHE_CHOICES))
    )


def get_sync_config() -> SyncConfig:
    timeout = env_float("CATALOGSYNC_TEST_TIMEOUT_SECONDS", DEFAULT_TEST_TIMEOUT_SECONDS)
    return SyncConfig(
        default_actor=optional_env("CATALOGSYNC_DEFAULT_ACTOR") or DEFAULT_ACTOR,
        test_concurrency=env_int(
            "CATALOGSYNC_TEST_CONCURRENCY", DEFAULT_TEST_CONCURRENCY, minimum=1
        ),
        test_timeout_seconds=timeout or DEFAULT_TEST_TIMEOUT_SECONDS,
        test_sample_size=env_int(
            "CATALOGSYNC_TEST_SAMPLE_SIZE", DEFAULT_TEST_SAMPLE_SIZE, minimum=1
        ),
        duplicate_policy=_duplicate_policy(),
        lock_timeout_seconds=env_float("CATALOGSYNC_LOCK_TIMEOUT_SECONDS", None),
        canonical_vendors=env_list("CATALOGSYNC_CANONICAL_VENDORS"),
        http_cache=_http_cache(),
        http_cache_ttl_seconds=env_float("CATALOGSYNC_HTTP_CACHE_TTL_SECONDS", None),
    )
