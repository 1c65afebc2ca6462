"""Adapter contract and the static slug -> adapter registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

from catalogsync.domain.normalization.errors import AdapterNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from catalogsync.domain.model import CanonicalProduct, IntegrationType, VendorRef


@runtime_checkable
class VendorAdapter[TRecord: BaseModel](Protocol):
    """Pure mapping from one validated raw vendor record to a canonical product."""

    @property
    def vendor(self) -> VendorRef: ...

    @property
    def input_model(self) -> type[TRecord]: ...

    @property
    def supported_integrations(self) -> frozenset[IntegrationType]: ...

    def normalize(self, record: TRecord) -> CanonicalProduct: ...


def normalize_slug(slug: str) -> str:
    return slug.strip().lower()


class AdapterRegistry:
    """Mapping of vendor slugs to adapters, populated once at startup."""

    def __init__(self, adapters: Iterable[VendorAdapter[BaseModel]] = ()) -> None:
        self._adapters: dict[str, VendorAdapter[BaseModel]] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(
        self, adapter: VendorAdapter[BaseModel], *, slug: str | None = None
    ) -> None:
        key = normalize_slug(slug or adapter.vendor.slug)
        if not key:
            raise ValueError("Adapter slug must not be blank")
        if key in self._adapters:
            raise ValueError(f"An adapter is already registered for '{key}'")
        self._adapters[key] = adapter

    def get(self, slug: str) -> VendorAdapter[BaseModel]:
        try:
            return self._adapters[normalize_slug(slug)]
        except KeyError:
            raise AdapterNotFoundError(normalize_slug(slug)) from None

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and normalize_slug(slug) in self._adapters

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._adapters))

    def __len__(self) -> int:
        return len(self._adapters)

    @property
    def slugs(self) -> tuple[str, ...]:
        return tuple(sorted(self._adapters))
