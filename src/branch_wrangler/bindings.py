"""Declared resource bindings, grouped by resource kind.

A binding maps a Worker/Pages binding name (``env.DB``) to the base name of
a concrete resource. Branch-specific resources are named
``{resource_key}{suffix}``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from .errors import ConfigurationError


class ResourceKind(str, enum.Enum):
    """Resource kinds, in provisioning order."""

    D1 = "d1"
    R2 = "r2"
    KV = "kv"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    ResourceKind.D1: "D1 database",
    ResourceKind.R2: "R2 bucket",
    ResourceKind.KV: "KV namespace",
}

PROVISIONING_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.D1,
    ResourceKind.R2,
    ResourceKind.KV,
)


@dataclass(frozen=True, slots=True)
class Binding:
    """One declared resource.

    ``resource_key`` is the database name, the bucket name, or (for KV) the
    ``id`` field, which doubles as the human-chosen namespace title.
    """

    binding_name: str
    resource_key: str


@dataclass(frozen=True, slots=True)
class BindingSet:
    """Declared bindings per kind. Binding names are unique within a kind."""

    d1: tuple[Binding, ...] = ()
    r2: tuple[Binding, ...] = ()
    kv: tuple[Binding, ...] = ()

    def __post_init__(self) -> None:
        for kind in PROVISIONING_ORDER:
            seen: set[str] = set()
            for binding in self.for_kind(kind):
                if binding.binding_name in seen:
                    raise ConfigurationError(
                        f"Duplicate {kind.label} binding name: {binding.binding_name!r}"
                    )
                seen.add(binding.binding_name)

    def for_kind(self, kind: ResourceKind) -> tuple[Binding, ...]:
        return getattr(self, kind.value)

    def items(self) -> Iterator[tuple[ResourceKind, tuple[Binding, ...]]]:
        for kind in PROVISIONING_ORDER:
            yield kind, self.for_kind(kind)

    def counts(self) -> dict[str, int]:
        return {kind.value: len(self.for_kind(kind)) for kind in PROVISIONING_ORDER}

    @property
    def is_empty(self) -> bool:
        return not (self.d1 or self.r2 or self.kv)


# Config section and key names per kind: (section, key fields in priority order).
_CONFIG_SECTIONS: dict[ResourceKind, tuple[str, tuple[str, ...]]] = {
    ResourceKind.D1: ("d1_databases", ("database_name", "database_id")),
    ResourceKind.R2: ("r2_buckets", ("bucket_name",)),
    ResourceKind.KV: ("kv_namespaces", ("id",)),
}


def extract_bindings(config: Mapping[str, Any]) -> BindingSet:
    """Extract D1, R2, and KV bindings from a parsed wrangler config.

    Raises:
        ConfigurationError: If an entry is malformed or a binding name is
            declared twice for the same kind.
    """
    grouped: dict[str, tuple[Binding, ...]] = {}
    for kind, (section, key_fields) in _CONFIG_SECTIONS.items():
        entries = config.get(section) or []
        if not isinstance(entries, list):
            raise ConfigurationError(f"{section} must be a list of tables")
        grouped[kind.value] = tuple(
            _binding_from_entry(section, index, entry, key_fields)
            for index, entry in enumerate(entries)
        )
    return BindingSet(**grouped)


def _binding_from_entry(
    section: str,
    index: int,
    entry: Any,
    key_fields: tuple[str, ...],
) -> Binding:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"{section}[{index}] must be a table")

    binding_name = str(entry.get("binding") or "").strip()
    if not binding_name:
        raise ConfigurationError(f"{section}[{index}] is missing 'binding'")

    resource_key = ""
    for key in key_fields:
        value = entry.get(key)
        if value:
            resource_key = str(value).strip()
            break
    if not resource_key:
        raise ConfigurationError(
            f"{section}[{index}] ({binding_name}) is missing "
            + " or ".join(repr(k) for k in key_fields)
        )

    return Binding(binding_name=binding_name, resource_key=resource_key)
