"""Resource provider protocol for dependency injection.

The provisioner and the cleanup reconciler only talk to the platform through
this protocol. ``WranglerCLIProvider`` shells out to the wrangler CLI;
``InMemoryResourceProvider`` backs the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..bindings import ResourceKind


@dataclass(frozen=True, slots=True)
class RemoteResource:
    """One resource as reported by a provider listing.

    ``identifier`` is the provider-assigned id: a UUID for D1, a 32-hex
    namespace id for KV, and the bucket name itself for R2.
    """

    kind: ResourceKind
    name: str
    identifier: str


@runtime_checkable
class ResourceProvider(Protocol):
    """List/create/delete primitives per resource kind, plus D1 setup steps."""

    def list_resources(self, kind: ResourceKind) -> list[RemoteResource]:
        """Return every resource of ``kind``. Raises ProviderError on failure."""
        ...

    def find_resource(self, kind: ResourceKind, name: str) -> RemoteResource | None:
        """Return the resource named exactly ``name``, or None."""
        ...

    def create_resource(self, kind: ResourceKind, name: str) -> str:
        """Create a resource and return the raw command output."""
        ...

    def delete_resource(self, resource: RemoteResource) -> None: ...

    def apply_migrations(self, database_name: str, config_path: Path) -> None: ...

    def execute_sql_file(self, database_name: str, sql_file: Path, config_path: Path) -> None: ...
