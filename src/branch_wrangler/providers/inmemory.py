"""In-memory ResourceProvider for tests and dry local runs."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Iterable

from ..bindings import ResourceKind
from ..errors import ProviderCommandError, ProviderOutputError
from .base import RemoteResource


class InMemoryResourceProvider:
    """Provider that keeps resources in dicts and records every call.

    Failure switches mimic wrangler misbehaving:
      - ``list_fails``: listing raises (treated as "not found" upstream).
      - ``create_fails``: create exits non-zero.
      - ``create_output``: literal create output, e.g. text without an id.
      - ``register_created``: False makes created resources invisible to
        later listings (identifier cannot be recovered).
      - ``delete_fails``: names whose deletion fails.
      - ``migrations_fail`` / ``seed_fails``: D1 setup steps fail.
    """

    def __init__(
        self,
        resources: Iterable[RemoteResource] = (),
        *,
        list_fails: bool = False,
        create_fails: bool = False,
        create_output: str | None = None,
        register_created: bool = True,
        delete_fails: Iterable[str] = (),
        migrations_fail: bool = False,
        seed_fails: bool = False,
    ) -> None:
        self.resources: dict[ResourceKind, dict[str, RemoteResource]] = {
            kind: {} for kind in ResourceKind
        }
        for resource in resources:
            self.resources[resource.kind][resource.name] = resource
        self.list_fails = list_fails
        self.create_fails = create_fails
        self.create_output = create_output
        self.register_created = register_created
        self.delete_fails = set(delete_fails)
        self.migrations_fail = migrations_fail
        self.seed_fails = seed_fails
        self.calls: list[tuple[str, ...]] = []

    def add(self, kind: ResourceKind, name: str, identifier: str | None = None) -> RemoteResource:
        resource = RemoteResource(kind=kind, name=name, identifier=identifier or name)
        self.resources[kind][name] = resource
        return resource

    def names(self, kind: ResourceKind) -> list[str]:
        return sorted(self.resources[kind])

    def calls_named(self, method: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == method]

    # ── ResourceProvider ────────────────────────────────────────────

    def list_resources(self, kind: ResourceKind) -> list[RemoteResource]:
        self.calls.append(("list_resources", kind.value))
        if self.list_fails:
            raise ProviderOutputError(f"{kind.label} listing unavailable")
        return list(self.resources[kind].values())

    def find_resource(self, kind: ResourceKind, name: str) -> RemoteResource | None:
        self.calls.append(("find_resource", kind.value, name))
        if self.list_fails:
            raise ProviderOutputError(f"{kind.label} listing unavailable")
        return self.resources[kind].get(name)

    def create_resource(self, kind: ResourceKind, name: str) -> str:
        self.calls.append(("create_resource", kind.value, name))
        if self.create_fails:
            raise ProviderCommandError(["wrangler", kind.value, "create", name], 1, "create failed")

        if kind is ResourceKind.D1:
            identifier = str(uuid.uuid4())
            output = (
                f"Successfully created DB '{name}'\n\n"
                f'[[d1_databases]]\nbinding = "DB"\ndatabase_name = "{name}"\n'
                f'database_id = "{identifier}"\n'
            )
        elif kind is ResourceKind.KV:
            identifier = uuid.uuid4().hex
            output = f'Success!\n[[kv_namespaces]]\nbinding = "{name}"\nid = "{identifier}"\n'
        else:
            identifier = name
            output = f"Created bucket '{name}' with default storage class of Standard.\n"

        if self.register_created:
            self.resources[kind][name] = RemoteResource(kind=kind, name=name, identifier=identifier)
        return self.create_output if self.create_output is not None else output

    def delete_resource(self, resource: RemoteResource) -> None:
        self.calls.append(("delete_resource", resource.kind.value, resource.name))
        if resource.name in self.delete_fails:
            raise ProviderCommandError(["wrangler", "delete", resource.name], 1, "delete failed")
        self.resources[resource.kind].pop(resource.name, None)

    def apply_migrations(self, database_name: str, config_path: Path) -> None:
        self.calls.append(("apply_migrations", database_name, config_path.read_text()))
        if self.migrations_fail:
            raise ProviderCommandError(["wrangler", "d1", "migrations", "apply"], 1, "migration failed")

    def execute_sql_file(self, database_name: str, sql_file: Path, config_path: Path) -> None:
        self.calls.append(("execute_sql_file", database_name, sql_file.name, config_path.read_text()))
        if self.seed_fails:
            raise ProviderCommandError(["wrangler", "d1", "execute"], 1, "seed failed")
