"""Value types produced by the provisioner and consumed by the publisher."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..bindings import PROVISIONING_ORDER, ResourceKind


@dataclass(frozen=True, slots=True)
class ProvisionedResource:
    """A branch resource that exists remotely.

    ``name`` is the branch-suffixed resource name; ``identifier`` is the
    provider id (equal to ``name`` for R2 buckets).
    """

    kind: ResourceKind
    binding_name: str
    name: str
    identifier: str
    created: bool = False


@dataclass(slots=True)
class ProvisioningResult:
    """Provisioned resources per kind, in declaration order."""

    d1: list[ProvisionedResource] = field(default_factory=list)
    r2: list[ProvisionedResource] = field(default_factory=list)
    kv: list[ProvisionedResource] = field(default_factory=list)

    def for_kind(self, kind: ResourceKind) -> list[ProvisionedResource]:
        return getattr(self, kind.value)

    def add(self, resource: ProvisionedResource) -> None:
        self.for_kind(resource.kind).append(resource)

    def all(self) -> list[ProvisionedResource]:
        return [r for kind in PROVISIONING_ORDER for r in self.for_kind(kind)]

    @property
    def created_count(self) -> int:
        return sum(1 for r in self.all() if r.created)
