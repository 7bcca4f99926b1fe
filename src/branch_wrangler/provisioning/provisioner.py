"""Discover-or-create provisioning of branch resources.

For every declared binding the provisioner:
  1. Computes the target name ``{resource_key}{suffix}``.
  2. Looks the name up in the provider's live inventory. A failed lookup
     counts as "not found"; a duplicate create is the accepted cost.
  3. Reuses the existing resource, or creates it and recovers its id from
     the create output (falling back to a second lookup).
  4. For D1 databases, applies migrations / seed.sql when present.

There is no local ledger: idempotency comes from re-querying the provider
on every run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..bindings import Binding, BindingSet, ResourceKind
from ..errors import (
    IdentifierNotFoundError,
    ProviderError,
    ResourceCreationError,
)
from ..providers.base import RemoteResource, ResourceProvider
from ..providers.output import extract_identifier
from ..wrangler_config import ConfigFormat
from .database_setup import run_database_setup
from .models import ProvisionedResource, ProvisioningResult

logger = logging.getLogger(__name__)


class Provisioner:
    """Ensures a branch-suffixed resource exists for each declared binding."""

    def __init__(
        self,
        provider: ResourceProvider,
        *,
        project_root: Path,
        config_format: ConfigFormat = "toml",
    ) -> None:
        self._provider = provider
        self._project_root = project_root
        self._config_format: ConfigFormat = config_format

    def provision_all(self, bindings: BindingSet, suffix: str) -> ProvisioningResult:
        """Provision every binding, kinds in order D1, R2, KV.

        Raises:
            ProvisioningError: On the first fatal failure. Resources created
                before the failure are left in place for the next run.
        """
        result = ProvisioningResult()
        for kind, group in bindings.items():
            for binding in group:
                result.add(self.provision(kind, binding, suffix))
        return result

    def provision(self, kind: ResourceKind, binding: Binding, suffix: str) -> ProvisionedResource:
        target = f"{binding.resource_key}{suffix}"
        logger.info(
            "Provisioning %s: %s",
            kind.label,
            target,
            extra={"kind": kind.value, "resource_name": target, "binding": binding.binding_name},
        )

        existing = self._discover(kind, target)
        if existing is not None:
            logger.info("  %s already exists: %s (%s)", kind.label, target, existing.identifier)
            resource = ProvisionedResource(
                kind=kind,
                binding_name=binding.binding_name,
                name=target,
                identifier=existing.identifier,
            )
        else:
            resource = ProvisionedResource(
                kind=kind,
                binding_name=binding.binding_name,
                name=target,
                identifier=self._create(kind, target),
                created=True,
            )
            logger.info("  Created %s: %s (%s)", kind.label, target, resource.identifier)

        if kind is ResourceKind.D1:
            run_database_setup(
                self._provider,
                resource,
                project_root=self._project_root,
                config_format=self._config_format,
            )
        return resource

    # ── Private helpers ─────────────────────────────────────────────

    def _discover(self, kind: ResourceKind, name: str) -> RemoteResource | None:
        try:
            return self._provider.find_resource(kind, name)
        except ProviderError as exc:
            logger.warning(
                "  Could not list %ss, treating %s as missing: %s",
                kind.label,
                name,
                exc,
                extra={"kind": kind.value, "resource_name": name},
            )
            return None

    def _create(self, kind: ResourceKind, name: str) -> str:
        logger.info("  Creating new %s: %s", kind.label, name)
        try:
            output = self._provider.create_resource(kind, name)
        except ProviderError as exc:
            raise ResourceCreationError(name, f"Failed to create {kind.label} {name}: {exc}") from exc

        if kind is ResourceKind.R2:
            return name

        identifier = extract_identifier(output, kind)
        if identifier:
            return identifier

        logger.info("  No id in create output for %s, re-listing", name)
        found = self._discover(kind, name)
        if found is not None:
            return found.identifier

        raise IdentifierNotFoundError(name, f"Failed to retrieve {kind.label} id for {name}")
