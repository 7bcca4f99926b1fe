"""Publishing provisioned resources to a Pages project's preview bindings.

The PATCH body carries one binding-name-keyed map per kind. Each map is
built only from this run's provisioning result and replaces the remote map
wholesale: preview bindings not declared in the current config are dropped.
"""

from __future__ import annotations

import logging
from typing import Any

from .bindings import ResourceKind
from .errors import ConfigurationError
from .provisioning.models import ProvisionedResource, ProvisioningResult
from .providers.cloudflare_client import CloudflareClient

logger = logging.getLogger(__name__)

PREVIEW_ENVIRONMENT = "preview"

# Deployment-config section and value field per kind.
_PATCH_FIELDS: dict[ResourceKind, tuple[str, str]] = {
    ResourceKind.D1: ("d1_databases", "id"),
    ResourceKind.R2: ("r2_buckets", "name"),
    ResourceKind.KV: ("kv_namespaces", "namespace_id"),
}


def _binding_value(resource: ProvisionedResource) -> dict[str, str]:
    _, field_name = _PATCH_FIELDS[resource.kind]
    value = resource.name if resource.kind is ResourceKind.R2 else resource.identifier
    return {field_name: value}


def build_preview_patch(result: ProvisioningResult) -> dict[str, Any]:
    """Build the ``deployment_configs.preview`` PATCH body.

    Raises:
        ValueError: If a binding name appears twice within one kind.
    """
    preview: dict[str, dict[str, dict[str, str]]] = {}
    for kind, (section, _) in _PATCH_FIELDS.items():
        mapping: dict[str, dict[str, str]] = {}
        for resource in result.for_kind(kind):
            if resource.binding_name in mapping:
                raise ValueError(
                    f"Duplicate {kind.label} binding name in preview patch: "
                    f"{resource.binding_name!r}"
                )
            mapping[resource.binding_name] = _binding_value(resource)
        preview[section] = mapping
    return {"deployment_configs": {PREVIEW_ENVIRONMENT: preview}}


class BindingPublisher:
    """Points a Pages project's preview environment at branch resources."""

    def __init__(self, client: CloudflareClient) -> None:
        self._client = client

    def resolve_account_id(self, account_id: str | None = None) -> str:
        """Return ``account_id`` or derive it from the API token.

        Raises:
            ConfigurationError: If the token can see no accounts.
        """
        if account_id:
            return account_id
        accounts = self._client.fetch_account_ids(per_page=1)
        if not accounts:
            raise ConfigurationError("No accounts found for the provided API token")
        logger.info("Derived account id from API token: %s", accounts[0])
        return accounts[0]

    def publish(
        self,
        project_name: str,
        result: ProvisioningResult,
        *,
        account_id: str | None = None,
    ) -> dict[str, Any]:
        """Submit one PATCH with every kind's preview bindings.

        Raises:
            CloudflareAPIError: On transport failure or non-2xx status,
                with the upstream status and body attached.
        """
        payload = build_preview_patch(result)
        resolved_account = self.resolve_account_id(account_id)

        preview = payload["deployment_configs"][PREVIEW_ENVIRONMENT]
        logger.info(
            "Updating preview bindings for Pages project: %s",
            project_name,
            extra={
                "project_name": project_name,
                "d1_count": len(preview["d1_databases"]),
                "r2_count": len(preview["r2_buckets"]),
                "kv_count": len(preview["kv_namespaces"]),
            },
        )
        logger.info("  D1 databases: %d", len(preview["d1_databases"]))
        logger.info("  R2 buckets: %d", len(preview["r2_buckets"]))
        logger.info("  KV namespaces: %d", len(preview["kv_namespaces"]))

        response = self._client.patch_pages_project(resolved_account, project_name, payload)
        logger.info("Successfully updated preview bindings")
        return response
