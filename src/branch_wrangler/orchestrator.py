"""Run sequencing for the provision and cleanup modes.

Provision:
  settings -> wrangler config -> bindings -> production-branch check
  -> branch suffix -> discover-or-create per binding -> preview PATCH

Cleanup:
  wrangler config -> bindings -> find branch resources -> confirm -> delete

Cleanup needs no API token: every operation goes through wrangler, which
carries its own auth.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .bindings import PROVISIONING_ORDER
from .cleanup import (
    CleanupSummary,
    ConfirmFn,
    cleanup_branch_resources,
    describe_resource,
    find_branch_resources,
)
from .errors import ConfigurationError
from .naming import branch_suffix, is_production_branch
from .providers.base import ResourceProvider
from .providers.cloudflare_client import CloudflareClient
from .providers.wrangler import WranglerCLIProvider
from .provisioning.models import ProvisioningResult
from .provisioning.provisioner import Provisioner
from .publisher import BindingPublisher
from .settings import Settings
from .wrangler_config import WranglerConfig, load_wrangler_config

logger = logging.getLogger(__name__)


class ProvisionStatus(str, enum.Enum):
    PROVISIONED = "provisioned"
    SKIPPED_PRODUCTION = "skipped_production"
    SKIPPED_EMPTY_SUFFIX = "skipped_empty_suffix"


@dataclass(frozen=True, slots=True)
class ProvisionOutcome:
    status: ProvisionStatus
    project_name: str
    suffix: str = ""
    result: ProvisioningResult | None = None


def _default_provider(settings: Settings) -> WranglerCLIProvider:
    return WranglerCLIProvider(
        command=settings.wrangler_command,
        account_id=settings.account_id,
        cwd=settings.project_root,
    )


def _resolve_project_name(settings: Settings, config: WranglerConfig) -> str:
    if settings.project_name:
        return settings.project_name
    if config.project_name:
        logger.info("  Project name derived from %s: %s", config.path.name, config.project_name)
        return config.project_name
    raise ConfigurationError(
        f'CF_PAGES_PROJECT_NAME not set and no "name" field found in {config.path.name}. '
        "Please set CF_PAGES_PROJECT_NAME environment variable."
    )


def run_provision(
    settings: Settings,
    *,
    provider: ResourceProvider | None = None,
    client: CloudflareClient | None = None,
) -> ProvisionOutcome:
    """Provision branch resources and re-point the preview environment.

    Raises:
        ConfigurationError: Before any provider call, if configuration is
            missing or invalid.
        ProvisioningError: If a resource cannot be created or set up.
        CloudflareAPIError: If the preview PATCH (or account lookup) fails.
    """
    errors = settings.validate_for_provision()
    if errors:
        raise ConfigurationError("; ".join(errors))

    logger.info("Parsing wrangler config")
    config = load_wrangler_config(settings.project_root)
    project_name = _resolve_project_name(settings, config)
    bindings = config.bindings()

    logger.info("  Branch: %s", settings.branch)
    logger.info("  Production branch: %s", settings.production_branch)
    logger.info("  Project: %s", project_name)
    counts = bindings.counts()
    for kind in PROVISIONING_ORDER:
        logger.info("  Found %d %s bindings", counts[kind.value], kind.name)

    if is_production_branch(settings.branch, settings.production_branch):
        logger.info("Production branch detected, skipping provisioning")
        return ProvisionOutcome(ProvisionStatus.SKIPPED_PRODUCTION, project_name)

    suffix = branch_suffix(settings.branch, settings.production_branch)
    logger.info('Branch suffix: "%s"', suffix)
    if not suffix:
        logger.warning("Empty branch suffix generated, skipping provisioning")
        return ProvisionOutcome(ProvisionStatus.SKIPPED_EMPTY_SUFFIX, project_name)

    logger.info("Provisioning branch-specific resources")
    provisioner = Provisioner(
        provider or _default_provider(settings),
        project_root=settings.project_root,
        config_format=config.format,
    )
    result = provisioner.provision_all(bindings, suffix)

    if client is not None:
        BindingPublisher(client).publish(project_name, result, account_id=settings.account_id)
    else:
        with CloudflareClient(api_token=settings.api_token, base_url=settings.api_base_url) as owned:
            BindingPublisher(owned).publish(project_name, result, account_id=settings.account_id)

    return ProvisionOutcome(ProvisionStatus.PROVISIONED, project_name, suffix, result)


def run_cleanup(
    settings: Settings,
    *,
    auto_confirm: bool = False,
    branch_filter: str | None = None,
    confirm: ConfirmFn | None = None,
    provider: ResourceProvider | None = None,
) -> CleanupSummary:
    """Find and delete branch-specific resources declared in the wrangler config."""
    logger.info("Parsing wrangler config")
    config = load_wrangler_config(settings.project_root)
    bindings = config.bindings()
    if bindings.is_empty:
        logger.info("No D1, R2 or KV bindings declared in %s. Nothing to clean up.", config.path.name)
        return CleanupSummary()
    provider = provider or _default_provider(settings)

    filter_label = f' for branch "{branch_filter}"' if branch_filter else ""
    logger.info("Searching for branch-specific resources%s...", filter_label)
    candidates = find_branch_resources(provider, bindings, branch_filter)

    total = sum(len(v) for v in candidates.values())
    if total == 0:
        logger.info("No branch-specific resources found. Nothing to clean up.")
        return CleanupSummary()

    logger.info("Found %d branch-specific resource(s):", total)
    for kind in PROVISIONING_ORDER:
        if candidates[kind]:
            logger.info("  %ss:", kind.label)
            for resource in candidates[kind]:
                logger.info("    - %s", describe_resource(resource))

    return cleanup_branch_resources(
        provider,
        candidates,
        auto_confirm=auto_confirm,
        confirm=confirm,
    )
