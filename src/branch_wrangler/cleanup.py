"""Cleanup of branch-specific resources.

Finds resources whose names are branch-suffixed descendants of the base
names declared in the wrangler config, and deletes them after confirmation.

Matching rules for a declared base name ``key``:
  - the remote name starts with ``key + "-"`` (the unsuffixed production
    resource named exactly ``key`` never matches);
  - with a branch filter, the remote name must equal
    ``key + "-" + sanitize_branch_name(filter)``.

Without a filter every non-production branch resource matches, not just the
current branch's.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .bindings import PROVISIONING_ORDER, BindingSet, ResourceKind
from .errors import ProviderError
from .naming import sanitize_branch_name
from .providers.base import RemoteResource, ResourceProvider

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]
CleanupCandidates = dict[ResourceKind, list[RemoteResource]]


@dataclass(slots=True)
class CleanupSummary:
    """Outcome counts of a cleanup run."""

    found: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0


def matches_branch_resource(name: str, base_name: str, filter_suffix: str | None = None) -> bool:
    """Return True if ``name`` is a branch descendant of ``base_name``."""
    if name == base_name or not name.startswith(f"{base_name}-"):
        return False
    if filter_suffix is not None and name != f"{base_name}{filter_suffix}":
        return False
    return True


def find_branch_resources(
    provider: ResourceProvider,
    bindings: BindingSet,
    branch_filter: str | None = None,
) -> CleanupCandidates:
    """List every kind and collect branch-suffixed descendants of declared names.

    A listing failure for a kind is logged and that kind yields no matches.
    """
    filter_suffix = f"-{sanitize_branch_name(branch_filter)}" if branch_filter else None
    candidates: CleanupCandidates = {kind: [] for kind in PROVISIONING_ORDER}

    for kind, group in bindings.items():
        if not group:
            continue
        try:
            remote = provider.list_resources(kind)
        except ProviderError as exc:
            logger.warning(
                "Failed to list %ss, skipping: %s",
                kind.label,
                exc,
                extra={"operation": "cleanup_scan", "kind": kind.value},
            )
            continue

        base_names = [b.resource_key for b in group]
        seen: set[str] = set()
        for resource in remote:
            if resource.name in seen:
                continue
            if any(matches_branch_resource(resource.name, base, filter_suffix) for base in base_names):
                candidates[kind].append(resource)
                seen.add(resource.name)

    return candidates


def describe_resource(resource: RemoteResource) -> str:
    if resource.kind is ResourceKind.R2:
        return resource.name
    return f"{resource.name} ({resource.identifier})"


def cleanup_branch_resources(
    provider: ResourceProvider,
    candidates: CleanupCandidates,
    *,
    auto_confirm: bool = False,
    confirm: ConfirmFn | None = None,
) -> CleanupSummary:
    """Delete matched resources, each independently.

    Unless ``auto_confirm`` is set, ``confirm`` is asked once per resource;
    a decline skips that resource. A failed delete is logged and the run
    continues with the next resource.
    """
    if not auto_confirm and confirm is None:
        raise ValueError("confirm is required unless auto_confirm is set")

    summary = CleanupSummary(found=sum(len(v) for v in candidates.values()))

    for kind in PROVISIONING_ORDER:
        for resource in candidates.get(kind, []):
            if not auto_confirm and not confirm(f'Delete {kind.label} "{resource.name}"?'):
                logger.info("  Skipped %s", resource.name)
                summary.skipped += 1
                continue

            try:
                logger.info("  Deleting %s: %s", kind.label, resource.name)
                provider.delete_resource(resource)
            except ProviderError as exc:
                logger.error(
                    "  Failed to delete %s %s: %s",
                    kind.label,
                    resource.name,
                    exc,
                    extra={"operation": "cleanup_delete", "resource_name": resource.name},
                )
                summary.failed += 1
                continue

            summary.deleted += 1

    return summary
