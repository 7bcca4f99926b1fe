"""Per-branch D1, R2, and KV provisioning for Cloudflare Pages preview deployments."""

from .bindings import Binding, BindingSet, ResourceKind, extract_bindings
from .naming import branch_suffix, is_production_branch, sanitize_branch_name
from .settings import Settings

__all__ = [
    "Binding",
    "BindingSet",
    "ResourceKind",
    "Settings",
    "branch_suffix",
    "extract_bindings",
    "is_production_branch",
    "sanitize_branch_name",
]
