"""Run configuration for cf-branch-wrangler.

Settings is the single configuration object passed into every component.
It is a plain frozen dataclass so tests can construct it without touching
os.environ; only ``Settings.from_env`` reads the process environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .naming import DEFAULT_PRODUCTION_BRANCH

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_WRANGLER_COMMAND = ("npx", "wrangler")


@dataclass(frozen=True, slots=True)
class Settings:
    """Configuration for one provisioning or cleanup invocation."""

    # ── Credentials / identity ─────────────────────────────────────
    api_token: str = ""
    """Cloudflare API bearer token. Never log this."""

    account_id: str | None = None
    """Cloudflare account id. Derived from the API token when unset."""

    project_name: str | None = None
    """Pages project name. Derived from the wrangler config ``name`` when unset."""

    # ── Branch ─────────────────────────────────────────────────────
    branch: str = ""
    """Branch being deployed (set by Pages CI as CF_PAGES_BRANCH)."""

    production_branch: str = DEFAULT_PRODUCTION_BRANCH

    # ── Tooling ────────────────────────────────────────────────────
    project_root: Path = field(default_factory=Path.cwd)
    """Directory holding the wrangler config, migrations/, and seed.sql."""

    wrangler_command: tuple[str, ...] = DEFAULT_WRANGLER_COMMAND
    api_base_url: str = DEFAULT_API_BASE_URL

    # ── Logging ────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"
    """``console`` for human-readable output or ``json`` for JSON lines."""

    def validate_for_provision(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if not self.api_token:
            errors.append("CLOUDFLARE_API_TOKEN is required")
        if not self.branch:
            errors.append("CF_PAGES_BRANCH is required")
        if not self.wrangler_command:
            errors.append("WRANGLER_COMMAND must not be empty")
        return errors

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        project_root: Path | None = None,
    ) -> Settings:
        """Build settings from environment variables.

        This is a convenience factory for CLI use. Tests should construct
        Settings directly.
        """
        if env is None:
            env = dict(os.environ)

        wrangler_raw = env.get("WRANGLER_COMMAND", "").strip()
        wrangler_command = tuple(wrangler_raw.split()) if wrangler_raw else DEFAULT_WRANGLER_COMMAND

        return cls(
            api_token=env.get("CLOUDFLARE_API_TOKEN", "").strip(),
            account_id=env.get("CLOUDFLARE_ACCOUNT_ID", "").strip() or None,
            project_name=env.get("CF_PAGES_PROJECT_NAME", "").strip() or None,
            branch=env.get("CF_PAGES_BRANCH", ""),
            production_branch=env.get("CF_PAGES_PRODUCTION_BRANCH", "") or DEFAULT_PRODUCTION_BRANCH,
            project_root=project_root or Path.cwd(),
            wrangler_command=wrangler_command,
            api_base_url=env.get("CLOUDFLARE_API_BASE_URL", "").strip() or DEFAULT_API_BASE_URL,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "console").strip().lower() or "console",
        )
