"""ResourceProvider backed by the wrangler CLI.

Wrangler carries its own authentication (CLOUDFLARE_API_TOKEN in the
inherited environment), so every primitive here is a subprocess call.
Commands are run without a timeout; a hung wrangler blocks the run until
the surrounding CI job times out.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from ..bindings import ResourceKind
from ..errors import ProviderCommandError, ProviderError, ProviderOutputError
from ..settings import DEFAULT_WRANGLER_COMMAND
from .base import RemoteResource
from .output import parse_listing, parse_listing_text, scan_listing_text

logger = logging.getLogger(__name__)

_LIST_ARGS: dict[ResourceKind, tuple[str, ...]] = {
    ResourceKind.D1: ("d1", "list"),
    ResourceKind.R2: ("r2", "bucket", "list"),
    ResourceKind.KV: ("kv", "namespace", "list"),
}

_CREATE_ARGS: dict[ResourceKind, tuple[str, ...]] = {
    ResourceKind.D1: ("d1", "create"),
    ResourceKind.R2: ("r2", "bucket", "create"),
    ResourceKind.KV: ("kv", "namespace", "create"),
}


class WranglerCLIProvider:
    """Hybrid structured/text client over ``wrangler`` subcommands.

    Args:
        command: Wrangler invocation, e.g. ``("npx", "wrangler")``.
        account_id: Appended as ``--accountId`` to list/create/delete calls.
        cwd: Working directory for every command (the project root).
    """

    def __init__(
        self,
        *,
        command: Sequence[str] = DEFAULT_WRANGLER_COMMAND,
        account_id: str | None = None,
        cwd: Path | None = None,
    ) -> None:
        if not command:
            raise ValueError("command is required")
        self._command = tuple(command)
        self._account_id = account_id
        self._cwd = cwd

    # ------ helpers ------

    def _argv(self, *args: str, account_scoped: bool = True) -> list[str]:
        argv = [*self._command, *args]
        if account_scoped and self._account_id:
            argv.append(f"--accountId={self._account_id}")
        return argv

    def _run(self, argv: list[str], *, capture: bool = True) -> str:
        """Run a wrangler command; return stdout when captured.

        Raises:
            ProviderCommandError: On non-zero exit or a missing binary.
        """
        logger.debug("Running wrangler", extra={"argv": argv})
        try:
            result = subprocess.run(
                argv,
                cwd=self._cwd,
                capture_output=capture,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as exc:
            raise ProviderCommandError(argv, -1, f"command not found: {argv[0]}") from exc

        if result.returncode != 0:
            raise ProviderCommandError(argv, result.returncode, result.stderr or "")
        return result.stdout or ""

    # ------ discovery ------

    def _list(self, kind: ResourceKind) -> tuple[list[RemoteResource] | None, str]:
        """Return a decoded listing, or ``(None, raw_text)`` when only text is available.

        Raises:
            ProviderCommandError: If the plain listing command fails too.
        """
        try:
            output = self._run(self._argv(*_LIST_ARGS[kind], "--json"))
            return parse_listing(output, kind), output
        except ProviderError as exc:
            # Not every wrangler release accepts --json for every listing.
            logger.debug(
                "Structured listing failed, falling back to text",
                extra={"kind": kind.value, "error": str(exc)[:200]},
            )

        output = self._run(self._argv(*_LIST_ARGS[kind]))
        try:
            return parse_listing(output, kind), output
        except ProviderOutputError:
            return None, output

    def list_resources(self, kind: ResourceKind) -> list[RemoteResource]:
        resources, text = self._list(kind)
        return resources if resources is not None else parse_listing_text(text, kind)

    def find_resource(self, kind: ResourceKind, name: str) -> RemoteResource | None:
        """Look up ``name`` exactly; table output is scanned token-wise."""
        resources, text = self._list(kind)
        if resources is not None:
            return next((r for r in resources if r.name == name), None)
        return scan_listing_text(text, kind, name)

    # ------ lifecycle ------

    def create_resource(self, kind: ResourceKind, name: str) -> str:
        output = self._run(self._argv(*_CREATE_ARGS[kind], name))
        if output.strip():
            logger.info(output.rstrip())
        return output

    def delete_resource(self, resource: RemoteResource) -> None:
        if resource.kind is ResourceKind.D1:
            argv = self._argv("d1", "delete", resource.name, "-y")
        elif resource.kind is ResourceKind.R2:
            argv = self._argv("r2", "bucket", "delete", resource.name)
        else:
            argv = self._argv("kv", "namespace", "delete", f"--namespace-id={resource.identifier}")
        self._run(argv, capture=False)

    # ------ D1 setup steps ------

    def apply_migrations(self, database_name: str, config_path: Path) -> None:
        argv = self._argv(
            "d1", "migrations", "apply", database_name,
            "--remote", f"--config={config_path}",
            account_scoped=False,
        )
        self._run(argv, capture=False)

    def execute_sql_file(self, database_name: str, sql_file: Path, config_path: Path) -> None:
        argv = self._argv(
            "d1", "execute", database_name,
            "--remote", f"--file={sql_file}", f"--config={config_path}",
            account_scoped=False,
        )
        self._run(argv, capture=False)
