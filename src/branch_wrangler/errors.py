"""Error hierarchy for branch provisioning and cleanup.

These errors stay small and dependency-free so they can cross module
boundaries without leaking subprocess or httpx objects (or the API token).
"""

from __future__ import annotations

from typing import Sequence


class BranchWranglerError(Exception):
    """Base class for every fatal error raised by this package."""


class ConfigurationError(BranchWranglerError, ValueError):
    """Configuration is missing or invalid. Raised before any provider call."""


# ── Provider (wrangler CLI) errors ──────────────────────────────────


class ProviderError(BranchWranglerError):
    """A provider primitive failed or returned output we cannot use."""


class ProviderCommandError(ProviderError):
    """A wrangler command exited non-zero or could not be started.

    Attributes:
        argv: The command line that was run.
        return_code: Process exit code (-1 when the binary was not found).
        stderr: Captured standard error, if any.
    """

    def __init__(
        self,
        argv: Sequence[str],
        return_code: int,
        stderr: str = "",
    ) -> None:
        self.argv = list(argv)
        self.return_code = return_code
        self.stderr = stderr
        detail = stderr.strip()[:200] or "(no output)"
        super().__init__(
            f"Command failed (exit {return_code}): {' '.join(self.argv)}: {detail}"
        )


class ProviderOutputError(ProviderError):
    """Provider output could not be decoded."""


# ── Provisioning errors ─────────────────────────────────────────────


class ProvisioningError(BranchWranglerError):
    """Base class for fatal provisioning failures."""

    def __init__(self, resource_name: str, message: str) -> None:
        self.resource_name = resource_name
        super().__init__(message)


class ResourceCreationError(ProvisioningError):
    """The provider's create primitive failed."""


class IdentifierNotFoundError(ProvisioningError):
    """A resource was created but its identifier could not be recovered."""


class PostProvisionStepError(ProvisioningError):
    """A migration or seed step failed for a branch database."""

    def __init__(self, resource_name: str, step: str, message: str) -> None:
        self.step = step
        super().__init__(resource_name, message)


# ── Cloudflare API errors ───────────────────────────────────────────


class CloudflareAPIError(BranchWranglerError):
    """HTTP error (or transport failure) from the Cloudflare REST API.

    ``status_code`` is 0 for transport failures. ``response_body`` is the
    raw upstream body, surfaced verbatim.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        *,
        response_body: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        text = f"Cloudflare API error {status_code}: {message}"
        if response_body:
            text = f"{text}\nResponse body: {response_body}"
        super().__init__(text)
