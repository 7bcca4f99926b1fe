"""Branch name sanitization for Cloudflare resource naming.

Resource names are ``{base_name}{suffix}`` where the suffix is derived from
the git branch:

  - production branch -> ``""`` (resources keep their declared names)
  - any other branch  -> ``"-" + sanitize_branch_name(branch)``

Sanitized tokens are lowercase ``[a-z0-9-]``, at most 63 characters, with no
leading, trailing, or doubled hyphens.
"""

from __future__ import annotations

import re

DEFAULT_PRODUCTION_BRANCH = "main"
MAX_NAME_LENGTH = 63

_INVALID_CHARS_RE = re.compile(r"[^a-z0-9-]")
_DASH_RUN_RE = re.compile(r"-{2,}")


def sanitize_branch_name(branch: str) -> str:
    """Convert an arbitrary branch name into a resource-name-safe token.

    Never fails: any input yields a string of length 0-63. An empty result
    means nothing usable survived sanitization.
    """
    sanitized = _INVALID_CHARS_RE.sub("-", branch.lower())
    sanitized = _DASH_RUN_RE.sub("-", sanitized).strip("-")
    return sanitized[:MAX_NAME_LENGTH].rstrip("-")


def branch_suffix(branch: str, production_branch: str = DEFAULT_PRODUCTION_BRANCH) -> str:
    """Return the resource-name suffix for ``branch``, e.g. ``"-feature-x"``.

    Empty for the production branch, and empty when the branch sanitizes
    to nothing.
    """
    if is_production_branch(branch, production_branch):
        return ""
    sanitized = sanitize_branch_name(branch)
    return f"-{sanitized}" if sanitized else ""


def is_production_branch(branch: str, production_branch: str = DEFAULT_PRODUCTION_BRANCH) -> bool:
    return branch == production_branch
