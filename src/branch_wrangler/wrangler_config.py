"""Wrangler config discovery and parsing (wrangler.jsonc / wrangler.toml).

JSONC is parsed with ``json5``, which accepts the ``//`` and ``/* */``
comments and trailing commas that wrangler allows.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import json5

from .bindings import BindingSet, extract_bindings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ConfigFormat = Literal["toml", "jsonc"]

# Search order: newer JSON formats first, then TOML.
_CANDIDATES: tuple[tuple[str, ConfigFormat], ...] = (
    ("wrangler.jsonc", "jsonc"),
    ("wrangler.json", "jsonc"),
    ("wrangler.toml", "toml"),
)


@dataclass(frozen=True, slots=True)
class WranglerConfig:
    """A parsed wrangler config and where it came from."""

    data: dict[str, Any]
    format: ConfigFormat
    path: Path

    @property
    def project_name(self) -> str | None:
        name = self.data.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None

    def bindings(self) -> BindingSet:
        return extract_bindings(self.data)


def find_wrangler_config(project_root: Path) -> tuple[Path, ConfigFormat] | None:
    for filename, fmt in _CANDIDATES:
        candidate = project_root / filename
        if candidate.is_file():
            return candidate, fmt
    return None


def load_wrangler_config(project_root: Path) -> WranglerConfig:
    """Locate and parse the wrangler config in ``project_root``.

    Raises:
        ConfigurationError: If no config exists or it cannot be parsed.
    """
    found = find_wrangler_config(project_root)
    if found is None:
        raise ConfigurationError(
            "No wrangler config found. Expected wrangler.toml or wrangler.jsonc "
            f"in project root ({project_root})."
        )

    path, fmt = found
    try:
        text = path.read_text(encoding="utf-8")
        data = parse_jsonc(text) if fmt == "jsonc" else tomllib.loads(text)
    except ValueError as exc:
        # UnicodeDecodeError, TOMLDecodeError and json5 errors are all ValueErrors.
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a top-level object")

    logger.debug("Loaded wrangler config", extra={"path": str(path), "format": fmt})
    return WranglerConfig(data=data, format=fmt, path=path)


def parse_jsonc(text: str) -> Any:
    """Parse JSON with comments and trailing commas."""
    return json5.loads(text)
