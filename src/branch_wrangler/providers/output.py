"""Decoders for wrangler command output.

Wrangler's output changes between releases: some commands accept ``--json``,
``create`` prints either a TOML or a JSON config snippet, and older releases
print tables. Every decoder here tries the structured form first and falls
back to a pattern scan.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

from ..bindings import ResourceKind
from ..errors import ProviderOutputError
from .base import RemoteResource

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
HEX32_PATTERN = r"[0-9a-f]{32}"

_UUID_RE = re.compile(rf"(?<![0-9a-f-]){UUID_PATTERN}(?![0-9a-f-])")
_HEX32_RE = re.compile(rf"(?<![0-9a-f]){HEX32_PATTERN}(?![0-9a-f])")

# Config-snippet forms: database_id = "..." (TOML) or "database_id": "..." (JSON).
_SNIPPET_RES: dict[ResourceKind, re.Pattern[str]] = {
    ResourceKind.D1: re.compile(rf'"?database_id"?\s*[=:]\s*"({UUID_PATTERN})"'),
    ResourceKind.KV: re.compile(rf'(?<![\w-])"?id"?\s*[=:]\s*"({HEX32_PATTERN})"'),
}

_ID_PATTERNS: dict[ResourceKind, re.Pattern[str]] = {
    ResourceKind.D1: _UUID_RE,
    ResourceKind.KV: _HEX32_RE,
}

_R2_NAME_LINE_RE = re.compile(r"^\s*name:\s*(\S+)\s*$", re.MULTILINE)
_TABLE_CELL_SPLIT_RE = re.compile(r"[│|]")

# JSON field names per kind: (name fields, identifier fields).
_LISTING_FIELDS: dict[ResourceKind, tuple[tuple[str, ...], tuple[str, ...]]] = {
    ResourceKind.D1: (("name",), ("uuid", "database_id", "id")),
    ResourceKind.R2: (("name",), ("name",)),
    ResourceKind.KV: (("title", "name"), ("id",)),
}


def extract_identifier(output: str, kind: ResourceKind) -> str | None:
    """Extract the provider identifier from ``create`` output.

    Tries, in order: a JSON document, a ``key = "value"`` config snippet,
    then any identifier-shaped token (UUID for D1, 32-hex for KV). R2
    buckets have no separate identifier, so this returns None for R2.
    """
    pattern = _ID_PATTERNS.get(kind)
    if pattern is None or not output:
        return None

    decoded = _decode_json_fragment(output)
    if decoded is not None:
        _, id_fields = _LISTING_FIELDS[kind]
        for value in _find_values(decoded, id_fields):
            if isinstance(value, str) and pattern.fullmatch(value):
                return value

    snippet = _SNIPPET_RES[kind].search(output)
    if snippet:
        return snippet.group(1)

    match = pattern.search(output)
    return match.group(0) if match else None


def parse_listing(output: str, kind: ResourceKind) -> list[RemoteResource]:
    """Decode ``<kind> list --json`` output.

    Raises:
        ProviderOutputError: If the output is not a JSON list.
    """
    try:
        payload = json.loads(output)
    except ValueError as exc:
        raise ProviderOutputError(f"{kind.label} listing is not valid JSON: {exc}") from exc

    # Some wrangler releases wrap the list: {"buckets": [...]} / {"result": [...]}
    if isinstance(payload, dict):
        payload = next(
            (v for k, v in payload.items() if k in ("result", "buckets", "databases", "namespaces")),
            payload,
        )
    if not isinstance(payload, list):
        raise ProviderOutputError(
            f"Expected a list from {kind.label} listing, got {type(payload).__name__}"
        )

    name_fields, id_fields = _LISTING_FIELDS[kind]
    resources: list[RemoteResource] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        name = _first_str(entry, name_fields)
        identifier = _first_str(entry, id_fields)
        if name and identifier:
            resources.append(RemoteResource(kind=kind, name=name, identifier=identifier))
    return resources


def parse_listing_text(output: str, kind: ResourceKind) -> list[RemoteResource]:
    """Best-effort decode of human-readable listing output.

    R2 prints ``name: <bucket>`` blocks; D1 and KV print tables whose rows
    hold the identifier followed by the name.
    """
    if kind is ResourceKind.R2:
        return [
            RemoteResource(kind=kind, name=name, identifier=name)
            for name in _R2_NAME_LINE_RE.findall(output)
        ]

    id_pattern = _ID_PATTERNS[kind]
    resources: list[RemoteResource] = []
    for line in output.splitlines():
        cells = [c.strip() for c in _TABLE_CELL_SPLIT_RE.split(line) if c.strip()]
        for index, cell in enumerate(cells[:-1]):
            if id_pattern.fullmatch(cell):
                resources.append(RemoteResource(kind=kind, name=cells[index + 1], identifier=cell))
                break
    return resources


def scan_listing_text(output: str, kind: ResourceKind, name: str) -> RemoteResource | None:
    """Find ``name`` in human-readable (table) listing output.

    Matches ``name`` only as a whole token, so ``app-db`` does not match a
    line about ``app-db-feature``. For D1/KV the identifier must appear on
    the same line.
    """
    token_re = re.compile(rf"(?<![A-Za-z0-9_.-]){re.escape(name)}(?![A-Za-z0-9_.-])")
    id_pattern = _ID_PATTERNS.get(kind)

    for line in output.splitlines():
        if not token_re.search(line):
            continue
        if id_pattern is None:
            return RemoteResource(kind=kind, name=name, identifier=name)
        # Strip the name itself so a hex-looking name is not taken for its id.
        id_match = id_pattern.search(token_re.sub(" ", line))
        if id_match:
            return RemoteResource(kind=kind, name=name, identifier=id_match.group(0))
    return None


# ── Private helpers ─────────────────────────────────────────────────


def _decode_json_fragment(output: str) -> Any | None:
    """Decode ``output`` as JSON, or the outermost ``{...}`` block inside it."""
    text = output.strip()
    try:
        return json.loads(text)
    except ValueError:
        pass

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except ValueError:
        return None


def _find_values(obj: Any, keys: Iterable[str]) -> Iterable[Any]:
    """Yield values stored under any of ``keys``, searching depth-first."""
    keys = tuple(keys)
    if isinstance(obj, dict):
        for key in keys:
            if key in obj:
                yield obj[key]
        for value in obj.values():
            yield from _find_values(value, keys)
    elif isinstance(obj, list):
        for item in obj:
            yield from _find_values(item, keys)


def _first_str(entry: dict[str, Any], fields: tuple[str, ...]) -> str | None:
    for field_name in fields:
        value = entry.get(field_name)
        if isinstance(value, str) and value:
            return value
    return None
