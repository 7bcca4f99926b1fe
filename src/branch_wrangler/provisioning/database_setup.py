"""Migrations and seeding for branch D1 databases.

``wrangler d1 migrations apply`` resolves databases through a config file
and has no ``--database-id`` flag, so each step runs against a temporary
config fragment that binds only the branch database. The fragment lives
in the project root for the duration of one binding's setup and is removed
on every exit path.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..errors import PostProvisionStepError, ProviderError
from ..providers.base import ResourceProvider
from ..wrangler_config import ConfigFormat
from .models import ProvisionedResource

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = "migrations"
SEED_FILE = "seed.sql"

TEMP_CONFIG_NAMES: dict[str, str] = {
    "toml": ".branch-wrangler.toml",
    "jsonc": ".branch-wrangler.jsonc",
}


def render_database_config(
    config_format: ConfigFormat,
    *,
    binding_name: str,
    database_name: str,
    database_id: str,
) -> str:
    """Render a minimal wrangler config binding one D1 database."""
    if config_format == "jsonc":
        return json.dumps(
            {
                "d1_databases": [
                    {
                        "binding": binding_name,
                        "database_name": database_name,
                        "database_id": database_id,
                    }
                ]
            },
            indent=2,
        )
    # JSON string escaping is valid TOML basic-string escaping.
    return (
        "[[d1_databases]]\n"
        f"binding = {json.dumps(binding_name)}\n"
        f"database_name = {json.dumps(database_name)}\n"
        f"database_id = {json.dumps(database_id)}\n"
    )


@contextmanager
def temporary_database_config(
    project_root: Path,
    config_format: ConfigFormat,
    *,
    binding_name: str,
    database_name: str,
    database_id: str,
) -> Iterator[Path]:
    """Write the fragment, yield its path, and always remove it afterwards."""
    path = project_root / TEMP_CONFIG_NAMES[config_format]
    path.write_text(
        render_database_config(
            config_format,
            binding_name=binding_name,
            database_name=database_name,
            database_id=database_id,
        ),
        encoding="utf-8",
    )
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def needs_database_setup(project_root: Path) -> bool:
    return (project_root / MIGRATIONS_DIR).exists() or (project_root / SEED_FILE).exists()


def run_database_setup(
    provider: ResourceProvider,
    database: ProvisionedResource,
    *,
    project_root: Path,
    config_format: ConfigFormat,
) -> None:
    """Apply migrations and/or seed.sql to a branch database.

    No-op when the project has neither. Failures are fatal.

    Raises:
        PostProvisionStepError: If the migration or seed command fails.
    """
    migrations_dir = project_root / MIGRATIONS_DIR
    seed_file = project_root / SEED_FILE
    if not needs_database_setup(project_root):
        return

    with temporary_database_config(
        project_root,
        config_format,
        binding_name=database.binding_name,
        database_name=database.name,
        database_id=database.identifier,
    ) as config_path:
        if migrations_dir.exists():
            logger.info("  Running migrations for %s", database.name)
            try:
                provider.apply_migrations(database.name, config_path)
            except ProviderError as exc:
                raise PostProvisionStepError(
                    database.name, "migrations", f"Migration failed for {database.name}: {exc}",
                ) from exc

        if seed_file.exists():
            logger.info("  Running %s for %s", SEED_FILE, database.name)
            try:
                provider.execute_sql_file(database.name, seed_file, config_path)
            except ProviderError as exc:
                raise PostProvisionStepError(
                    database.name, "seed", f"Seed failed for {database.name}: {exc}",
                ) from exc
