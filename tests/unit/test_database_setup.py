"""Tests for D1 migrations/seed against a temporary config fragment."""

from __future__ import annotations

import json
import tomllib

import pytest

from branch_wrangler.bindings import ResourceKind
from branch_wrangler.errors import PostProvisionStepError
from branch_wrangler.providers import InMemoryResourceProvider
from branch_wrangler.provisioning import (
    TEMP_CONFIG_NAMES,
    ProvisionedResource,
    render_database_config,
    run_database_setup,
)

D1_ID = "4f3e1c2a-9b8d-4e7f-a6b5-c4d3e2f1a0b9"

DATABASE = ProvisionedResource(
    kind=ResourceKind.D1,
    binding_name="DB",
    name="my-app-db-x",
    identifier=D1_ID,
)


def _fragments(project_root):
    return [p for p in project_root.iterdir() if p.name.startswith(".branch-wrangler")]


def test_render_toml_fragment():
    text = render_database_config(
        "toml", binding_name="DB", database_name="my-app-db-x", database_id=D1_ID,
    )
    assert tomllib.loads(text) == {
        "d1_databases": [{"binding": "DB", "database_name": "my-app-db-x", "database_id": D1_ID}],
    }


def test_render_jsonc_fragment():
    text = render_database_config(
        "jsonc", binding_name="DB", database_name="my-app-db-x", database_id=D1_ID,
    )
    assert json.loads(text)["d1_databases"][0]["database_id"] == D1_ID


def test_noop_without_migrations_or_seed(project_root):
    provider = InMemoryResourceProvider()

    run_database_setup(provider, DATABASE, project_root=project_root, config_format="toml")

    assert provider.calls == []
    assert _fragments(project_root) == []


def test_migrations_then_seed(project_root):
    (project_root / "migrations").mkdir()
    (project_root / "seed.sql").write_text("SELECT 1;")
    provider = InMemoryResourceProvider()

    run_database_setup(provider, DATABASE, project_root=project_root, config_format="jsonc")

    assert [call[0] for call in provider.calls] == ["apply_migrations", "execute_sql_file"]
    _, database, sql_name, config_text = provider.calls[1]
    assert (database, sql_name) == ("my-app-db-x", "seed.sql")
    assert json.loads(config_text)["d1_databases"][0]["binding"] == "DB"
    assert _fragments(project_root) == []


def test_seed_only(project_root):
    (project_root / "seed.sql").write_text("SELECT 1;")
    provider = InMemoryResourceProvider()

    run_database_setup(provider, DATABASE, project_root=project_root, config_format="toml")

    assert [call[0] for call in provider.calls] == ["execute_sql_file"]


def test_fragment_removed_after_migration_failure(project_root):
    (project_root / "migrations").mkdir()
    (project_root / "seed.sql").write_text("SELECT 1;")
    provider = InMemoryResourceProvider(migrations_fail=True)

    with pytest.raises(PostProvisionStepError, match="Migration failed for my-app-db-x") as exc_info:
        run_database_setup(provider, DATABASE, project_root=project_root, config_format="toml")

    assert exc_info.value.step == "migrations"
    assert provider.calls_named("execute_sql_file") == []
    assert not (project_root / TEMP_CONFIG_NAMES["toml"]).exists()


def test_fragment_removed_after_seed_failure(project_root):
    (project_root / "seed.sql").write_text("SELECT 1;")
    provider = InMemoryResourceProvider(seed_fails=True)

    with pytest.raises(PostProvisionStepError, match="Seed failed for my-app-db-x"):
        run_database_setup(provider, DATABASE, project_root=project_root, config_format="jsonc")

    assert _fragments(project_root) == []
