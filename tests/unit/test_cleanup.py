"""Tests for branch resource cleanup."""

from __future__ import annotations

import pytest

from branch_wrangler.bindings import Binding, BindingSet, ResourceKind
from branch_wrangler.cleanup import (
    cleanup_branch_resources,
    find_branch_resources,
    matches_branch_resource,
)
from branch_wrangler.providers import InMemoryResourceProvider

KV_ID = "0f2ac74b498b48028cb68387c421e279"


def _bindings() -> BindingSet:
    return BindingSet(
        d1=(Binding("DB", "my-app-db"),),
        kv=(Binding("CACHE", "my-app-cache"),),
    )


def _make_provider(**kwargs) -> InMemoryResourceProvider:
    provider = InMemoryResourceProvider(**kwargs)
    for name in ("my-app-db", "my-app-db-foo", "my-app-db-foobar-x", "other-db-foo"):
        provider.add(ResourceKind.D1, name, f"id-{name}")
    provider.add(ResourceKind.KV, "my-app-cache-foo", KV_ID)
    provider.add(ResourceKind.R2, "my-app-assets-foo")
    return provider


def _names(candidates, kind):
    return [r.name for r in candidates[kind]]


class TestMatchesBranchResource:
    def test_production_name_never_matches(self):
        assert not matches_branch_resource("my-app-db", "my-app-db")

    def test_any_branch_without_filter(self):
        assert matches_branch_resource("my-app-db-foo", "my-app-db")
        assert matches_branch_resource("my-app-db-foobar-x", "my-app-db")

    def test_filter_requires_exact_suffix(self):
        assert matches_branch_resource("my-app-db-foo", "my-app-db", "-foo")
        assert not matches_branch_resource("my-app-db-foobar-x", "my-app-db", "-foo")

    def test_unrelated_prefix(self):
        assert not matches_branch_resource("my-app-dbx", "my-app-db")


class TestFindBranchResources:
    def test_without_filter(self):
        candidates = find_branch_resources(_make_provider(), _bindings())

        assert _names(candidates, ResourceKind.D1) == ["my-app-db-foo", "my-app-db-foobar-x"]
        assert _names(candidates, ResourceKind.KV) == ["my-app-cache-foo"]

    def test_with_filter_is_sanitized(self):
        candidates = find_branch_resources(_make_provider(), _bindings(), branch_filter="Foo")
        assert _names(candidates, ResourceKind.D1) == ["my-app-db-foo"]

    def test_undeclared_kinds_are_not_listed(self):
        provider = _make_provider()

        candidates = find_branch_resources(provider, _bindings())

        assert candidates[ResourceKind.R2] == []
        assert ("list_resources", "r2") not in provider.calls

    def test_listing_failure_yields_nothing(self):
        candidates = find_branch_resources(_make_provider(list_fails=True), _bindings())
        assert all(not found for found in candidates.values())


class TestCleanupBranchResources:
    def test_auto_confirm_deletes_everything(self):
        provider = _make_provider()
        candidates = find_branch_resources(provider, _bindings())

        summary = cleanup_branch_resources(provider, candidates, auto_confirm=True)

        assert (summary.found, summary.deleted, summary.skipped, summary.failed) == (3, 3, 0, 0)
        assert provider.names(ResourceKind.D1) == ["my-app-db", "other-db-foo"]
        assert provider.names(ResourceKind.KV) == []

    def test_declined_resources_are_skipped(self):
        provider = _make_provider()
        candidates = find_branch_resources(provider, _bindings())
        questions: list[str] = []

        def confirm(question: str) -> bool:
            questions.append(question)
            return "foobar" not in question

        summary = cleanup_branch_resources(provider, candidates, confirm=confirm)

        assert summary.deleted == 2
        assert summary.skipped == 1
        assert questions[0] == 'Delete D1 database "my-app-db-foo"?'
        assert "my-app-db-foobar-x" in provider.names(ResourceKind.D1)

    def test_failed_delete_does_not_stop_run(self):
        provider = _make_provider(delete_fails={"my-app-db-foo"})
        candidates = find_branch_resources(provider, _bindings())

        summary = cleanup_branch_resources(provider, candidates, auto_confirm=True)

        assert summary.failed == 1
        assert summary.deleted == 2
        assert provider.names(ResourceKind.KV) == []

    def test_confirm_required_without_auto_confirm(self):
        with pytest.raises(ValueError):
            cleanup_branch_resources(InMemoryResourceProvider(), {})
