"""Tests for binding extraction from parsed wrangler configs."""

from __future__ import annotations

import pytest

from branch_wrangler.bindings import (
    PROVISIONING_ORDER,
    Binding,
    BindingSet,
    ResourceKind,
    extract_bindings,
)
from branch_wrangler.errors import ConfigurationError


def test_extracts_all_three_kinds():
    config = {
        'd1_databases': [{'binding': 'DB', 'database_name': 'app-db', 'database_id': 'x'}],
        'r2_buckets': [{'binding': 'FILES', 'bucket_name': 'app-files'}],
        'kv_namespaces': [{'binding': 'CACHE', 'id': 'app-cache'}],
    }

    bindings = extract_bindings(config)

    assert bindings.d1 == (Binding('DB', 'app-db'),)
    assert bindings.r2 == (Binding('FILES', 'app-files'),)
    assert bindings.kv == (Binding('CACHE', 'app-cache'),)
    assert bindings.counts() == {'d1': 1, 'r2': 1, 'kv': 1}


def test_d1_falls_back_to_database_id():
    bindings = extract_bindings({'d1_databases': [{'binding': 'DB', 'database_id': 'legacy-db'}]})
    assert bindings.d1[0].resource_key == 'legacy-db'


def test_missing_sections_yield_empty_set():
    bindings = extract_bindings({'name': 'app'})
    assert bindings.is_empty
    assert bindings.counts() == {'d1': 0, 'r2': 0, 'kv': 0}


def test_items_follow_provisioning_order():
    bindings = extract_bindings({})
    assert [kind for kind, _ in bindings.items()] == list(PROVISIONING_ORDER)
    assert PROVISIONING_ORDER == (ResourceKind.D1, ResourceKind.R2, ResourceKind.KV)


def test_duplicate_binding_name_within_kind_rejected():
    config = {
        'r2_buckets': [
            {'binding': 'FILES', 'bucket_name': 'a'},
            {'binding': 'FILES', 'bucket_name': 'b'},
        ],
    }
    with pytest.raises(ConfigurationError, match='Duplicate R2 bucket binding'):
        extract_bindings(config)


def test_same_binding_name_across_kinds_allowed():
    bindings = BindingSet(
        d1=(Binding('DATA', 'db'),),
        kv=(Binding('DATA', 'ns'),),
    )
    assert bindings.for_kind(ResourceKind.D1)[0].binding_name == 'DATA'


def test_shared_resource_key_allowed():
    bindings = extract_bindings({
        'kv_namespaces': [
            {'binding': 'A', 'id': 'shared'},
            {'binding': 'B', 'id': 'shared'},
        ],
    })
    assert [b.resource_key for b in bindings.kv] == ['shared', 'shared']


@pytest.mark.parametrize(
    'config,message',
    [
        ({'d1_databases': [{'database_name': 'db'}]}, "missing 'binding'"),
        ({'r2_buckets': [{'binding': 'FILES'}]}, "'bucket_name'"),
        ({'kv_namespaces': [{'binding': 'CACHE'}]}, "'id'"),
        ({'kv_namespaces': ['not-a-table']}, 'must be a table'),
        ({'r2_buckets': {'binding': 'FILES'}}, 'must be a list'),
    ],
)
def test_malformed_entries_rejected(config, message):
    with pytest.raises(ConfigurationError, match=message):
        extract_bindings(config)


def test_kind_labels():
    assert ResourceKind.D1.label == 'D1 database'
    assert ResourceKind.R2.label == 'R2 bucket'
    assert ResourceKind.KV.label == 'KV namespace'
