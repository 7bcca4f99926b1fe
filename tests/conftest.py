"""Pytest configuration for cf-branch-wrangler tests."""
import sys
from pathlib import Path

# Add src/ to path for src-layout imports
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC = _PROJECT_ROOT / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from branch_wrangler.settings import Settings


@pytest.fixture
def project_root(tmp_path):
    """Create a temporary project root for testing."""
    root = tmp_path / 'project'
    root.mkdir()
    return root


@pytest.fixture
def wrangler_toml(project_root):
    """Project root with a wrangler.toml declaring one binding per kind."""
    (project_root / 'wrangler.toml').write_text(
        'name = "my-app"\n'
        '\n'
        '[[d1_databases]]\n'
        'binding = "DB"\n'
        'database_name = "my-app-db"\n'
        'database_id = "00000000-0000-0000-0000-000000000000"\n'
        '\n'
        '[[r2_buckets]]\n'
        'binding = "ASSETS"\n'
        'bucket_name = "my-app-assets"\n'
        '\n'
        '[[kv_namespaces]]\n'
        'binding = "CACHE"\n'
        'id = "my-app-cache"\n'
    )
    return project_root


@pytest.fixture
def settings(project_root):
    return Settings(
        api_token='test-cf-token',
        account_id='acc-123',
        branch='Release/2.0',
        production_branch='main',
        project_root=project_root,
        wrangler_command=('wrangler',),
    )
