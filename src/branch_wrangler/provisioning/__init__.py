"""Branch resource provisioning."""

from .database_setup import (
    MIGRATIONS_DIR,
    SEED_FILE,
    TEMP_CONFIG_NAMES,
    render_database_config,
    run_database_setup,
    temporary_database_config,
)
from .models import ProvisionedResource, ProvisioningResult
from .provisioner import Provisioner

__all__ = [
    "MIGRATIONS_DIR",
    "SEED_FILE",
    "TEMP_CONFIG_NAMES",
    "ProvisionedResource",
    "ProvisioningResult",
    "Provisioner",
    "render_database_config",
    "run_database_setup",
    "temporary_database_config",
]
