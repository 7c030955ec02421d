"""
Storage data-plane upgrade job.
"""

from clients import StorageRestClient, build_core_api
from config import UpgradeJobConfig
from log_utils import setup_logging
from models import NodeDrainState, NodeUpgradeResult, UpgradeStep, WorkloadInstance
from upgrader import DataPlaneUpgrader, run_upgrade

__all__ = [
    "StorageRestClient",
    "build_core_api",
    "UpgradeJobConfig",
    "setup_logging",
    "NodeDrainState",
    "NodeUpgradeResult",
    "UpgradeStep",
    "WorkloadInstance",
    "DataPlaneUpgrader",
    "run_upgrade",
]
