"""
Configuration management for the storage upgrade job.
"""

from dataclasses import dataclass
from typing import Optional

from constants import (
    DEFAULT_NAMESPACE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REBUILD_GRACE_PERIOD,
)


@dataclass
class UpgradeJobConfig:
    """Configuration for an upgrade job run."""

    release_name: str
    rest_endpoint: str
    namespace: str = DEFAULT_NAMESPACE
    umbrella_chart_dir: Optional[str] = None
    core_chart_dir: Optional[str] = None
    pod_name: Optional[str] = None
    restart_data_plane: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    rebuild_grace_period: float = DEFAULT_REBUILD_GRACE_PERIOD
    quiescence_timeout: Optional[float] = None  # None = wait forever
    verbose: bool = False

    @classmethod
    def from_args(cls, args) -> "UpgradeJobConfig":
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed argparse arguments

        Returns:
            UpgradeJobConfig instance
        """
        return cls(
            release_name=args.release_name,
            rest_endpoint=args.rest_endpoint,
            namespace=args.namespace,
            umbrella_chart_dir=args.umbrella_chart_dir,
            core_chart_dir=args.core_chart_dir,
            pod_name=args.pod_name,
            restart_data_plane=args.restart_data_plane,
            poll_interval=args.poll_interval,
            rebuild_grace_period=args.rebuild_grace_period,
            quiescence_timeout=args.quiescence_timeout or None,
            verbose=args.verbose,
        )
