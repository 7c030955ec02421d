"""Console entry point for the storage upgrade job."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
from typing import List

from clients import StorageRestClient, build_core_api
from config import UpgradeJobConfig
from constants import DEFAULT_NAMESPACE, DEFAULT_POLL_INTERVAL, DEFAULT_REBUILD_GRACE_PERIOD
from errors import UpgradeError
from events import JobEventRecorder, LogOnlyRecorder
from log_utils import setup_logging
from upgrader import run_upgrade
from validators import (
    validate_helm_chart_dirs,
    validate_helm_release,
    validate_helm_v3_in_path,
    validate_rest_endpoint,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Upgrade the storage control plane with Helm and, optionally, "
            "restart the data-plane pods one node at a time."
        )
    )
    parser.add_argument(
        "--release-name", required=True, help="Helm release to upgrade"
    )
    parser.add_argument(
        "--rest-endpoint",
        required=True,
        help="Storage REST API endpoint (e.g. http://api-rest:8081)",
    )
    parser.add_argument(
        "-n", "--namespace", default=DEFAULT_NAMESPACE, help="Release namespace"
    )
    parser.add_argument(
        "--umbrella-chart-dir", help="Directory of the umbrella Helm chart"
    )
    parser.add_argument(
        "--core-chart-dir",
        default=os.environ.get("CORE_CHART_DIR"),
        help="Directory of the core Helm chart (default: $CORE_CHART_DIR)",
    )
    parser.add_argument(
        "--pod-name",
        default=os.environ.get("POD_NAME"),
        help="Name of the pod running this job, used to record Events (default: $POD_NAME)",
    )
    parser.add_argument(
        "--restart-data-plane",
        action="store_true",
        help="Restart data-plane pods after the control-plane upgrade",
    )
    parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)
    parser.add_argument(
        "--rebuild-grace-period",
        type=float,
        default=DEFAULT_REBUILD_GRACE_PERIOD,
        help="Seconds to wait for rebuilds to start before checking for them",
    )
    parser.add_argument(
        "--quiescence-timeout",
        type=float,
        default=0,
        help="Give up waiting for drains/rebuilds/pods after this many seconds (0 = never)",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def validate(config: UpgradeJobConfig) -> None:
    """Fail fast on bad input before anything in the cluster is touched."""
    validate_rest_endpoint(config.rest_endpoint)
    validate_helm_v3_in_path()
    validate_helm_release(config.release_name, config.namespace)
    validate_helm_chart_dirs(config.umbrella_chart_dir, config.core_chart_dir)


def main(argv: List[str] | None = None) -> int:
    """CLI main for console_scripts entry point."""
    parser = build_parser()
    args = parser.parse_args(args=argv)

    setup_logging(verbose=args.verbose)
    config = UpgradeJobConfig.from_args(args)

    cancel_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: cancel_event.set())

    events = LogOnlyRecorder()
    try:
        validate(config)
        rest_client = StorageRestClient(config.rest_endpoint)
        core_api = build_core_api()
        if config.pod_name:
            events = JobEventRecorder.for_job_pod(
                core_api, config.pod_name, config.namespace
            )
        run_upgrade(config, core_api, rest_client, events, cancel_event=cancel_event)
    except UpgradeError as e:
        logger.error(f"Failed to upgrade: {e}")
        events.publish("UpgradeFailed", str(e), event_type="Warning")
        return 1

    logger.info("Upgrade completed successfully")
    return 0
