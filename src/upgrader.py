"""
Upgrade logic: control-plane chart upgrade followed by a controlled,
one-node-at-a-time restart of the storage data-plane pods.
"""

import logging
import threading
import time
from datetime import datetime
from typing import List, Optional

from config import UpgradeJobConfig
from constants import IO_ENGINE_LABEL
from drain import DrainCoordinator
from health import ClusterHealthVerifier
from helm import HelmClient, HelmUpgrade
from inventory import PodInventory
from models import NodeUpgradeResult, UpgradeStep, WorkloadInstance
from rebuild import RebuildGuard
from replacer import PodReplacer
from waiter import QuiescenceWaiter

logger = logging.getLogger(__name__)


class DataPlaneUpgrader:
    """
    Restarts every data-plane pod, one node at a time.

    For each pod: record whether its node was already cordoned, drain the
    node, wait until no node in the cluster is draining and no volume is
    rebuilding, delete the pod, uncordon the node unless an operator had
    cordoned it beforehand, wait for the replacement pod to be ready and
    check the control plane. A second node is never disrupted while a drain
    or rebuild is in flight. The first error aborts the whole run.
    """

    def __init__(
        self,
        namespace: str,
        inventory: PodInventory,
        drain: DrainCoordinator,
        rebuild: RebuildGuard,
        replacer: PodReplacer,
        health: ClusterHealthVerifier,
        waiter: QuiescenceWaiter,
        poll_interval: float = 10.0,
        rebuild_grace_period: float = 60.0,
        selector: str = IO_ENGINE_LABEL,
        events=None,
    ):
        self.namespace = namespace
        self.inventory = inventory
        self.drain = drain
        self.rebuild = rebuild
        self.replacer = replacer
        self.health = health
        self.waiter = waiter
        self.poll_interval = poll_interval
        self.rebuild_grace_period = rebuild_grace_period
        self.selector = selector
        self.events = events

        self.run_start_time: Optional[float] = None
        self.run_end_time: Optional[float] = None
        self.results: List[NodeUpgradeResult] = []

    def run(self) -> List[NodeUpgradeResult]:
        """
        Upgrade every data-plane pod found at start.

        Returns:
            Per-node results, all in the DONE step

        Raises:
            UpgradeError: The first failure, after the partial report is logged
        """
        self.run_start_time = time.time()
        self.results = []

        logger.info("=" * 70)
        logger.info("Data-plane rolling restart")
        logger.info("=" * 70)
        logger.info(f"Namespace: {self.namespace}")
        logger.info(f"Pod selector: {self.selector}")
        logger.info(f"Poll interval: {self.poll_interval}s")
        logger.info(f"Rebuild grace period: {self.rebuild_grace_period}s")
        logger.info(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 70)

        instances = self.inventory.list_instances(self.selector)
        logger.info(f"Found {len(instances)} data-plane pod(s)")

        # Every pod must be scheduled before any node is disrupted.
        plan = [(inst, self.inventory.resolve_node(inst)) for inst in instances]
        for inst, node in plan:
            try:
                self.upgrade_node(inst, node)
            except Exception:
                self.run_end_time = time.time()
                failed = self.results[-1]
                logger.error(
                    f"✗ Data-plane upgrade stopped on node {node} "
                    f"(pod {failed.pod_name}, step {failed.step.value}): "
                    f"{failed.error_message}"
                )
                raise

        self.run_end_time = time.time()
        self._print_report()
        return self.results

    def _enter(self, result: NodeUpgradeResult, step: UpgradeStep) -> None:
        result.step = step
        logger.debug(f"[{result.node_name or result.pod_name}] {step.value}")

    def upgrade_node(
        self, instance: WorkloadInstance, node: Optional[str] = None
    ) -> NodeUpgradeResult:
        result = NodeUpgradeResult(pod_name=instance.name, start_time=time.time())
        self.results.append(result)
        try:
            self._upgrade_node(instance, node, result)
        except Exception as e:
            result.error_message = str(e)
            raise
        finally:
            result.end_time = time.time()
            result.duration_seconds = result.end_time - result.start_time
        return result

    def _upgrade_node(
        self,
        instance: WorkloadInstance,
        node: Optional[str],
        result: NodeUpgradeResult,
    ) -> None:
        self._enter(result, UpgradeStep.START)
        if node is None:
            node = self.inventory.resolve_node(instance)
        result.node_name = node
        logger.info(f"Upgrade starting for data-plane pod {instance.name} on node {node}")

        self._enter(result, UpgradeStep.RECORD_CORDON_STATE)
        result.was_cordoned = self.drain.is_cordoned(node)
        if result.was_cordoned:
            logger.info(f"Node {node} is already cordoned; it will stay cordoned")

        self._enter(result, UpgradeStep.DRAIN)
        self.drain.drain(node)

        self._enter(result, UpgradeStep.WAIT_DRAIN_QUIESCENT)
        self.waiter.wait(
            self.drain.is_draining,
            interval=self.poll_interval,
            description="node drains to complete",
        )

        self._enter(result, UpgradeStep.WAIT_REBUILD_QUIESCENT)
        self.waiter.wait(
            self.rebuild.is_rebuilding,
            interval=self.poll_interval,
            initial_delay=self.rebuild_grace_period,
            description="volume rebuilds to complete",
        )

        self._enter(result, UpgradeStep.REPLACE)
        self.replacer.replace(instance, node)

        self._enter(result, UpgradeStep.CONDITIONAL_UNCORDON)
        if not result.was_cordoned:
            self.drain.uncordon(node)
            result.uncordoned = True

        self._enter(result, UpgradeStep.WAIT_REPLACEMENT_READY)
        self.replacer.wait_ready(node, self.selector, interval=self.poll_interval)

        self._enter(result, UpgradeStep.VERIFY_CLUSTER_HEALTH)
        self.health.verify(self.namespace)

        self._enter(result, UpgradeStep.DONE)
        logger.info(f"✓ Data-plane pod on node {node} upgraded")
        if self.events is not None:
            self.events.publish(
                "DataPlaneNodeUpgraded", f"Data-plane pod on node {node} restarted"
            )

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            mins = int(seconds // 60)
            secs = seconds % 60
            return f"{mins}m {secs:.0f}s"
        else:
            hours = int(seconds // 3600)
            mins = int((seconds % 3600) // 60)
            secs = seconds % 60
            return f"{hours}h {mins}m {secs:.0f}s"

    def _print_report(self):
        """Print the per-node timing report of a completed run."""
        total_duration = self.run_end_time - self.run_start_time

        logger.info("")
        logger.info("=" * 70)
        logger.info("DATA-PLANE UPGRADE REPORT")
        logger.info("=" * 70)
        logger.info(f"Total duration:  {self._format_duration(total_duration)}")
        logger.info(
            f"Nodes done:      {sum(1 for r in self.results if r.step is UpgradeStep.DONE)}"
            f"/{len(self.results)}"
        )

        if self.results:
            logger.info("")
            logger.info(f"{'Node':<25} {'Pod':<30} {'Step':<24} {'Duration'}")
            logger.info("-" * 90)
            for r in self.results:
                duration_str = (
                    self._format_duration(r.duration_seconds)
                    if r.duration_seconds is not None
                    else "N/A"
                )
                logger.info(
                    f"{r.node_name or '?':<25} {r.pod_name:<30} {r.step.value:<24} {duration_str}"
                )
        logger.info("=" * 70)


def build_data_plane_upgrader(
    config: UpgradeJobConfig,
    core_api,
    rest_client,
    events=None,
    cancel_event: Optional[threading.Event] = None,
) -> DataPlaneUpgrader:
    """Wire the data-plane components around the two shared API clients."""
    waiter = QuiescenceWaiter(
        timeout=config.quiescence_timeout, cancel_event=cancel_event
    )
    inventory = PodInventory(core_api, config.namespace)
    return DataPlaneUpgrader(
        namespace=config.namespace,
        inventory=inventory,
        drain=DrainCoordinator(rest_client),
        rebuild=RebuildGuard(rest_client),
        replacer=PodReplacer(core_api, inventory, waiter),
        health=ClusterHealthVerifier(inventory),
        waiter=waiter,
        poll_interval=config.poll_interval,
        rebuild_grace_period=config.rebuild_grace_period,
        events=events,
    )


def run_upgrade(
    config: UpgradeJobConfig,
    core_api,
    rest_client,
    events,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """Upgrade the control plane with Helm, then optionally the data plane."""
    events.publish("UpgradeStarted", f"Upgrading release {config.release_name}")

    HelmUpgrade(config.release_name, HelmClient(config.namespace)).build().run(
        config.umbrella_chart_dir, config.core_chart_dir
    )
    events.publish("ControlPlaneUpgraded", "Helm upgrade of the control plane complete")

    if config.restart_data_plane:
        build_data_plane_upgrader(
            config, core_api, rest_client, events=events, cancel_event=cancel_event
        ).run()
    else:
        logger.info("Data-plane restart not requested; skipping")

    events.publish("UpgradeSucceeded", "Upgrade complete")
