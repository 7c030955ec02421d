"""
Data-plane pod replacement: delete the pod, then wait for its successor.
"""

import logging

from kubernetes.client.exceptions import ApiException

from constants import DEFAULT_POLL_INTERVAL
from errors import PodDeleteFailed
from inventory import PodInventory
from models import WorkloadInstance
from waiter import QuiescenceWaiter

logger = logging.getLogger(__name__)


class PodReplacer:
    """Deletes a pod so its controller recreates it, and waits for the new one."""

    def __init__(self, core_api, inventory: PodInventory, waiter: QuiescenceWaiter):
        self.core_api = core_api
        self.inventory = inventory
        self.waiter = waiter

    def replace(self, instance: WorkloadInstance, node_name: str) -> None:
        logger.info(f"Deleting pod {instance.name} on node {node_name}")
        try:
            self.core_api.delete_namespaced_pod(instance.name, instance.namespace)
        except ApiException as e:
            raise PodDeleteFailed(instance.name, node_name) from e

    def is_ready_on_node(self, node_name: str, selector: str) -> bool:
        """
        True if the node runs at least one matching pod and all of them are ready.

        A pod that is still terminating counts as not ready, so the old pod
        cannot be mistaken for its replacement.
        """
        on_node = [
            inst
            for inst in self.inventory.list_instances(selector)
            if self.inventory.resolve_node(inst) == node_name
        ]
        if not on_node:
            return False
        return all(inst.is_ready() for inst in on_node)

    def wait_ready(
        self,
        node_name: str,
        selector: str,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.waiter.wait(
            lambda: not self.is_ready_on_node(node_name, selector),
            interval=interval,
            description=f"pod with label {selector} on node {node_name} to be ready",
        )
        logger.info(f"Replacement pod on node {node_name} is ready")
