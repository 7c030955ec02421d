"""
Cordon and drain control for storage nodes.
"""

import logging

from constants import DRAIN_FOR_UPGRADE
from errors import (
    DrainRequestFailed,
    EmptyStorageNodeSpec,
    RestRequestError,
    StorageNodeGetError,
    StorageNodeListError,
    UncordonRequestFailed,
)
from models import NodeDrainState

logger = logging.getLogger(__name__)


def _drain_state(node: dict) -> NodeDrainState:
    spec = node.get("spec")
    if spec is None:
        raise EmptyStorageNodeSpec(node.get("id", ""))
    return NodeDrainState.from_spec(spec)


class DrainCoordinator:
    """Issues drain/uncordon requests and reads drain state. Nothing is cached."""

    def __init__(self, rest_client, label: str = DRAIN_FOR_UPGRADE):
        self.rest = rest_client
        self.label = label

    def is_cordoned(self, node_name: str) -> bool:
        try:
            node = self.rest.get_node(node_name)
        except RestRequestError as e:
            raise StorageNodeGetError(node_name) from e
        return _drain_state(node) is NodeDrainState.CORDONED

    def drain(self, node_name: str) -> None:
        try:
            self.rest.put_node_drain(node_name, self.label)
        except RestRequestError as e:
            raise DrainRequestFailed(node_name) from e
        logger.info(f"Drain started for node {node_name}")

    def uncordon(self, node_name: str) -> None:
        try:
            self.rest.delete_node_cordon(node_name, self.label)
        except RestRequestError as e:
            raise UncordonRequestFailed(node_name) from e
        logger.info(f"Storage node {node_name} is uncordoned")

    def is_draining(self) -> bool:
        """True if any node in the cluster is still draining."""
        try:
            nodes = self.rest.get_nodes()
        except RestRequestError as e:
            raise StorageNodeListError() from e

        for node in nodes:
            if _drain_state(node) is NodeDrainState.DRAINING:
                logger.debug(f"Node {node.get('id')} is draining")
                return True
        return False
