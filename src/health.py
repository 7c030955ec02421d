"""
Control-plane health verification.
"""

import logging
from typing import Sequence, Tuple

from constants import CONTROL_PLANE_COMPONENTS
from errors import ComponentNotReady
from inventory import PodInventory

logger = logging.getLogger(__name__)


class ClusterHealthVerifier:
    """Checks that every pod of each control-plane component is Ready."""

    def __init__(
        self,
        inventory: PodInventory,
        components: Sequence[Tuple[str, str]] = CONTROL_PLANE_COMPONENTS,
    ):
        self.inventory = inventory
        self.components = components

    def verify(self, namespace: str) -> None:
        """
        Raise ComponentNotReady for the first component with a pod that is not
        Ready. Components after the failing one are not queried.
        """
        for component, selector in self.components:
            for inst in self.inventory.list_instances(selector, namespace=namespace):
                if inst.conditions.get("Ready") != "True":
                    logger.warning(
                        f"Couldn't verify the ready condition of {component} pod "
                        f"'{inst.name}' in namespace '{namespace}' to be true"
                    )
                    raise ComponentNotReady(component, inst.name, namespace)
            logger.info(f"✓ All {component} pods are ready")
