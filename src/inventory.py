"""
Pod inventory: lists pods by label and resolves the node each one runs on.
"""

import logging
from typing import List, Optional

from kubernetes.client.exceptions import ApiException

from errors import MissingNodeAssignment, MissingPodSpec, PodListError
from models import WorkloadInstance

logger = logging.getLogger(__name__)


class PodInventory:
    """Namespace-scoped pod lookups against the Kubernetes API."""

    def __init__(self, core_api, namespace: str):
        self.core_api = core_api
        self.namespace = namespace

    def list_instances(
        self, selector: str, namespace: Optional[str] = None
    ) -> List[WorkloadInstance]:
        """
        List pods matching a label selector, in `namespace` if given, else in
        the inventory's own namespace.

        Raises:
            PodListError: If the API call fails
        """
        namespace = namespace or self.namespace
        try:
            pods = self.core_api.list_namespaced_pod(
                namespace, label_selector=selector
            )
        except ApiException as e:
            raise PodListError(selector, namespace) from e

        instances = [WorkloadInstance.from_pod(pod) for pod in pods.items]
        logger.debug(
            f"Found {len(instances)} pod(s) with label {selector} in {namespace}"
        )
        return instances

    def resolve_node(self, instance: WorkloadInstance) -> str:
        """
        Return the name of the node the pod is scheduled on.

        Raises:
            MissingPodSpec: The pod record has no spec
            MissingNodeAssignment: The pod has not been scheduled
        """
        if not instance.has_spec:
            raise MissingPodSpec(instance.name, instance.namespace)
        if not instance.node_name:
            raise MissingNodeAssignment(instance.name, instance.namespace)
        return instance.node_name
