"""
Unit tests for PodInventory.
"""

import unittest
from unittest.mock import MagicMock

from kubernetes.client.exceptions import ApiException

from errors import MissingNodeAssignment, MissingPodSpec, PodListError
from helpers import make_pod, pod_list
from inventory import PodInventory
from models import WorkloadInstance


class TestPodInventory(unittest.TestCase):
    """Test pod listing and node resolution."""

    def setUp(self):
        self.core_api = MagicMock()
        self.inventory = PodInventory(self.core_api, "mayastor")

    def test_list_instances(self):
        self.core_api.list_namespaced_pod.return_value = pod_list(
            make_pod("io-engine-a", node_name="node-1"),
            make_pod("io-engine-b", node_name="node-2", ready=False),
        )

        instances = self.inventory.list_instances("app=io-engine")

        self.core_api.list_namespaced_pod.assert_called_once_with(
            "mayastor", label_selector="app=io-engine"
        )
        self.assertEqual([i.name for i in instances], ["io-engine-a", "io-engine-b"])
        self.assertTrue(instances[0].is_ready())
        self.assertFalse(instances[1].is_ready())

    def test_list_instances_api_error(self):
        self.core_api.list_namespaced_pod.side_effect = ApiException(status=500)

        with self.assertRaises(PodListError) as ctx:
            self.inventory.list_instances("app=io-engine")

        self.assertEqual(ctx.exception.context["label"], "app=io-engine")
        self.assertEqual(ctx.exception.context["namespace"], "mayastor")

    def test_resolve_node(self):
        inst = WorkloadInstance.from_pod(make_pod("io-engine-a", node_name="node-7"))
        self.assertEqual(self.inventory.resolve_node(inst), "node-7")

    def test_resolve_node_unscheduled(self):
        inst = WorkloadInstance.from_pod(make_pod("io-engine-a", node_name=None))
        with self.assertRaises(MissingNodeAssignment):
            self.inventory.resolve_node(inst)

    def test_resolve_node_missing_spec(self):
        inst = WorkloadInstance.from_pod(make_pod("io-engine-a", with_spec=False))
        with self.assertRaises(MissingPodSpec):
            self.inventory.resolve_node(inst)


if __name__ == "__main__":
    unittest.main()
