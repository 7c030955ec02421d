"""
Unit tests for StorageRestClient and the Kubernetes client factory.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests
from kubernetes.config import ConfigException

from clients import StorageRestClient, build_core_api
from errors import KubeClientError, RestRequestError


def response(status_code=200, json_body=None, headers=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_body
    resp.headers = headers or {}
    resp.text = text
    return resp


class TestStorageRestClient(unittest.TestCase):
    """Test StorageRestClient REST API interactions."""

    def setUp(self):
        """Set up test fixtures."""
        self.session = MagicMock()
        self.client = StorageRestClient("http://api-rest:8081/", session=self.session)

    def test_client_initialization(self):
        """Test client is properly initialised."""
        self.assertEqual(self.client.endpoint, "http://api-rest:8081")
        self.assertEqual(self.client.timeout_s, 30)

    def test_url_construction(self):
        self.assertEqual(
            self.client._url("/nodes/node-1"), "http://api-rest:8081/v0/nodes/node-1"
        )

    def test_get_nodes(self):
        self.session.request.return_value = response(json_body=[{"id": "node-1"}])

        nodes = self.client.get_nodes()

        self.assertEqual(nodes, [{"id": "node-1"}])
        self.session.request.assert_called_once_with(
            "GET", "http://api-rest:8081/v0/nodes", timeout=30
        )

    def test_get_node(self):
        self.session.request.return_value = response(json_body={"id": "node-1"})
        self.assertEqual(self.client.get_node("node-1"), {"id": "node-1"})
        self.assertEqual(
            self.session.request.call_args.args,
            ("GET", "http://api-rest:8081/v0/nodes/node-1"),
        )

    def test_put_node_drain(self):
        self.session.request.return_value = response(status_code=204)
        self.client.put_node_drain("node-1", "drain-for-upgrade")
        self.assertEqual(
            self.session.request.call_args.args,
            ("PUT", "http://api-rest:8081/v0/nodes/node-1/drain/drain-for-upgrade"),
        )

    def test_delete_node_cordon(self):
        self.session.request.return_value = response(status_code=204)
        self.client.delete_node_cordon("node-1", "drain-for-upgrade")
        self.assertEqual(
            self.session.request.call_args.args,
            ("DELETE", "http://api-rest:8081/v0/nodes/node-1/cordon/drain-for-upgrade"),
        )

    def test_get_volumes_pagination_params(self):
        self.session.request.return_value = response(
            json_body={"entries": [], "next_token": 400}
        )

        page = self.client.get_volumes(200, 200)

        self.assertEqual(page["next_token"], 400)
        self.assertEqual(
            self.session.request.call_args.kwargs["params"],
            {"max_entries": 200, "starting_token": 200},
        )

    def test_client_error_raises(self):
        self.session.request.return_value = response(status_code=404, text="Not found")

        with self.assertRaises(RestRequestError) as ctx:
            self.client.get_node("node-9")

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(self.session.request.call_count, 1)

    def test_server_error_is_not_retried(self):
        self.session.request.side_effect = [
            response(status_code=503, text="unavailable"),
            response(json_body=[]),
        ]

        with self.assertRaises(RestRequestError) as ctx:
            self.client.get_nodes()

        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(self.session.request.call_count, 1)

    def test_connection_error_is_not_retried(self):
        self.session.request.side_effect = [
            requests.ConnectionError("refused"),
            response(json_body=[]),
        ]

        with self.assertRaises(RestRequestError) as ctx:
            self.client.get_nodes()

        self.assertIsNone(ctx.exception.status)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)
        self.assertEqual(self.session.request.call_count, 1)


class TestBuildCoreApi(unittest.TestCase):
    """Test Kubernetes client construction."""

    @patch("clients.k8s_client.CoreV1Api")
    @patch("clients.k8s_config")
    def test_in_cluster(self, mock_config, mock_core):
        build_core_api()
        mock_config.load_incluster_config.assert_called_once()
        mock_config.load_kube_config.assert_not_called()

    @patch("clients.k8s_client.CoreV1Api")
    @patch("clients.k8s_config.load_kube_config")
    @patch("clients.k8s_config.load_incluster_config")
    def test_falls_back_to_kubeconfig(self, mock_incluster, mock_kubeconfig, mock_core):
        mock_incluster.side_effect = ConfigException("not in cluster")

        build_core_api()

        mock_kubeconfig.assert_called_once()

    @patch("clients.k8s_client.CoreV1Api")
    @patch("clients.k8s_config.load_kube_config")
    @patch("clients.k8s_config.load_incluster_config")
    def test_no_configuration_available(self, mock_incluster, mock_kubeconfig, mock_core):
        mock_incluster.side_effect = ConfigException("not in cluster")
        mock_kubeconfig.side_effect = ConfigException("Invalid kube-config file. No configuration found.")

        with self.assertRaises(KubeClientError):
            build_core_api()

        mock_core.assert_not_called()


if __name__ == "__main__":
    unittest.main()
