"""
API clients: the storage control-plane REST API and the Kubernetes API.

Both are built once at startup and handed to every component that needs them.
"""

import logging
from typing import Dict, List, Optional

import requests
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config

from errors import KubeClientError, RestRequestError

logger = logging.getLogger(__name__)

API_VERSION = "v0"


class StorageRestClient:
    """
    REST client for the storage control plane (nodes, drain/cordon, volumes).

    Each call is a single attempt. Callers poll these reads to decide whether
    the cluster is quiescent, so a failed read has to surface immediately
    rather than be papered over by a retry.
    """

    def __init__(
        self,
        endpoint: str,
        timeout_s: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the storage REST client.

        Args:
            endpoint: Base URL of the REST service, e.g. http://api-rest:8081
            timeout_s: Request timeout in seconds
            session: Optional pre-built requests session
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        """Construct full API URL from path."""
        return f"{self.endpoint}/{API_VERSION}/{path.lstrip('/')}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Execute one HTTP request.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            The successful (2xx) response

        Raises:
            RestRequestError: On a transport error or a non-2xx status
        """
        method = method.upper()
        try:
            resp = self.session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"Request error on {method} {url}: {e}")
            raise RestRequestError(method, url, None, str(e)) from e

        if not 200 <= resp.status_code < 300:
            logger.warning(f"Error {resp.status_code} on {method} {url}")
            raise RestRequestError(method, url, resp.status_code, resp.text)

        return resp

    def get_nodes(self) -> List[Dict]:
        """List all storage nodes."""
        return self._request("GET", self._url("nodes")).json()

    def get_node(self, node_id: str) -> Dict:
        """Get a single storage node."""
        return self._request("GET", self._url(f"nodes/{node_id}")).json()

    def put_node_drain(self, node_id: str, label: str) -> None:
        """Start draining a node. The drain is tagged with `label`."""
        self._request("PUT", self._url(f"nodes/{node_id}/drain/{label}"))

    def delete_node_cordon(self, node_id: str, label: str) -> None:
        """Remove the cordon tagged with `label` from a node."""
        self._request("DELETE", self._url(f"nodes/{node_id}/cordon/{label}"))

    def get_volumes(self, max_entries: int, starting_token: int) -> Dict:
        """
        Get one page of volumes.

        Returns:
            Dictionary with 'entries' and, unless this is the last page,
            'next_token'
        """
        params = {"max_entries": max_entries, "starting_token": starting_token}
        return self._request("GET", self._url("volumes"), params=params).json()


def build_core_api() -> k8s_client.CoreV1Api:
    """
    Build a Kubernetes CoreV1Api client.

    Uses the in-cluster service account when running as a Job, falling back to
    the local kubeconfig.

    Raises:
        KubeClientError: Neither configuration could be loaded
    """
    try:
        k8s_config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
        except (k8s_config.ConfigException, OSError) as e:
            raise KubeClientError(str(e)) from e
        logger.debug("Loaded Kubernetes configuration from kubeconfig")
    return k8s_client.CoreV1Api()
