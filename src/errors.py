"""
Error hierarchy for the storage upgrade job.

Every error carries the identity of what it was acting on (node, pod,
namespace, label...) so a failed run can be diagnosed from the log line alone.

    ConfigurationError   bad input, missing tooling, malformed chart dirs
    ExternalSystemError  Kubernetes, storage REST API or Helm call failed
    InvariantViolation   cluster objects are not shaped the way we require
"""

from typing import Any, Dict, Optional

from constants import PRODUCT


class UpgradeError(Exception):
    """Base exception for all upgrade job errors."""

    code: str = "UPGRADE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigurationError(UpgradeError):
    code = "CONFIGURATION_ERROR"


class InvalidRestEndpoint(ConfigurationError):
    code = "INVALID_REST_ENDPOINT"

    def __init__(self, rest_endpoint: str):
        super().__init__(
            f"Failed to parse {PRODUCT} REST API URL",
            context={"rest_endpoint": rest_endpoint},
        )


class HelmVersionError(ConfigurationError):
    code = "HELM_VERSION"

    def __init__(self, version: str):
        super().__init__(
            "Helm version does not start with 'v3.x.y'",
            context={"version": version.strip()},
        )


class HelmReleaseNotFound(ConfigurationError):
    code = "HELM_RELEASE_NOT_FOUND"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            "'deployed' Helm release not found",
            context={"release": name, "namespace": namespace},
        )


class MissingChartDir(ConfigurationError):
    code = "MISSING_CHART_DIR"

    def __init__(self, chart_name: str):
        super().__init__(
            "No input for helm chart's directory path",
            context={"chart": chart_name},
        )


class UnsupportedChartVariant(ConfigurationError):
    code = "UNSUPPORTED_CHART_VARIANT"

    def __init__(self, release_name: str, namespace: str, chart_name: str):
        super().__init__(
            "Helm release uses an unsupported chart variant",
            context={
                "release": release_name,
                "namespace": namespace,
                "chart": chart_name,
            },
        )


class NotADirectory(ConfigurationError):
    code = "NOT_A_DIRECTORY"

    def __init__(self, path: str):
        super().__init__("Path is not a directory", context={"path": path})


class NotAFile(ConfigurationError):
    code = "NOT_A_FILE"

    def __init__(self, path: str):
        super().__init__("Path is not a file", context={"path": path})


class ChartNameMismatch(ConfigurationError):
    code = "CHART_NAME_MISMATCH"

    def __init__(self, path: str, expected: str, found: str):
        super().__init__(
            "Failed to find valid Helm chart in path",
            context={"path": path, "expected": expected, "found": found},
        )


class YamlStructureError(ConfigurationError):
    code = "YAML_STRUCTURE"

    def __init__(self, yaml_path: str, filepath: str = ""):
        context = {"yaml_path": yaml_path}
        if filepath:
            context["file"] = filepath
        super().__init__("Failed to parse YAML path", context=context)


class YamlParseError(ConfigurationError):
    code = "YAML_PARSE"

    def __init__(self, filepath: str, detail: str):
        super().__init__(
            "Failed to parse YAML file",
            context={"file": filepath, "detail": detail},
        )


class FileOpenError(ConfigurationError):
    code = "FILE_OPEN"

    def __init__(self, filepath: str, detail: str):
        super().__init__(
            "Failed to open file", context={"file": filepath, "detail": detail}
        )


class KubeClientError(ConfigurationError):
    code = "K8S_CLIENT"

    def __init__(self, detail: str):
        super().__init__(
            "Failed to generate Kubernetes client", context={"detail": detail}
        )


# =============================================================================
# External system errors
# =============================================================================


class ExternalSystemError(UpgradeError):
    code = "EXTERNAL_SYSTEM_ERROR"


class RestRequestError(ExternalSystemError):
    code = "REST_REQUEST"

    def __init__(self, method: str, url: str, status: Optional[int], detail: str):
        super().__init__(
            f"{PRODUCT} REST API request failed",
            context={
                "method": method,
                "url": url,
                "status": status,
                "detail": detail[:200],
            },
        )
        self.status = status


class HelmCommandError(ExternalSystemError):
    code = "HELM_COMMAND"

    def __init__(self, command: str, args, detail: str):
        super().__init__(
            "Failed to run Helm command",
            context={"command": command, "args": list(args), "detail": detail},
        )


class PodListError(ExternalSystemError):
    code = "POD_LIST"

    def __init__(self, label: str, namespace: str):
        super().__init__(
            "Failed to list Pods with label",
            context={"label": label, "namespace": namespace},
        )


class PodGetError(ExternalSystemError):
    code = "POD_GET"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            "Failed to GET Pod", context={"pod": name, "namespace": namespace}
        )


class PodDeleteFailed(ExternalSystemError):
    code = "POD_DELETE"

    def __init__(self, name: str, node: str):
        super().__init__(
            "Failed to delete Pod", context={"pod": name, "node": node}
        )


class StorageNodeListError(ExternalSystemError):
    code = "STORAGE_NODE_LIST"

    def __init__(self):
        super().__init__(f"Failed to list {PRODUCT} Nodes")


class StorageNodeGetError(ExternalSystemError):
    code = "STORAGE_NODE_GET"

    def __init__(self, node_name: str):
        super().__init__(f"Failed to get {PRODUCT} Node", context={"node": node_name})


class DrainRequestFailed(ExternalSystemError):
    code = "DRAIN_REQUEST"

    def __init__(self, node_name: str):
        super().__init__(f"Failed to drain {PRODUCT} Node", context={"node": node_name})


class UncordonRequestFailed(ExternalSystemError):
    code = "UNCORDON_REQUEST"

    def __init__(self, node_name: str):
        super().__init__(
            f"Failed to uncordon {PRODUCT} Node", context={"node": node_name}
        )


class VolumeListError(ExternalSystemError):
    code = "VOLUME_LIST"

    def __init__(self, starting_token: int):
        super().__init__(
            f"Failed to list {PRODUCT} Volumes",
            context={"starting_token": starting_token},
        )


# =============================================================================
# Invariant violations
# =============================================================================


class InvariantViolation(UpgradeError):
    code = "INVARIANT_VIOLATION"


class MissingPodSpec(InvariantViolation):
    code = "EMPTY_POD_SPEC"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            "Failed to get .spec from Pod",
            context={"pod": name, "namespace": namespace},
        )


class MissingNodeAssignment(InvariantViolation):
    code = "EMPTY_POD_NODE_NAME"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            "Failed to get .spec.nodeName from Pod",
            context={"pod": name, "namespace": namespace},
        )


class EmptyStorageNodeSpec(InvariantViolation):
    code = "EMPTY_STORAGE_NODE_SPEC"

    def __init__(self, node_id: str):
        super().__init__(
            f"{PRODUCT} Node has no spec", context={"node": node_id}
        )


class JobPodOwnerNotFound(InvariantViolation):
    code = "JOB_POD_OWNER_NOT_FOUND"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            ".metadata.ownerReferences empty while looking for the Pod's Job owner",
            context={"pod": name, "namespace": namespace},
        )


class JobPodHasTooManyOwners(InvariantViolation):
    code = "JOB_POD_TOO_MANY_OWNERS"

    def __init__(self, name: str, namespace: str):
        super().__init__(
            "Pod has too many owners while looking for the Pod's Job owner",
            context={"pod": name, "namespace": namespace},
        )


class JobPodOwnerIsNotJob(InvariantViolation):
    code = "JOB_POD_OWNER_NOT_JOB"

    def __init__(self, name: str, namespace: str, kind: str):
        super().__init__(
            "Pod has an owner which is not a Job",
            context={"pod": name, "namespace": namespace, "kind": kind},
        )


# =============================================================================
# Orchestration errors
# =============================================================================


class ComponentNotReady(UpgradeError):
    code = "COMPONENT_NOT_READY"

    def __init__(self, component: str, pod_name: str, namespace: str):
        super().__init__(
            "Pod is not running",
            context={"component": component, "pod": pod_name, "namespace": namespace},
        )
        self.component = component


class QuiescenceTimeout(UpgradeError):
    code = "QUIESCENCE_TIMEOUT"

    def __init__(self, description: str, timeout: float):
        super().__init__(
            "Timed out waiting for quiescence",
            context={"waiting_for": description, "timeout_s": timeout},
        )


class UpgradeCancelled(UpgradeError):
    code = "UPGRADE_CANCELLED"

    def __init__(self, description: str = ""):
        super().__init__(
            "Upgrade cancelled", context={"waiting_for": description} if description else None
        )
