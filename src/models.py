"""
Data models for the storage upgrade job.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from constants import CORE_CHART_NAME, UMBRELLA_CHART_NAME


@dataclass
class WorkloadInstance:
    """Snapshot of a pod, taken fresh from the API at each decision point."""

    name: str
    namespace: str
    node_name: Optional[str] = None  # spec.nodeName, None until scheduled
    has_spec: bool = True
    conditions: Dict[str, str] = field(default_factory=dict)  # type -> "True"/"False"
    terminating: bool = False  # metadata.deletionTimestamp is set

    @classmethod
    def from_pod(cls, pod) -> "WorkloadInstance":
        """Build an instance from a kubernetes.client.V1Pod."""
        metadata = pod.metadata
        spec = pod.spec
        conditions = {}
        if pod.status is not None and pod.status.conditions:
            for cond in pod.status.conditions:
                conditions[cond.type] = cond.status
        return cls(
            name=metadata.name,
            namespace=metadata.namespace,
            node_name=(spec.node_name or None) if spec is not None else None,
            has_spec=spec is not None,
            conditions=conditions,
            terminating=metadata.deletion_timestamp is not None,
        )

    def is_ready(self) -> bool:
        return self.conditions.get("Ready") == "True" and not self.terminating


class NodeDrainState(Enum):
    """Cordon/drain state of a storage node as reported by the control plane."""

    CORDONED = "cordonedstate"
    DRAINING = "drainingstate"
    DRAINED = "drainedstate"
    UNCORDONED = "uncordoned"

    @classmethod
    def from_spec(cls, spec: Dict) -> "NodeDrainState":
        state = spec.get("cordondrainstate")
        if not state:
            return cls.UNCORDONED
        for member in (cls.CORDONED, cls.DRAINING, cls.DRAINED):
            if member.value in state:
                return member
        return cls.UNCORDONED


class UpgradeStep(Enum):
    """Steps each data-plane node goes through, in order."""

    START = "start"
    RECORD_CORDON_STATE = "record_cordon_state"
    DRAIN = "drain"
    WAIT_DRAIN_QUIESCENT = "wait_drain_quiescent"
    WAIT_REBUILD_QUIESCENT = "wait_rebuild_quiescent"
    REPLACE = "replace"
    CONDITIONAL_UNCORDON = "conditional_uncordon"
    WAIT_REPLACEMENT_READY = "wait_replacement_ready"
    VERIFY_CLUSTER_HEALTH = "verify_cluster_health"
    DONE = "done"


class ChartVariant(Enum):
    """Which chart the deployed release was installed from."""

    UMBRELLA = UMBRELLA_CHART_NAME
    CORE = CORE_CHART_NAME

    @property
    def chart_name(self) -> str:
        return self.value

    @property
    def image_tag_key(self) -> str:
        """Dotted values key holding the control-plane image tag."""
        if self is ChartVariant.UMBRELLA:
            return f"{CORE_CHART_NAME}.image.tag"
        return "image.tag"


@dataclass
class NodeUpgradeResult:
    """Outcome of upgrading the data-plane pod on one node."""

    pod_name: str
    node_name: str = ""
    step: UpgradeStep = UpgradeStep.START
    was_cordoned: bool = False
    uncordoned: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    duration_seconds: Optional[float] = None
    error_message: Optional[str] = None
