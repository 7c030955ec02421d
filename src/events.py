"""
Kubernetes Events recorded against the Job running the upgrade.
"""

import logging
from datetime import datetime, timezone

from kubernetes import client as k8s_client
from kubernetes.client.exceptions import ApiException

from constants import KUBE_EVENT_REPORTER_NAME
from errors import (
    JobPodHasTooManyOwners,
    JobPodOwnerIsNotJob,
    JobPodOwnerNotFound,
    PodGetError,
)

logger = logging.getLogger(__name__)


class JobEventRecorder:
    """Publishes Events whose involved object is the upgrade Job."""

    def __init__(self, core_api, namespace: str, job_ref: k8s_client.V1ObjectReference, instance: str = ""):
        self.core_api = core_api
        self.namespace = namespace
        self.job_ref = job_ref
        self.instance = instance

    @classmethod
    def for_job_pod(cls, core_api, pod_name: str, namespace: str) -> "JobEventRecorder":
        """
        Build a recorder for the Job owning pod `pod_name`.

        The pod must have exactly one owner reference, of kind Job.
        """
        try:
            pod = core_api.read_namespaced_pod(pod_name, namespace)
        except ApiException as e:
            raise PodGetError(pod_name, namespace) from e

        owners = pod.metadata.owner_references or []
        if not owners:
            raise JobPodOwnerNotFound(pod_name, namespace)
        if len(owners) != 1:
            raise JobPodHasTooManyOwners(pod_name, namespace)
        owner = owners[0]
        if owner.kind != "Job":
            raise JobPodOwnerIsNotJob(pod_name, namespace, owner.kind)

        job_ref = k8s_client.V1ObjectReference(
            api_version=owner.api_version,
            kind=owner.kind,
            name=owner.name,
            namespace=namespace,
            uid=owner.uid,
        )
        return cls(core_api, namespace, job_ref, instance=pod_name)

    def publish(self, reason: str, message: str, event_type: str = "Normal") -> None:
        """Create an Event. Failures are logged, never raised."""
        now = datetime.now(timezone.utc)
        event = k8s_client.CoreV1Event(
            metadata=k8s_client.V1ObjectMeta(
                generate_name=f"{self.job_ref.name}.", namespace=self.namespace
            ),
            involved_object=self.job_ref,
            reason=reason,
            message=message,
            type=event_type,
            count=1,
            first_timestamp=now,
            last_timestamp=now,
            source=k8s_client.V1EventSource(component=KUBE_EVENT_REPORTER_NAME),
            reporting_component=KUBE_EVENT_REPORTER_NAME,
            reporting_instance=self.instance or KUBE_EVENT_REPORTER_NAME,
        )
        try:
            self.core_api.create_namespaced_event(self.namespace, event)
        except ApiException as e:
            logger.warning(f"Failed to publish event {reason}: {e}")


class LogOnlyRecorder:
    """Stand-in used when the job does not know its own pod name."""

    def publish(self, reason: str, message: str, event_type: str = "Normal") -> None:
        logger.debug(f"Event {reason} ({event_type}): {message}")
