"""
Shared builders for unit tests.
"""

from datetime import datetime, timezone

from kubernetes import client as k8s_client


def make_pod(
    name,
    node_name="node-1",
    ready=True,
    namespace="mayastor",
    terminating=False,
    with_spec=True,
    conditions=None,
):
    """Build a V1Pod with a Ready condition and optional node assignment."""
    if conditions is None:
        conditions = [
            k8s_client.V1PodCondition(type="Ready", status="True" if ready else "False")
        ]
    return k8s_client.V1Pod(
        metadata=k8s_client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            deletion_timestamp=datetime.now(timezone.utc) if terminating else None,
        ),
        spec=k8s_client.V1PodSpec(containers=[], node_name=node_name) if with_spec else None,
        status=k8s_client.V1PodStatus(conditions=conditions),
    )


def pod_list(*pods):
    return k8s_client.V1PodList(items=list(pods))


def storage_node(node_id, state=None):
    """Storage REST node body; `state` is a cordondrainstate key or None."""
    spec = {"id": node_id, "grpcEndpoint": "10.0.0.1:10124"}
    if state is not None:
        spec["cordondrainstate"] = {state: {"cordonlabels": ["drain-for-upgrade"]}}
    return {"id": node_id, "spec": spec}


def volume(uuid, rebuilding=False):
    child = {"uri": f"bdev:///{uuid}", "state": "Online"}
    if rebuilding:
        child["rebuildProgress"] = 42
    return {
        "spec": {"uuid": uuid},
        "state": {"uuid": uuid, "target": {"children": [child]}},
    }
