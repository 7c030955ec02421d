"""
Constants shared by the storage upgrade job.
"""

PRODUCT = "Mayastor"

# Label selectors for the pods the upgrade job touches.
IO_ENGINE_LABEL = "app=io-engine"
AGENT_CORE_LABEL = "app=agent-core"
API_REST_LABEL = "app=api-rest"
ETCD_LABEL = "app.kubernetes.io/name=etcd"

# Components checked, in order, after every data-plane restart.
CONTROL_PLANE_COMPONENTS = (
    ("agent-core", AGENT_CORE_LABEL),
    ("api-rest", API_REST_LABEL),
    ("etcd", ETCD_LABEL),
)

# Label used on drain/cordon requests so only our own cordon is removed.
DRAIN_FOR_UPGRADE = "drain-for-upgrade"

UMBRELLA_CHART_NAME = "openebs"
CORE_CHART_NAME = "mayastor"

KUBE_EVENT_REPORTER_NAME = "upgrade-job"

DEFAULT_NAMESPACE = "mayastor"
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_REBUILD_GRACE_PERIOD = 60.0
VOLUME_PAGE_SIZE = 200
