"""Error codes and fixed values for the monitoring e2e suite"""

# Error codes
MONITORING_TEST_ERROR = 1000
CONFIGURATION_ERROR = 1001
CLUSTER_ERROR = 1100
CLUSTER_SETUP_ERROR = 1101
DEPLOYMENT_ERROR = 1102
QUERY_ERROR = 1200
PROMETHEUS_ERROR = 1201
ALERTMANAGER_ERROR = 1202
RESPONSE_DECODE_ERROR = 1203
POLL_TIMEOUT_ERROR = 1300
EXPECTATION_ERROR = 1400

PROM_STATUS_SUCCESS = "success"
ALERT_STATE_FIRING = "firing"
ALERT_STATE_ACTIVE = "active"

CONTAINER_INFO_METRIC = "kube_pod_container_info"
ALERTS_METRIC = "ALERTS"
