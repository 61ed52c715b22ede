"""Constantes canônicas (labels, finalizer, kinds) compartilhadas pelo operador."""

API_GROUP = "apps.clusterflow.io"
API_VERSION = f"{API_GROUP}/v1alpha1"

CLUSTER_KIND = "Cluster"
CLUSTER_DEFINITION_KIND = "ClusterDefinition"
CLUSTER_VERSION_KIND = "ClusterVersion"

DB_CLUSTER_FINALIZER = "cluster.clusterflow.io/finalizer"

# labels imutáveis do Cluster
CLUSTER_DEF_LABEL_KEY = "clusterdefinition.clusterflow.io/name"
CLUSTER_VER_LABEL_KEY = "clusterversion.clusterflow.io/name"

# labels dos objetos derivados
APP_INSTANCE_LABEL_KEY = "app.kubernetes.io/instance"
APP_MANAGED_BY_LABEL_KEY = "app.kubernetes.io/managed-by"
APP_MANAGED_BY_VALUE = "clusterflow"
COMPONENT_NAME_LABEL_KEY = "apps.clusterflow.io/component-name"
COMPONENT_TYPE_LABEL_KEY = "apps.clusterflow.io/component-type"

PROMETHEUS_SCRAPE_ANNOTATION = "prometheus.io/scrape"
PROMETHEUS_PORT_ANNOTATION = "prometheus.io/port"

# kinds da plataforma
DEPLOYMENT_KIND = "Deployment"
STATEFULSET_KIND = "StatefulSet"
SERVICE_KIND = "Service"
CONFIGMAP_KIND = "ConfigMap"
PVC_KIND = "PersistentVolumeClaim"
POD_KIND = "Pod"

WORKLOAD_KINDS = (DEPLOYMENT_KIND, STATEFULSET_KIND)
COMPUTE_KINDS = (DEPLOYMENT_KIND, STATEFULSET_KIND, SERVICE_KIND, CONFIGMAP_KIND)
STORAGE_KINDS = (PVC_KIND,)

# kinds listados no snapshot observado de um Cluster
OBSERVED_KINDS = COMPUTE_KINDS + STORAGE_KINDS + (POD_KIND,)
