"""Constants for the Multicluster Observability Addon."""

# Addon
ADDON_NAME = "multicluster-observability-addon"
ADDON_GROUP = "addon.open-cluster-management.io"
ADDON_VERSION = "v1alpha1"
ADDON_GROUP_VERSION = f"{ADDON_GROUP}/{ADDON_VERSION}"

# Resource kinds
KIND_MANAGED_CLUSTER_ADDON = "ManagedClusterAddOn"
KIND_CERTIFICATE = "Certificate"

# Config references on the ManagedClusterAddOn
RESOURCE_CONFIGMAPS = "configmaps"
RESOURCE_SECRETS = "secrets"
RESOURCE_ADDON_DEPLOYMENT_CONFIGS = "addondeploymentconfigs"

# cert-manager
CERT_MANAGER_GROUP = "cert-manager.io"
CERT_MANAGER_VERSION = "v1"
CERT_MANAGER_PLURAL = "certificates"

# Labels
LABEL_SIGNAL = "mcoa.openshift.io/signal"
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"

# Annotations, one set per signal family
ANNOTATION_LOGGING_TARGET_OUTPUT_NAME = "logging.mcoa.openshift.io/target-output-name"
ANNOTATION_LOGGING_CA = "logging.mcoa.openshift.io/ca"
ANNOTATION_OTEL_TARGET_OUTPUT_NAME = "opentelemetry.mcoa.openshift.io/target-output-name"
ANNOTATION_OTEL_CA = "opentelemetry.mcoa.openshift.io/ca"

# Data keys
KEY_CA_BUNDLE = "ca.crt"
KEY_TLS_CERT = "tls.crt"
KEY_TLS_KEY = "tls.key"
KEY_ENDPOINT = "endpoint"

# Field Manager
FIELD_MANAGER = "multicluster-observability-addon"

# Condition Types
COND_READY = "Ready"
COND_CONFIG_INVALID = "ConfigInvalid"
COND_TEMPLATE_NOT_FOUND = "TemplateNotFound"
COND_SECRETS_NOT_READY = "SecretsNotReady"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_OPTIONS_BUILT = "OptionsBuilt"
EVENT_REASON_SECRETS_PROVISIONED = "SecretsProvisioned"
