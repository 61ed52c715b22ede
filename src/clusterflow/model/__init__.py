"""Modelo de domínio do ClusterFlow: Cluster, templates e manifests da plataforma."""

from .cluster import (
    Cluster,
    ClusterSpec,
    ClusterStatus,
    ComponentSpec,
    ComponentStatus,
    Phase,
    TerminationPolicy,
    VolumeClaimTemplate,
)
from .templates import (
    ClusterDefinition,
    ClusterVersion,
    ComponentDefinition,
    StaticTemplateResolver,
    TemplateResolver,
    WorkloadType,
)

__all__ = [
    "Cluster",
    "ClusterSpec",
    "ClusterStatus",
    "ComponentSpec",
    "ComponentStatus",
    "Phase",
    "TerminationPolicy",
    "VolumeClaimTemplate",
    "ClusterDefinition",
    "ClusterVersion",
    "ComponentDefinition",
    "StaticTemplateResolver",
    "TemplateResolver",
    "WorkloadType",
]
