# src/clusterflow/transformers/common.py
"""
Helpers compartilhados pelos Transformers estruturais.

Concentram:
    - nomes derivados (`<cluster>-<component>[-sufixo]`)
    - labels de instância e de componente
    - resolução de templates com erros tipados
    - poda de objetos órfãos (componentes removidos da spec)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Set, Tuple

from clusterflow.constant import (
    APP_INSTANCE_LABEL_KEY,
    APP_MANAGED_BY_LABEL_KEY,
    APP_MANAGED_BY_VALUE,
    COMPONENT_NAME_LABEL_KEY,
    COMPONENT_TYPE_LABEL_KEY,
)
from clusterflow.core.exceptions import TransformError, ValidationError
from clusterflow.core.graph.dag import DAG
from clusterflow.core.graph.types import ObjectKey
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.cluster import Cluster, ComponentSpec
from clusterflow.model.objects import get_labels, object_key
from clusterflow.model.templates import ClusterDefinition, ClusterVersion, ComponentDefinition

CONFIG_VOLUME_NAME = "config"
CONFIG_MOUNT_PATH = "/etc/clusterflow/config"


# -----------------------------
# Nomes e identidades
# -----------------------------
def component_object_name(cluster: Cluster, comp: ComponentSpec, suffix: str = "") -> str:
    name = f"{cluster.name}-{comp.name}"
    return f"{name}-{suffix}" if suffix else name


def config_map_name(cluster: Cluster, comp: ComponentSpec) -> str:
    return component_object_name(cluster, comp, "config")


def headless_service_name(cluster: Cluster, comp: ComponentSpec) -> str:
    return component_object_name(cluster, comp, "headless")


def key_for(kind: str, cluster: Cluster, name: str) -> ObjectKey:
    return ObjectKey(kind, cluster.namespace, name)


# -----------------------------
# Labels
# -----------------------------
def instance_labels(cluster: Cluster) -> Dict[str, str]:
    return {
        APP_INSTANCE_LABEL_KEY: cluster.name,
        APP_MANAGED_BY_LABEL_KEY: APP_MANAGED_BY_VALUE,
    }


def selector_labels(cluster: Cluster, comp: ComponentSpec) -> Dict[str, str]:
    return {
        APP_INSTANCE_LABEL_KEY: cluster.name,
        COMPONENT_NAME_LABEL_KEY: comp.name,
    }


def component_labels(cluster: Cluster, comp: ComponentSpec) -> Dict[str, str]:
    labels = instance_labels(cluster)
    labels[COMPONENT_NAME_LABEL_KEY] = comp.name
    labels[COMPONENT_TYPE_LABEL_KEY] = comp.type
    return labels


# -----------------------------
# Templates
# -----------------------------
def require_templates(ctx: TransformContext, *, source: str) -> Tuple[ClusterDefinition, ClusterVersion]:
    """
    Retorna os templates resolvidos do ciclo.

    Raises:
        TransformError: template ausente (pode surgir em ciclo futuro).
        ValidationError: versão referencia outra topologia.
    """
    spec = ctx.cluster.spec
    definition = ctx.cluster_definition
    if definition is None:
        raise TransformError(
            message=f"ClusterDefinition {spec.cluster_definition_ref!r} not found",
            details={"clusterDefinitionRef": spec.cluster_definition_ref, "source": source},
            hint="Crie o ClusterDefinition referenciado; o ciclo será reexecutado",
        )

    version = ctx.cluster_version
    if version is None:
        raise TransformError(
            message=f"ClusterVersion {spec.cluster_version_ref!r} not found",
            details={"clusterVersionRef": spec.cluster_version_ref, "source": source},
            hint="Crie o ClusterVersion referenciado; o ciclo será reexecutado",
        )

    if version.cluster_definition_ref and version.cluster_definition_ref != definition.name:
        raise ValidationError(
            message=f"ClusterVersion {version.name} belongs to {version.cluster_definition_ref}",
            details={"clusterVersionRef": version.name, "clusterDefinitionRef": definition.name},
        )
    return definition, version


def require_component_definition(definition: ClusterDefinition, comp: ComponentSpec) -> ComponentDefinition:
    comp_def = definition.get_component(comp.type)
    if comp_def is None:
        raise TransformError(
            message=f"Component type {comp.type!r} not defined in {definition.name}",
            details={"component": comp.name, "type": comp.type, "clusterDefinition": definition.name},
        )
    return comp_def


def merged_affinity(cluster: Cluster, comp: ComponentSpec) -> Dict[str, Any]:
    affinity = dict(cluster.spec.affinity)
    affinity.update(comp.affinity)
    return affinity


def merged_tolerations(cluster: Cluster, comp: ComponentSpec) -> List[Dict[str, Any]]:
    return list(cluster.spec.tolerations) + list(comp.tolerations)


# -----------------------------
# Poda de órfãos
# -----------------------------
def prune_orphans(ctx: TransformContext, dag: DAG, kinds: Iterable[str], desired: Set[ObjectKey], *, source: str) -> None:
    """Marca para remoção objetos gerenciados observados que não são mais desejados."""
    for kind in kinds:
        for obj in ctx.observed.list(kind):
            key = object_key(obj)
            if key in desired:
                continue
            if get_labels(obj).get(APP_MANAGED_BY_LABEL_KEY) != APP_MANAGED_BY_VALUE:
                continue
            dag.remove_node(key, source=source, reason="orphan")
            ctx.log(source=source, level="info", message="orphan marked for removal", key=str(key))
