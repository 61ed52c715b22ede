"""
Templates referenciados por um Cluster: topologia e versão.

    - ClusterDefinition (topologia): tipos de componente, tipo de workload,
      réplicas padrão, portas, templates de configuração
    - ClusterVersion (versão): imagem por tipo de componente

A resolução por nome é feita por um `TemplateResolver`; a ausência de um
template é sinalizada com `None` e tratada pelos Transformers como
pré-condição não satisfeita (TransformError, retryable), pois o template
pode aparecer em um ciclo futuro.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from clusterflow.constant import CLUSTER_DEFINITION_KIND, CLUSTER_VERSION_KIND
from clusterflow.core.config.loader import PathLike, load_documents
from clusterflow.core.exceptions import ValidationError


class WorkloadType(str, Enum):
    STATELESS = "Stateless"
    STATEFUL = "Stateful"
    CONSENSUS = "Consensus"
    REPLICATION = "Replication"

    @property
    def uses_statefulset(self) -> bool:
        return self is not WorkloadType.STATELESS


@dataclass
class ComponentDefinition:
    type: str
    workload_type: WorkloadType = WorkloadType.STATELESS
    default_replicas: int = 1
    ports: List[Dict[str, Any]] = field(default_factory=list)
    config_templates: Dict[str, str] = field(default_factory=dict)
    monitor_port: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentDefinition":
        raw_workload = data.get("workloadType") or WorkloadType.STATELESS.value
        try:
            workload_type = WorkloadType(raw_workload)
        except ValueError as e:
            raise ValidationError(
                message=f"Unknown workload type: {raw_workload}",
                details={"componentType": data.get("type"), "workloadType": raw_workload},
            ) from e
        return cls(
            type=data.get("type", ""),
            workload_type=workload_type,
            default_replicas=int(data.get("defaultReplicas", 1)),
            ports=list(data.get("ports") or []),
            config_templates=dict(data.get("configTemplates") or {}),
            monitor_port=data.get("monitorPort"),
        )


@dataclass
class ClusterDefinition:
    name: str
    components: Dict[str, ComponentDefinition] = field(default_factory=dict)

    def get_component(self, comp_type: str) -> Optional[ComponentDefinition]:
        return self.components.get(comp_type)

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "ClusterDefinition":
        spec = manifest.get("spec") or {}
        comps = [ComponentDefinition.from_dict(c) for c in spec.get("components") or []]
        return cls(
            name=(manifest.get("metadata") or {}).get("name", ""),
            components={c.type: c for c in comps},
        )


@dataclass
class ClusterVersion:
    name: str
    cluster_definition_ref: str
    images: Dict[str, str] = field(default_factory=dict)

    def image_for(self, comp_type: str) -> Optional[str]:
        return self.images.get(comp_type)

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "ClusterVersion":
        spec = manifest.get("spec") or {}
        return cls(
            name=(manifest.get("metadata") or {}).get("name", ""),
            cluster_definition_ref=spec.get("clusterDefinitionRef", ""),
            images={c.get("type", ""): c.get("image", "") for c in spec.get("components") or []},
        )


@runtime_checkable
class TemplateResolver(Protocol):
    """Colaborador de resolução de templates por nome."""

    def get_cluster_definition(self, name: str) -> Optional[ClusterDefinition]:
        ...

    def get_cluster_version(self, name: str) -> Optional[ClusterVersion]:
        ...


class StaticTemplateResolver:
    """Resolver em memória, alimentado explicitamente ou por manifests."""

    def __init__(
        self,
        definitions: Iterable[ClusterDefinition] = (),
        versions: Iterable[ClusterVersion] = (),
    ):
        self._definitions: Dict[str, ClusterDefinition] = {d.name: d for d in definitions}
        self._versions: Dict[str, ClusterVersion] = {v.name: v for v in versions}

    @classmethod
    def from_manifests(cls, manifests: Iterable[Dict[str, Any]]) -> "StaticTemplateResolver":
        resolver = cls()
        for manifest in manifests:
            kind = manifest.get("kind")
            if kind == CLUSTER_DEFINITION_KIND:
                resolver.add_definition(ClusterDefinition.from_manifest(manifest))
            elif kind == CLUSTER_VERSION_KIND:
                resolver.add_version(ClusterVersion.from_manifest(manifest))
        return resolver

    @classmethod
    def from_files(cls, *paths: PathLike) -> "StaticTemplateResolver":
        """Carrega templates de arquivos YAML (multi-documento) ou JSON."""
        manifests: List[Dict[str, Any]] = []
        for path in paths:
            manifests.extend(load_documents(path))
        return cls.from_manifests(manifests)

    def add_definition(self, definition: ClusterDefinition) -> None:
        self._definitions[definition.name] = definition

    def add_version(self, version: ClusterVersion) -> None:
        self._versions[version.name] = version

    def remove_definition(self, name: str) -> None:
        self._definitions.pop(name, None)

    def get_cluster_definition(self, name: str) -> Optional[ClusterDefinition]:
        return self._definitions.get(name)

    def get_cluster_version(self, name: str) -> Optional[ClusterVersion]:
        return self._versions.get(name)
