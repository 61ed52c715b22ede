"""
Recurso Cluster — especificação declarada pelo usuário e status observado.

Este módulo define o modelo de domínio do recurso de topo do ClusterFlow:

    - ComponentSpec       → sub-unidade escalável de um Cluster
    - ClusterSpec         → estado desejado (refs de templates, componentes, política)
    - ClusterStatus       → fase agregada e fase/mensagem por componente
    - Cluster             → metadados + spec + status, com round-trip para manifest

Política de término (TerminationPolicy):
    - DoNotTerminate → remoção bloqueada até a política mudar
    - Retain         → remove objetos de computação, preserva storage claims
    - WipeOut        → remove também objetos que guardam dados

Invariantes (validate):
    - nomes de componentes são únicos no Cluster
    - `cluster_definition_ref` não é vazio
    - réplicas, quando declaradas, não são negativas

Limites explícitos:
    - Não deriva objetos filhos (isso é papel dos Transformers)
    - Não acessa o object store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from clusterflow.constant import API_VERSION, CLUSTER_KIND
from clusterflow.core.exceptions import ValidationError
from clusterflow.core.graph.types import ObjectKey


class TerminationPolicy(str, Enum):
    DO_NOT_TERMINATE = "DoNotTerminate"
    RETAIN = "Retain"
    WIPE_OUT = "WipeOut"


class Phase(str, Enum):
    """Fases canônicas de um componente e do Cluster."""
    CREATING = "Creating"
    RUNNING = "Running"
    UPDATING = "Updating"
    ABNORMAL = "Abnormal"
    FAILED = "Failed"
    DELETING = "Deleting"


@dataclass
class VolumeClaimTemplate:
    name: str
    spec: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ComponentSpec:
    name: str
    type: str
    replicas: Optional[int] = None
    resources: Dict[str, Any] = field(default_factory=dict)
    affinity: Dict[str, Any] = field(default_factory=dict)
    tolerations: List[Dict[str, Any]] = field(default_factory=list)
    volume_claim_templates: List[VolumeClaimTemplate] = field(default_factory=list)
    monitor: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentSpec":
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            replicas=data.get("replicas"),
            resources=dict(data.get("resources") or {}),
            affinity=dict(data.get("affinity") or {}),
            tolerations=list(data.get("tolerations") or []),
            volume_claim_templates=[
                VolumeClaimTemplate(name=v.get("name", ""), spec=dict(v.get("spec") or {}))
                for v in data.get("volumeClaimTemplates") or []
            ],
            monitor=bool(data.get("monitor", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "type": self.type, "monitor": self.monitor}
        if self.replicas is not None:
            out["replicas"] = self.replicas
        if self.resources:
            out["resources"] = self.resources
        if self.affinity:
            out["affinity"] = self.affinity
        if self.tolerations:
            out["tolerations"] = self.tolerations
        if self.volume_claim_templates:
            out["volumeClaimTemplates"] = [
                {"name": v.name, "spec": v.spec} for v in self.volume_claim_templates
            ]
        return out


@dataclass
class ClusterSpec:
    cluster_definition_ref: str
    cluster_version_ref: str = ""
    components: List[ComponentSpec] = field(default_factory=list)
    termination_policy: TerminationPolicy = TerminationPolicy.WIPE_OUT
    affinity: Dict[str, Any] = field(default_factory=dict)
    tolerations: List[Dict[str, Any]] = field(default_factory=list)

    def get_component(self, name: str) -> Optional[ComponentSpec]:
        for comp in self.components:
            if comp.name == name:
                return comp
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterSpec":
        policy = data.get("terminationPolicy") or TerminationPolicy.WIPE_OUT.value
        try:
            termination_policy = TerminationPolicy(policy)
        except ValueError as e:
            raise ValidationError(
                message=f"Unknown termination policy: {policy}",
                details={"terminationPolicy": policy},
                hint="Use DoNotTerminate, Retain ou WipeOut",
            ) from e
        return cls(
            cluster_definition_ref=data.get("clusterDefinitionRef", ""),
            cluster_version_ref=data.get("clusterVersionRef", ""),
            components=[ComponentSpec.from_dict(c) for c in data.get("components") or []],
            termination_policy=termination_policy,
            affinity=dict(data.get("affinity") or {}),
            tolerations=list(data.get("tolerations") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "clusterDefinitionRef": self.cluster_definition_ref,
            "clusterVersionRef": self.cluster_version_ref,
            "terminationPolicy": self.termination_policy.value,
            "components": [c.to_dict() for c in self.components],
        }
        if self.affinity:
            out["affinity"] = self.affinity
        if self.tolerations:
            out["tolerations"] = self.tolerations
        return out


@dataclass
class ComponentStatus:
    phase: Phase = Phase.CREATING
    message: Dict[str, str] = field(default_factory=dict)

    def get_object_message(self, kind: str, name: str) -> Optional[str]:
        return self.message.get(f"{kind}/{name}")

    def set_object_message(self, kind: str, name: str, message: str) -> None:
        self.message[f"{kind}/{name}"] = message


def _parse_phase(value: Any, default: Optional[Phase]) -> Optional[Phase]:
    """Fase gravada no status; valores desconhecidos caem no default e são reescritos no ciclo."""
    try:
        return Phase(value) if value else default
    except ValueError:
        return default


@dataclass
class ClusterStatus:
    phase: Optional[Phase] = None
    observed_generation: int = 0
    components: Dict[str, ComponentStatus] = field(default_factory=dict)
    message: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterStatus":
        return cls(
            phase=_parse_phase(data.get("phase"), None),
            observed_generation=int(data.get("observedGeneration") or 0),
            components={
                name: ComponentStatus(
                    phase=_parse_phase(c.get("phase"), Phase.CREATING),
                    message=dict(c.get("message") or {}),
                )
                for name, c in (data.get("components") or {}).items()
            },
            message=data.get("message") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value if self.phase else None,
            "observedGeneration": self.observed_generation,
            "message": self.message,
            "components": {
                name: {"phase": c.phase.value, "message": dict(c.message)}
                for name, c in self.components.items()
            },
        }


@dataclass
class Cluster:
    name: str
    namespace: str
    spec: ClusterSpec
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    finalizers: List[str] = field(default_factory=list)
    generation: int = 1
    resource_version: Optional[str] = None
    deletion_requested: bool = False
    status: ClusterStatus = field(default_factory=ClusterStatus)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(CLUSTER_KIND, self.namespace, self.name)

    # -----------------------------
    # Finalizers
    # -----------------------------
    def contains_finalizer(self, name: str) -> bool:
        return name in self.finalizers

    def add_finalizer(self, name: str) -> None:
        if name not in self.finalizers:
            self.finalizers.append(name)

    def remove_finalizer(self, name: str) -> None:
        self.finalizers = [f for f in self.finalizers if f != name]

    # -----------------------------
    # Validação
    # -----------------------------
    def validate(self) -> None:
        problems: List[str] = []
        if not self.spec.cluster_definition_ref:
            problems.append("spec.clusterDefinitionRef must not be empty")

        seen = set()
        for comp in self.spec.components:
            if not comp.name:
                problems.append("component name must not be empty")
            elif comp.name in seen:
                problems.append(f"duplicate component name: {comp.name}")
            seen.add(comp.name)
            if comp.replicas is not None and comp.replicas < 0:
                problems.append(f"component {comp.name}: replicas must be >= 0")

        if problems:
            raise ValidationError(
                message=f"Invalid Cluster {self.namespace}/{self.name}",
                details={"problems": problems},
                hint="Corrija a spec do Cluster; o ciclo não é reexecutado com a mesma spec",
            )

    # -----------------------------
    # Manifest round-trip
    # -----------------------------
    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "Cluster":
        meta = manifest.get("metadata") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            spec=ClusterSpec.from_dict(manifest.get("spec") or {}),
            labels=dict(meta.get("labels") or {}),
            annotations=dict(meta.get("annotations") or {}),
            finalizers=list(meta.get("finalizers") or []),
            generation=int(meta.get("generation") or 1),
            resource_version=meta.get("resourceVersion"),
            deletion_requested=bool(meta.get("deletionTimestamp")),
            status=ClusterStatus.from_dict(manifest.get("status") or {}),
        )

    def to_manifest(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
            "finalizers": list(self.finalizers),
            "generation": self.generation,
        }
        if self.resource_version is not None:
            metadata["resourceVersion"] = self.resource_version
        return {
            "apiVersion": API_VERSION,
            "kind": CLUSTER_KIND,
            "metadata": metadata,
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }
