"""Canonical pod template schema consumed by the structural validator.

Only the fields the structural rules look at are modelled; anything else in
the source template is dropped during conversion.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Field, ValidationError

from staticpod_validator.core.exceptions import ConversionError
from staticpod_validator.models.resources import KubeModel, ObjectMeta

Quantity = Union[str, int, float]


class ContainerPort(KubeModel):
    name: Optional[str] = None
    container_port: int = Field(default=0, alias="containerPort")
    host_port: Optional[int] = Field(default=None, alias="hostPort")
    protocol: Optional[str] = None


class EnvVar(KubeModel):
    name: str = ""
    value: Optional[str] = None


class ResourceRequirements(KubeModel):
    limits: Dict[str, Quantity] = Field(default_factory=dict)
    requests: Dict[str, Quantity] = Field(default_factory=dict)


class VolumeMount(KubeModel):
    name: str = ""
    mount_path: str = Field(default="", alias="mountPath")
    read_only: bool = Field(default=False, alias="readOnly")


class Container(KubeModel):
    name: str = ""
    image: str = ""
    command: List[str] = Field(default_factory=list)
    args: List[str] = Field(default_factory=list)
    working_dir: Optional[str] = Field(default=None, alias="workingDir")
    ports: List[ContainerPort] = Field(default_factory=list)
    env: List[EnvVar] = Field(default_factory=list)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    volume_mounts: List[VolumeMount] = Field(default_factory=list, alias="volumeMounts")
    image_pull_policy: Optional[str] = Field(default=None, alias="imagePullPolicy")


class Volume(KubeModel):
    # Volume sources (hostPath, configMap, ...) pass through untyped.
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""


class PodSpec(KubeModel):
    containers: List[Container] = Field(default_factory=list)
    init_containers: List[Container] = Field(default_factory=list, alias="initContainers")
    volumes: List[Volume] = Field(default_factory=list)
    restart_policy: Optional[str] = Field(default=None, alias="restartPolicy")
    dns_policy: Optional[str] = Field(default=None, alias="dnsPolicy")
    termination_grace_period_seconds: Optional[int] = Field(
        default=None, alias="terminationGracePeriodSeconds"
    )
    active_deadline_seconds: Optional[int] = Field(default=None, alias="activeDeadlineSeconds")
    host_network: bool = Field(default=False, alias="hostNetwork")
    node_name: Optional[str] = Field(default=None, alias="nodeName")
    node_selector: Dict[str, str] = Field(default_factory=dict, alias="nodeSelector")
    priority_class_name: Optional[str] = Field(default=None, alias="priorityClassName")


class PodTemplateSpec(KubeModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)


def convert_pod_template(source: Any) -> PodTemplateSpec:
    """Convert a source-schema pod template into a :class:`PodTemplateSpec`.

    ``None`` converts to an empty template. Raises :class:`ConversionError`
    when the source is not a mapping or its fields have the wrong shape.
    """
    if isinstance(source, PodTemplateSpec):
        return source.model_copy(deep=True)
    if source is None:
        source = {}
    if not isinstance(source, Mapping):
        raise ConversionError(f"pod template must be a mapping, got {type(source).__name__}")
    try:
        return PodTemplateSpec.model_validate(dict(source))
    except ValidationError as e:
        raise ConversionError(f"cannot convert pod template: {e}") from e
