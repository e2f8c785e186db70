from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

GROUP = "apps.openyurt.io"
VERSION = "v1alpha1"
KIND = "StaticPod"
API_VERSION = f"{GROUP}/{VERSION}"


class UpgradeStrategyType(str, Enum):
    AUTO = "auto"
    OTA = "OTA"
    ADVANCED_ROLLING_UPDATE = "AdvancedRollingUpdate"


class KubeModel(BaseModel):
    """Base for Kubernetes-shaped models: camelCase aliases, null as zero value."""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        # An explicit null decodes as the field's zero value.
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class ObjectMeta(KubeModel):
    name: str = ""
    namespace: Optional[str] = None
    uid: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[str] = Field(default=None, alias="resourceVersion")


class StaticPodUpgradeStrategy(KubeModel):
    # Any string decodes; membership in UpgradeStrategyType is a validation rule.
    type: str = ""
    max_unavailable: Optional[Union[int, str]] = Field(default=None, alias="maxUnavailable")


class StaticPodSpec(KubeModel):
    static_pod_manifest: str = Field(default="", alias="staticPodManifest")
    namespace: Optional[str] = None
    upgrade_strategy: StaticPodUpgradeStrategy = Field(
        default_factory=StaticPodUpgradeStrategy, alias="upgradeStrategy"
    )
    # Kept in source form; conversion to the canonical template may fail.
    template: Any = Field(default_factory=dict)


class StaticPodStatus(KubeModel):
    total_number: int = Field(default=0, alias="totalNumber")
    ready_number: int = Field(default=0, alias="readyNumber")
    upgraded_number: int = Field(default=0, alias="upgradedNumber")
    observed_generation: int = Field(default=0, alias="observedGeneration")


class StaticPod(KubeModel):
    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: str = KIND
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: StaticPodSpec = Field(default_factory=StaticPodSpec)
    status: Optional[StaticPodStatus] = None

    def key(self) -> str:
        if self.metadata.namespace:
            return f"{self.metadata.namespace}/{self.metadata.name}"
        return self.metadata.name


class UnstructuredObject(KubeModel):
    """Any object that is not a StaticPod."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    kind: Optional[str] = None
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


def decode_object(raw: Dict[str, Any]) -> Union[StaticPod, UnstructuredObject]:
    """Decode a manifest mapping, typed by its ``kind``.

    Raises :class:`pydantic.ValidationError` when a StaticPod is malformed.
    """
    if raw.get("kind") == KIND:
        return StaticPod.model_validate(raw)
    return UnstructuredObject.model_validate(raw)
