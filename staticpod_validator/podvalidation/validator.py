"""Structural validation of canonical pod templates.

The rule engine only depends on the :class:`PodTemplateValidator` protocol;
:class:`DefaultPodTemplateValidator` implements the subset of the upstream
pod rules that matter for static pod manifests.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Set

from staticpod_validator.core.field import Path, invalid, not_supported, required
from staticpod_validator.models.pod import Container, PodSpec, PodTemplateSpec
from staticpod_validator.models.results import FieldViolation
from staticpod_validator.utils.units import parse_quantity


DNS1123_LABEL_MAX_LENGTH = 63
DNS1123_SUBDOMAIN_MAX_LENGTH = 253
QUALIFIED_NAME_MAX_LENGTH = 63
LABEL_VALUE_MAX_LENGTH = 63
IANA_SVC_NAME_MAX_LENGTH = 15

_DNS1123_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_DNS1123_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_QUALIFIED_NAME = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_IANA_SVC_NAME = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")

DNS1123_LABEL_MSG = (
    "a lowercase RFC 1123 label must consist of lower case alphanumeric characters or '-', "
    "and must start and end with an alphanumeric character"
)
QUALIFIED_NAME_MSG = (
    "name part must consist of alphanumeric characters, '-', '_' or '.', "
    "and must start and end with an alphanumeric character"
)
LABEL_VALUE_MSG = (
    "a valid label must be an empty string or consist of alphanumeric characters, "
    "'-', '_' or '.', and must start and end with an alphanumeric character"
)

SUPPORTED_RESTART_POLICIES = ["Always", "OnFailure", "Never"]
SUPPORTED_DNS_POLICIES = ["ClusterFirstWithHostNet", "ClusterFirst", "Default", "None"]
SUPPORTED_PULL_POLICIES = ["Always", "IfNotPresent", "Never"]
SUPPORTED_PORT_PROTOCOLS = ["TCP", "UDP", "SCTP"]


@dataclass(frozen=True)
class PodValidationOptions:
    """Flags relaxing individual pod rules. All off by default."""

    allow_invalid_label_value: bool = False
    allow_requests_above_limits: bool = False


class PodTemplateValidator(Protocol):
    def validate(
        self, template: PodTemplateSpec, path: Path, options: PodValidationOptions
    ) -> List[FieldViolation]:
        ...


def is_dns1123_label(value: str) -> List[str]:
    errs: List[str] = []
    if len(value) > DNS1123_LABEL_MAX_LENGTH:
        errs.append(f"must be no more than {DNS1123_LABEL_MAX_LENGTH} characters")
    if not _DNS1123_LABEL.match(value):
        errs.append(DNS1123_LABEL_MSG)
    return errs


def is_qualified_name(value: str) -> List[str]:
    errs: List[str] = []
    parts = value.split("/")
    if len(parts) == 1:
        name = parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            errs.append("prefix part must be non-empty")
        elif len(prefix) > DNS1123_SUBDOMAIN_MAX_LENGTH or not _DNS1123_SUBDOMAIN.match(prefix):
            errs.append("prefix part must be a lowercase RFC 1123 subdomain")
    else:
        return ["a qualified name must consist of an optional DNS subdomain prefix and a name, separated by '/'"]
    if not name:
        errs.append("name part must be non-empty")
    else:
        if len(name) > QUALIFIED_NAME_MAX_LENGTH:
            errs.append(f"name part must be no more than {QUALIFIED_NAME_MAX_LENGTH} characters")
        if not _QUALIFIED_NAME.match(name):
            errs.append(QUALIFIED_NAME_MSG)
    return errs


def is_valid_label_value(value: str) -> List[str]:
    if value == "":
        return []
    errs: List[str] = []
    if len(value) > LABEL_VALUE_MAX_LENGTH:
        errs.append(f"must be no more than {LABEL_VALUE_MAX_LENGTH} characters")
    if not _QUALIFIED_NAME.match(value):
        errs.append(LABEL_VALUE_MSG)
    return errs


def is_valid_port_name(value: str) -> List[str]:
    errs: List[str] = []
    if len(value) > IANA_SVC_NAME_MAX_LENGTH:
        errs.append(f"must be no more than {IANA_SVC_NAME_MAX_LENGTH} characters")
    if not _IANA_SVC_NAME.match(value):
        errs.append("must contain only alpha-numeric characters (a-z, 0-9), and hyphens (-)")
    if "--" in value:
        errs.append("must not contain consecutive hyphens")
    if not re.search(r"[a-z]", value):
        errs.append("must contain at least one letter (a-z)")
    return errs


class DefaultPodTemplateValidator:
    """Metadata, container, port, resource and volume rules for pod templates."""

    def validate(
        self,
        template: PodTemplateSpec,
        path: Path,
        options: Optional[PodValidationOptions] = None,
    ) -> List[FieldViolation]:
        opts = options or PodValidationOptions()
        errs: List[FieldViolation] = []
        meta_path = path.child("metadata")
        errs.extend(self._validate_labels(template.metadata.labels or {}, meta_path.child("labels"), opts))
        errs.extend(self._validate_annotations(template.metadata.annotations or {}, meta_path.child("annotations")))
        errs.extend(self._validate_pod_spec(template.spec, path.child("spec"), opts))
        return errs

    def _validate_labels(
        self, labels: Mapping[str, str], path: Path, opts: PodValidationOptions
    ) -> List[FieldViolation]:
        errs: List[FieldViolation] = []
        for k, v in labels.items():
            for msg in is_qualified_name(k):
                errs.append(invalid(path, k, msg))
            if opts.allow_invalid_label_value:
                continue
            for msg in is_valid_label_value(v):
                errs.append(invalid(path.key(k), v, msg))
        return errs

    def _validate_annotations(self, annotations: Mapping[str, str], path: Path) -> List[FieldViolation]:
        errs: List[FieldViolation] = []
        for k in annotations:
            for msg in is_qualified_name(k.lower()):
                errs.append(invalid(path, k, msg))
        return errs

    def _validate_pod_spec(self, spec: PodSpec, path: Path, opts: PodValidationOptions) -> List[FieldViolation]:
        errs: List[FieldViolation] = []

        volume_names, vol_errs = self._validate_volumes(spec, path.child("volumes"))
        errs.extend(vol_errs)

        if not spec.containers:
            errs.append(required(path.child("containers")))

        seen: Set[str] = set()
        for field_name, containers in (("initContainers", spec.init_containers), ("containers", spec.containers)):
            for i, c in enumerate(containers):
                errs.extend(
                    self._validate_container(c, path.child(field_name).at(i), seen, volume_names, opts)
                )

        if spec.restart_policy is not None and spec.restart_policy not in SUPPORTED_RESTART_POLICIES:
            errs.append(not_supported(path.child("restartPolicy"), spec.restart_policy, SUPPORTED_RESTART_POLICIES))
        if spec.dns_policy is not None and spec.dns_policy not in SUPPORTED_DNS_POLICIES:
            errs.append(not_supported(path.child("dnsPolicy"), spec.dns_policy, SUPPORTED_DNS_POLICIES))

        tgps = spec.termination_grace_period_seconds
        if tgps is not None and tgps < 0:
            errs.append(invalid(path.child("terminationGracePeriodSeconds"), tgps, "must be greater than or equal to 0"))
        ads = spec.active_deadline_seconds
        if ads is not None and not (1 <= ads <= 2147483647):
            errs.append(invalid(path.child("activeDeadlineSeconds"), ads, "must be between 1 and 2147483647, inclusive"))

        for k, v in spec.node_selector.items():
            for msg in is_qualified_name(k):
                errs.append(invalid(path.child("nodeSelector"), k, msg))
            for msg in is_valid_label_value(v):
                errs.append(invalid(path.child("nodeSelector").key(k), v, msg))

        return errs

    def _validate_volumes(self, spec: PodSpec, path: Path) -> tuple[Set[str], List[FieldViolation]]:
        errs: List[FieldViolation] = []
        names: Set[str] = set()
        for i, vol in enumerate(spec.volumes):
            name_path = path.at(i).child("name")
            if not vol.name:
                errs.append(required(name_path))
                continue
            for msg in is_dns1123_label(vol.name):
                errs.append(invalid(name_path, vol.name, msg))
            if vol.name in names:
                errs.append(invalid(name_path, vol.name, "duplicate volume name"))
            names.add(vol.name)
        return names, errs

    def _validate_container(
        self,
        c: Container,
        path: Path,
        seen_names: Set[str],
        volume_names: Set[str],
        opts: PodValidationOptions,
    ) -> List[FieldViolation]:
        errs: List[FieldViolation] = []

        if not c.name:
            errs.append(required(path.child("name")))
        else:
            for msg in is_dns1123_label(c.name):
                errs.append(invalid(path.child("name"), c.name, msg))
            if c.name in seen_names:
                errs.append(invalid(path.child("name"), c.name, "duplicate container name"))
            seen_names.add(c.name)

        # An image of only whitespace is as good as none.
        if not c.image.strip():
            errs.append(required(path.child("image")))

        if c.image_pull_policy is not None and c.image_pull_policy not in SUPPORTED_PULL_POLICIES:
            errs.append(not_supported(path.child("imagePullPolicy"), c.image_pull_policy, SUPPORTED_PULL_POLICIES))

        errs.extend(self._validate_ports(c, path.child("ports")))
        errs.extend(self._validate_resources(c, path.child("resources"), opts))

        for i, vm in enumerate(c.volume_mounts):
            vm_path = path.child("volumeMounts").at(i)
            if not vm.name:
                errs.append(required(vm_path.child("name")))
            elif vm.name not in volume_names:
                errs.append(invalid(vm_path.child("name"), vm.name, "volume not found"))
            if not vm.mount_path:
                errs.append(required(vm_path.child("mountPath")))

        for i, env in enumerate(c.env):
            if not env.name:
                errs.append(required(path.child("env").at(i).child("name")))

        return errs

    def _validate_ports(self, c: Container, path: Path) -> List[FieldViolation]:
        errs: List[FieldViolation] = []
        port_names: Set[str] = set()
        for i, port in enumerate(c.ports):
            p = path.at(i)
            if port.name:
                for msg in is_valid_port_name(port.name):
                    errs.append(invalid(p.child("name"), port.name, msg))
                if port.name in port_names:
                    errs.append(invalid(p.child("name"), port.name, "duplicate port name"))
                port_names.add(port.name)
            if port.container_port == 0:
                errs.append(required(p.child("containerPort")))
            elif not (1 <= port.container_port <= 65535):
                errs.append(
                    invalid(p.child("containerPort"), port.container_port, "must be between 1 and 65535, inclusive")
                )
            if port.host_port not in (None, 0) and not (1 <= port.host_port <= 65535):
                errs.append(invalid(p.child("hostPort"), port.host_port, "must be between 1 and 65535, inclusive"))
            if port.protocol is not None and port.protocol not in SUPPORTED_PORT_PROTOCOLS:
                errs.append(not_supported(p.child("protocol"), port.protocol, SUPPORTED_PORT_PROTOCOLS))
        return errs

    def _validate_resources(self, c: Container, path: Path, opts: PodValidationOptions) -> List[FieldViolation]:
        errs: List[FieldViolation] = []
        parsed: Dict[str, Dict[str, float]] = {"limits": {}, "requests": {}}
        for section, values in (("limits", c.resources.limits), ("requests", c.resources.requests)):
            for name, raw in values.items():
                q_path = path.child(section).key(name)
                try:
                    q = parse_quantity(raw)
                except ValueError:
                    errs.append(invalid(q_path, raw, "must be a valid quantity"))
                    continue
                if q < 0:
                    errs.append(invalid(q_path, raw, "must be greater than or equal to 0"))
                    continue
                parsed[section][name] = q

        if opts.allow_requests_above_limits:
            return errs
        for name, req in parsed["requests"].items():
            limit = parsed["limits"].get(name)
            if limit is not None and req > limit:
                errs.append(
                    invalid(
                        path.child("requests").key(name),
                        c.resources.requests[name],
                        f"must be less than or equal to {name} limit of {c.resources.limits[name]}",
                    )
                )
        return errs
