"""Built-in rule catalog for Pod manifests.

Document rules run in the order apiVersion, kind, metadata.name, spec.os,
spec.containers. Container rules run per container as name, image, ports,
probes, resources.
"""

import re
from functools import lru_cache

from ..config import PodlintConfig
from ..models import Container, CpuValue, Document, ResourceLimits
from .framework import (
    ContainerRule,
    ErrorCode,
    ValidationReport,
    ValidationRule,
)

MIN_PORT = 1
MAX_PORT = 65535

CONTAINER_NAME_PATTERN = re.compile(r"[a-z0-9_]+")
MEMORY_PATTERN = re.compile(r"[0-9]+(Ki|Mi|Gi)")
_CPU_DIGITS = re.compile(r"[0-9]+")
_IMAGE_TAG = r"[a-zA-Z0-9_.-]+"


@lru_cache(maxsize=8)
def image_pattern(registry: str) -> re.Pattern:
    """``<registry>/<repository>:<tag>`` for the given registry host."""
    return re.compile(rf"{re.escape(registry)}/.+:{_IMAGE_TAG}")


def port_in_range(port: int) -> bool:
    return MIN_PORT <= port <= MAX_PORT


class CpuFormatError(ValueError):
    """Raised when a cpu value is neither an integer nor a digit-only string."""
    pass


def normalize_cpu(value: CpuValue) -> int:
    """Resolve a cpu value to an integer.

    Native integers and digit-only strings are equivalent (``2`` and ``"2"``).
    Booleans, floats and any other string are rejected. Sign is not checked
    here.

    Raises:
        CpuFormatError: For any representation other than int or digit string
    """
    if isinstance(value, bool):
        raise CpuFormatError(f"boolean {value!r} is not a cpu quantity")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _CPU_DIGITS.fullmatch(value):
        return int(value)
    raise CpuFormatError(f"{value!r} is not an integer")


class ApiVersionRule(ValidationRule):
    """apiVersion must equal the supported schema revision."""

    @property
    def name(self) -> str:
        return "api_version"

    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        if document.api_version != config.manifest_schema.api_version:
            report.add_violation(
                self.name,
                ErrorCode.API_VERSION_UNSUPPORTED,
                f"apiVersion has unsupported value '{document.api_version}'",
                "apiVersion",
            )


class KindRule(ValidationRule):
    """kind must equal the supported object kind."""

    @property
    def name(self) -> str:
        return "kind"

    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        if document.kind != config.manifest_schema.kind:
            report.add_violation(
                self.name,
                ErrorCode.KIND_UNSUPPORTED,
                f"kind has unsupported value '{document.kind}'",
                "kind",
            )


class MetadataNameRule(ValidationRule):
    """metadata.name must be non-empty after trimming whitespace."""

    @property
    def name(self) -> str:
        return "metadata_name"

    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        if not document.metadata.name.strip():
            report.add_violation(
                self.name,
                ErrorCode.NAME_REQUIRED,
                "metadata.name is required",
                "metadata.name",
            )


class SpecOsRule(ValidationRule):
    """spec.os must be one of the allowed operating systems."""

    @property
    def name(self) -> str:
        return "spec_os"

    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        if document.spec.os not in config.manifest_schema.allowed_os:
            report.add_violation(
                self.name,
                ErrorCode.OS_UNSUPPORTED,
                f"spec.os has unsupported value '{document.spec.os}'",
                "spec.os",
            )


class SpecContainersRule(ValidationRule):
    """spec.containers must hold at least one container."""

    @property
    def name(self) -> str:
        return "spec_containers"

    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        if not document.spec.containers:
            report.add_violation(
                self.name,
                ErrorCode.CONTAINERS_REQUIRED,
                "spec.containers is required",
                "spec.containers",
            )
        report.increment_counter("containers_checked", len(document.spec.containers))


class ContainerNameRule(ContainerRule):
    """Container name is required and limited to lowercase letters, digits and underscores."""

    @property
    def name(self) -> str:
        return "container_name"

    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        if not container.name.strip():
            report.add_violation(self.name, ErrorCode.NAME_REQUIRED,
                                 f"{path}.name is required", f"{path}.name")
        elif config.policy.enforce_name_format and not CONTAINER_NAME_PATTERN.fullmatch(container.name):
            report.add_violation(
                self.name,
                ErrorCode.NAME_INVALID_FORMAT,
                f"{path}.name has invalid format '{container.name}'",
                f"{path}.name",
            )


class ContainerImageRule(ContainerRule):
    """Container image must live in the organization registry and carry a tag."""

    @property
    def name(self) -> str:
        return "container_image"

    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        if not container.image.strip():
            report.add_violation(self.name, ErrorCode.IMAGE_REQUIRED,
                                 f"{path}.image is required", f"{path}.image")
            return

        pattern = image_pattern(config.manifest_schema.image_registry)
        if not pattern.fullmatch(container.image):
            report.add_violation(
                self.name,
                ErrorCode.IMAGE_INVALID_FORMAT,
                f"{path}.image has invalid format '{container.image}'",
                f"{path}.image",
            )


class ContainerPortsRule(ContainerRule):
    """containerPort must be within 1-65535 and protocol, when set, TCP or UDP."""

    @property
    def name(self) -> str:
        return "container_ports"

    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        if config.policy.require_ports and not container.ports:
            report.add_violation(self.name, ErrorCode.PORTS_REQUIRED,
                                 f"{path}.ports is required", f"{path}.ports")
            return

        allowed = config.manifest_schema.allowed_protocols
        for index, port in enumerate(container.ports):
            port_path = f"{path}.ports[{index}]"
            report.increment_counter("ports_checked")

            if not port_in_range(port.container_port):
                report.add_violation(
                    self.name,
                    ErrorCode.PORT_OUT_OF_RANGE,
                    f"{port_path}.containerPort value out of range ({port.container_port})",
                    f"{port_path}.containerPort",
                )
            if port.protocol and port.protocol not in allowed:
                report.add_violation(
                    self.name,
                    ErrorCode.PROTOCOL_UNSUPPORTED,
                    f"{port_path}.protocol has unsupported value '{port.protocol}'",
                    f"{port_path}.protocol",
                )


class ContainerProbesRule(ContainerRule):
    """Each defined probe must target an httpGet port within 1-65535."""

    @property
    def name(self) -> str:
        return "container_probes"

    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        for probe_name, probe in container.probes():
            report.increment_counter("probes_checked")
            port = probe.http_get.port
            if not port_in_range(port):
                port_path = f"{path}.{probe_name}.httpGet.port"
                report.add_violation(
                    self.name,
                    ErrorCode.PROBE_PORT_OUT_OF_RANGE,
                    f"{port_path} value out of range ({port})",
                    port_path,
                )


class ContainerResourcesRule(ContainerRule):
    """resources.limits needs a positive integer cpu and a Ki/Mi/Gi memory quantity."""

    @property
    def name(self) -> str:
        return "container_resources"

    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        resources = container.resources
        if resources is None:
            if not config.policy.require_resources:
                return
            self._check(ResourceLimits(), f"{path}.resources.limits", True, report)
            return

        self._check(resources.limits, f"{path}.resources.limits", True, report)
        if resources.requests is not None:
            self._check(resources.requests, f"{path}.resources.requests", False, report)

    def _check(self, values: ResourceLimits, path: str, required: bool,
               report: ValidationReport) -> None:
        cpu_path = f"{path}.cpu"
        if values.cpu is None:
            if required:
                report.add_violation(self.name, ErrorCode.CPU_REQUIRED,
                                     f"{cpu_path} is required", cpu_path)
        else:
            try:
                cpu = normalize_cpu(values.cpu)
            except CpuFormatError:
                report.add_violation(
                    self.name,
                    ErrorCode.CPU_INVALID_TYPE,
                    f"{cpu_path} has invalid format {values.cpu!r}, expected a positive integer",
                    cpu_path,
                )
            else:
                if cpu <= 0:
                    report.add_violation(self.name, ErrorCode.CPU_NOT_POSITIVE,
                                         f"{cpu_path} must be positive, got {cpu}", cpu_path)

        memory_path = f"{path}.memory"
        if not values.memory:
            if required:
                report.add_violation(self.name, ErrorCode.MEMORY_REQUIRED,
                                     f"{memory_path} is required", memory_path)
        elif not MEMORY_PATTERN.fullmatch(values.memory):
            report.add_violation(
                self.name,
                ErrorCode.MEMORY_INVALID_FORMAT,
                f"{memory_path} has invalid format '{values.memory}'",
                memory_path,
            )


def default_document_rules() -> list[ValidationRule]:
    """Document rules in evaluation order."""
    return [
        ApiVersionRule(),
        KindRule(),
        MetadataNameRule(),
        SpecOsRule(),
        SpecContainersRule(),
    ]


def default_container_rules() -> list[ContainerRule]:
    """Container rules in evaluation order."""
    return [
        ContainerNameRule(),
        ContainerImageRule(),
        ContainerPortsRule(),
        ContainerProbesRule(),
        ContainerResourcesRule(),
    ]
