"""Validation engine for Pod manifests.

The engine walks an already-parsed ``Document`` and reports every rule
violation, in field order, without raising or mutating the document.
"""

from .framework import (
    ContainerRule,
    ErrorCode,
    ValidationEngine,
    ValidationReport,
    ValidationRule,
    ValidationStatus,
    Violation,
    validate,
)
from .rules import (
    ApiVersionRule,
    ContainerImageRule,
    ContainerNameRule,
    ContainerPortsRule,
    ContainerProbesRule,
    ContainerResourcesRule,
    KindRule,
    MetadataNameRule,
    SpecContainersRule,
    SpecOsRule,
    normalize_cpu,
)

__all__ = [
    "ValidationEngine",
    "ValidationReport",
    "ValidationRule",
    "ContainerRule",
    "ValidationStatus",
    "Violation",
    "ErrorCode",
    "validate",
    "normalize_cpu",
    "ApiVersionRule",
    "KindRule",
    "MetadataNameRule",
    "SpecOsRule",
    "SpecContainersRule",
    "ContainerNameRule",
    "ContainerImageRule",
    "ContainerPortsRule",
    "ContainerProbesRule",
    "ContainerResourcesRule",
]
