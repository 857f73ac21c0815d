"""Document models for podlint."""

from .document import (
    Container,
    ContainerPort,
    CpuValue,
    Document,
    HTTPGetAction,
    Metadata,
    PodSpec,
    Probe,
    ResourceLimits,
    Resources,
)

__all__ = [
    "Container",
    "ContainerPort",
    "CpuValue",
    "Document",
    "HTTPGetAction",
    "Metadata",
    "PodSpec",
    "Probe",
    "ResourceLimits",
    "Resources",
]
