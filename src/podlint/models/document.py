"""Typed, immutable representation of a parsed Pod manifest.

The models only describe shape. Required scalars default to empty values so
that a manifest with missing fields still loads and the validation rules,
not the loader, report what is missing. Unknown keys are ignored.
"""

from typing import Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

# cpu is carried exactly as written and normalized by the resource rule.
# Strict members keep YAML's native type (true stays bool, 2.5 stays float).
CpuValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data):
        """Treat explicit YAML nulls as absent keys."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ResourceLimits(_FrozenModel):
    """cpu / memory pair used for both limits and requests."""
    cpu: CpuValue = None
    memory: StrictStr | None = None


class Resources(_FrozenModel):
    """Container resource requirements."""
    limits: ResourceLimits = Field(default_factory=ResourceLimits)
    requests: ResourceLimits | None = None


class HTTPGetAction(_FrozenModel):
    """HTTP GET probe target."""
    path: StrictStr = ""
    port: StrictInt = 0


class Probe(_FrozenModel):
    """Readiness or liveness probe."""
    http_get: HTTPGetAction = Field(alias="httpGet", default_factory=HTTPGetAction)


class ContainerPort(_FrozenModel):
    """Port exposed by a container."""
    container_port: StrictInt = Field(alias="containerPort", default=0)
    protocol: StrictStr | None = None


class Container(_FrozenModel):
    """Single container of the Pod."""
    name: StrictStr = ""
    image: StrictStr = ""
    ports: tuple[ContainerPort, ...] = ()
    readiness_probe: Probe | None = Field(alias="readinessProbe", default=None)
    liveness_probe: Probe | None = Field(alias="livenessProbe", default=None)
    resources: Resources | None = None

    def probes(self) -> list[tuple[str, Probe]]:
        """Defined probes keyed by field name, in evaluation order."""
        defined = []
        if self.readiness_probe is not None:
            defined.append(("readinessProbe", self.readiness_probe))
        if self.liveness_probe is not None:
            defined.append(("livenessProbe", self.liveness_probe))
        return defined


class PodSpec(_FrozenModel):
    """Pod spec section."""
    os: StrictStr = ""
    containers: tuple[Container, ...] = ()


class Metadata(_FrozenModel):
    """Object metadata."""
    name: StrictStr = ""
    namespace: StrictStr | None = None
    labels: dict[StrictStr, StrictStr] = Field(default_factory=dict)

    @field_validator("labels", mode="before")
    @classmethod
    def drop_null_labels(cls, v):
        if isinstance(v, dict):
            return {k: value for k, value in v.items() if value is not None}
        return v


class Document(_FrozenModel):
    """Top-level Pod manifest."""
    api_version: StrictStr = Field(
        default="",
        validation_alias=AliasChoices("apiVersion", "schemaVersion", "api_version"),
        serialization_alias="apiVersion",
    )
    kind: StrictStr = ""
    metadata: Metadata = Field(default_factory=Metadata)
    spec: PodSpec = Field(default_factory=PodSpec)
