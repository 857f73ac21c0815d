"""Core validation framework for Pod manifests.

Rules come in two flavours: document rules see the whole manifest once,
container rules are applied to every container in input order. The engine
runs document rules first, then each container through the full container
rule list, so violations come out in field order.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import FailurePolicy, PodlintConfig
from ..models import Container, Document

logger = logging.getLogger(__name__)


class ValidationStatus(str, Enum):
    """Overall outcome of a validation run."""
    PASS = "pass"
    FAIL = "fail"


class ErrorCode(str, Enum):
    """Stable identifiers for every violation the rules can emit."""

    # Document level
    API_VERSION_UNSUPPORTED = "API_VERSION_UNSUPPORTED"
    KIND_UNSUPPORTED = "KIND_UNSUPPORTED"
    NAME_REQUIRED = "NAME_REQUIRED"
    OS_UNSUPPORTED = "OS_UNSUPPORTED"
    CONTAINERS_REQUIRED = "CONTAINERS_REQUIRED"

    # Container level
    NAME_INVALID_FORMAT = "NAME_INVALID_FORMAT"
    IMAGE_REQUIRED = "IMAGE_REQUIRED"
    IMAGE_INVALID_FORMAT = "IMAGE_INVALID_FORMAT"
    PORTS_REQUIRED = "PORTS_REQUIRED"
    PORT_OUT_OF_RANGE = "PORT_OUT_OF_RANGE"
    PROTOCOL_UNSUPPORTED = "PROTOCOL_UNSUPPORTED"
    PROBE_PORT_OUT_OF_RANGE = "PROBE_PORT_OUT_OF_RANGE"
    CPU_REQUIRED = "CPU_REQUIRED"
    CPU_INVALID_TYPE = "CPU_INVALID_TYPE"
    CPU_NOT_POSITIVE = "CPU_NOT_POSITIVE"
    MEMORY_REQUIRED = "MEMORY_REQUIRED"
    MEMORY_INVALID_FORMAT = "MEMORY_INVALID_FORMAT"

    # Engine
    RULE_EXECUTION_FAILED = "RULE_EXECUTION_FAILED"


@dataclass(frozen=True)
class Violation:
    """A single rule failure."""
    rule: str
    code: ErrorCode
    message: str
    path: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationReport:
    """Ordered result of one validation run."""
    status: ValidationStatus = ValidationStatus.PASS
    violations: list[Violation] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == ValidationStatus.PASS

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = pass, 1 = any violation."""
        return 0 if self.ok else 1

    @property
    def messages(self) -> list[str]:
        return [violation.message for violation in self.violations]

    def add_violation(self, rule: str, code: ErrorCode, message: str, path: str) -> None:
        """Record a violation and mark the report as failed."""
        self.violations.append(Violation(rule, code, message, path))
        self.status = ValidationStatus.FAIL

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self.counters[name] = self.counters.get(name, 0) + value

    def truncate(self, limit: int) -> None:
        """Keep only the first ``limit`` violations."""
        del self.violations[limit:]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "counters": dict(sorted(self.counters.items())),
            "violations": [
                {
                    "rule": violation.rule,
                    "code": violation.code.value,
                    "message": violation.message,
                    "path": violation.path,
                }
                for violation in self.violations
            ],
        }


class ValidationRule(ABC):
    """Base class for rules evaluated once per document."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name for identification."""
        pass

    @abstractmethod
    def validate(self, document: Document, config: PodlintConfig, report: ValidationReport) -> None:
        """Execute the rule.

        Args:
            document: Parsed manifest, read only
            config: podlint configuration
            report: Report to append violations/counters to
        """
        pass


class ContainerRule(ABC):
    """Base class for rules evaluated once per container."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name for identification."""
        pass

    @abstractmethod
    def validate(self, container: Container, path: str, config: PodlintConfig,
                 report: ValidationReport) -> None:
        """Execute the rule for one container.

        Args:
            container: Container under check, read only
            path: Field path of the container, e.g. ``spec.containers[0]``
            config: podlint configuration
            report: Report to append violations/counters to
        """
        pass


def rule_description(rule: ValidationRule | ContainerRule) -> str:
    """First docstring line of a rule class."""
    doc = type(rule).__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


class ValidationEngine:
    """Runs the rule catalog against a document and builds the report.

    The engine keeps no state between runs; one instance can validate any
    number of documents, from any number of threads.
    """

    def __init__(self, config: PodlintConfig | None = None):
        self.config = config or PodlintConfig()
        self.document_rules: list[ValidationRule] = []
        self.container_rules: list[ContainerRule] = []

    @property
    def fail_fast(self) -> bool:
        return self.config.policy.failure_policy == FailurePolicy.FAIL_FAST

    def add_rule(self, rule: ValidationRule | ContainerRule) -> None:
        """Append a rule to the matching rule list."""
        if isinstance(rule, ContainerRule):
            self.container_rules.append(rule)
        else:
            self.document_rules.append(rule)

    def create_default_rules(self) -> None:
        """Register the built-in rule catalog in evaluation order."""
        from .rules import default_container_rules, default_document_rules

        for rule in default_document_rules():
            self.add_rule(rule)
        for rule in default_container_rules():
            self.add_rule(rule)

    def _steps(self, document: Document) -> Iterator[tuple[Any, tuple, str]]:
        for rule in self.document_rules:
            yield rule, (document,), ""
        for index, container in enumerate(document.spec.containers):
            path = f"spec.containers[{index}]"
            for rule in self.container_rules:
                yield rule, (container, path), path

    def validate(self, document: Document) -> ValidationReport:
        """Validate a document.

        Args:
            document: Parsed manifest

        Returns:
            ValidationReport with status, ordered violations and counters
        """
        report = ValidationReport()

        logger.debug(
            f"Running {len(self.document_rules)} document rules and "
            f"{len(self.container_rules)} container rules "
            f"({self.config.policy.failure_policy.value})"
        )

        for rule, args, path in self._steps(document):
            logger.debug(f"Executing rule: {rule.name} {path}".rstrip())
            try:
                rule.validate(*args, self.config, report)
            except Exception as e:
                logger.error(f"Rule {rule.name} failed with error: {e}")
                report.add_violation(
                    rule.name,
                    ErrorCode.RULE_EXECUTION_FAILED,
                    f"Rule execution failed: {e}",
                    path,
                )

            if self.fail_fast and report.violations:
                report.truncate(1)
                break

        logger.debug(f"Validation completed with status: {report.status.value}, "
                     f"{len(report.violations)} violation(s)")
        return report


def validate(document: Document, config: PodlintConfig | None = None) -> ValidationReport:
    """Validate a document with the default rule catalog."""
    engine = ValidationEngine(config)
    engine.create_default_rules()
    return engine.validate(document)
