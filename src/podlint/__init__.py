"""podlint - Validation CLI for Pod workload descriptors.

podlint loads a Pod manifest written in YAML, checks it against a fixed
catalog of structural and semantic rules, and reports every violation with
a field path and a best-effort source line.
"""

__version__ = "0.1.0"
__author__ = "podlint maintainers"
__description__ = "Validation CLI for Pod workload descriptors"

from podlint.config import PodlintConfig

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "PodlintConfig",
]
