"""Loading of Pod manifests from YAML into the document model.

The loader owns every failure that happens before validation: unreadable
files and text that cannot be turned into a ``Document``. Rule violations
are never raised from here.
"""

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from podlint.models import Document

logger = logging.getLogger(__name__)

_MERGE_TAG = "tag:yaml.org,2002:merge"
TOO_DEEP_MESSAGE = "cannot unmarshal file content: document nested too deeply"


class PodlintError(Exception):
    """Base class for errors that stop a podlint run."""
    pass


class DocumentReadError(PodlintError):
    """Raised when the manifest file cannot be read."""
    pass


class DocumentParseError(PodlintError):
    """Raised when the manifest text cannot be parsed into a Document."""

    def __init__(self, message: str, details: list[str] | None = None):
        self.details = details or []
        super().__init__(message)


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate keys inside one mapping."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                if not isinstance(key, Hashable):
                    continue  # SafeLoader reports unhashable keys itself
                if key in seen:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class LoadedDocument:
    """A parsed document together with the text it came from."""
    path: Path
    source_text: str
    document: Document


def read_source(path: str | Path) -> str:
    """Read manifest text from disk.

    Raises:
        DocumentReadError: If the file is missing, unreadable or not UTF-8
    """
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(f"cannot read file content: {e}") from e


def _describe_errors(error: ValidationError) -> list[str]:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        details.append(f"{location}: {item['msg']}")
    return details


def parse_document(text: str) -> Document:
    """Parse YAML text into a Document.

    An empty text yields an empty Document, which later fails the
    required-field rules.

    Raises:
        DocumentParseError: On YAML syntax errors, duplicate keys, a
            non-mapping top level, or fields of the wrong type
    """
    try:
        data = yaml.load(text, Loader=UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise DocumentParseError(f"cannot unmarshal file content: {e}") from e
    except RecursionError as e:
        raise DocumentParseError(TOO_DEEP_MESSAGE) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocumentParseError(
            f"cannot unmarshal file content: expected a mapping at top level, got {type(data).__name__}"
        )

    try:
        document = Document.model_validate(data)
    except ValidationError as e:
        details = _describe_errors(e)
        raise DocumentParseError(
            f"cannot unmarshal file content: {'; '.join(details)}", details
        ) from e
    except RecursionError as e:
        raise DocumentParseError(TOO_DEEP_MESSAGE) from e

    logger.debug(f"Parsed document with {len(document.spec.containers)} container(s)")
    return document


def load_document(path: str | Path) -> LoadedDocument:
    """Read and parse a manifest file."""
    path = Path(path)
    logger.debug(f"Loading manifest from {path}")
    text = read_source(path)
    return LoadedDocument(path=path, source_text=text, document=parse_document(text))
