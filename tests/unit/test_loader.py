"""Unit tests for manifest loading."""

import time

import pytest
from pydantic import ValidationError

from podlint.loader import (
    DocumentParseError,
    DocumentReadError,
    PodlintError,
    load_document,
    parse_document,
    read_source,
)
from podlint.models import Document


class TestReadSource:
    """Test reading manifest text."""

    def test_read_file(self, manifest_file, manifest_text):
        assert read_source(manifest_file()) == manifest_text

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentReadError, match="cannot read file content"):
            read_source(tmp_path / "missing.yaml")

    def test_directory(self, tmp_path):
        with pytest.raises(DocumentReadError):
            read_source(tmp_path)

    def test_errors_share_base_class(self):
        assert issubclass(DocumentReadError, PodlintError)
        assert issubclass(DocumentParseError, PodlintError)


class TestParseDocument:
    """Test YAML parsing into the document model."""

    def test_parse_valid_manifest(self, manifest_text):
        document = parse_document(manifest_text)

        assert document.api_version == "v1"
        assert document.kind == "Pod"
        assert document.metadata.name == "web"
        assert document.metadata.namespace == "default"
        assert document.metadata.labels == {"app": "web"}
        assert document.spec.os == "linux"

        container = document.spec.containers[0]
        assert container.name == "api"
        assert container.ports[0].container_port == 8080
        assert container.ports[0].protocol == "TCP"
        assert container.readiness_probe.http_get.path == "/healthz"
        assert container.liveness_probe is None
        assert container.resources.limits.cpu == 1
        assert container.resources.limits.memory == "256Mi"
        assert container.resources.requests is None

    def test_empty_text_gives_empty_document(self):
        document = parse_document("")

        assert document.api_version == ""
        assert document.metadata.name == ""
        assert document.spec.containers == ()

    def test_missing_fields_default_to_empty(self):
        document = parse_document("kind: Pod\nspec:\n  containers:\n    - name: api\n")

        container = document.spec.containers[0]
        assert container.image == ""
        assert container.ports == ()
        assert container.resources is None
        assert document.spec.os == ""

    def test_explicit_nulls_are_absent(self):
        document = parse_document("metadata:\n  name:\nspec:\n  os: ~\n")
        assert document.metadata.name == ""
        assert document.spec.os == ""

    def test_unknown_keys_ignored(self):
        document = parse_document("kind: Pod\nstatus:\n  phase: Running\n")
        assert document.kind == "Pod"

    def test_schema_version_key(self):
        assert parse_document("schemaVersion: v1\n").api_version == "v1"

    @pytest.mark.parametrize("text,cpu", [
        ("cpu: 2", 2),
        ("cpu: '2'", "2"),
        ("cpu: 2.5", 2.5),
        ("cpu: true", True),
        ("cpu: abc", "abc"),
    ])
    def test_cpu_kept_verbatim(self, text, cpu):
        document = parse_document(
            "spec:\n  containers:\n    - resources:\n        limits:\n          " + text + "\n"
        )
        value = document.spec.containers[0].resources.limits.cpu
        assert value == cpu
        assert type(value) is type(cpu)

    def test_syntax_error(self):
        with pytest.raises(DocumentParseError, match="cannot unmarshal file content"):
            parse_document("metadata: [unclosed\n")

    def test_top_level_must_be_mapping(self):
        with pytest.raises(DocumentParseError, match="expected a mapping"):
            parse_document("- a\n- b\n")

    def test_scalar_where_mapping_expected(self):
        with pytest.raises(DocumentParseError) as exc_info:
            parse_document("metadata: web\n")
        assert exc_info.value.details
        assert exc_info.value.details[0].startswith("metadata")

    def test_non_integer_container_port(self):
        with pytest.raises(DocumentParseError, match="containerPort"):
            parse_document("spec:\n  containers:\n    - ports:\n        - containerPort: http\n")

    def test_quoted_integer_port_rejected(self):
        with pytest.raises(DocumentParseError):
            parse_document("spec:\n  containers:\n    - ports:\n        - containerPort: '8080'\n")

    def test_non_string_label_value(self):
        with pytest.raises(DocumentParseError):
            parse_document("metadata:\n  labels:\n    replicas: 3\n")

    def test_duplicate_label_key(self):
        with pytest.raises(DocumentParseError, match="duplicate key"):
            parse_document("metadata:\n  labels:\n    app: web\n    app: api\n")

    def test_duplicate_keys_in_separate_mappings_allowed(self):
        document = parse_document(
            "metadata:\n  name: web\nspec:\n  containers:\n    - name: a\n    - name: b\n"
        )
        assert [c.name for c in document.spec.containers] == ["a", "b"]

    def test_multiple_documents_rejected(self):
        with pytest.raises(DocumentParseError):
            parse_document("kind: Pod\n---\nkind: Pod\n")

    def test_null_label_values_are_absent(self):
        document = parse_document("metadata:\n  labels:\n    app: web\n    tier:\n")
        assert document.metadata.labels == {"app": "web"}

    def test_deeply_nested_input(self):
        text = "metadata:\n  labels: " + "[" * 5000 + "]" * 5000 + "\n"

        with pytest.raises(DocumentParseError, match="nested too deeply"):
            parse_document(text)

    def test_shared_aliases_are_not_expanded(self):
        lines = ["a0: &a0 [x, x, x, x, x, x, x, x, x, x]"]
        for level in range(1, 8):
            refs = ", ".join([f"*a{level - 1}"] * 10)
            lines.append(f"a{level}: &a{level} [{refs}]")
        lines.append("kind: Pod")

        started = time.monotonic()
        document = parse_document("\n".join(lines) + "\n")

        assert document.kind == "Pod"
        assert time.monotonic() - started < 2

    def test_aliased_container(self):
        text = (
            "spec:\n"
            "  containers:\n"
            "    - &api\n"
            "      name: api\n"
            "      image: registry.bigbrother.io/api:1.0\n"
            "    - *api\n"
        )
        document = parse_document(text)
        assert [c.name for c in document.spec.containers] == ["api", "api"]


class TestLoadDocument:
    """Test loading a manifest file."""

    def test_load(self, manifest_file, manifest_text):
        path = manifest_file()
        loaded = load_document(path)

        assert loaded.path == path
        assert loaded.source_text == manifest_text
        assert loaded.document.metadata.name == "web"

    def test_load_missing(self, tmp_path):
        with pytest.raises(DocumentReadError):
            load_document(tmp_path / "nope.yaml")

    def test_load_malformed(self, manifest_file):
        with pytest.raises(DocumentParseError):
            load_document(manifest_file("kind: [Pod\n"))


class TestDocumentModel:
    """Test document immutability."""

    def test_document_is_frozen(self, manifest_data):
        document = Document.model_validate(manifest_data)

        with pytest.raises(ValidationError):
            document.kind = "Deployment"
        with pytest.raises(ValidationError):
            document.spec.containers[0].name = "other"
