"""Shared fixtures for podlint tests."""

import copy

import pytest

VALID_MANIFEST = """\
apiVersion: v1
kind: Pod
metadata:
  name: web
  namespace: default
  labels:
    app: web
spec:
  os: linux
  containers:
    - name: api
      image: registry.bigbrother.io/api:1.0
      ports:
        - containerPort: 8080
          protocol: TCP
      readinessProbe:
        httpGet:
          path: /healthz
          port: 8080
      resources:
        limits:
          cpu: 1
          memory: 256Mi
"""

VALID_DATA = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {"name": "web", "namespace": "default", "labels": {"app": "web"}},
    "spec": {
        "os": "linux",
        "containers": [
            {
                "name": "api",
                "image": "registry.bigbrother.io/api:1.0",
                "ports": [{"containerPort": 8080, "protocol": "TCP"}],
                "readinessProbe": {"httpGet": {"path": "/healthz", "port": 8080}},
                "resources": {"limits": {"cpu": 1, "memory": "256Mi"}},
            }
        ],
    },
}


@pytest.fixture
def manifest_data():
    """Valid manifest as a plain mapping, safe to mutate."""
    return copy.deepcopy(VALID_DATA)


@pytest.fixture
def container_data(manifest_data):
    """First container of ``manifest_data``."""
    return manifest_data["spec"]["containers"][0]


@pytest.fixture
def manifest_text():
    """Valid manifest as YAML text."""
    return VALID_MANIFEST


@pytest.fixture
def manifest_file(tmp_path):
    """Write YAML text to pod.yaml in a temp dir and return the path."""
    def _write(text: str = VALID_MANIFEST, name: str = "pod.yaml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
