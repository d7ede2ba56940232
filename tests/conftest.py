"""Shared fixtures for landingpage tests."""

import base64
from unittest.mock import MagicMock

import pytest
import yaml

from landingpage.config import Config

REMOTE_KUBECONFIG = {
    "apiVersion": "v1",
    "kind": "Config",
    "clusters": [{"name": "remote", "cluster": {"server": "https://remote.example.com:6443"}}],
    "contexts": [{"name": "remote", "context": {"cluster": "remote", "user": "remote"}}],
    "current-context": "remote",
    "users": [{"name": "remote", "user": {"token": "remote-token"}}],
}


def _make_path(path):
    mock_path = MagicMock()
    mock_path.path = path
    return mock_path


@pytest.fixture
def make_ingress():
    """Factory for Ingress objects shaped like the kubernetes client models.

    ``rules`` is a list of ``(host, paths)`` tuples; ``paths`` of None means the
    rule has no ``http`` block.
    """
    def _make(name="web", namespace="apps", annotations=None, labels=None,
              rules=None, has_spec=True):
        ingress = MagicMock()
        ingress.metadata.name = name
        ingress.metadata.namespace = namespace
        ingress.metadata.annotations = annotations
        ingress.metadata.labels = labels
        if not has_spec:
            ingress.spec = None
            return ingress
        if rules is None:
            ingress.spec.rules = None
            return ingress
        mock_rules = []
        for host, paths in rules:
            rule = MagicMock()
            rule.host = host
            if paths is None:
                rule.http = None
            else:
                rule.http.paths = [_make_path(p) for p in paths]
            mock_rules.append(rule)
        ingress.spec.rules = mock_rules
        return ingress

    return _make


@pytest.fixture
def remote_kubeconfig():
    return dict(REMOTE_KUBECONFIG)


@pytest.fixture
def make_secret():
    """Factory for Secrets holding a kubeconfig under ``value``."""
    def _make(content=None, data=None):
        secret = MagicMock()
        if data is not None:
            secret.data = data
        elif content is None:
            secret.data = None
        else:
            raw = content if isinstance(content, bytes) else yaml.safe_dump(content).encode()
            secret.data = {"value": base64.b64encode(raw).decode()}
        return secret

    return _make


@pytest.fixture
def home_client():
    return MagicMock(name="home_client")


@pytest.fixture
def sample_config():
    return Config.model_validate({
        "global": {"onlyWithAnnotation": False, "refreshIntervalSeconds": 30},
        "local": {"enabled": True, "description": "Home"},
        "remote": {
            "production": [
                {
                    "name": "prod-eu",
                    "description": "Production EU",
                    "kubeconfigSecret": {"name": "prod-eu", "namespace": "landingpage"},
                },
                {
                    "name": "prod-us",
                    "kubeconfigSecret": {"name": "prod-us", "namespace": "landingpage"},
                },
            ],
            "staging": [
                {
                    "name": "staging",
                    "kubeconfigSecret": {"name": "staging", "namespace": "landingpage"},
                    "namespaces": ["web"],
                },
            ],
        },
    })
