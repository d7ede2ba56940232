"""Tests for snapshot construction."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from landingpage.aggregator import ClusterAggregator
from landingpage.collector import build_snapshot
from landingpage.config import Config
from landingpage.errors import CredentialMalformed, ScanFailed
from landingpage.models import ClusterEntry


def cluster_entry(name):
    return ClusterEntry(name=name, description="", routes=())


async def fake_remote(self, remote):
    return cluster_entry(remote.name)


async def fake_local(self, local):
    return cluster_entry("local")


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    @pytest.mark.asyncio
    async def test_nothing_configured(self, home_client):
        config = Config.model_validate({"local": {"enabled": False}})
        assert await build_snapshot(config, home_client) == ()

    @pytest.mark.asyncio
    async def test_groups_in_configuration_order(self, sample_config, home_client):
        with patch.object(ClusterAggregator, "aggregate_local", fake_local), \
                patch.object(ClusterAggregator, "aggregate_remote", fake_remote):
            snapshot = await build_snapshot(sample_config, home_client)

        assert [g.name for g in snapshot] == ["local", "production", "staging"]
        assert [c.name for c in snapshot[0].clusters] == ["local"]
        assert [c.name for c in snapshot[1].clusters] == ["prod-eu", "prod-us"]
        assert [c.name for c in snapshot[2].clusters] == ["staging"]

    @pytest.mark.asyncio
    async def test_local_disabled(self, sample_config, home_client):
        config = sample_config.model_copy(update={"local": None})

        with patch.object(ClusterAggregator, "aggregate_remote", fake_remote):
            snapshot = await build_snapshot(config, home_client)

        assert [g.name for g in snapshot] == ["production", "staging"]

    @pytest.mark.asyncio
    async def test_local_failure_propagates(self, sample_config, home_client):
        async def failing_local(self, local):
            raise ScanFailed("home cluster down")

        with patch.object(ClusterAggregator, "aggregate_local", failing_local), \
                patch.object(ClusterAggregator, "aggregate_remote", fake_remote):
            with pytest.raises(ScanFailed, match="home cluster down"):
                await build_snapshot(sample_config, home_client)

    @pytest.mark.asyncio
    async def test_remote_failure_isolated(self, sample_config, home_client):
        async def flaky_remote(self, remote):
            if remote.name == "prod-us":
                raise CredentialMalformed("bad kubeconfig")
            return cluster_entry(remote.name)

        with patch.object(ClusterAggregator, "aggregate_local", fake_local), \
                patch.object(ClusterAggregator, "aggregate_remote", flaky_remote):
            snapshot = await build_snapshot(sample_config, home_client)

        assert [c.name for c in snapshot[1].clusters] == ["prod-eu"]
        assert [c.name for c in snapshot[2].clusters] == ["staging"]

    @pytest.mark.asyncio
    async def test_group_kept_when_all_clusters_fail(self, sample_config, home_client):
        async def failing_remote(self, remote):
            raise RuntimeError("unexpected")

        with patch.object(ClusterAggregator, "aggregate_local", fake_local), \
                patch.object(ClusterAggregator, "aggregate_remote", failing_remote):
            snapshot = await build_snapshot(sample_config, home_client)

        assert [g.name for g in snapshot] == ["local", "production", "staging"]
        assert snapshot[1].clusters == ()
        assert snapshot[2].clusters == ()

    @pytest.mark.asyncio
    async def test_order_independent_of_completion(self, sample_config, home_client):
        async def slow_first(self, remote):
            if remote.name == "prod-eu":
                await asyncio.sleep(0.05)
            return cluster_entry(remote.name)

        config = sample_config.model_copy(update={"local": None})
        with patch.object(ClusterAggregator, "aggregate_remote", slow_first):
            snapshot = await build_snapshot(config, home_client)

        assert [c.name for c in snapshot[0].clusters] == ["prod-eu", "prod-us"]

    @pytest.mark.asyncio
    async def test_idempotent(self, sample_config, home_client):
        with patch.object(ClusterAggregator, "aggregate_local", fake_local), \
                patch.object(ClusterAggregator, "aggregate_remote", fake_remote):
            first = await build_snapshot(sample_config, home_client)
            second = await build_snapshot(sample_config, home_client)

        assert first == second


class TestBuildSnapshotAgainstApi:
    """End to end through credentials and scanner with mocked Kubernetes APIs."""

    @pytest.mark.asyncio
    async def test_unparsable_credential_bundle(self, make_ingress, make_secret, remote_kubeconfig, home_client):
        config = Config.model_validate({
            "remote": {
                "production": [
                    {"name": "good", "kubeconfigSecret": {"name": "good", "namespace": "lp"}},
                    {"name": "broken", "kubeconfigSecret": {"name": "broken", "namespace": "lp"}},
                ],
            },
        })
        secrets = {
            "good": make_secret(remote_kubeconfig),
            "broken": make_secret(b"clusters: [unclosed"),
        }

        core_v1 = MagicMock()
        core_v1.read_namespaced_secret.side_effect = lambda name, namespace: secrets[name]
        networking = MagicMock()
        networking.list_ingress_for_all_namespaces.return_value.items = [
            make_ingress(name="shop", rules=[("shop.example.com", ["/app"])]),
        ]

        with patch("landingpage.credentials.client.CoreV1Api", return_value=core_v1), \
                patch("landingpage.scanner.client.NetworkingV1Api", return_value=networking):
            snapshot = await build_snapshot(config, home_client)

        assert len(snapshot) == 1
        group = snapshot[0]
        assert group.name == "production"
        assert [c.name for c in group.clusters] == ["good"]
        assert [(r.name, r.url) for r in group.clusters[0].routes] == [
            ("shop", "https://shop.example.com/app"),
        ]

    @pytest.mark.asyncio
    async def test_local_only_with_annotation(self, make_ingress, home_client):
        config = Config.model_validate({
            "global": {"onlyWithAnnotation": True},
            "local": {"enabled": True, "description": "Home"},
        })
        networking = MagicMock()
        networking.list_ingress_for_all_namespaces.return_value.items = [
            make_ingress(name="plain", rules=[("plain.example.com", ["/"])]),
            make_ingress(name="tagged",
                         annotations={"landingpage.info/name": "Tagged",
                                      "landingpage.info/description": "Shown"},
                         rules=[("tagged.example.com", [None])]),
        ]

        with patch("landingpage.scanner.client.NetworkingV1Api", return_value=networking):
            snapshot = await build_snapshot(config, home_client)

        routes = snapshot[0].clusters[0].routes
        assert [(r.name, r.description, r.url) for r in routes] == [
            ("Tagged", "Shown", "https://tagged.example.com/"),
        ]
