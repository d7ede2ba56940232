"""Per-cluster aggregation of route records into display entries."""

from typing import List, Optional

from kubernetes import client

from .config import LocalCluster, RemoteCluster
from .credentials import resolve_remote_client
from .logging_config import get_logger, log_function_entry, log_function_exit
from .models import (
    DESCRIPTION_ANNOTATION,
    LOCAL_GROUP,
    NAME_ANNOTATION,
    ClusterEntry,
    RouteEntry,
    RouteRecord,
)
from .scanner import scan_routes

logger = get_logger(__name__)


def build_url(host: str, path_prefix: Optional[str]) -> str:
    return f"https://{host}{path_prefix or '/'}"


def to_route_entry(record: RouteRecord) -> RouteEntry:
    """Map a route record to its display entry, honouring annotation overrides."""
    return RouteEntry(
        name=record.annotations.get(NAME_ANNOTATION, record.name),
        description=record.annotations.get(DESCRIPTION_ANNOTATION, ""),
        url=build_url(record.host, record.path_prefix),
    )


class ClusterAggregator:
    """Produces the ClusterEntry for one local or remote cluster."""

    def __init__(self, home_client: client.ApiClient, only_with_annotation: bool = False):
        self.home_client = home_client
        self.only_with_annotation = only_with_annotation

    async def collect_records(
        self,
        api_client: client.ApiClient,
        namespaces: Optional[List[str]],
        cluster: str,
    ) -> List[RouteRecord]:
        """Scan the given namespaces in order, or the whole cluster.

        The first failing namespace aborts the collection for the cluster.
        """
        if not namespaces:
            return await scan_routes(api_client, None, self.only_with_annotation, cluster=cluster)

        records = []
        for namespace in namespaces:
            records.extend(
                await scan_routes(api_client, namespace, self.only_with_annotation, cluster=cluster)
            )
        return records

    async def aggregate_local(self, local: LocalCluster) -> ClusterEntry:
        """Aggregate the home cluster with the home client."""
        log_function_entry(logger, "aggregate_local", namespaces=local.namespaces)
        records = await self.collect_records(self.home_client, local.namespaces, LOCAL_GROUP)
        entry = self.to_cluster_entry(LOCAL_GROUP, local.description, records)
        log_function_exit(logger, "aggregate_local", routes=len(entry.routes))
        return entry

    async def aggregate_remote(self, remote: RemoteCluster) -> ClusterEntry:
        """Aggregate a remote cluster through its kubeconfig secret."""
        log_function_entry(logger, "aggregate_remote", cluster=remote.name, namespaces=remote.namespaces)
        remote_client = await resolve_remote_client(remote, self.home_client)
        try:
            records = await self.collect_records(remote_client, remote.namespaces, remote.name)
        finally:
            remote_client.close()
        entry = self.to_cluster_entry(remote.name, remote.description, records)
        log_function_exit(logger, "aggregate_remote", cluster=remote.name, routes=len(entry.routes))
        return entry

    @staticmethod
    def to_cluster_entry(name: str, description: Optional[str], records: List[RouteRecord]) -> ClusterEntry:
        return ClusterEntry(
            name=name,
            description=description or "",
            routes=tuple(to_route_entry(record) for record in records),
        )
