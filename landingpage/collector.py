"""Snapshot construction across the local cluster and all remote groups."""

import asyncio
from typing import List

from kubernetes import client

from .aggregator import ClusterAggregator
from .config import Config, RemoteCluster
from .logging_config import get_logger, log_function_entry, log_function_exit, log_refresh_event
from .models import LOCAL_GROUP, ClusterEntry, GroupEntry, Snapshot

logger = get_logger(__name__)


async def _collect_group(aggregator: ClusterAggregator, group_name: str,
                         clusters: List[RemoteCluster]) -> GroupEntry:
    """Aggregate every cluster of a group, omitting the ones that fail."""
    results = await asyncio.gather(
        *(aggregator.aggregate_remote(remote) for remote in clusters),
        return_exceptions=True,
    )

    entries: List[ClusterEntry] = []
    for remote, result in zip(clusters, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.error("Could not collect ingresses from remote cluster",
                         group=group_name,
                         cluster=remote.name,
                         error_type=type(result).__name__,
                         error=str(result))
            continue
        entries.append(result)

    return GroupEntry(name=group_name, clusters=tuple(entries))


async def build_snapshot(config: Config, home_client: client.ApiClient) -> Snapshot:
    """Build a complete snapshot for the given configuration.

    Remote cluster failures are logged and the cluster left out of its group.
    A failure of the local cluster propagates, since nothing else can be
    trusted without the home cluster.

    Args:
        config: Parsed configuration.
        home_client: Client for the home cluster.

    Returns:
        Groups in configuration order, the local group first.
    """
    log_function_entry(logger, "build_snapshot",
                       local_enabled=config.local_enabled,
                       remote_groups=list(config.remote.keys()))

    aggregator = ClusterAggregator(home_client, config.only_with_annotation)
    groups: List[GroupEntry] = []

    if config.local_enabled:
        local_entry = await aggregator.aggregate_local(config.local)
        groups.append(GroupEntry(name=LOCAL_GROUP, clusters=(local_entry,)))

    for group_name, clusters in config.remote.items():
        groups.append(await _collect_group(aggregator, group_name, clusters))

    snapshot = tuple(groups)
    log_refresh_event(logger, "snapshot_built",
                      groups=len(snapshot),
                      clusters=sum(len(g.clusters) for g in snapshot),
                      routes=sum(len(c.routes) for g in snapshot for c in g.clusters))
    log_function_exit(logger, "build_snapshot", status="success")
    return snapshot
