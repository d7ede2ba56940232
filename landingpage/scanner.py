"""Ingress scanning: list Ingress objects and flatten them into route records."""

import asyncio
from typing import Any, Iterable, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from .errors import ScanFailed
from .logging_config import get_logger, log_k8s_operation
from .models import DESCRIPTION_ANNOTATION, NAME_ANNOTATION, RouteRecord

logger = get_logger(__name__)


def has_landingpage_annotation(ingress: Any) -> bool:
    """Return True if the ingress carries a name or description annotation."""
    annotations = ingress.metadata.annotations
    if not annotations:
        return False
    return NAME_ANNOTATION in annotations or DESCRIPTION_ANNOTATION in annotations


def ingress_to_records(ingress: Any) -> List[RouteRecord]:
    """Flatten one Ingress into one record per (rule with host, path)."""
    spec = ingress.spec
    if spec is None:
        logger.debug("Skipping ingress without spec", ingress_name=ingress.metadata.name)
        return []

    metadata = ingress.metadata
    name = metadata.name or metadata.generate_name
    records = []
    for rule in spec.rules or []:
        if not rule.host:
            logger.debug("Skipping rule without host", ingress_name=name)
            continue
        paths = rule.http.paths if rule.http is not None else None
        for path in paths or []:
            records.append(RouteRecord(
                name=name,
                namespace=metadata.namespace or "default",
                host=rule.host,
                path_prefix=path.path,
                # TLS sections are not inspected; every route is linked as https
                is_secure=True,
                annotations=metadata.annotations or {},
                labels=metadata.labels or {},
            ))
    return records


def filter_and_flatten(ingresses: Iterable[Any], only_with_annotation: bool) -> List[RouteRecord]:
    """Apply the annotation filter and flatten the ingresses in list order."""
    records = []
    for ingress in ingresses:
        if only_with_annotation and not has_landingpage_annotation(ingress):
            logger.debug("Skipping ingress without landingpage annotation",
                         ingress_name=ingress.metadata.name,
                         namespace=ingress.metadata.namespace)
            continue
        records.extend(ingress_to_records(ingress))
    return records


def _list_ingresses(api_client: client.ApiClient, namespace: Optional[str]) -> List[Any]:
    networking_v1 = client.NetworkingV1Api(api_client)
    if namespace:
        response = networking_v1.list_namespaced_ingress(namespace=namespace)
    else:
        response = networking_v1.list_ingress_for_all_namespaces()
    return response.items or []


async def scan_routes(
    api_client: client.ApiClient,
    namespace: Optional[str] = None,
    only_with_annotation: bool = False,
    cluster: str = "",
) -> List[RouteRecord]:
    """List Ingress objects and return their route records in scan order.

    Args:
        api_client: Client for the cluster to scan.
        namespace: Namespace to list, or None for the whole cluster.
        only_with_annotation: Drop ingresses without a landingpage annotation.
        cluster: Cluster name, only used for logging.

    Raises:
        ScanFailed: If the list call fails. No partial result is returned.
    """
    log_k8s_operation(logger, "list_ingress", cluster, namespace=namespace or "*")
    try:
        ingresses = await asyncio.to_thread(_list_ingresses, api_client, namespace)
    except ApiException as e:
        raise ScanFailed(
            f"Could not list ingresses in {namespace or 'all namespaces'}: {e.status} {e.reason}"
        ) from e
    except Exception as e:
        raise ScanFailed(f"Could not list ingresses in {namespace or 'all namespaces'}: {e}") from e

    records = filter_and_flatten(ingresses, only_with_annotation)
    logger.debug("Scanned ingresses",
                 cluster=cluster,
                 namespace=namespace or "*",
                 ingresses=len(ingresses),
                 routes=len(records))
    return records
