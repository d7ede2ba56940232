"""Kubernetes client construction for the home cluster and remote clusters."""

import asyncio
import base64
import binascii
from typing import Any, Dict, Optional

import urllib3
import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from .config import RemoteCluster
from .errors import ClusterUnreachable, CredentialMalformed, CredentialNotFound, UpstreamApiError
from .logging_config import get_logger, log_function_entry, log_function_exit, log_k8s_operation

logger = get_logger(__name__)

KUBECONFIG_KEY = "value"

# Remote clusters are expected to serve self-issued certificates.
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def load_home_client(kubeconfig_path: Optional[str] = None, context: Optional[str] = None) -> client.ApiClient:
    """Build a client for the cluster landingpage runs in.

    The in-cluster service account is tried first, then the local kubeconfig.

    Raises:
        ClusterUnreachable: If neither source yields a usable configuration.
    """
    log_function_entry(logger, "load_home_client", kubeconfig_path=kubeconfig_path, context=context)
    configuration = client.Configuration()
    try:
        if kubeconfig_path:
            logger.debug("Loading kubeconfig from file", kubeconfig_path=kubeconfig_path, context=context)
            config.load_kube_config(config_file=kubeconfig_path, context=context,
                                    client_configuration=configuration)
        else:
            try:
                config.load_incluster_config(client_configuration=configuration)
                logger.debug("Loaded in-cluster config")
            except ConfigException:
                logger.debug("No in-cluster config, falling back to kubeconfig", context=context)
                config.load_kube_config(context=context, client_configuration=configuration)
        api_client = client.ApiClient(configuration=configuration)
    except Exception as e:
        logger.error("Failed to create home cluster client", error=str(e))
        raise ClusterUnreachable(f"Could not create client for the home cluster: {e}") from e

    log_function_exit(logger, "load_home_client", host=configuration.host, status="success")
    return api_client


def _read_kubeconfig_secret(remote: RemoteCluster, home_client: client.ApiClient) -> bytes:
    ref = remote.credential_secret_ref
    secret_name = f"{ref.namespace}/{ref.name}"
    log_k8s_operation(logger, "read_secret", remote.name, secret=secret_name)

    try:
        secret = client.CoreV1Api(home_client).read_namespaced_secret(name=ref.name, namespace=ref.namespace)
    except ApiException as e:
        if e.status == 404:
            raise CredentialNotFound(f"Could not get kubeconfig secret {secret_name}: not found") from e
        raise UpstreamApiError(f"Could not get kubeconfig secret {secret_name}: {e.reason}", status=e.status) from e

    data = secret.data or {}
    if not data:
        raise CredentialMalformed(f"Could not get kubeconfig secret {secret_name}: no data")
    encoded = data.get(KUBECONFIG_KEY)
    if encoded is None:
        raise CredentialMalformed(
            f"Could not get kubeconfig secret {secret_name}: no data field {KUBECONFIG_KEY}"
        )
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CredentialMalformed(f"Kubeconfig secret {secret_name} is not valid base64: {e}") from e


def parse_kubeconfig(raw: bytes) -> Dict[str, Any]:
    """Parse a kubeconfig document.

    Raises:
        CredentialMalformed: If the document is not a YAML mapping.
    """
    try:
        document = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise CredentialMalformed(f"Could not parse kubeconfig: {e}") from e
    if not isinstance(document, dict):
        raise CredentialMalformed("Could not parse kubeconfig: document is not a mapping")
    return document


def build_remote_client(kubeconfig: Dict[str, Any]) -> client.ApiClient:
    """Create an ApiClient from a parsed kubeconfig, skipping TLS verification."""
    configuration = client.Configuration()
    try:
        config.load_kube_config_from_dict(
            config_dict=kubeconfig,
            client_configuration=configuration,
            persist_config=False,
        )
    except Exception as e:
        # misshapen documents surface as AttributeError, KeyError or TypeError from the loader
        raise CredentialMalformed(f"Invalid kubeconfig: {e}") from e

    configuration.verify_ssl = False

    try:
        return client.ApiClient(configuration=configuration)
    except Exception as e:
        raise ClusterUnreachable(f"Could not create client for {configuration.host}: {e}") from e


def _resolve(remote: RemoteCluster, home_client: client.ApiClient) -> client.ApiClient:
    raw = _read_kubeconfig_secret(remote, home_client)
    return build_remote_client(parse_kubeconfig(raw))


async def resolve_remote_client(remote: RemoteCluster, home_client: client.ApiClient) -> client.ApiClient:
    """Turn a remote cluster descriptor into a client scoped to that cluster.

    The kubeconfig is read from the Secret referenced by the descriptor,
    using the home cluster client. No retries are attempted.

    Args:
        remote: Remote cluster descriptor.
        home_client: Authenticated client for the home cluster.

    Returns:
        Client for the remote cluster. The caller owns it and should close it.

    Raises:
        CredentialNotFound: The Secret does not exist.
        CredentialMalformed: The Secret content cannot be used.
        ClusterUnreachable: The client could not be constructed.
        UpstreamApiError: Reading the Secret failed for another reason.
    """
    log_function_entry(logger, "resolve_remote_client", cluster=remote.name)
    remote_client = await asyncio.to_thread(_resolve, remote, home_client)
    logger.debug("Resolved remote cluster client",
                 cluster=remote.name,
                 host=remote_client.configuration.host)
    log_function_exit(logger, "resolve_remote_client", cluster=remote.name, status="success")
    return remote_client
