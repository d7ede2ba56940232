"""Exception hierarchy for landingpage."""

from typing import Optional


class LandingPageError(Exception):
    """Base class for all landingpage errors."""


class ConfigError(LandingPageError):
    """The configuration file is missing or invalid."""


class CredentialNotFound(LandingPageError):
    """The kubeconfig secret for a remote cluster does not exist."""


class CredentialMalformed(LandingPageError):
    """The kubeconfig secret exists but cannot be turned into a client."""


class ClusterUnreachable(CredentialMalformed):
    """A client for the cluster could not be constructed."""


class ScanFailed(LandingPageError):
    """Listing Ingress objects failed."""


class UpstreamApiError(LandingPageError):
    """The Kubernetes API answered with an unexpected error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
