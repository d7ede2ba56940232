"""Data models for the landingpage route snapshot."""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

NAME_ANNOTATION = "landingpage.info/name"
DESCRIPTION_ANNOTATION = "landingpage.info/description"

LOCAL_GROUP = "local"


class RouteRecord(BaseModel):
    """A single host/path pair discovered on an Ingress object."""

    name: str = Field(..., description="Ingress resource name")
    namespace: str = Field("default", description="Kubernetes namespace")
    host: str = Field(..., description="Rule host")
    path_prefix: Optional[str] = Field(None, description="HTTP path of the rule, if any")
    is_secure: bool = Field(True, description="Whether the route is served over TLS")
    annotations: Dict[str, str] = Field(default_factory=dict, description="Resource annotations")
    labels: Dict[str, str] = Field(default_factory=dict, description="Resource labels")


class RouteEntry(BaseModel):
    """A route as shown on the landing page."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    description: str = Field("", description="Display description")
    url: str = Field(..., description="Absolute URL of the route")


class ClusterEntry(BaseModel):
    """All routes discovered in one cluster, in scan order."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Cluster name")
    description: str = Field("", description="Cluster description")
    routes: Tuple[RouteEntry, ...] = Field(default_factory=tuple, description="Routes in scan order")


class GroupEntry(BaseModel):
    """A named display group of clusters."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Group name")
    clusters: Tuple[ClusterEntry, ...] = Field(default_factory=tuple, description="Clusters in configuration order")


# A complete, immutable aggregation result.
Snapshot = Tuple[GroupEntry, ...]
