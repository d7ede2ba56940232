"""landingpage: a landing page for the ingresses of several Kubernetes clusters."""

__version__ = "0.1.0"

# Lazy imports to avoid loading heavy dependencies for CLI usage
__all__ = [
    "RefreshScheduler",
    "SnapshotHandle",
    "build_snapshot",
    "Config",
    "GroupEntry",
    "ClusterEntry",
    "RouteEntry",
]


def __getattr__(name):
    if name in ("RefreshScheduler", "SnapshotHandle"):
        from . import scheduler
        return getattr(scheduler, name)
    elif name == "build_snapshot":
        from .collector import build_snapshot
        return build_snapshot
    elif name == "Config":
        from .config import Config
        return Config
    elif name in ("GroupEntry", "ClusterEntry", "RouteEntry"):
        from . import models
        return getattr(models, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
