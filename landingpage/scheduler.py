"""Background refresh of the published route snapshot."""

import asyncio
import enum
from datetime import datetime, timezone
from typing import Optional, Tuple

from kubernetes import client

from .collector import build_snapshot
from .config import Config
from .logging_config import get_logger, log_function_entry, log_function_exit, log_refresh_event
from .models import Snapshot

logger = get_logger(__name__)


class SchedulerState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    REFRESHING = "refreshing"
    STOPPED = "stopped"


class SnapshotHandle:
    """Read handle over the most recently published snapshot.

    The snapshot, its publication time and its generation are stored as one
    tuple and replaced with a single assignment, so a reader always sees a
    consistent triple.
    """

    def __init__(self, snapshot: Snapshot):
        self._state: Tuple[Snapshot, datetime, int] = (snapshot, datetime.now(timezone.utc), 1)

    @property
    def snapshot(self) -> Snapshot:
        return self._state[0]

    @property
    def published_at(self) -> datetime:
        return self._state[1]

    @property
    def generation(self) -> int:
        return self._state[2]

    def read(self) -> Tuple[Snapshot, datetime, int]:
        return self._state

    def publish(self, snapshot: Snapshot) -> None:
        """Replace the published snapshot and bump the generation.

        Only the owning RefreshScheduler calls this; there is a single writer.
        """
        self._state = (snapshot, datetime.now(timezone.utc), self._state[2] + 1)


class RefreshScheduler:
    """Owns the snapshot handle and keeps it up to date.

    ``start`` builds the first snapshot synchronously and fails if that build
    fails. Afterwards a background task rebuilds the snapshot every
    ``refresh_interval_seconds``; a failed rebuild is logged and the previous
    snapshot stays published.
    """

    def __init__(self, home_client: client.ApiClient):
        self.home_client = home_client
        self.config: Optional[Config] = None
        self.handle: Optional[SnapshotHandle] = None
        self.state = SchedulerState.UNINITIALIZED
        self._task: Optional[asyncio.Task] = None

    async def start(self, config: Config) -> SnapshotHandle:
        """Build and publish the first snapshot, then start refreshing.

        Raises:
            LandingPageError: If the first build fails.
            RuntimeError: If the scheduler was already started.
        """
        if self.state is not SchedulerState.UNINITIALIZED:
            raise RuntimeError(f"RefreshScheduler cannot be started in state {self.state.value}")

        log_function_entry(logger, "start", refresh_interval=config.refresh_interval)
        self.config = config

        snapshot = await build_snapshot(config, self.home_client)
        self.handle = SnapshotHandle(snapshot)
        self.state = SchedulerState.READY
        log_refresh_event(logger, "initial_snapshot_published", groups=len(snapshot))

        self._task = asyncio.create_task(self._run(), name="landingpage-refresh")
        log_function_exit(logger, "start", status="success")
        return self.handle

    async def refresh_once(self) -> bool:
        """Run one refresh cycle. Returns True if a new snapshot was published."""
        if self.handle is None or self.config is None:
            raise RuntimeError("RefreshScheduler has not been started")

        self.state = SchedulerState.REFRESHING
        logger.info("Reloading ingresses")
        try:
            snapshot = await build_snapshot(self.config, self.home_client)
        except Exception as e:
            logger.error("Encountered error when reloading ingresses",
                         error_type=type(e).__name__,
                         error=str(e))
            return False
        finally:
            if self.state is SchedulerState.REFRESHING:
                self.state = SchedulerState.READY

        self.handle.publish(snapshot)
        log_refresh_event(logger, "snapshot_published",
                          generation=self.handle.generation,
                          groups=len(snapshot))
        return True

    async def _run(self) -> None:
        interval = self.config.refresh_interval
        logger.info("Starting refresh loop", interval_seconds=interval)
        while True:
            await asyncio.sleep(interval)
            await self.refresh_once()

    async def stop(self) -> None:
        """Cancel the background refresh task."""
        self.state = SchedulerState.STOPPED
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Refresh loop stopped")

