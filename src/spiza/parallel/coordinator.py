"""
SnapshotCoordinator: quorum-based merging of observer snapshots.

Solver processes submit their partial populations. Once a quorum of snapshots
has arrived they are merged, and every submitter of that quorum receives the
same JSON result. A submitter left waiting past the timeout receives a plain
timeout message instead of an exception.
"""

import asyncio
import json
from typing import Dict, List

from loguru import logger

from ..exceptions import SettingsError
from ..solver.observer import ObserverSnapshot
from .merging import merge_snapshots

TIMEOUT_MESSAGE = "Timeout waiting for all observers."


class SnapshotCoordinator:
    """
    Buffers snapshots until quorum, then merges them by elitism.

    Must be used from a single event loop. State is only touched between
    awaits, so no extra locking is needed.
    """

    def __init__(self, quorum: int = 2, timeout: float = 2.0, elite_size: int = 10):
        """
        Args:
            quorum: Snapshots needed before a merge happens, > 0
            timeout: Seconds a submitter waits for the rest of its quorum
            elite_size: Individuals kept in the merged population
        """
        if quorum <= 0:
            raise SettingsError("quorum must be greater than 0")
        if timeout <= 0:
            raise SettingsError("timeout must be greater than 0")
        if elite_size < 0:
            raise SettingsError("elite_size must be non-negative")
        self.quorum = quorum
        self.timeout = timeout
        self.elite_size = elite_size
        self._received: List[ObserverSnapshot] = []
        # Waiters keyed by snapshot object; request ids may repeat across submitters.
        self._pending: Dict[int, asyncio.Future] = {}

    @property
    def waiting(self) -> int:
        """Snapshots received but not merged yet."""
        return len(self._received)

    def merge(self, snapshots: List[ObserverSnapshot]) -> str:
        """JSON result of a quorum: the latest generation index and the merged inhabitants."""
        population = merge_snapshots(snapshots, self.elite_size)
        return json.dumps(
            {
                "CurrentGenerationIndex": max(snapshot.generation_index for snapshot in snapshots),
                "Inhabitants": population.serialize()["Inhabitants"],
                "RequestIds": [snapshot.request_id for snapshot in snapshots],
            }
        )

    async def submit(self, snapshot: ObserverSnapshot) -> str:
        """
        Submit a snapshot and wait for its quorum's merged result.

        Returns:
            Merged JSON shared by the whole quorum, or TIMEOUT_MESSAGE
        """
        self._received.append(snapshot)
        logger.debug(
            "[SnapshotCoordinator] received {} ({}/{})",
            snapshot.request_id,
            len(self._received),
            self.quorum,
        )

        if len(self._received) >= self.quorum:
            snapshots, self._received = self._received, []
            result = self.merge(snapshots)
            for other in snapshots:
                future = self._pending.pop(id(other), None)
                if future is not None and not future.done():
                    future.set_result(result)
            logger.info("[SnapshotCoordinator] merged {} snapshots", len(snapshots))
            return result

        future = asyncio.get_running_loop().create_future()
        self._pending[id(snapshot)] = future
        try:
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            self._pending.pop(id(snapshot), None)
            if snapshot in self._received:
                self._received.remove(snapshot)
            logger.warning("[SnapshotCoordinator] timeout waiting for quorum, request {}", snapshot.request_id)
            return TIMEOUT_MESSAGE
