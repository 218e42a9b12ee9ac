"""
Communication: distributed snapshot exchange for solver processes.

Wraps torch.distributed primitives for all-gathering observer snapshots across
ranks. All methods are all-gather style: every rank calls, every rank gets the
full result.
"""

from typing import List

from torch import distributed as dist

from ..genetics.population import Population
from ..solver.observer import EvolutionObserver, ObserverSnapshot
from .merging import merge_snapshots


class Communication:
    """
    Handles distributed gathering across ranks.

    Requires torch.distributed to be initialized before use. Snapshots travel
    as their serialized dicts, so any backend able to pickle plain Python
    objects works.
    """

    def __init__(self):
        """
        Raises:
            EnvironmentError: If torch.distributed is not initialized
        """
        if not (dist.is_available() and dist.is_initialized()):
            raise EnvironmentError("Distributed world is not initialized")

    @property
    def world_size(self) -> int:
        """Number of ranks in the distributed group."""
        return dist.get_world_size()

    @property
    def rank(self) -> int:
        """This process's rank in the distributed group."""
        return dist.get_rank()

    def gather_snapshots(self, snapshot: ObserverSnapshot) -> List[ObserverSnapshot]:
        """
        All-gather one snapshot from every rank.

        Returns:
            Snapshots from all ranks (length = world_size), ordered by rank
        """
        output = [None] * self.world_size
        dist.all_gather_object(output, snapshot.serialize())
        return [ObserverSnapshot.deserialize(data) for data in output]

    def exchange_population(self, observer: EvolutionObserver, elite_size: int) -> Population:
        """
        Gather every rank's current population and merge them by elitism.

        Every rank receives the same merged population.
        """
        snapshot = observer.snapshot_for_exchange(request_id=f"rank-{self.rank}")
        return merge_snapshots(self.gather_snapshots(snapshot), elite_size)
