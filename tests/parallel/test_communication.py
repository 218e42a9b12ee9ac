"""
Tests for Communication over a single-process gloo group.

With world_size 1 every gather returns this rank's own contribution, which is
enough to exercise serialization through torch.distributed.
"""

import pytest
import torch.distributed as dist

from spiza.genetics.genes import SliderTemplate
from spiza.genetics.individual import Individual
from spiza.genetics.population import Population
from spiza.parallel.communication import Communication
from spiza.solver.observer import EvolutionObserver, ObserverSnapshot


TEMPLATE = SliderTemplate("x", 100)


@pytest.fixture
def process_group(tmp_path):
    dist.init_process_group(
        backend="gloo",
        init_method=f"file://{tmp_path / 'store'}",
        rank=0,
        world_size=1,
    )
    yield
    dist.destroy_process_group()


def test_requires_initialized_world():
    with pytest.raises(EnvironmentError):
        Communication()


def test_world_properties(process_group):
    communication = Communication()
    assert communication.world_size == 1
    assert communication.rank == 0


def test_gather_snapshots_round_trips(process_group):
    snapshot = ObserverSnapshot(4, [Individual([TEMPLATE.make_gene(3)], fitness=2.5)], request_id="r")
    gathered = Communication().gather_snapshots(snapshot)
    assert len(gathered) == 1
    assert gathered[0].generation_index == 4
    assert gathered[0].inhabitants[0].fitness == 2.5


def test_exchange_population_merges_by_elitism(process_group):
    observer = EvolutionObserver()
    observer.set_population(Population(Individual([TEMPLATE.make_gene(i)], fitness=float(i)) for i in range(5)))
    merged = Communication().exchange_population(observer, elite_size=2)
    assert merged.fitness_values() == [4.0, 3.0]
