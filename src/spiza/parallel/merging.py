"""Merging partial populations gathered from several solver processes."""

from typing import Iterable

from ..genetics.elitism import select_top_individuals
from ..genetics.population import Population
from ..solver.observer import ObserverSnapshot


def merge_snapshots(snapshots: Iterable[ObserverSnapshot], elite_size: int) -> Population:
    """
    Concatenate every snapshot's inhabitants and keep the elite_size fittest.

    Args:
        snapshots: Partial observer states, in any order
        elite_size: Number of individuals in the merged population

    Returns:
        Population of cloned individuals, fittest first
    """
    inhabitants = [individual for snapshot in snapshots for individual in snapshot.inhabitants]
    return Population(select_top_individuals(elite_size, inhabitants))
