"""Elitism: carry the best individuals unchanged into the next generation."""

from typing import Iterable, List

from .individual import Individual, fitness_key


def select_top_individuals(elite_size: int, inhabitants: Iterable[Individual]) -> List[Individual]:
    """
    Clone every individual, rank by fitness descending and keep the first elite_size.

    Cloning keeps the elites independent of the generation they came from, so
    later mutation of either side cannot leak across. The input is not modified.
    Ties keep their original order.

    Args:
        elite_size: Number of elites to return
        inhabitants: Individuals to choose from

    Returns:
        Up to elite_size cloned individuals, fittest first
    """
    if elite_size < 0:
        raise ValueError("elite_size must be non-negative")
    cloned = [individual.clone() for individual in inhabitants]
    cloned.sort(key=fitness_key, reverse=True)
    return cloned[:elite_size]
