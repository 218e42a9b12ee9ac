"""
Concrete pairing strategies forming mating couples.

Fulfills AbstractPairingStrategy's find_mate contract by ranking candidates on
genomic distance over tick values.
"""

from enum import Enum
from typing import Any, Dict, List

import numpy

from ..exceptions import MalformedGenomeError, SettingsError
from .abstract_strategies import AbstractPairingStrategy
from .individual import Individual


class DistanceFunction(str, Enum):
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"


def genomic_distance(first: Individual, second: Individual, distance_function: DistanceFunction) -> float:
    """
    Distance between two genomes over their tick values.

    Raises:
        MalformedGenomeError: If genome lengths differ
    """
    a = numpy.asarray(first.tick_values(), dtype=float)
    b = numpy.asarray(second.tick_values(), dtype=float)
    if a.shape != b.shape:
        raise MalformedGenomeError("Cannot compare genomes of different lengths")
    if distance_function is DistanceFunction.EUCLIDEAN:
        return float(numpy.sqrt(numpy.sum((a - b) ** 2)))
    return float(numpy.sum(numpy.abs(a - b)))


class InbreedingPairing(AbstractPairingStrategy):
    """
    Mate choice steered by an in-breeding factor.

    Candidates (the whole pool, the individual itself included) are sorted by
    distance to the individual, stable on ties. The mate sits at index
    int((factor + 1) / 2 * (n - 1)) of that order: -1 picks the closest match,
    +1 the most distant, 0 the median.
    """

    def __init__(
        self,
        in_breeding_factor: float = 0.0,
        distance_function: DistanceFunction = DistanceFunction.MANHATTAN,
    ):
        """
        Args:
            in_breeding_factor: Dial in [-1, 1] from most similar to most distant mate
            distance_function: Euclidean or Manhattan distance over tick values
        """
        if not -1.0 <= in_breeding_factor <= 1.0:
            raise SettingsError("in_breeding_factor must be in [-1, 1]")
        try:
            distance_function = DistanceFunction(distance_function)
        except ValueError as e:
            raise SettingsError(f"Unknown distance function: {distance_function}") from e
        self.in_breeding_factor = in_breeding_factor
        self.distance_function = distance_function

    def get_parameters(self) -> Dict[str, Any]:
        return {
            "in_breeding_factor": self.in_breeding_factor,
            "distance_function": self.distance_function.value,
        }

    def find_mate(self, individual: Individual, candidates: List[Individual]) -> Individual:
        if not candidates:
            raise MalformedGenomeError("No candidates to pair with")
        ranked = sorted(
            candidates,
            key=lambda mate: genomic_distance(individual, mate, self.distance_function),
        )
        mate_index = int((self.in_breeding_factor + 1) / 2 * (len(ranked) - 1))
        return ranked[mate_index]
