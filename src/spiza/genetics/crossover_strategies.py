"""
Concrete crossover strategies implementing position-wise recombination.

Each strategy fulfills AbstractCrossoverStrategy's cross_genes contract. Every
child position holds the gene one of the parents had at that position.
"""

from typing import List, Tuple

from .abstract_strategies import AbstractCrossoverStrategy
from .genes import Gene

MAX_CUT_POINT_RETRIES = 10


class SinglePointCrossover(AbstractCrossoverStrategy):
    """
    One cut index c in [1, length): child one takes parent one's genes before c
    and parent two's from c on; child two the complement.

    Genomes shorter than two genes cannot be cut and are passed through.
    """

    def _cut_point(self, length: int) -> int:
        """Cut index in [1, length). Override in tests for determinism."""
        return self.rng.randrange(1, length)

    def cross_genes(self, genes1: List[Gene], genes2: List[Gene]) -> Tuple[List[Gene], List[Gene]]:
        length = len(genes1)
        if length < 2:
            return list(genes1), list(genes2)

        cut = self._cut_point(length)
        child1 = genes1[:cut] + genes2[cut:]
        child2 = genes2[:cut] + genes1[cut:]
        return child1, child2


class TwoPointCrossover(AbstractCrossoverStrategy):
    """
    Two cut indices, ordered ascending; the inclusive middle segment is swapped.

    The second index is redrawn up to 10 times while it equals the first. If it
    still matches, crossover proceeds with a one-gene middle segment.
    """

    def _cut_points(self, length: int) -> Tuple[int, int]:
        """Two cut indices in [0, length). Override in tests for determinism."""
        point1 = self.rng.randrange(length)
        point2 = self.rng.randrange(length)
        retries = 0
        while point1 == point2 and retries < MAX_CUT_POINT_RETRIES:
            point2 = self.rng.randrange(length)
            retries += 1
        return point1, point2

    def cross_genes(self, genes1: List[Gene], genes2: List[Gene]) -> Tuple[List[Gene], List[Gene]]:
        length = len(genes1)
        if length == 0:
            return [], []

        point1, point2 = self._cut_points(length)
        if point1 > point2:
            point1, point2 = point2, point1

        child1 = []
        child2 = []
        for i in range(length):
            if point1 <= i <= point2:
                child1.append(genes2[i])
                child2.append(genes1[i])
            else:
                child1.append(genes1[i])
                child2.append(genes2[i])
        return child1, child2
