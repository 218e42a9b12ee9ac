"""
Concrete mutation strategies implementing tick-value perturbation.

Each strategy fulfills AbstractMutationStrategy's mutate_gene contract. Results
always stay within [0, tick_count]: perturbations that leave the range are
re-rolled rather than clamped.
"""

from typing import Any, Dict

from ..exceptions import SettingsError
from .abstract_strategies import AbstractMutationStrategy, check_probability
from .genes import Gene


class RandomMutation(AbstractMutationStrategy):
    """
    Replace the tick value with a uniform draw from [0, tick_count].

    Maximum exploration: the whole range is reachable with equal probability.
    """

    def mutate_gene(self, gene: Gene) -> int:
        return self._randint(0, gene.tick_count)


class FixedValueMutation(AbstractMutationStrategy):
    """
    Perturb by a uniform integer in [-mutation_value, mutation_value].

    Draws that leave [0, tick_count] are re-rolled. The zero offset is always
    admissible, so the loop terminates.
    """

    def __init__(self, mutation_rate: float = 0.1, mutation_value: int = 1):
        """
        Args:
            mutation_rate: Per-gene mutation probability in [0, 1]
            mutation_value: Largest absolute step, >= 0
        """
        super().__init__(mutation_rate)
        if mutation_value < 0:
            raise SettingsError("mutation_value must be non-negative")
        self.mutation_value = int(mutation_value)

    def get_parameters(self) -> Dict[str, Any]:
        return {"mutation_rate": self.mutation_rate, "mutation_value": self.mutation_value}

    def mutate_gene(self, gene: Gene) -> int:
        current = gene.tick_value
        new_value = current + self._randint(-self.mutation_value, self.mutation_value)
        while new_value < 0 or new_value > gene.tick_count:
            new_value = current + self._randint(-self.mutation_value, self.mutation_value)
        return new_value


class PercentageMutation(AbstractMutationStrategy):
    """
    Perturb by a uniform integer within a fraction of the current value.

    The step bound is int(tick_value * mutation_percentage), so a gene sitting
    at 0 cannot move. Out-of-range draws are re-rolled.
    """

    def __init__(self, mutation_rate: float = 0.1, mutation_percentage: float = 0.1):
        """
        Args:
            mutation_rate: Per-gene mutation probability in [0, 1]
            mutation_percentage: Fraction in [0, 1] of the current value used as step bound
        """
        super().__init__(mutation_rate)
        self.mutation_percentage = check_probability("mutation_percentage", mutation_percentage)

    def get_parameters(self) -> Dict[str, Any]:
        return {"mutation_rate": self.mutation_rate, "mutation_percentage": self.mutation_percentage}

    def mutate_gene(self, gene: Gene) -> int:
        current = gene.tick_value
        amount = int(current * self.mutation_percentage)
        new_value = current + self._randint(-amount, amount)
        while new_value < 0 or new_value > gene.tick_count:
            new_value = current + self._randint(-amount, amount)
        return new_value
