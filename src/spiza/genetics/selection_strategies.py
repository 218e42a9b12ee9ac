"""
Concrete selection strategies implementing mating-pool sampling.

Each strategy fulfills AbstractSelectionStrategy's select_individuals contract.
Fitness is maximized: higher fitness means a fitter individual.
"""

import warnings
from typing import Any, Dict, List

from ..exceptions import InvalidOperationError, MalformedGenomeError, SettingsError
from .abstract_strategies import AbstractSelectionStrategy
from .individual import Individual, fitness_key
from .population import Population


class TournamentSelection(AbstractSelectionStrategy):
    """
    Repeated tournaments: sample tournament_size individuals with replacement, keep the fittest.

    Larger tournaments raise selection pressure, smaller ones preserve diversity.
    Ties inside a tournament go to the first sampled contestant.
    """

    def __init__(self, tournament_size: int = 3):
        """
        Args:
            tournament_size: Contestants per tournament. Must be > 0.
        """
        if tournament_size <= 0:
            raise SettingsError("Tournament size must be greater than 0")
        self.tournament_size = tournament_size

    def get_parameters(self) -> Dict[str, Any]:
        return {"tournament_size": self.tournament_size}

    def _choose_index(self, size: int) -> int:
        """Uniform index in [0, size). Override in tests for determinism."""
        return self.rng.randrange(size)

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        inhabitants = population.inhabitants
        selected = []
        for _ in range(number_of_selections):
            tournament = [inhabitants[self._choose_index(len(inhabitants))] for _ in range(self.tournament_size)]
            selected.append(max(tournament, key=fitness_key))
        return selected


class RouletteWheelSelection(AbstractSelectionStrategy):
    """
    Fitness-proportionate sampling over the cumulative fitness.

    Each draw picks a point in [0, total fitness) and walks the running sum.
    A population with total fitness exactly 0 is a hard error, never retried.
    """

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        total_fitness = population.total_fitness()
        if total_fitness == 0:
            raise InvalidOperationError("Total fitness is zero, selection cannot be performed")

        inhabitants = population.inhabitants
        selected = []
        for _ in range(number_of_selections):
            target = self._random() * total_fitness
            running_sum = 0.0
            for individual in inhabitants:
                running_sum += fitness_key(individual)
                if running_sum >= target:
                    selected.append(individual)
                    break
            else:
                # float round-off can leave the last sum just below target
                selected.append(inhabitants[-1])
        return selected


class PoolSelection(AbstractSelectionStrategy):
    """
    Cumulative-probability sampling after normalizing fitness into probabilities.

    Calls Population.calculate_probability, so every individual's probability is
    refreshed as a side effect. The selection count must lie in [1, population size].
    """

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        inhabitants = population.inhabitants
        if number_of_selections <= 0 or number_of_selections > len(inhabitants):
            raise MalformedGenomeError("Invalid number of selections")

        population.calculate_probability()

        selected = []
        for _ in range(number_of_selections):
            remaining = self._random()
            index = 0
            while remaining > 0 and index < len(inhabitants):
                remaining -= inhabitants[index].probability
                index += 1
            selected.append(inhabitants[max(0, index - 1)])
        return selected


class StochasticUniversalSampling(AbstractSelectionStrategy):
    """
    One random offset, then evenly spaced pointers over the fitness distribution.

    Unlike roulette wheel, an individual holding share p of the total fitness is
    chosen either floor(p * n) or ceil(p * n) times, which guarantees a spread.
    """

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        if number_of_selections == 0:
            return []
        total_fitness = population.total_fitness()
        if total_fitness == 0:
            raise InvalidOperationError("Total fitness is zero, selection cannot be performed")

        inhabitants = population.inhabitants
        distance = 1.0 / number_of_selections
        start = self._random() * distance

        selected = []
        for i in range(number_of_selections):
            pointer = start + i * distance
            running_sum = 0.0
            for individual in inhabitants:
                running_sum += fitness_key(individual) / total_fitness
                if running_sum >= pointer:
                    selected.append(individual)
                    break
            else:
                selected.append(inhabitants[-1])
        return selected


class IsotropicSelection(AbstractSelectionStrategy):
    """
    Uniform random pick, ignoring fitness.

    Deprecated: kept so existing settings files still load.
    """

    def __init__(self):
        warnings.warn(
            "IsotropicSelection is deprecated; use another selection strategy",
            DeprecationWarning,
            stacklevel=2,
        )

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        inhabitants = population.inhabitants
        return [inhabitants[self.rng.randrange(len(inhabitants))] for _ in range(number_of_selections)]


class ExclusiveSelection(AbstractSelectionStrategy):
    """
    Deterministic pick of the top fraction of the population, fittest first.

    Returns at most min(number_of_selections, int(count * top_percentage))
    individuals. A population too small to hold a single eligible individual
    is an error. Deprecated: kept so existing settings files still load.
    """

    def __init__(self, top_percentage: float = 0.5):
        """
        Args:
            top_percentage: Fraction in (0, 1] of the population eligible
        """
        if not 0 < top_percentage <= 1:
            raise SettingsError("Top percentage must be between 0 and 1")
        warnings.warn(
            "ExclusiveSelection is deprecated; use another selection strategy",
            DeprecationWarning,
            stacklevel=2,
        )
        self.top_percentage = top_percentage

    def get_parameters(self) -> Dict[str, Any]:
        return {"top_percentage": self.top_percentage}

    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        cutoff = int(population.count * self.top_percentage)
        if cutoff == 0 and number_of_selections > 0:
            raise InvalidOperationError(
                f"Top {self.top_percentage} of {population.count} individuals selects nobody"
            )
        ranked = population.select_top_individuals(population.count)
        return ranked[: min(number_of_selections, cutoff)]
