"""
Concrete termination strategies deciding when a run stops early.

Each strategy fulfills AbstractTerminationStrategy's evaluate contract, reading
only the observer's recorded history and current population.
"""

from typing import TYPE_CHECKING, Any, Dict

from ..exceptions import SettingsError
from .abstract_strategies import AbstractTerminationStrategy

if TYPE_CHECKING:
    from ..solver.observer import EvolutionObserver


class MaxGenerations(AbstractTerminationStrategy):
    """Stop once the observer's generation counter reaches the threshold."""

    def __init__(self, max_generations: int = 100):
        if max_generations <= 0:
            raise SettingsError("max_generations must be greater than 0")
        super().__init__(max_generations)

    def get_parameters(self) -> Dict[str, Any]:
        return {"max_generations": int(self.termination_threshold)}

    def evaluate(self, observer: "EvolutionObserver") -> bool:
        return observer.current_generation_index >= self.termination_threshold


class PopulationDiversity(AbstractTerminationStrategy):
    """Stop once the current population holds at most threshold distinct individuals."""

    def __init__(self, threshold: float = 1):
        if threshold < 0:
            raise SettingsError("threshold must be non-negative")
        super().__init__(threshold)

    def get_parameters(self) -> Dict[str, Any]:
        return {"threshold": self.termination_threshold}

    def evaluate(self, observer: "EvolutionObserver") -> bool:
        population = observer.get_current_population()
        return population.diversity() <= self.termination_threshold


class ProgressConvergence(AbstractTerminationStrategy):
    """
    Stop when average fitness has stopped moving.

    Over the last progress_range generations, each step's absolute change in
    average fitness is divided by that generation's best fitness; the mean of
    those normalized deltas is compared with the threshold. A step whose best
    fitness is 0 contributes its raw delta.

    Needs progress_range + 1 recorded generations to form progress_range deltas
    and returns False until then.
    """

    def __init__(self, threshold: float = 0.1, progress_range: int = 5):
        """
        Args:
            threshold: Mean normalized delta below which the run stops
            progress_range: Number of most recent deltas considered, > 0
        """
        if threshold < 0:
            raise SettingsError("threshold must be non-negative")
        if progress_range <= 0:
            raise SettingsError("progress_range must be greater than 0")
        super().__init__(threshold)
        self.progress_range = progress_range

    def get_parameters(self) -> Dict[str, Any]:
        return {"threshold": self.termination_threshold, "progress_range": self.progress_range}

    def evaluate(self, observer: "EvolutionObserver") -> bool:
        average_fitness = observer.average_fitness
        best_fitness = observer.best_fitness
        history = min(len(average_fitness), len(best_fitness))
        if history <= self.progress_range:
            return False

        total_normalized_delta = 0.0
        for i in range(1, self.progress_range + 1):
            delta = abs(average_fitness[-i] - average_fitness[-(i + 1)])
            best = best_fitness[-i]
            total_normalized_delta += delta / abs(best) if best != 0 else delta

        return total_normalized_delta / self.progress_range < self.termination_threshold
