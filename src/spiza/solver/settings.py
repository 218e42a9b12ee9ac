"""
SolverSettings: the validated configuration bundle of one solver run.

Binds one strategy of each family plus the population, generation and elite
sizes. Validation runs in the constructor, so settings loaded from JSON fail as
fast as settings built in code.
"""

import json
from pathlib import Path
from typing import Any, Dict, Type, Union

from ..exceptions import SerializationError, SettingsError
from ..genetics.abstract_strategies import (
    AbstractCrossoverStrategy,
    AbstractMutationStrategy,
    AbstractPairingStrategy,
    AbstractSelectionStrategy,
    AbstractStrategy,
    AbstractTerminationStrategy,
)

# Import concrete strategies so their kinds are registered before deserialization.
from ..genetics import (  # noqa: F401
    crossover_strategies,
    mutation_strategies,
    pairing_strategies,
    selection_strategies,
    termination_strategies,
)

_STRATEGY_FIELDS: Dict[str, Type[AbstractStrategy]] = {
    "selection_strategy": AbstractSelectionStrategy,
    "crossover_strategy": AbstractCrossoverStrategy,
    "mutation_strategy": AbstractMutationStrategy,
    "pairing_strategy": AbstractPairingStrategy,
    "termination_strategy": AbstractTerminationStrategy,
}


class SolverSettings:
    """
    Immutable, validated solver configuration.

    Invariants: population_size > 0, max_generations > 0,
    0 <= elite_size <= population_size, and every strategy slot holds an
    instance of its family. Violations raise SettingsError; nothing is clamped.
    """

    def __init__(
        self,
        selection_strategy: AbstractSelectionStrategy,
        crossover_strategy: AbstractCrossoverStrategy,
        mutation_strategy: AbstractMutationStrategy,
        pairing_strategy: AbstractPairingStrategy,
        termination_strategy: AbstractTerminationStrategy,
        population_size: int,
        max_generations: int,
        elite_size: int = 0,
    ):
        """
        Args:
            selection_strategy: Builds the mating pool
            crossover_strategy: Recombines pairs; its crossover_rate gates use
            mutation_strategy: Perturbs children; its mutation_rate gates use
            pairing_strategy: Forms couples from the mating pool
            termination_strategy: Decides early stop
            population_size: Individuals per generation, > 0
            max_generations: Generation limit including the initial one, > 0
            elite_size: Individuals carried over unchanged, in [0, population_size]
        """
        strategies = {
            "selection_strategy": selection_strategy,
            "crossover_strategy": crossover_strategy,
            "mutation_strategy": mutation_strategy,
            "pairing_strategy": pairing_strategy,
            "termination_strategy": termination_strategy,
        }
        for name, strategy in strategies.items():
            family = _STRATEGY_FIELDS[name]
            if strategy is None:
                raise SettingsError(f"{name} is required")
            if not isinstance(strategy, family):
                raise SettingsError(f"{name} must be a {family.__name__}, got {type(strategy).__name__}")

        if isinstance(population_size, bool) or not isinstance(population_size, int) or population_size <= 0:
            raise SettingsError("Population size must be greater than 0")
        if isinstance(max_generations, bool) or not isinstance(max_generations, int) or max_generations <= 0:
            raise SettingsError("Max generations must be greater than 0")
        if isinstance(elite_size, bool) or not isinstance(elite_size, int) or not 0 <= elite_size <= population_size:
            raise SettingsError("Elite size must be between 0 and population size")

        self._selection_strategy = selection_strategy
        self._crossover_strategy = crossover_strategy
        self._mutation_strategy = mutation_strategy
        self._pairing_strategy = pairing_strategy
        self._termination_strategy = termination_strategy
        self._population_size = population_size
        self._max_generations = max_generations
        self._elite_size = elite_size

    @property
    def selection_strategy(self) -> AbstractSelectionStrategy:
        return self._selection_strategy

    @property
    def crossover_strategy(self) -> AbstractCrossoverStrategy:
        return self._crossover_strategy

    @property
    def mutation_strategy(self) -> AbstractMutationStrategy:
        return self._mutation_strategy

    @property
    def pairing_strategy(self) -> AbstractPairingStrategy:
        return self._pairing_strategy

    @property
    def termination_strategy(self) -> AbstractTerminationStrategy:
        return self._termination_strategy

    @property
    def population_size(self) -> int:
        return self._population_size

    @property
    def max_generations(self) -> int:
        return self._max_generations

    @property
    def elite_size(self) -> int:
        return self._elite_size

    def strategies(self) -> Dict[str, AbstractStrategy]:
        """Strategy slots by field name."""
        return {name: getattr(self, name) for name in _STRATEGY_FIELDS}

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: strategy.serialize() for name, strategy in self.strategies().items()}
        data["population_size"] = self._population_size
        data["max_generations"] = self._max_generations
        data["elite_size"] = self._elite_size
        return data

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "SolverSettings":
        """
        Rebuild settings from serialize() output, validating on the way.

        Raises:
            SerializationError: Missing fields or unknown strategy kinds
            SettingsError: Values violating the settings invariants
        """
        if not isinstance(data, dict):
            raise SerializationError("Serialized settings must be a dict")
        try:
            strategies = {
                name: AbstractStrategy.deserialize(data[name], expected=family)
                for name, family in _STRATEGY_FIELDS.items()
            }
            sizes = {
                "population_size": data["population_size"],
                "max_generations": data["max_generations"],
                "elite_size": data["elite_size"],
            }
        except KeyError as e:
            raise SerializationError(f"Missing field in serialized settings: {e}") from e
        return cls(**strategies, **sizes)

    def to_json(self) -> str:
        return json.dumps(self.serialize(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> "SolverSettings":
        if not text or not text.strip():
            raise SerializationError("JSON string cannot be null or empty")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON format: {e}") from e
        return cls.deserialize(data)

    def to_file(self, path: Union[str, Path]) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SolverSettings":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))
