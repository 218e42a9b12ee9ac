"""
EvolutionObserver: thread-safe, append-only record of per-generation statistics.

One observer is driven by one solver run. Other threads may read it while the
run is active, so every mutating operation holds one lock for its full duration
and the time series stay aligned index by index.
"""

import json
import threading
import uuid
from typing import Any, Dict, Hashable, List, Optional

import numpy

from ..exceptions import InvalidOperationError, SerializationError
from ..genetics.individual import Individual, fitness_key
from ..genetics.population import Population


class EvolutionObserver:
    """
    Time series of population statistics, one entry per recorded generation.

    snapshot() appends to the fitness series (best, worst, average, total,
    unique individuals, standard deviation). set_population() replaces the
    current population and appends its best individual. A solver calling both
    once per generation keeps every series the same length.

    The generation counter is advanced separately by update_generation_counter().
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._current_generation_index = 0
        self._current_population: Optional[Population] = None
        self._best_fitness: List[float] = []
        self._worst_fitness: List[float] = []
        self._average_fitness: List[float] = []
        self._total_fitness: List[float] = []
        self._unique_individuals: List[int] = []
        self._fitness_standard_deviation: List[float] = []
        self._best_individuals: List[Individual] = []

    # Read access. Lists are returned as copies taken under the lock.

    @property
    def current_generation_index(self) -> int:
        return self._current_generation_index

    @property
    def current_population(self) -> Optional[Population]:
        return self._current_population

    @property
    def best_fitness(self) -> List[float]:
        with self._lock:
            return list(self._best_fitness)

    @property
    def worst_fitness(self) -> List[float]:
        with self._lock:
            return list(self._worst_fitness)

    @property
    def average_fitness(self) -> List[float]:
        with self._lock:
            return list(self._average_fitness)

    @property
    def total_fitness(self) -> List[float]:
        with self._lock:
            return list(self._total_fitness)

    @property
    def unique_individuals(self) -> List[int]:
        with self._lock:
            return list(self._unique_individuals)

    @property
    def fitness_standard_deviation(self) -> List[float]:
        with self._lock:
            return list(self._fitness_standard_deviation)

    @property
    def best_individuals(self) -> List[Individual]:
        with self._lock:
            return list(self._best_individuals)

    def get_current_population(self) -> Population:
        """
        Raises:
            InvalidOperationError: If no population has been set yet
        """
        population = self._current_population
        if population is None or population.count == 0:
            raise InvalidOperationError("Observer holds no population")
        return population

    # Recording

    def snapshot(self, population: Population) -> None:
        """
        Append one value to every fitness series, computed from population.

        Raises:
            InvalidOperationError: If population is empty
        """
        if population is None or population.count == 0:
            raise InvalidOperationError("Cannot snapshot an empty population")
        fitness = numpy.asarray(population.fitness_values(), dtype=float)
        with self._lock:
            self._best_fitness.append(float(fitness.max()))
            self._worst_fitness.append(float(fitness.min()))
            self._average_fitness.append(float(fitness.mean()))
            self._total_fitness.append(float(fitness.sum()))
            self._unique_individuals.append(population.diversity())
            self._fitness_standard_deviation.append(float(fitness.std()))

    def set_population(self, population: Population) -> None:
        """Make population current and record its best individual."""
        if population is None or population.count == 0:
            raise InvalidOperationError("Cannot set an empty population")
        with self._lock:
            self._current_population = population
            self._best_individuals.append(max(population.inhabitants, key=fitness_key))

    def update_generation_counter(self) -> None:
        with self._lock:
            self._current_generation_index += 1

    def reset(self) -> None:
        """Clear every series, the current population and the generation counter."""
        with self._lock:
            self._current_generation_index = 0
            self._current_population = None
            self._best_fitness = []
            self._worst_fitness = []
            self._average_fitness = []
            self._total_fitness = []
            self._unique_individuals = []
            self._fitness_standard_deviation = []
            self._best_individuals = []

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        with self._lock:
            population = self._current_population
            return {
                "CurrentGenerationIndex": self._current_generation_index,
                "CurrentPopulation": population.serialize() if population is not None else None,
                "BestFitness": list(self._best_fitness),
                "WorstFitness": list(self._worst_fitness),
                "AverageFitness": list(self._average_fitness),
                "TotalFitness": list(self._total_fitness),
                "NumberOfUniqueIndividuals": list(self._unique_individuals),
                "FitnessStandardDeviation": list(self._fitness_standard_deviation),
                "BestIndividuals": [individual.serialize() for individual in self._best_individuals],
            }

    def to_json(self) -> str:
        return json.dumps(self.serialize(), indent=2)

    def snapshot_for_exchange(self, request_id: Optional[str] = None) -> "ObserverSnapshot":
        """
        Package the generation index and current inhabitants for a coordinator.

        Args:
            request_id: Tag for the exchange, a fresh uuid4 string when omitted
        """
        with self._lock:
            population = self.get_current_population()
            return ObserverSnapshot(
                generation_index=self._current_generation_index,
                inhabitants=[individual.clone() for individual in population],
                request_id=request_id,
            )


class ObserverSnapshot:
    """Partial observer state exchanged between solver processes."""

    def __init__(
        self,
        generation_index: int,
        inhabitants: List[Individual],
        request_id: Optional[str] = None,
    ):
        self.generation_index = generation_index
        self.inhabitants = list(inhabitants)
        self.request_id = request_id if request_id is not None else str(uuid.uuid4())

    @property
    def count(self) -> int:
        return len(self.inhabitants)

    def serialize(self) -> Dict[str, Any]:
        return {
            "CurrentGenerationIndex": self.generation_index,
            "Inhabitants": [individual.serialize() for individual in self.inhabitants],
            "RequestId": self.request_id,
        }

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "ObserverSnapshot":
        if not isinstance(data, dict):
            raise SerializationError("Snapshot data must be a dict")
        try:
            return cls(
                generation_index=int(data["CurrentGenerationIndex"]),
                inhabitants=[Individual.deserialize(item) for item in data["Inhabitants"]],
                request_id=data.get("RequestId"),
            )
        except (KeyError, TypeError) as e:
            raise SerializationError(f"Invalid snapshot data: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.serialize())

    @classmethod
    def from_json(cls, text: str) -> "ObserverSnapshot":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON format: {e}") from e
        return cls.deserialize(data)


class ObserverRegistry:
    """
    Thread-safe map from a caller identity to its observer.

    Replaces a process-wide observer table: create one registry where several
    solver instances need to find their observers by key.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._observers: Dict[Hashable, EvolutionObserver] = {}

    def get(self, key: Hashable) -> EvolutionObserver:
        """Observer for key, created on first request."""
        with self._lock:
            observer = self._observers.get(key)
            if observer is None:
                observer = EvolutionObserver()
                self._observers[key] = observer
            return observer

    def discard(self, key: Hashable) -> None:
        with self._lock:
            self._observers.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
