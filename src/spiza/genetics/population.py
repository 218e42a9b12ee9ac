"""Population: the individuals under evaluation in one generation."""

import json
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import InvalidOperationError, SerializationError
from .individual import Individual, fitness_key


class Population:
    """
    Ordered collection of individuals with aggregate fitness queries.

    All individuals produced by one solver run share genome length and gene
    identities; only tick values and fitness differ. Aggregates treat an
    unevaluated fitness as 0.
    """

    def __init__(self, inhabitants: Optional[Iterable[Individual]] = None):
        self._inhabitants: List[Individual] = list(inhabitants) if inhabitants is not None else []

    @property
    def inhabitants(self) -> List[Individual]:
        """The live list of individuals; mutating it mutates the population."""
        return self._inhabitants

    @property
    def count(self) -> int:
        return len(self._inhabitants)

    def __len__(self) -> int:
        return len(self._inhabitants)

    def __iter__(self):
        return iter(self._inhabitants)

    def add_individual(self, individual: Individual) -> None:
        self._inhabitants.append(individual)

    def add_individuals(self, individuals: Iterable[Individual]) -> None:
        if individuals is None:
            raise ValueError("individuals cannot be None")
        self._inhabitants.extend(individuals)

    def copy(self) -> "Population":
        """New population holding the same individual objects."""
        return Population(self._inhabitants)

    # Aggregates

    def fitness_values(self) -> List[float]:
        return [fitness_key(individual) for individual in self._inhabitants]

    def total_fitness(self) -> float:
        return sum(self.fitness_values())

    def average_fitness(self) -> float:
        if not self._inhabitants:
            raise InvalidOperationError("Average fitness of an empty population is undefined")
        return self.total_fitness() / len(self._inhabitants)

    def diversity(self) -> int:
        """Number of structurally distinct individuals (never exceeds count)."""
        return len({individual.structure_key() for individual in self._inhabitants})

    def select_top_individuals(self, count: int) -> List[Individual]:
        """
        The count fittest individuals, descending, ties kept in original order.

        Returns the individuals themselves, not copies. See elitism for the
        cloning variant used between generations.
        """
        if count < 0:
            raise ValueError("count must be non-negative")
        ranked = sorted(self._inhabitants, key=fitness_key, reverse=True)
        return ranked[:count]

    def best(self) -> Individual:
        if not self._inhabitants:
            raise InvalidOperationError("Empty population has no best individual")
        return self.select_top_individuals(1)[0]

    def worst(self) -> Individual:
        if not self._inhabitants:
            raise InvalidOperationError("Empty population has no worst individual")
        return min(self._inhabitants, key=fitness_key)

    def calculate_probability(self) -> None:
        """
        Assign each individual its share of the total fitness as probability.

        Raises:
            InvalidOperationError: If total fitness is exactly 0
        """
        total = self.total_fitness()
        if total == 0:
            raise InvalidOperationError("Total fitness is zero, probabilities are undefined")
        for individual in self._inhabitants:
            individual.set_probability(fitness_key(individual) / total)

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        return {"Inhabitants": [individual.serialize() for individual in self._inhabitants]}

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "Population":
        if not isinstance(data, dict) or "Inhabitants" not in data:
            raise SerializationError("Population data must be a dict with an 'Inhabitants' field")
        return cls(Individual.deserialize(item) for item in data["Inhabitants"])

    def to_json(self) -> str:
        return json.dumps(self.serialize())

    @classmethod
    def from_json(cls, text: str) -> "Population":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON format: {e}") from e
        return cls.deserialize(data)
