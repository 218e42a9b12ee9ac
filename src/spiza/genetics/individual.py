"""Individual: one candidate solution, an ordered genome plus its fitness."""

import json
import math
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from ..exceptions import SerializationError
from .genes import Gene


def fitness_key(individual: "Individual") -> float:
    """Sort key treating unevaluated fitness as 0."""
    fitness = individual.fitness
    return 0.0 if fitness is None else fitness


class Individual:
    """
    Ordered genome with fitness, selection probability and generation tag.

    Gene order is meaningful: crossover combines genes position by position, so
    two parents must agree on length and gene identity at each index.

    Fitness is None until the individual has been evaluated. Probability is the
    fitness-proportionate selection weight and defaults to 0.
    """

    def __init__(
        self,
        genes: Optional[Iterable[Gene]] = None,
        fitness: Optional[float] = None,
        generation: int = 0,
    ):
        """
        Args:
            genes: Genome in slot order. The list is copied, the genes are not.
            fitness: Evaluation result, None until evaluated
            generation: Generation index the individual lives in
        """
        self._genes: List[Gene] = list(genes) if genes is not None else []
        self._fitness: Optional[float] = None
        self._probability = 0.0
        self._generation = 0
        if fitness is not None:
            self.set_fitness(fitness)
        self.set_generation(generation)

    # Properties

    @property
    def genes(self) -> List[Gene]:
        """Genome in slot order (copy of the list, shared gene objects)."""
        return list(self._genes)

    @property
    def fitness(self) -> Optional[float]:
        return self._fitness

    @property
    def probability(self) -> float:
        return self._probability

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._genes)

    # Mutators

    def add_gene(self, gene: Gene) -> None:
        if gene is None:
            raise ValueError("gene cannot be None")
        self._genes.append(gene)

    def set_fitness(self, fitness: float) -> None:
        fitness = float(fitness)
        if math.isnan(fitness):
            raise ValueError("Fitness cannot be NaN")
        if math.isinf(fitness):
            raise ValueError("Fitness cannot be infinity")
        self._fitness = fitness

    def set_probability(self, normalized_fitness: float) -> None:
        if not 0.0 <= normalized_fitness <= 1.0:
            raise ValueError("Normalized fitness must be between 0 and 1")
        self._probability = normalized_fitness

    def set_generation(self, generation: int) -> None:
        if generation < 0:
            raise ValueError("Generation cannot be negative")
        self._generation = generation

    # Copies

    def copy(self) -> "Individual":
        """
        Copy-construct: new gene list holding the same gene objects.

        Fitness and generation carry over, probability resets to 0. Mutating a
        gene of the copy mutates the original too; use clone() to avoid that.
        """
        return Individual(self._genes, fitness=self._fitness, generation=self._generation)

    def clone(self) -> "Individual":
        """Copy with independent genes, safe to mutate."""
        return Individual(
            [gene.copy() for gene in self._genes],
            fitness=self._fitness,
            generation=self._generation,
        )

    # Queries

    def tick_values(self) -> List[int]:
        return [gene.tick_value for gene in self._genes]

    def assignment(self) -> Dict[UUID, int]:
        """Map each gene id to its tick value, the input of a fitness function."""
        return {gene.gene_id: gene.tick_value for gene in self._genes}

    def structure_key(self) -> tuple:
        """Every gene's (id, value) plus the fitness; equal keys mean equal individuals."""
        return tuple(gene.structure_key() for gene in self._genes), self._fitness

    def structure_hash(self) -> int:
        return hash(self.structure_key())

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        return {
            "Fitness": self._fitness,
            "GenePool": [gene.serialize() for gene in self._genes],
            "Generation": self._generation,
        }

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "Individual":
        if not isinstance(data, dict) or "GenePool" not in data:
            raise SerializationError("Individual data must be a dict with a 'GenePool' field")
        genes = [Gene.deserialize(gene_data) for gene_data in data["GenePool"]]
        try:
            return cls(
                genes,
                fitness=data.get("Fitness"),
                generation=data.get("Generation", 0),
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Invalid individual data: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.serialize(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> "Individual":
        if not text:
            raise SerializationError("JSON string cannot be empty")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON format: {e}") from e
        return cls.deserialize(data)

    def __repr__(self) -> str:
        return (
            f"Individual(fitness={self._fitness}, generation={self._generation}, "
            f"tick_values={self.tick_values()})"
        )
