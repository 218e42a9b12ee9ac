"""
Evaluation ports: the boundary between the solver and the external model.

The solver never computes fitness itself. It pushes an individual's tick values
into the external model through a gene registry, then asks a fitness function
for a score. One EvaluationContext exists per run, so concurrent runs never
share fitness state.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List
from uuid import UUID

from loguru import logger

from ..exceptions import InvalidOperationError, MalformedGenomeError
from ..genetics.genes import Gene, GeneTemplate
from ..genetics.individual import Individual

FitnessFunction = Callable[[Dict[UUID, int]], float]


class AbstractGeneRegistry(ABC):
    """
    Port to the external model's parameter slots.

    Resolves gene identities to their live tick counts and provides the write
    path that pushes tick values into the model before evaluation.
    """

    @abstractmethod
    def templates(self) -> List[GeneTemplate]:
        """Templates genes are created from, in genome order."""
        ...

    @abstractmethod
    def tick_count(self, gene_id: UUID) -> int:
        """Live tick count of the slot behind gene_id."""
        ...

    @abstractmethod
    def write(self, gene: Gene) -> None:
        """Push gene's tick value into the external model."""
        ...


class InMemoryGeneRegistry(AbstractGeneRegistry):
    """
    Registry over a fixed list of templates, storing written values in a dict.

    Useful when the "external model" is plain Python: the fitness function
    reads the assignment it is given, and the caller reads the committed result
    back through value_of() or values() after the run.
    """

    def __init__(self, templates: Iterable[GeneTemplate]):
        self._templates = list(templates)
        self._by_id: Dict[UUID, GeneTemplate] = {}
        for template in self._templates:
            if template.gene_id in self._by_id:
                raise MalformedGenomeError(f"Duplicate gene id {template.gene_id}")
            self._by_id[template.gene_id] = template
        self._values: Dict[UUID, int] = {}

    def templates(self) -> List[GeneTemplate]:
        return list(self._templates)

    def tick_count(self, gene_id: UUID) -> int:
        try:
            return self._by_id[gene_id].tick_count
        except KeyError as e:
            raise MalformedGenomeError(f"Unknown gene id {gene_id}") from e

    def write(self, gene: Gene) -> None:
        if gene.gene_id not in self._by_id:
            raise MalformedGenomeError(f"Unknown gene id {gene.gene_id}")
        self._values[gene.gene_id] = gene.tick_value

    def value_of(self, gene_id: UUID) -> int:
        """Last tick value written for gene_id."""
        if gene_id not in self._values:
            raise InvalidOperationError(f"No value written for gene {gene_id}")
        return self._values[gene_id]

    def values(self) -> Dict[UUID, int]:
        return dict(self._values)


class EvaluationContext:
    """
    Fitness evaluation scoped to one solver run.

    evaluate() writes every gene of an individual through the registry and then
    calls the fitness function exactly once with the individual's assignment.
    """

    def __init__(self, registry: AbstractGeneRegistry, fitness_function: FitnessFunction):
        """
        Args:
            registry: Write path into the external model
            fitness_function: Maps a gene-id to tick-value assignment to a score
        """
        self._registry = registry
        self._fitness_function = fitness_function
        self._evaluation_count = 0

    @property
    def registry(self) -> AbstractGeneRegistry:
        return self._registry

    @property
    def evaluation_count(self) -> int:
        """Number of fitness function calls made so far."""
        return self._evaluation_count

    def evaluate(self, individual: Individual) -> float:
        """
        Score individual and record the result on it.

        Returns:
            The fitness assigned to individual
        """
        self.reinstate(individual)
        fitness = float(self._fitness_function(individual.assignment()))
        self._evaluation_count += 1
        individual.set_fitness(fitness)
        return fitness

    def reinstate(self, individual: Individual) -> None:
        """Write individual's tick values into the external model without scoring it."""
        for gene in individual.genes:
            self._registry.write(gene)
        logger.trace("[EvaluationContext] wrote {} genes", len(individual))
