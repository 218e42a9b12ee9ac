"""
Abstract strategy classes for the evolutionary solver.

Strategies provide the decision logic of a generation - which individuals mate,
how they are paired, how genomes recombine and mutate, and when the run stops.
Abstract classes define the hook-based pattern and validation contracts; concrete
implementations (in selection_strategies.py, pairing_strategies.py,
crossover_strategies.py, mutation_strategies.py, termination_strategies.py)
provide the algorithms.
"""

import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Type

from ..exceptions import MalformedGenomeError, SerializationError, SettingsError
from .genes import Gene
from .individual import Individual
from .population import Population

if TYPE_CHECKING:
    from ..solver.observer import EvolutionObserver


def check_probability(name: str, value: float) -> float:
    """Validate a rate parameter lies in [0, 1]; never clamps."""
    if not 0.0 <= value <= 1.0:
        raise SettingsError(f"{name} must be in [0, 1], got {value}")
    return float(value)


class IndividualPair(NamedTuple):
    """Two individuals chosen to mate."""

    first: Individual
    second: Individual


class AbstractStrategy(ABC):
    """
    Root strategy class providing randomness and serialization infrastructure.

    Every strategy owns a private random.Random, created lazily and replaceable
    through reseed(). Concrete strategies draw random numbers only through small
    hook methods so tests can override them for determinism.

    Subclasses are automatically registered by class name for serialization
    dispatch via __init_subclass__. A serialized strategy is
    {"kind": <class name>, "payload": get_parameters()} and is rebuilt by calling
    the registered class with the payload as keyword arguments.

    Holds no mutable state besides its configuration and PRNG.
    """

    _registry: Dict[str, type] = {}

    def __init_subclass__(cls, **kwargs):
        """Auto-register subclasses for serialization dispatch."""
        super().__init_subclass__(**kwargs)
        AbstractStrategy._registry[cls.__name__] = cls

    # Randomness

    @property
    def rng(self) -> random.Random:
        rng = getattr(self, "_rng", None)
        if rng is None:
            rng = random.Random()
            self._rng = rng
        return rng

    def reseed(self, seed: Optional[int]) -> None:
        """Replace the PRNG with one seeded from seed."""
        self._rng = random.Random(seed)

    def _random(self) -> float:
        """Return uniform random in [0, 1). Override in tests for determinism."""
        return self.rng.random()

    def _randint(self, low: int, high: int) -> int:
        """Return uniform integer in [low, high], both inclusive. Override in tests for determinism."""
        return self.rng.randint(low, high)

    # Serialization

    def get_parameters(self) -> Dict[str, Any]:
        """
        Constructor keyword arguments reproducing this strategy.

        Parameterless strategies keep the default empty dict.
        """
        return {}

    def serialize(self) -> Dict[str, Any]:
        return {"kind": type(self).__name__, "payload": self.get_parameters()}

    @classmethod
    def deserialize(
        cls,
        data: Dict[str, Any],
        expected: Optional[Type["AbstractStrategy"]] = None,
    ) -> "AbstractStrategy":
        """
        Rebuild a strategy from serialize() output.

        Args:
            data: Dict with "kind" and "payload"
            expected: Optional family the result must belong to

        Raises:
            SerializationError: If kind is missing, unknown or of the wrong family,
                or the payload does not fit the constructor
        """
        if not isinstance(data, dict):
            raise SerializationError("Serialized strategy must be a dict")
        kind = data.get("kind")
        if kind is None:
            raise SerializationError("Missing 'kind' field in serialized strategy")
        strategy_class = cls._registry.get(kind)
        if strategy_class is None:
            raise SerializationError(f"Unknown strategy kind: {kind}")
        if expected is not None and not issubclass(strategy_class, expected):
            raise SerializationError(f"Strategy kind {kind} is not a {expected.__name__}")
        try:
            return strategy_class(**data.get("payload", {}))
        except TypeError as e:
            raise SerializationError(f"Invalid payload for {kind}: {e}") from e

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.get_parameters().items())
        return f"{type(self).__name__}({params})"


class AbstractSelectionStrategy(AbstractStrategy):
    """
    Mating-pool selection: sample individuals from a population.

    Sampling, not partitioning - the same individual may be chosen many times.
    Stateless apart from configuration and PRNG.
    """

    def select(self, population: Population, number_of_selections: int) -> List[Individual]:
        """
        Draw number_of_selections individuals from population.

        Orchestrates selection by validating inputs and dispatching to the
        select_individuals hook.

        Raises:
            MalformedGenomeError: If population is empty or the selection count
                is negative
        """
        if population is None or population.count == 0:
            raise MalformedGenomeError("Population is empty")
        if number_of_selections < 0:
            raise MalformedGenomeError("number_of_selections cannot be negative")
        return self.select_individuals(population, number_of_selections)

    @abstractmethod
    def select_individuals(self, population: Population, number_of_selections: int) -> List[Individual]:
        """
        Abstract hook for the sampling algorithm.

        Args:
            population: Non-empty population with fitness set
            number_of_selections: Number of individuals to return

        Returns:
            Selected individuals (references, duplicates allowed)
        """
        ...


class AbstractPairingStrategy(AbstractStrategy):
    """Forms mating couples from a mating pool."""

    def pair_individuals(self, selected: Sequence[Individual]) -> List[IndividualPair]:
        """
        Pair every individual of the pool with a mate from the same pool.

        Returns:
            One pair per selected individual, in pool order
        """
        candidates = list(selected)
        return [IndividualPair(individual, self.find_mate(individual, candidates)) for individual in candidates]

    @abstractmethod
    def find_mate(self, individual: Individual, candidates: List[Individual]) -> Individual:
        """Abstract hook choosing a mate for individual among candidates."""
        ...


class AbstractCrossoverStrategy(AbstractStrategy):
    """
    Recombines two parents into two children.

    crossover_rate is the chance the solver applies crossover to a pair at all;
    the strategy itself never consults it.
    """

    def __init__(self, crossover_rate: float = 0.8):
        """
        Args:
            crossover_rate: Probability in [0, 1] that a pair is recombined
        """
        self.crossover_rate = check_probability("crossover_rate", crossover_rate)

    def get_parameters(self) -> Dict[str, Any]:
        return {"crossover_rate": self.crossover_rate}

    def crossover(self, parent1: Individual, parent2: Individual) -> List[Individual]:
        """
        Produce two children from two equal-length parents.

        Children get copies of the parents' genes, so mutating a child never
        touches a parent. Children are unevaluated (fitness None).

        Raises:
            MalformedGenomeError: If the parents' genomes differ in length
        """
        genes1 = parent1.genes
        genes2 = parent2.genes
        if len(genes1) != len(genes2):
            raise MalformedGenomeError("Parents must have genomes of the same length")
        child1_genes, child2_genes = self.cross_genes(genes1, genes2)
        return [
            Individual([gene.copy() for gene in child1_genes]),
            Individual([gene.copy() for gene in child2_genes]),
        ]

    @abstractmethod
    def cross_genes(self, genes1: List[Gene], genes2: List[Gene]) -> Tuple[List[Gene], List[Gene]]:
        """
        Abstract hook for position-wise recombination.

        Every output position must hold the gene from one of the parents at
        that position.
        """
        ...


class AbstractMutationStrategy(AbstractStrategy):
    """
    In-place gene mutation for introducing variation.

    Each gene of an individual is independently mutated with probability
    mutation_rate. Tick values always stay in [0, tick_count].
    """

    def __init__(self, mutation_rate: float = 0.1):
        """
        Args:
            mutation_rate: Per-gene mutation probability in [0, 1]
        """
        self.mutation_rate = check_probability("mutation_rate", mutation_rate)

    def get_parameters(self) -> Dict[str, Any]:
        return {"mutation_rate": self.mutation_rate}

    def mutate(self, individual: Individual) -> None:
        """Mutate the individual's genes in place."""
        for gene in individual.genes:
            if self._random() < self.mutation_rate:
                gene.mutated_value(self.mutate_gene(gene))

    @abstractmethod
    def mutate_gene(self, gene: Gene) -> int:
        """
        Abstract hook returning the new tick value for gene.

        Must return a value in [0, gene.tick_count].
        """
        ...


class AbstractTerminationStrategy(AbstractStrategy):
    """Predicate over the observer deciding whether a run stops early."""

    def __init__(self, termination_threshold: float):
        self.termination_threshold = termination_threshold

    @abstractmethod
    def evaluate(self, observer: "EvolutionObserver") -> bool:
        """Return True when the run should stop."""
        ...
