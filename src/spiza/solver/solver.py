"""
EvolutionarySolver: the generational loop.

Each generation carries over the elites, breeds offspring from a selected and
paired mating pool, trims the result to the population size, scores it through
the evaluation context and records it in the observer. The loop is synchronous:
every fitness call of a generation completes before the next generation starts.
"""

import random
import threading
from typing import List, Optional

from loguru import logger

from ..exceptions import InvalidOperationError
from ..genetics.abstract_strategies import IndividualPair
from ..genetics.elitism import select_top_individuals
from ..genetics.individual import Individual, fitness_key
from ..genetics.population import Population
from .context import EvaluationContext
from .observer import EvolutionObserver
from .settings import SolverSettings

TERMINATION_EVALUATION_THRESHOLD = 5


class EvolutionarySolver:
    """
    Runs one evolutionary optimization against an evaluation context.

    A solver owns its population reference and is its only writer. The
    observer it records into may be read from other threads while run() is
    active.

    Failures inside run() are logged once and stored on error; the run is not
    retried and the observer keeps whatever it recorded. Cancellation is
    cooperative and only checked between generations.
    """

    def __init__(
        self,
        settings: SolverSettings,
        context: EvaluationContext,
        observer: Optional[EvolutionObserver] = None,
        seed: Optional[int] = None,
        termination_evaluation_threshold: int = TERMINATION_EVALUATION_THRESHOLD,
    ):
        """
        Args:
            settings: Strategies and sizes for the run
            context: Gene registry plus fitness function, scoped to this run
            observer: Statistics recorder, a fresh one when omitted
            seed: Reseeds the solver and every strategy PRNG for reproducible runs
            termination_evaluation_threshold: Generation index the loop must pass
                before the termination strategy is consulted
        """
        if termination_evaluation_threshold < 0:
            raise ValueError("termination_evaluation_threshold must be non-negative")
        self.settings = settings
        self.context = context
        self.observer = observer if observer is not None else EvolutionObserver()
        self.termination_evaluation_threshold = termination_evaluation_threshold

        self._rng = random.Random(seed)
        if seed is not None:
            for offset, strategy in enumerate(settings.strategies().values()):
                strategy.reseed(seed + offset + 1)

        self._population = Population()
        self._best_individual: Optional[Individual] = None
        self._error: Optional[BaseException] = None
        self._cancelled = False

    @property
    def population(self) -> Population:
        return self._population

    @property
    def best_individual(self) -> Optional[Individual]:
        """Individual reinstated at the end of the last completed run."""
        return self._best_individual

    @property
    def error(self) -> Optional[BaseException]:
        """Exception that aborted the last run, if any."""
        return self._error

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    # Random hooks

    def _random(self) -> float:
        """Uniform random in [0, 1). Override in tests for determinism."""
        return self._rng.random()

    def _random_tick(self, tick_count: int) -> int:
        """Uniform initial tick value in [0, tick_count). Override in tests for determinism."""
        if tick_count <= 0:
            return 0
        return self._rng.randrange(tick_count)

    # Run

    def initialize_population(self) -> Population:
        """
        Build, score and record generation 0.

        Every gene starts at a uniformly random tick below its live tick count,
        as reported by the registry.
        """
        registry = self.context.registry
        templates = registry.templates()
        population = Population()
        for _ in range(self.settings.population_size):
            genes = [
                template.make_gene(self._random_tick(registry.tick_count(template.gene_id)))
                for template in templates
            ]
            individual = Individual(genes, generation=0)
            self.context.evaluate(individual)
            population.add_individual(individual)

        self.observer.snapshot(population)
        self.observer.set_population(population)
        self._population = population
        logger.debug(
            "[EvolutionarySolver] initialized {} individuals, best={}",
            population.count,
            fitness_key(population.best()),
        )
        return population

    def run(self, cancel_event: Optional[threading.Event] = None) -> Optional[Individual]:
        """
        Run the generational loop to completion, termination or cancellation.

        Args:
            cancel_event: Set from another thread to stop at the next generation
                boundary

        Returns:
            The reinstated best individual, or None when the run was cancelled
            or failed
        """
        self._error = None
        self._cancelled = False
        self._best_individual = None
        settings = self.settings
        logger.info(
            "[EvolutionarySolver] starting run: population_size={}, max_generations={}, elite_size={}",
            settings.population_size,
            settings.max_generations,
            settings.elite_size,
        )

        try:
            self.initialize_population()
            for i in range(settings.max_generations - 1):
                if cancel_event is not None and cancel_event.is_set():
                    self._cancelled = True
                    logger.info("[EvolutionarySolver] cancelled before generation {}", i + 1)
                    return None

                new_population = self._next_generation(i + 1)

                self.observer.snapshot(new_population)
                self.observer.set_population(new_population)
                self.observer.update_generation_counter()
                logger.debug(
                    "[EvolutionarySolver] generation {} best={} average={}",
                    i + 1,
                    fitness_key(new_population.best()),
                    new_population.average_fitness(),
                )

                if i > self.termination_evaluation_threshold:
                    if settings.termination_strategy.evaluate(self.observer):
                        logger.info(
                            "[EvolutionarySolver] {} met at generation {}",
                            type(settings.termination_strategy).__name__,
                            i + 1,
                        )
                        break

                # An early stop leaves the previous generation live.
                self._population = new_population

            best = self._population.best()
            self.context.reinstate(best)
            self._best_individual = best
            logger.info("[EvolutionarySolver] reinstated best individual with fitness {}", best.fitness)
            return best
        except Exception as e:
            self._error = e
            logger.exception("[EvolutionarySolver] run aborted: {}", e)
            return None

    # Generation steps

    def _next_generation(self, generation: int) -> Population:
        """Breed, trim and score the population that follows the current one."""
        settings = self.settings
        population_copy = self._population.copy()
        new_population = Population()
        new_population.add_individuals(select_top_individuals(settings.elite_size, self._population.inhabitants))

        while new_population.count < settings.population_size:
            mating_pool = settings.selection_strategy.select(population_copy, settings.population_size)
            if not mating_pool:
                raise InvalidOperationError(
                    f"{type(settings.selection_strategy).__name__} returned an empty mating pool"
                )
            for pair in settings.pairing_strategy.pair_individuals(mating_pool):
                children = self._perform_crossover(pair)
                self._mutate_children(children)
                new_population.add_individuals(children)
            new_population.add_individuals(individual.clone() for individual in mating_pool)

        self._trim(new_population)

        for individual in new_population:
            individual.set_generation(generation)
        for individual in new_population:
            self.context.evaluate(individual)
        return new_population

    def _perform_crossover(self, pair: IndividualPair) -> List[Individual]:
        strategy = self.settings.crossover_strategy
        if self._random() < strategy.crossover_rate:
            return strategy.crossover(pair.first, pair.second)
        return [pair.first.clone(), pair.second.clone()]

    def _mutate_children(self, children: List[Individual]) -> None:
        strategy = self.settings.mutation_strategy
        for child in children:
            if self._random() < strategy.mutation_rate:
                strategy.mutate(child)

    def _trim(self, population: Population) -> None:
        """
        Sort ascending by fitness and cut the tail beyond population_size.

        Runs before the new generation is scored, so offspring rank by their
        unset fitness (0) and carried individuals by their parents' fitness.
        Unscored offspring therefore sit at the front and survive the cut.
        """
        size = self.settings.population_size
        if population.count <= size:
            return
        inhabitants = population.inhabitants
        inhabitants.sort(key=fitness_key)
        del inhabitants[size:]
