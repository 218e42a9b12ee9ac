"""
Black-box tests for EvolutionarySolver.

Runs the generational loop against an in-memory registry and a plain Python
fitness function.
"""

import threading

import pytest

from spiza.exceptions import InvalidOperationError

from spiza.genetics.crossover_strategies import TwoPointCrossover
from spiza.genetics.genes import SliderTemplate
from spiza.genetics.individual import Individual
from spiza.genetics.mutation_strategies import RandomMutation
from spiza.genetics.pairing_strategies import InbreedingPairing
from spiza.genetics.population import Population
from spiza.genetics.selection_strategies import ExclusiveSelection, RouletteWheelSelection, TournamentSelection
from spiza.genetics.termination_strategies import MaxGenerations
from spiza.solver.context import EvaluationContext, InMemoryGeneRegistry
from spiza.solver.observer import EvolutionObserver
from spiza.solver.settings import SolverSettings
from spiza.solver.solver import EvolutionarySolver


# ─── Fixtures ─────────────────────────────────────────────────────────────────


def make_settings(
    population_size=12, max_generations=10, elite_size=2, termination=None, selection=None, crossover=None
):
    return SolverSettings(
        selection_strategy=selection or TournamentSelection(tournament_size=3),
        crossover_strategy=crossover or TwoPointCrossover(crossover_rate=0.8),
        mutation_strategy=RandomMutation(mutation_rate=0.3),
        pairing_strategy=InbreedingPairing(in_breeding_factor=0.5),
        termination_strategy=termination or MaxGenerations(max_generations=1000),
        population_size=population_size,
        max_generations=max_generations,
        elite_size=elite_size,
    )


class CountingFitness:
    """Sum of tick values, plus a record of every call."""

    def __init__(self):
        self.calls = 0

    def __call__(self, assignment):
        self.calls += 1
        return float(sum(assignment.values()))


def make_context(fitness=None, gene_count=4, tick_count=20):
    templates = [SliderTemplate(f"g{i}", tick_count) for i in range(gene_count)]
    registry = InMemoryGeneRegistry(templates)
    return EvaluationContext(registry, fitness or CountingFitness())


# ─── Initialization ───────────────────────────────────────────────────────────


class TestInitialization:
    def test_initial_population_is_scored_and_recorded(self):
        fitness = CountingFitness()
        context = make_context(fitness)
        observer = EvolutionObserver()
        solver = EvolutionarySolver(make_settings(), context, observer, seed=1)
        population = solver.initialize_population()
        assert population.count == 12
        assert fitness.calls == 12
        assert all(i.generation == 0 and i.fitness is not None for i in population)
        assert observer.best_fitness == [max(population.fitness_values())]
        assert observer.get_current_population() is population

    def test_initial_ticks_stay_below_tick_count(self):
        context = make_context(tick_count=3)
        solver = EvolutionarySolver(make_settings(population_size=40), context, seed=2)
        population = solver.initialize_population()
        assert all(0 <= v < 3 for i in population for v in i.tick_values())

    def test_zero_tick_count_starts_at_zero(self):
        context = make_context(tick_count=0)
        population = EvolutionarySolver(make_settings(), context, seed=2).initialize_population()
        assert all(v == 0 for i in population for v in i.tick_values())


# ─── Run ──────────────────────────────────────────────────────────────────────


class TestRun:
    def test_full_run_records_every_generation(self):
        observer = EvolutionObserver()
        solver = EvolutionarySolver(make_settings(max_generations=8), make_context(), observer, seed=3)
        best = solver.run()
        assert solver.error is None
        assert best is not None
        assert observer.current_generation_index == 7
        assert len(observer.best_fitness) == 8
        assert len(observer.best_individuals) == 8
        assert len(observer.fitness_standard_deviation) == 8

    def test_population_size_is_kept(self):
        solver = EvolutionarySolver(make_settings(max_generations=5), make_context(), seed=4)
        solver.run()
        assert solver.population.count == 12
        assert {i.generation for i in solver.population} == {4}

    def test_fitness_called_once_per_individual_per_generation(self):
        fitness = CountingFitness()
        solver = EvolutionarySolver(make_settings(max_generations=6), make_context(fitness), seed=5)
        solver.run()
        assert fitness.calls == 12 * 6

    def test_best_individual_is_reinstated(self):
        context = make_context()
        solver = EvolutionarySolver(make_settings(max_generations=4), context, seed=6)
        best = solver.run()
        assert solver.best_individual is best
        assert context.registry.values() == best.assignment()
        assert best.fitness == max(solver.population.fitness_values())

    def test_generations_do_not_share_individuals(self):
        observer = EvolutionObserver()
        solver = EvolutionarySolver(make_settings(max_generations=3), make_context(), observer, seed=7)
        solver.run()
        first, second, third = observer.best_individuals
        assert first is not second and second is not third

    def test_same_seed_reproduces_run(self):
        first = EvolutionarySolver(make_settings(), make_context(), seed=42)
        second = EvolutionarySolver(make_settings(), make_context(), seed=42)
        first.run()
        second.run()
        assert first.observer.best_fitness == second.observer.best_fitness

    def test_single_generation_run(self):
        observer = EvolutionObserver()
        solver = EvolutionarySolver(make_settings(max_generations=1), make_context(), observer, seed=8)
        assert solver.run() is not None
        assert observer.current_generation_index == 0
        assert len(observer.best_fitness) == 1


# ─── Termination ──────────────────────────────────────────────────────────────


class TestTermination:
    def test_termination_consulted_only_past_threshold(self):
        observer = EvolutionObserver()
        settings = make_settings(max_generations=50, termination=MaxGenerations(max_generations=1))
        solver = EvolutionarySolver(settings, make_context(), observer, seed=9)
        solver.run()
        # loop index 6 is the first one past the threshold of 5
        assert observer.current_generation_index == 7

    def test_custom_threshold(self):
        observer = EvolutionObserver()
        settings = make_settings(max_generations=50, termination=MaxGenerations(max_generations=1))
        solver = EvolutionarySolver(settings, make_context(), observer, seed=9, termination_evaluation_threshold=0)
        solver.run()
        assert observer.current_generation_index == 2


# ─── Failure and Cancellation ─────────────────────────────────────────────────


class TestFailureAndCancellation:
    def test_cancelled_run_skips_reinstatement(self):
        context = make_context()
        event = threading.Event()
        event.set()
        observer = EvolutionObserver()
        solver = EvolutionarySolver(make_settings(), context, observer, seed=10)
        assert solver.run(cancel_event=event) is None
        assert solver.cancelled
        assert solver.best_individual is None
        assert len(observer.best_fitness) == 1

    def test_cancel_between_generations(self):
        event = threading.Event()
        observer = EvolutionObserver()

        class CancellingFitness(CountingFitness):
            def __call__(self, assignment):
                if self.calls == 12 * 3 - 1:
                    event.set()
                return super().__call__(assignment)

        solver = EvolutionarySolver(make_settings(max_generations=20), make_context(CancellingFitness()), observer, seed=11)
        solver.run(cancel_event=event)
        assert solver.cancelled
        assert observer.current_generation_index == 2

    def test_fitness_failure_is_captured(self):
        def failing(assignment):
            raise RuntimeError("model crashed")

        solver = EvolutionarySolver(make_settings(), make_context(failing), seed=12)
        assert solver.run() is None
        assert isinstance(solver.error, RuntimeError)

    def test_zero_fitness_landscape_aborts_roulette_run(self):
        observer = EvolutionObserver()
        settings = make_settings(selection=RouletteWheelSelection())
        solver = EvolutionarySolver(settings, make_context(lambda assignment: 0.0), observer, seed=13)
        assert solver.run() is None
        assert solver.error is not None
        assert len(observer.best_fitness) == 1

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            EvolutionarySolver(make_settings(), make_context(), termination_evaluation_threshold=-1)


# ─── Generation Steps ─────────────────────────────────────────────────────────


class _RecordingTwoPoint(TwoPointCrossover):
    """Keeps every child it produces."""

    def __init__(self, crossover_rate=1.0):
        super().__init__(crossover_rate=crossover_rate)
        self.children = []

    def crossover(self, parent1, parent2):
        children = super().crossover(parent1, parent2)
        self.children.extend(children)
        return children


class TestTrim:
    def test_trim_keeps_front_and_cuts_tail(self):
        solver = EvolutionarySolver(make_settings(population_size=2, elite_size=0), make_context(), seed=14)
        population = Population([Individual(fitness=f) for f in (5.0, 1.0, 3.0)] + [Individual()])
        solver._trim(population)
        assert population.fitness_values() == [0.0, 1.0]

    def test_crossover_children_reach_next_generation(self):
        crossover = _RecordingTwoPoint()
        settings = make_settings(
            population_size=10, elite_size=2, selection=TournamentSelection(tournament_size=3), crossover=crossover
        )
        solver = EvolutionarySolver(settings, make_context(), seed=15)
        solver.initialize_population()
        new_population = solver._next_generation(1)
        assert crossover.children
        assert any(child is individual for child in crossover.children for individual in new_population)
        assert new_population.count == 10


class TestEmptyMatingPool:
    def test_exclusive_cutoff_of_zero_aborts_run(self):
        with pytest.warns(DeprecationWarning):
            selection = ExclusiveSelection(top_percentage=0.3)
        settings = make_settings(population_size=3, max_generations=3, elite_size=0, selection=selection)
        solver = EvolutionarySolver(settings, make_context(), seed=16)
        results = []
        worker = threading.Thread(target=lambda: results.append(solver.run()), daemon=True)
        worker.start()
        worker.join(timeout=5)
        assert not worker.is_alive()
        assert results == [None]
        assert isinstance(solver.error, InvalidOperationError)


class TestEarlyStop:
    def test_early_stop_keeps_previous_generation(self):
        observer = EvolutionObserver()
        settings = make_settings(max_generations=50, termination=MaxGenerations(max_generations=1))
        solver = EvolutionarySolver(settings, make_context(), observer, seed=17, termination_evaluation_threshold=0)
        best = solver.run()
        assert observer.current_generation_index == 2
        assert {i.generation for i in solver.population} == {1}
        assert any(best is individual for individual in solver.population)
