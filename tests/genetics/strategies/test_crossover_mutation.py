"""
Black-box tests for concrete crossover and mutation strategies.

Cut points and random draws are forced through deterministic subclasses.
"""

import pytest

from spiza.exceptions import MalformedGenomeError
from spiza.genetics.crossover_strategies import SinglePointCrossover, TwoPointCrossover
from spiza.genetics.genes import SliderTemplate
from spiza.genetics.individual import Individual
from spiza.genetics.mutation_strategies import FixedValueMutation, PercentageMutation, RandomMutation


# ─── Deterministic Test Subclasses ────────────────────────────────────────────


class _FixedSinglePoint(SinglePointCrossover):
    def __init__(self, cut, **kwargs):
        super().__init__(**kwargs)
        self._cut = cut

    def _cut_point(self, length):
        return self._cut


class _FixedTwoPoint(TwoPointCrossover):
    def __init__(self, points, **kwargs):
        super().__init__(**kwargs)
        self._points = points

    def _cut_points(self, length):
        return self._points


class _ScriptedMutation(FixedValueMutation):
    """Overrides _random and _randint with fixed sequences."""

    def __init__(self, randoms, ints, **kwargs):
        super().__init__(**kwargs)
        self._random_it = iter(randoms)
        self._int_it = iter(ints)

    def _random(self):
        return next(self._random_it)

    def _randint(self, low, high):
        return next(self._int_it)


# ─── Fixtures ─────────────────────────────────────────────────────────────────


TEMPLATES = [SliderTemplate(f"g{i}", 10) for i in range(6)]


def make_individual(values, fitness=None):
    return Individual([t.make_gene(v) for t, v in zip(TEMPLATES, values)], fitness=fitness)


# ─── Crossover ────────────────────────────────────────────────────────────────


class TestTwoPointCrossover:
    def test_scenario_forced_cut_points(self):
        parent1 = make_individual([1, 2, 3, 4, 5, 6])
        parent2 = make_individual([6, 5, 4, 3, 2, 1])
        child1, child2 = _FixedTwoPoint((2, 4)).crossover(parent1, parent2)
        assert child1.tick_values() == [1, 2, 4, 3, 2, 6]
        assert child2.tick_values() == [6, 5, 3, 4, 5, 1]

    def test_cut_points_are_ordered(self):
        parent1 = make_individual([1, 2, 3, 4, 5, 6])
        parent2 = make_individual([6, 5, 4, 3, 2, 1])
        child1, _ = _FixedTwoPoint((4, 2)).crossover(parent1, parent2)
        assert child1.tick_values() == [1, 2, 4, 3, 2, 6]

    def test_equal_cut_points_swap_one_gene(self):
        parent1 = make_individual([1, 1, 1, 1, 1, 1])
        parent2 = make_individual([2, 2, 2, 2, 2, 2])
        child1, _ = _FixedTwoPoint((3, 3)).crossover(parent1, parent2)
        assert child1.tick_values() == [1, 1, 1, 2, 1, 1]

    def test_random_children_recombine_parent_values(self):
        parent1 = make_individual([1, 2, 3, 4, 5, 6])
        parent2 = make_individual([6, 5, 4, 3, 2, 1])
        strategy = TwoPointCrossover()
        strategy.reseed(11)
        for _ in range(25):
            child1, child2 = strategy.crossover(parent1, parent2)
            for i, (a, b) in enumerate(zip(child1.tick_values(), child2.tick_values())):
                assert {a, b} == {parent1.tick_values()[i], parent2.tick_values()[i]}


class TestSinglePointCrossover:
    def test_forced_cut(self):
        parent1 = make_individual([1, 2, 3, 4, 5, 6])
        parent2 = make_individual([6, 5, 4, 3, 2, 1])
        child1, child2 = _FixedSinglePoint(2).crossover(parent1, parent2)
        assert child1.tick_values() == [1, 2, 4, 3, 2, 1]
        assert child2.tick_values() == [6, 5, 3, 4, 5, 6]

    def test_mismatched_lengths_raise(self):
        parent1 = make_individual([1, 2, 3])
        parent2 = make_individual([1, 2])
        with pytest.raises(MalformedGenomeError, match="same length"):
            SinglePointCrossover().crossover(parent1, parent2)

    def test_children_do_not_alias_parents(self):
        parent1 = make_individual([1, 2, 3, 4, 5, 6], fitness=3.0)
        parent2 = make_individual([6, 5, 4, 3, 2, 1], fitness=4.0)
        child1, _ = _FixedSinglePoint(3).crossover(parent1, parent2)
        child1.genes[0].mutated_value(9)
        assert parent1.tick_values()[0] == 1
        assert child1.fitness is None

    def test_single_gene_genome_passes_through(self):
        parent1 = make_individual([1])
        parent2 = make_individual([2])
        child1, child2 = SinglePointCrossover().crossover(parent1, parent2)
        assert child1.tick_values() == [1]
        assert child2.tick_values() == [2]


# ─── Mutation ─────────────────────────────────────────────────────────────────


class TestMutation:
    @pytest.mark.parametrize(
        "strategy",
        [
            RandomMutation(mutation_rate=1.0),
            FixedValueMutation(mutation_rate=1.0, mutation_value=4),
            PercentageMutation(mutation_rate=1.0, mutation_percentage=0.9),
        ],
        ids=lambda s: type(s).__name__,
    )
    def test_values_stay_in_bounds(self, strategy):
        strategy.reseed(5)
        individual = make_individual([0, 10, 5, 1, 9, 3])
        for _ in range(200):
            strategy.mutate(individual)
            assert all(0 <= gene.tick_value <= gene.tick_count for gene in individual.genes)

    def test_zero_rate_never_mutates(self):
        individual = make_individual([1, 2, 3, 4, 5, 6])
        strategy = RandomMutation(mutation_rate=0.0)
        strategy.reseed(1)
        strategy.mutate(individual)
        assert individual.tick_values() == [1, 2, 3, 4, 5, 6]

    def test_per_gene_gate(self):
        individual = make_individual([5, 5, 5, 5, 5, 5])
        strategy = _ScriptedMutation(
            randoms=[0.0, 0.9, 0.0, 0.9, 0.9, 0.9],
            ints=[1, -1],
            mutation_rate=0.5,
            mutation_value=1,
        )
        strategy.mutate(individual)
        assert individual.tick_values() == [6, 5, 4, 5, 5, 5]

    def test_fixed_value_rerolls_out_of_range(self):
        individual = make_individual([10, 5, 5, 5, 5, 5])
        strategy = _ScriptedMutation(
            randoms=[0.0, 0.9, 0.9, 0.9, 0.9, 0.9],
            ints=[2, 1, -2],
            mutation_rate=0.5,
            mutation_value=2,
        )
        strategy.mutate(individual)
        assert individual.tick_values()[0] == 8

    def test_percentage_at_zero_cannot_move(self):
        individual = make_individual([0, 0, 0, 0, 0, 0])
        strategy = PercentageMutation(mutation_rate=1.0, mutation_percentage=0.5)
        strategy.reseed(2)
        strategy.mutate(individual)
        assert individual.tick_values() == [0] * 6
