"""
Gene system for spiza genetics.

A gene is one discrete parameter slot: a stable identity plus a tick value in
[0, tick_count]. Gene templates describe where a gene comes from in the
external model, either a plain slider or one slot of a multi-value pool.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from ..exceptions import SerializationError

SLIDER_POOL_INDEX = -1


class Gene:
    """
    Discrete parameter slot with an immutable identity and one mutable value.

    Identity fields (gene_id, slot_id, name, pool_index, tick_count) never change
    after construction. tick_value changes only through mutated_value(), which is
    reserved for crossover and mutation operators.

    Genes at the same position of two individuals from one run share their
    gene_id; only tick_value differs.
    """

    def __init__(
        self,
        tick_value: int,
        gene_id: UUID,
        tick_count: int,
        name: str,
        slot_id: UUID,
        pool_index: int = SLIDER_POOL_INDEX,
    ):
        """
        Args:
            tick_value: Current position in [0, tick_count]
            gene_id: Identity shared by this slot across the population
            tick_count: Largest reachable tick value
            name: Human-readable label
            slot_id: Id of the external object this gene writes into
            pool_index: Index within a multi-value pool, -1 for sliders
        """
        if tick_count < 0:
            raise ValueError("tick_count must be non-negative")
        self._gene_id = gene_id
        self._slot_id = slot_id
        self._name = name
        self._pool_index = pool_index
        self._tick_count = tick_count
        self._tick_value = 0
        self.mutated_value(tick_value)

    @property
    def gene_id(self) -> UUID:
        return self._gene_id

    @property
    def slot_id(self) -> UUID:
        return self._slot_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def pool_index(self) -> int:
        return self._pool_index

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def tick_value(self) -> int:
        return self._tick_value

    @property
    def is_pool_slot(self) -> bool:
        return self._pool_index != SLIDER_POOL_INDEX

    def mutated_value(self, value: int) -> None:
        """
        Set a new tick value. Only crossover and mutation operators call this.

        Raises:
            ValueError: If value is outside [0, tick_count]
        """
        value = int(value)
        if not 0 <= value <= self._tick_count:
            raise ValueError(
                f"tick value {value} outside [0, {self._tick_count}] for gene '{self._name}'"
            )
        self._tick_value = value

    def copy(self) -> "Gene":
        """Independent gene with the same identity and tick value."""
        return Gene(
            tick_value=self._tick_value,
            gene_id=self._gene_id,
            tick_count=self._tick_count,
            name=self._name,
            slot_id=self._slot_id,
            pool_index=self._pool_index,
        )

    def structure_key(self) -> tuple:
        return self._gene_id, self._tick_value

    def serialize(self) -> Dict[str, Any]:
        return {
            "TickValue": self._tick_value,
            "GeneGuid": str(self._gene_id),
            "TickCount": self._tick_count,
            "GeneName": self._name,
            "GhInstanceGuid": str(self._slot_id),
            "GenePoolIndex": self._pool_index,
        }

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "Gene":
        try:
            return cls(
                tick_value=data["TickValue"],
                gene_id=UUID(data["GeneGuid"]),
                tick_count=data["TickCount"],
                name=data["GeneName"],
                slot_id=UUID(data["GhInstanceGuid"]),
                pool_index=data.get("GenePoolIndex", SLIDER_POOL_INDEX),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Invalid gene data: {e}") from e

    def __repr__(self) -> str:
        return f"Gene(name={self._name!r}, tick_value={self._tick_value}, tick_count={self._tick_count})"


class GeneTemplate(ABC):
    """
    Description of one external slot that genes are created from.

    Two variants exist: SliderTemplate for single-value sliders and
    PoolSlotTemplate for one entry of a multi-value gene pool. Each carries only
    the fields its variant needs.
    """

    def __init__(
        self,
        name: str,
        tick_count: int,
        slot_id: Optional[UUID] = None,
        gene_id: Optional[UUID] = None,
    ):
        if tick_count < 0:
            raise ValueError("tick_count must be non-negative")
        self._name = name
        self._tick_count = tick_count
        self._slot_id = slot_id if slot_id is not None else uuid4()
        self._gene_id = gene_id if gene_id is not None else uuid4()

    @property
    def name(self) -> str:
        return self._name

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def slot_id(self) -> UUID:
        return self._slot_id

    @property
    def gene_id(self) -> UUID:
        return self._gene_id

    @property
    @abstractmethod
    def kind(self) -> str:
        """Variant tag, "slider" or "pool_slot"."""
        ...

    @property
    @abstractmethod
    def pool_index(self) -> int:
        ...

    def make_gene(self, tick_value: int) -> Gene:
        """Create a gene bound to this template with the given tick value."""
        return Gene(
            tick_value=tick_value,
            gene_id=self._gene_id,
            tick_count=self._tick_count,
            name=self._name,
            slot_id=self._slot_id,
            pool_index=self.pool_index,
        )


class SliderTemplate(GeneTemplate):
    """Single-value slider slot."""

    @property
    def kind(self) -> str:
        return "slider"

    @property
    def pool_index(self) -> int:
        return SLIDER_POOL_INDEX


class PoolSlotTemplate(GeneTemplate):
    """One indexed entry of a multi-value gene pool."""

    def __init__(
        self,
        name: str,
        tick_count: int,
        pool_index: int,
        slot_id: Optional[UUID] = None,
        gene_id: Optional[UUID] = None,
    ):
        if pool_index < 0:
            raise ValueError("pool_index must be non-negative")
        super().__init__(name, tick_count, slot_id=slot_id, gene_id=gene_id)
        self._pool_index = pool_index

    @property
    def kind(self) -> str:
        return "pool_slot"

    @property
    def pool_index(self) -> int:
        return self._pool_index
