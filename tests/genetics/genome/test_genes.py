"""
Black-box tests for Gene and the gene template variants.

Tests identity preservation, tick value bounds, copying, and the JSON field
contract.
"""

from uuid import uuid4

import pytest

from spiza.exceptions import SerializationError
from spiza.genetics.genes import SLIDER_POOL_INDEX, Gene, PoolSlotTemplate, SliderTemplate


def make_gene(tick_value=3, tick_count=10, pool_index=SLIDER_POOL_INDEX):
    return Gene(tick_value, uuid4(), tick_count, "width", uuid4(), pool_index)


# ─── Gene ─────────────────────────────────────────────────────────────────────


class TestGene:
    def test_constructor_stores_fields(self):
        gene_id, slot_id = uuid4(), uuid4()
        gene = Gene(4, gene_id, 10, "width", slot_id, 2)
        assert gene.tick_value == 4
        assert gene.gene_id == gene_id
        assert gene.slot_id == slot_id
        assert gene.name == "width"
        assert gene.pool_index == 2
        assert gene.tick_count == 10
        assert gene.is_pool_slot

    def test_slider_is_not_pool_slot(self):
        assert not make_gene().is_pool_slot

    def test_constructor_rejects_out_of_range_value(self):
        with pytest.raises(ValueError, match="outside"):
            make_gene(tick_value=11, tick_count=10)

    def test_mutated_value_accepts_bounds(self):
        gene = make_gene(tick_count=10)
        gene.mutated_value(0)
        assert gene.tick_value == 0
        gene.mutated_value(10)
        assert gene.tick_value == 10

    def test_mutated_value_rejects_negative(self):
        gene = make_gene()
        with pytest.raises(ValueError):
            gene.mutated_value(-1)

    def test_copy_is_independent_with_same_identity(self):
        gene = make_gene(tick_value=3)
        copied = gene.copy()
        copied.mutated_value(7)
        assert gene.tick_value == 3
        assert copied.gene_id == gene.gene_id
        assert copied.slot_id == gene.slot_id

    def test_serialize_uses_contract_field_names(self):
        data = make_gene(tick_value=5).serialize()
        assert set(data) == {"TickValue", "GeneGuid", "TickCount", "GeneName", "GhInstanceGuid", "GenePoolIndex"}
        assert data["TickValue"] == 5

    def test_deserialize_restores_gene(self):
        gene = make_gene(tick_value=6, pool_index=1)
        restored = Gene.deserialize(gene.serialize())
        assert restored.structure_key() == gene.structure_key()
        assert restored.pool_index == 1

    def test_deserialize_missing_field_raises(self):
        data = make_gene().serialize()
        del data["GeneGuid"]
        with pytest.raises(SerializationError):
            Gene.deserialize(data)


# ─── Templates ────────────────────────────────────────────────────────────────


class TestTemplates:
    def test_slider_template_makes_slider_gene(self):
        template = SliderTemplate("height", 20)
        gene = template.make_gene(7)
        assert template.kind == "slider"
        assert gene.pool_index == SLIDER_POOL_INDEX
        assert gene.gene_id == template.gene_id
        assert gene.tick_count == 20

    def test_pool_slot_template_carries_index(self):
        pool_id = uuid4()
        template = PoolSlotTemplate("pool", 5, pool_index=3, slot_id=pool_id)
        gene = template.make_gene(2)
        assert template.kind == "pool_slot"
        assert gene.pool_index == 3
        assert gene.slot_id == pool_id

    def test_pool_slot_template_rejects_negative_index(self):
        with pytest.raises(ValueError):
            PoolSlotTemplate("pool", 5, pool_index=-1)

    def test_templates_get_distinct_ids(self):
        assert SliderTemplate("a", 1).gene_id != SliderTemplate("a", 1).gene_id
