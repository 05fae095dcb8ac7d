import pytest

from invoicer.engine.columns import (
    FIXED_COLUMNS,
    Column,
    ColumnBehavior,
    ColumnRegistry,
    InsertPosition,
)
from invoicer.exceptions import (
    ColumnNotFoundError,
    DuplicateColumnError,
    InvalidColumnNameError,
    InvalidReferenceError,
)


def registry(*names):
    return ColumnRegistry(Column(name) for name in names)


class TestColumnBehavior:
    def test_wire_values(self):
        assert ColumnBehavior("text") is ColumnBehavior.NEUTRAL
        assert ColumnBehavior("additive") is ColumnBehavior.ADDITIVE
        assert ColumnBehavior("subtractive") is ColumnBehavior.SUBTRACTIVE

    def test_neutral_alias(self):
        assert ColumnBehavior("neutral") is ColumnBehavior.NEUTRAL

    def test_unknown_behavior_rejected(self):
        with pytest.raises(ValueError):
            ColumnBehavior("multiply")

    def test_column_round_trip(self):
        column = Column.from_dict({"name": "Shipping", "type": "additive"})
        assert column.behavior is ColumnBehavior.ADDITIVE
        assert column.to_dict() == {"name": "Shipping", "type": "additive"}

    def test_column_without_type_is_neutral(self):
        assert Column.from_dict({"name": "SKU"}).behavior is ColumnBehavior.NEUTRAL

    def test_column_coerces_wire_value(self):
        assert Column("Tax", "subtractive").behavior is ColumnBehavior.SUBTRACTIVE


class TestInsertColumn:
    def test_append_without_reference(self):
        columns = registry("A", "B")
        assert columns.insert_column("C") == 2
        assert columns.names == ["A", "B", "C"]

    def test_insert_after_custom_column(self):
        columns = registry("A", "B")
        assert columns.insert_column("X", reference_column_name="A", position=InsertPosition.AFTER) == 1
        assert columns.names == ["A", "X", "B"]

    def test_insert_before_custom_column(self):
        columns = registry("A", "B")
        assert columns.insert_column("X", reference_column_name="B", position="before") == 1
        assert columns.names == ["A", "X", "B"]

    def test_insert_before_first_column(self):
        columns = registry("A")
        assert columns.insert_column("X", reference_column_name="A", position=InsertPosition.BEFORE) == 0
        assert columns.names == ["X", "A"]

    @pytest.mark.parametrize("reference", list(FIXED_COLUMNS) + ["Quantity", "Unit Price"])
    @pytest.mark.parametrize("position", [InsertPosition.BEFORE, InsertPosition.AFTER])
    def test_fixed_reference_clamps_to_start(self, reference, position):
        columns = registry("Discount")
        assert columns.insert_column("Tax", ColumnBehavior.SUBTRACTIVE, reference, position) == 0
        assert columns.names == ["Tax", "Discount"]

    def test_unknown_reference(self):
        columns = registry("A")
        with pytest.raises(InvalidReferenceError, match="Reference column 'Nope' does not exist"):
            columns.insert_column("X", reference_column_name="Nope")
        assert columns.names == ["A"]

    def test_duplicate_name(self):
        columns = registry("Shipping")
        with pytest.raises(DuplicateColumnError, match="Column 'Shipping' already exists"):
            columns.insert_column("Shipping", ColumnBehavior.ADDITIVE)
        assert len(columns) == 1

    def test_names_are_case_sensitive(self):
        columns = registry("Shipping")
        columns.insert_column("shipping")
        assert columns.names == ["Shipping", "shipping"]

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, name):
        columns = registry()
        with pytest.raises(InvalidColumnNameError):
            columns.insert_column(name)
        assert len(columns) == 0

    def test_duplicates_rejected_on_load(self):
        with pytest.raises(DuplicateColumnError):
            ColumnRegistry.from_list([{"name": "A", "type": "text"}, {"name": "A", "type": "additive"}])


class TestRemoveColumn:
    def test_returns_removed_index(self):
        columns = registry("A", "B", "C")
        assert columns.remove_column("B") == 1
        assert columns.names == ["A", "C"]

    def test_missing_column(self):
        columns = registry("A")
        with pytest.raises(ColumnNotFoundError, match="Column 'B' not found"):
            columns.remove_column("B")
        assert columns.names == ["A"]

    def test_fixed_columns_cannot_be_removed(self):
        columns = registry("A")
        with pytest.raises(ColumnNotFoundError):
            columns.remove_column("Price")


class TestRegistryViews:
    def test_all_columns_in_render_order(self):
        columns = registry("Shipping", "Tax")
        assert columns.all_columns() == ["Description", "Qty", "Price", "Shipping", "Tax"]

    def test_serialization(self):
        data = [{"name": "Shipping", "type": "additive"}, {"name": "SKU", "type": "text"}]
        assert ColumnRegistry.from_list(data).to_list() == data

    def test_get(self):
        columns = ColumnRegistry([Column("Rebate", ColumnBehavior.SUBTRACTIVE)])
        assert columns.get("Rebate").behavior is ColumnBehavior.SUBTRACTIVE
        assert columns.get("Missing") is None
