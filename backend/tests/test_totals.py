from decimal import Decimal

from invoicer.engine.columns import Column, ColumnBehavior
from invoicer.engine.line_items import LineItem
from invoicer.engine.totals import aggregate


class TestAggregate:
    def test_single_item_no_custom_columns(self):
        totals = aggregate([LineItem("Widget", 2, 50)])
        assert totals.subtotal == Decimal("100")
        assert totals.total_amount == Decimal("100")
        assert totals.amount_due == Decimal("100")

    def test_shipping_and_discount(self):
        columns = [Column("Shipping", ColumnBehavior.ADDITIVE)]
        items = [
            LineItem("Widget", 2, 50, {"Shipping": "10"}),
            LineItem("Gadget", 1, 30, {"Shipping": ""}),
        ]
        totals = aggregate(items, columns, discount=5)
        assert totals.line_totals == [Decimal("110"), Decimal("30")]
        assert totals.subtotal == Decimal("140")
        assert totals.total_amount == Decimal("135")

    def test_payments_reduce_amount_due(self):
        totals = aggregate([LineItem("Widget", 1, 100)], total_paid="40")
        assert totals.total_paid == Decimal("40")
        assert totals.amount_due == Decimal("60")

    def test_negative_results_kept(self):
        columns = [Column("Rebate", ColumnBehavior.SUBTRACTIVE)]
        totals = aggregate([LineItem("Widget", 1, 10, {"Rebate": "30"})], columns, discount=5)
        assert totals.subtotal == Decimal("-20")
        assert totals.total_amount == Decimal("-25")

    def test_overpayment_gives_negative_amount_due(self):
        totals = aggregate([LineItem("Widget", 1, 10)], total_paid=15)
        assert totals.amount_due == Decimal("-5")

    def test_no_items(self):
        totals = aggregate([])
        assert totals.subtotal == Decimal("0")
        assert totals.line_totals == []

    def test_decimal_arithmetic_is_exact(self):
        totals = aggregate([LineItem("A", 1, "0.1"), LineItem("B", 1, "0.2")])
        assert totals.subtotal == Decimal("0.3")

    def test_item_order_does_not_change_totals(self):
        columns = [Column("Shipping", ColumnBehavior.ADDITIVE), Column("Rebate", ColumnBehavior.SUBTRACTIVE)]
        items = [
            LineItem("Widget", 2, "19.99", {"Shipping": "4.5", "Rebate": "1"}),
            LineItem("Gadget", 1, 30, {"Shipping": "", "Rebate": "12.25"}),
            LineItem("Bolt", 100, "0.07", {"Shipping": "abc", "Rebate": ""}),
        ]
        order = [2, 0, 1]
        forward = aggregate(items, columns, discount="3", total_paid="10")
        permuted = aggregate([items[i] for i in order], columns, discount="3", total_paid="10")

        assert permuted.subtotal == forward.subtotal
        assert permuted.total_amount == forward.total_amount
        assert permuted.amount_due == forward.amount_due
        assert permuted.line_totals == [forward.line_totals[i] for i in order]

    def test_long_custom_values_do_not_fail(self):
        columns = [Column("Shipping", ColumnBehavior.ADDITIVE)]
        totals = aggregate([LineItem("Widget", 1, 0, {"Shipping": "9" * 29})], columns, discount="0.5")
        assert totals.total_amount == Decimal("9" * 28 + "8.5")
