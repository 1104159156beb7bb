# =============================================================================
# tests/unit/test_calculations.py
# Unit Tests for derived-field calculations
# =============================================================================

import pytest

from inventory_core.domain import calculations
from inventory_core.domain.calculations import (
    TOLL_FEES,
    closing_stock,
    column_totals,
    department_loss,
    final_output,
    stock_totals,
    toll_fee,
    total_dispatch_cost,
    total_quantity,
    yield_percent,
)


class TestStockArithmetic:
    """Closing stock and total quantity"""

    def test_closing_stock(self):
        assert closing_stock(100, 20, 5) == 115

    def test_closing_stock_negative_is_not_clamped(self):
        """Issuing more than is held gives a negative balance"""
        assert closing_stock(10, 0, 25) == -15

    @pytest.mark.parametrize("opening,stock_in,stock_out", [
        (0, 0, 0),
        (0.1, 0.2, 0.3),
        (1.5, 2.25, 10),
        (1000000, 0.01, 999999.99),
    ])
    def test_closing_stock_is_exact(self, opening, stock_in, stock_out):
        from decimal import Decimal
        expected = Decimal(str(opening)) + Decimal(str(stock_in)) - Decimal(str(stock_out))
        assert Decimal(str(closing_stock(opening, stock_in, stock_out))) == expected

    def test_blank_values_count_as_zero(self):
        assert closing_stock("", None, "5") == -5
        assert total_quantity("12", "") == 12

    def test_text_numbers_are_parsed(self):
        assert total_quantity("100", "20.5") == 120.5

    def test_non_finite_values_count_as_zero(self):
        assert closing_stock(100, "1e999", 5) == 95
        assert total_quantity(float("nan"), 12) == 12


class TestDispatchCosts:
    """Toll fee lookup and total dispatch cost"""

    def test_group_3_toll(self):
        assert toll_fee("Group 3: SUVs, Pickup Jeeps, Mini Buses") == 10

    def test_unknown_group_costs_nothing(self):
        assert toll_fee("Group 9: Spaceships") == 0
        assert toll_fee("") == 0
        assert toll_fee(None) == 0

    def test_every_group_has_a_fee(self):
        assert len(TOLL_FEES) == 7
        assert all(fee > 0 for fee in TOLL_FEES.values())

    def test_custom_toll_table(self):
        assert toll_fee("Bridge", {"Bridge": 2}) == 2

    def test_total_cost(self):
        # 10 + 200 + 50 * 2
        assert total_dispatch_cost(10, 200, 50, 2) == 310

    def test_total_cost_counts_at_least_one_person(self):
        assert total_dispatch_cost(10, 200, 50, 0) == 260
        assert total_dispatch_cost(10, 200, 50, None) == 260


class TestProduction:
    """Yield and department loss"""

    def test_full_yield(self):
        assert yield_percent(1000, 1) == 100.00

    def test_yield_rounded_to_two_places(self):
        assert yield_percent(333, 1) == 33.3
        assert yield_percent(1, 3) == 0.03

    def test_zero_planned_tons(self):
        assert yield_percent(500, 0) == 0.0

    def test_department_loss(self):
        assert department_loss(1000, 950) == 50

    def test_negative_loss_is_accepted(self):
        assert department_loss(900, 950) == -50

    def test_final_output(self):
        departments = [{"output": 990}, {"output": 940}]
        assert final_output(departments) == 940
        assert final_output([]) == 0

    def test_department_losses_keep_other_fields(self):
        rows = calculations.department_losses([{"name": "Milling", "input": 10, "output": 8}])
        assert rows == [{"name": "Milling", "input": 10, "output": 8, "loss": 2}]


class TestTableTotals:
    """Column sums agree with per-row sums"""

    def test_column_totals(self):
        rows = [{"a": 1, "b": "2"}, {"a": 0.5}, {"b": None}]
        assert column_totals(rows, ["a", "b"]) == {"a": 1.5, "b": 2}

    def test_closing_agrees_both_ways(self):
        rows = [
            {"openingBalance": 0.1, "newStock": 0.2, "stockOut": 0.3},
            {"openingBalance": 100, "newStock": 20, "stockOut": 5},
            {"openingBalance": 1.1, "newStock": 2.2, "stockOut": 10},
            {"openingBalance": "", "newStock": None, "stockOut": 0.7},
        ]
        totals = stock_totals(rows)

        assert totals["closing_from_rows"] == totals["closing_from_columns"]
        assert totals["closing_from_columns"] == closing_stock(
            totals["openingBalance"], totals["newStock"], totals["stockOut"]
        )

    def test_empty_table(self):
        totals = stock_totals([])
        assert totals["closing_from_rows"] == 0
        assert totals["totalStock"] == 0
