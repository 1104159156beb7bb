# =============================================================================
# inventory_core/domain/calculations.py
# Derived-Field Calculator
# =============================================================================
"""
Pure functions for every value a screen derives from base fields.

Nothing here is cached or persisted: screens call these on every read so a
derived value can never disagree with the fields it came from.

Table totals use exact decimal arithmetic. Summing floats column by column
and row by row rounds differently, and the totals row must satisfy
sum(closing) == sum(opening) + sum(in) - sum(out) exactly.
"""

from __future__ import annotations
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

Number = Union[int, float]

# Vehicle toll groups and their fee in Leones
TOLL_FEES: Dict[str, Number] = {
    "Group 1: Motorcycles, Tricycles (Keke)": 3,
    "Group 2: Saloon Cars, Taxis": 5,
    "Group 3: SUVs, Pickup Jeeps, Mini Buses": 10,
    "Group 4: Buses, Light Trucks (2 Axles)": 30,
    "Group 5: Medium Trucks (3 Axles)": 100,
    "Group 6: Heavy Trucks (4 Axles)": 300,
    "Group 7: Articulated Trucks, Trailers (5+ Axles)": 600,
}


def to_number(value: Any) -> Number:
    """Form values arrive as text, None or numbers; blanks and inf/nan count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    try:
        number = float(str(value).strip() or 0)
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(to_number(value)))
    except InvalidOperation:
        return Decimal(0)


def _from_decimal(value: Decimal) -> Number:
    return int(value) if value == value.to_integral_value() else float(value)


# =============================================================================
# STOCK
# =============================================================================

def closing_stock(opening: Any, stock_in: Any, stock_out: Any) -> Number:
    """opening + stock_in - stock_out. Negative results are kept as they are."""
    return _from_decimal(_to_decimal(opening) + _to_decimal(stock_in) - _to_decimal(stock_out))


def total_quantity(opening: Any, stock_in: Any) -> Number:
    """opening + stock_in."""
    return _from_decimal(_to_decimal(opening) + _to_decimal(stock_in))


def stock_value(quantity: Any, unit_price: Any) -> Number:
    return _from_decimal(_to_decimal(quantity) * _to_decimal(unit_price))


# =============================================================================
# DISPATCH
# =============================================================================

def toll_fee(group: Optional[str], table: Mapping[str, Number] = TOLL_FEES) -> Number:
    """Fee for an exact group label; unknown or empty labels cost 0."""
    if not group:
        return 0
    return table.get(group, 0)


def total_dispatch_cost(
    toll: Any,
    fuel_cost: Any,
    per_diem_rate: Any,
    personnel_count: Any,
) -> Number:
    """toll + fuel + per diem for at least one person."""
    personnel = max(_to_decimal(personnel_count), Decimal(1))
    total = _to_decimal(toll) + _to_decimal(fuel_cost) + _to_decimal(per_diem_rate) * personnel
    return _from_decimal(total)


# =============================================================================
# PRODUCTION
# =============================================================================

def yield_percent(final_output_kg: Any, planned_tons: Any) -> float:
    """
    Final output as a percentage of the planned tonnage, 2 decimals.

    A batch planned at 0 tons has no meaningful yield and returns 0.0.
    """
    planned_kg = to_number(planned_tons) * 1000
    if planned_kg == 0:
        return 0.0
    return round(to_number(final_output_kg) / planned_kg * 100, 2)


def department_loss(input_kg: Any, output_kg: Any) -> Number:
    """Loss at one processing stage. Output above input gives a negative loss."""
    return _from_decimal(_to_decimal(input_kg) - _to_decimal(output_kg))


def gross_input(base_kg: Any, extra_kg: Any) -> Number:
    return total_quantity(base_kg, extra_kg)


def department_losses(departments: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Each department row with its loss recomputed."""
    rows = []
    for dept in departments:
        row = dict(dept)
        row["loss"] = department_loss(dept.get("input"), dept.get("output"))
        rows.append(row)
    return rows


def final_output(departments: Sequence[Mapping[str, Any]]) -> Number:
    """Output of the last department, 0 for an empty flow."""
    if not departments:
        return 0
    return to_number(departments[-1].get("output"))


# =============================================================================
# TABLE AGGREGATION
# =============================================================================

def column_totals(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> Dict[str, Number]:
    """Sum each numeric column of a table."""
    sums = {column: Decimal(0) for column in columns}
    for row in rows:
        for column in columns:
            sums[column] += _to_decimal(row.get(column))
    return {column: _from_decimal(total) for column, total in sums.items()}


def stock_totals(
    rows: Iterable[Mapping[str, Any]],
    opening: str = "openingBalance",
    stock_in: str = "newStock",
    stock_out: str = "stockOut",
) -> Dict[str, Number]:
    """
    Totals row for a stock table.

    Returns the column sums plus two closing figures: the sum of each row's
    closing value and the closing value of the column sums. They are equal
    for every input.
    """
    rows = list(rows)
    totals = column_totals(rows, [opening, stock_in, stock_out])

    closing_sum = Decimal(0)
    for row in rows:
        closing_sum += _to_decimal(closing_stock(row.get(opening), row.get(stock_in), row.get(stock_out)))

    totals["totalStock"] = total_quantity(totals[opening], totals[stock_in])
    totals["closing_from_rows"] = _from_decimal(closing_sum)
    totals["closing_from_columns"] = closing_stock(totals[opening], totals[stock_in], totals[stock_out])
    return totals
