from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


def num(x) -> float:
    """Numeric field as float; None / '' / garbage count as 0."""
    if x is None or x == "":
        return 0.0
    try:
        value = float(x)
    except (TypeError, ValueError):
        return 0.0
    if value != value:  # NaN
        return 0.0
    return value


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def fmt2(x) -> str:
    """'1234.50' style text for report cells."""
    return f"{money(num(x)):.2f}"


def currency(x) -> str:
    return f"Rs {fmt2(x)}"


def number(x):
    """Raw numeric cell value: 1000.0 -> 1000, 95.5 -> 95.5."""
    value = num(x)
    if value.is_integer():
        return int(value)
    return value


def plain(x) -> str:
    """Raw number cell as text: 1000.0 -> '1000', 95.5 -> '95.5'."""
    return str(number(x))


class PriceSlot(str, Enum):
    """
    Where a reading's price snapshot lives.

    PRIMARY   -> sales_readings.petrol_price (petrol, and others alias it)
    SECONDARY -> sales_readings.diesel_price
    """
    PRIMARY = "petrol_price"
    SECONDARY = "diesel_price"


def price_slot(fuel_type: str) -> PriceSlot:
    if fuel_type == "diesel":
        return PriceSlot.SECONDARY
    return PriceSlot.PRIMARY


def snapshot_price(fuel_type: str, petrol_price, diesel_price) -> float:
    """Unit price stored on a reading for the nozzle's fuel type."""
    if price_slot(fuel_type) is PriceSlot.SECONDARY:
        return num(diesel_price)
    return num(petrol_price)


def price_columns(fuel_type: str, price) -> dict:
    """{'petrol_price': x, 'diesel_price': y} with the price in its slot, 0 elsewhere."""
    cols = {PriceSlot.PRIMARY.value: 0.0, PriceSlot.SECONDARY.value: 0.0}
    cols[price_slot(fuel_type).value] = num(price)
    return cols


def reading_totals(opening, closing, unit_price) -> tuple[float, float]:
    """
    litres = closing - opening
    value  = litres * unit_price

    Example:
      opening=100, closing=150, price=95.5 => (50.0, 4775.0)
    """
    litres = num(closing) - num(opening)
    return litres, litres * num(unit_price)
