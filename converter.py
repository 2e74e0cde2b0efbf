import logging
import numbers
from decimal import Decimal

import numpy as np
import pandas as pd

from errors import IncompatibleUnits, InvalidValue, MissingSelection, UnknownCategory
from unit_registry import registry as default_registry

# Quantity class of the one-and-only UnitsRegistry instance
from units import Q_

logger = logging.getLogger(__name__)


def parse_value(raw):
    """
    Parse a raw user value into a finite float.

    Parameters:
        raw (str | int | float | Decimal | numpy scalar | None): Value typed by the user or passed
            by a caller. Text is stripped before parsing.

    Returns:
        float: The parsed value.

    Raises:
        InvalidValue: If the value is missing, empty, not numeric, NaN or infinite.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidValue(f"{raw!r} is not a number.")

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidValue("No value was entered.")
        try:
            value = float(text)
        except ValueError:
            raise InvalidValue(f'"{raw}" is not a number.') from None
    elif isinstance(raw, (numbers.Real, Decimal)):
        try:
            value = float(raw)
        except (OverflowError, ValueError):
            # ints beyond the float range, signaling Decimal NaN
            raise InvalidValue(f"{raw!r} is not a finite number.") from None
    else:
        raise InvalidValue(f"{raw!r} is not a number.")

    if not np.isfinite(value):
        raise InvalidValue(f"{raw!r} is not a finite number.")
    return value


def _is_unset(unit):
    return unit is None or (isinstance(unit, str) and not unit.strip())


def _shared_category(from_unit, to_unit, registry):
    """Return the category containing both units, or raise IncompatibleUnits."""
    from_category = registry.category_of(from_unit)
    to_category = registry.category_of(to_unit)

    if from_category is None or to_category is None or from_category != to_category:
        raise IncompatibleUnits(
            f'Cannot convert "{from_unit}" ({from_category}) to "{to_unit}" ({to_category}).'
        )

    # A unit indexed under a category the registry cannot list is still incompatible
    if from_category not in registry.list_categories():
        raise IncompatibleUnits(f'Category "{from_category}" is not registered.')

    return from_category


def convert(value, from_unit, to_unit, registry=default_registry):
    """
    Convert `value` from `from_unit` to `to_unit` within one category.

    The value is first normalized to the category's base unit, then scaled to the target unit.

    Parameters:
        value (str | float): Raw value, as text or a number.
        from_unit (str): Display name of the source unit, e.g. "Meters (m)".
        to_unit (str): Display name of the target unit.
        registry (ConversionRegistry): Registry to resolve units against.

    Returns:
        float: The converted value.

    Raises:
        MissingSelection: If either unit is unset.
        InvalidValue: If the value is not a finite number.
        IncompatibleUnits: If the units are unknown or belong to different categories.
    """
    if _is_unset(from_unit) or _is_unset(to_unit):
        raise MissingSelection(
            f"Both units must be selected (from={from_unit!r}, to={to_unit!r})."
        )

    number = parse_value(value)
    category = _shared_category(from_unit, to_unit, registry)

    if from_unit == to_unit:
        return number

    try:
        base_value = number * registry.factor_of(category, from_unit)
        result = base_value / registry.factor_of(category, to_unit)
    except UnknownCategory as e:
        raise IncompatibleUnits(str(e)) from e

    logger.debug(f"{number} {from_unit} = {result} {to_unit} (category {category})")
    return result


def convert_quantity(value, from_unit, to_unit, registry=default_registry):
    """
    Convert like `convert` and return the result as a pint Quantity in the target unit.

    Raises:
        IncompatibleUnits: If no pint unit is registered for `to_unit`.
    """
    result = convert(value, from_unit, to_unit, registry)
    pint_unit = registry.pint_unit_of(to_unit)
    if pint_unit is None:
        raise IncompatibleUnits(f'No pint unit is registered for "{to_unit}".')
    return Q_(result, pint_unit)


def conversion_table(value, from_unit, registry=default_registry):
    """
    Express `value` in every unit of `from_unit`'s category.

    Parameters:
        value (str | float): Raw value, as text or a number.
        from_unit (str): Display name of the source unit.
        registry (ConversionRegistry): Registry to resolve units against.

    Returns:
        pandas.DataFrame: Columns "unit", "symbol" and "value", one row per unit in registry order.
    """
    if _is_unset(from_unit):
        raise MissingSelection("The source unit must be selected.")

    category = registry.category_of(from_unit)
    if category is None:
        raise IncompatibleUnits(f'"{from_unit}" is not a registered unit.')

    units = registry.list_units(category)
    return pd.DataFrame(
        {
            "unit": list(units),
            "symbol": [registry.symbol_of(unit) for unit in units],
            "value": [convert(value, from_unit, unit, registry) for unit in units],
        },
        columns=["unit", "symbol", "value"],
    )


def format_result(result):
    """Format a conversion result to two decimals; no result displays as "0"."""
    if result is None:
        return "0"
    return f"{result:.2f}"
