import logging
import numbers
import re
from types import MappingProxyType

import numpy as np
import pandas as pd

from errors import UnknownCategory, UnknownUnit

logger = logging.getLogger(__name__)

# Conversion factors to each category's base unit:
#  millimeters for length,
#  grams for weight and
#  milliliters for volume
CONVERSION_RATES = {
    "length": {
        "Millimeters (mm)": 1,
        "Centimeters (cm)": 10,
        "Meters (m)": 1000,
        "Kilometers (km)": 1000000,
        "Inches (in)": 25.4,
        "Feet (ft)": 304.8,
        "Yards (yd)": 914.4,
        "Miles (mi)": 1609344,
    },
    "weight": {
        "Grams (g)": 1,
        "Kilograms (kg)": 1000,
        "Ounces (oz)": 28.3495,
        "Pounds (lb)": 453.592,
    },
    "volume": {
        "Milliliters (ml)": 1,
        "Liters (l)": 1000,
        "Fluid Ounces (fl oz)": 29.5735,
        "Cups (cup)": 240,
        "Pints (pt)": 473.176,
        "Quarts (qt)": 946.353,
        "Gallons (gal)": 3785.41,
    },
}

# Matching units in the pint registry, used for display and dimension checks only
PINT_UNITS = {
    "Millimeters (mm)": "millimeter",
    "Centimeters (cm)": "centimeter",
    "Meters (m)": "meter",
    "Kilometers (km)": "kilometer",
    "Inches (in)": "inch",
    "Feet (ft)": "foot",
    "Yards (yd)": "yard",
    "Miles (mi)": "mile",
    "Grams (g)": "gram",
    "Kilograms (kg)": "kilogram",
    "Ounces (oz)": "ounce",
    "Pounds (lb)": "pound",
    "Milliliters (ml)": "milliliter",
    "Liters (l)": "liter",
    "Fluid Ounces (fl oz)": "fluid_ounce",
    "Cups (cup)": "cup",
    "Pints (pt)": "pint",
    "Quarts (qt)": "quart",
    "Gallons (gal)": "gallon",
}

_SYMBOL_PATTERN = re.compile(r"\(([^()]+)\)\s*$")


class ConversionRegistry:
    def __init__(self, rates, pint_units=None):
        """
        Build a read-only table of unit categories and conversion factors.

        Parameters:
            rates (Mapping[str, Mapping[str, float]]): Category name to an ordered mapping of
                unit display name to conversion factor. Iteration order is kept for display.
            pint_units (Mapping[str, str], optional): Unit display name to the name of the
                matching pint unit.

        Raises:
            ValueError: If a factor is not a strictly positive finite number, or a unit name
                appears in more than one category.
        """
        logger.debug("Entering ConversionRegistry.__init__")

        categories = {}
        unit_index = {}
        for category, units in rates.items():
            factors = {}
            for unit, factor in units.items():
                if unit in unit_index:
                    raise ValueError(
                        f'Unit "{unit}" is listed in both "{unit_index[unit]}" and "{category}".'
                    )
                if (
                    isinstance(factor, bool)
                    or not isinstance(factor, numbers.Real)
                    or not np.isfinite(factor)
                    or factor <= 0
                ):
                    raise ValueError(
                        f'Conversion factor for "{unit}" must be a positive finite number, got {factor!r}.'
                    )
                factors[unit] = float(factor)
                unit_index[unit] = category
            categories[category] = MappingProxyType(factors)

        self.__categories = MappingProxyType(categories)
        self.__unit_index = MappingProxyType(unit_index)
        self.__pint_units = MappingProxyType(dict(pint_units or {}))

        logger.debug(
            f"Registry holds {len(unit_index)} units in {len(categories)} categories"
        )

    def __contains__(self, unit):
        return self.category_of(unit) is not None

    def list_categories(self):
        return tuple(self.__categories)

    def list_units(self, category):
        return tuple(self.__units(category))

    def factor_of(self, category, unit):
        """
        Return how many base units of `category` one `unit` equals.

        Raises:
            UnknownCategory: If the category is not registered.
            UnknownUnit: If the unit is not registered under that category.
        """
        units = self.__units(category)
        try:
            return units[unit]
        except (KeyError, TypeError):
            raise UnknownUnit(
                f'Unit "{unit}" is not registered under category "{category}".'
            ) from None

    def category_of(self, unit):
        """Return the category owning `unit`, or None when no category lists it."""
        try:
            return self.__unit_index.get(unit)
        except TypeError:
            # unhashable ids cannot name a unit
            return None

    def symbol_of(self, unit):
        """Return the short symbol from a display name, e.g. "fl oz" for "Fluid Ounces (fl oz)"."""
        self.__require(unit)
        match = _SYMBOL_PATTERN.search(unit)
        return match.group(1).strip() if match else unit

    def pint_unit_of(self, unit):
        self.__require(unit)
        return self.__pint_units.get(unit)

    def to_dataframe(self):
        """
        Return the registry as a DataFrame with one row per unit.

        Returns:
            pandas.DataFrame: Columns "category", "unit", "symbol" and "factor", in registry order.
                The frame is a fresh copy; changing it does not affect the registry.
        """
        rows = [
            {
                "category": category,
                "unit": unit,
                "symbol": self.symbol_of(unit),
                "factor": factor,
            }
            for category, units in self.__categories.items()
            for unit, factor in units.items()
        ]
        return pd.DataFrame(rows, columns=["category", "unit", "symbol", "factor"])

    def dropdown_options(self):
        """
        Format the units for the dcc.Dropdown 'options' property, grouped by category.

        Each category contributes a disabled header entry followed by one entry per unit,
        so the dropdown mirrors a grouped select.
        """
        options = []
        for category, units in self.__categories.items():
            options.append(
                {
                    "label": category.capitalize(),
                    "value": f"category:{category}",
                    "disabled": True,
                }
            )
            options.extend({"label": unit, "value": unit} for unit in units)
        return options

    def __units(self, category):
        try:
            return self.__categories[category]
        except (KeyError, TypeError):
            raise UnknownCategory(f'Unknown unit category "{category}".') from None

    def __require(self, unit):
        if unit not in self:
            raise UnknownUnit(f'Unit "{unit}" is not registered.')


# The one-and-only registry built from the static conversion table
registry = ConversionRegistry(CONVERSION_RATES, PINT_UNITS)
