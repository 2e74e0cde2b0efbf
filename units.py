# units.py
from pint import UnitRegistry

# There can only be a single UnitRegistry instance
ureg = UnitRegistry()
Q_ = ureg.Quantity

# Physical dimensionality shared by every unit of a converter category
CATEGORY_DIMENSIONALITY = {
    "length": ureg("meter").dimensionality,
    "weight": ureg("gram").dimensionality,
    "volume": ureg("liter").dimensionality,
}


def dimensionality_of(category):
    """Return the pint dimensionality for a converter category, or None if the category has none."""
    return CATEGORY_DIMENSIONALITY.get(category)
