"""
Unit handling for twobody.

Values cross the public API as plain numbers (or arrays) together with a unit
string. Conversion is delegated to OpenMDAO's unit library so any unit it
understands ('km', 'm', 'AU', 'deg', 'km/s', 'km**3/s**2', ...) can be used.
"""
import openmdao.utils.units as om_units


def check_units(units: str) -> str:
    """
    Raise ValueError if ``units`` is not a unit string OpenMDAO recognizes.

    Returns the units unchanged so the call can be used inline.
    """
    if not isinstance(units, str) or not om_units.valid_units(units):
        raise ValueError(f"Invalid units '{units}'.")
    return units


def convert(value, old_units: str, new_units: str):
    """
    Convert ``value`` from ``old_units`` to ``new_units``.

    Args:
        value: Scalar or array (numpy or JAX) to convert. Array dtypes are preserved.
        old_units: Units of ``value``
        new_units: Desired units

    Returns:
        The converted value.

    Raises:
        ValueError: If either unit string is invalid or the units are incompatible
            (e.g. converting 'km' to 'km/s').
    """
    if old_units == new_units:
        return value

    check_units(old_units)
    check_units(new_units)

    if not om_units.is_compatible(old_units, new_units):
        raise ValueError(f"Units '{old_units}' and '{new_units}' are incompatible.")

    return om_units.convert_units(value, old_units, new_units)


def velocity_units(distance_units: str, time_units: str) -> str:
    """Compose a velocity unit string from distance and time units."""
    return f'{distance_units}/{time_units}'
