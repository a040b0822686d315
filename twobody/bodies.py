import math
import numbers

import numpy as np

import pydantic
from pydantic import ConfigDict, Field, model_validator

from twobody.constants import G, DISTANCE_UNITS, MASS_UNITS, MU_UNITS
from twobody.units import convert

# Floating point types bodies and orbits may be stored at
SUPPORTED_PRECISIONS = ('float32', 'float64')


def check_precision(dtype) -> np.dtype:
    """
    Normalize ``dtype`` to a numpy dtype, raising ValueError unless it is one of
    SUPPORTED_PRECISIONS.
    """
    try:
        dtype = np.dtype(dtype)
    except TypeError as err:
        raise ValueError(f"Unknown precision '{dtype}'") from err
    if dtype.name not in SUPPORTED_PRECISIONS:
        raise ValueError(f"precision must be one of {SUPPORTED_PRECISIONS}, got '{dtype.name}'")
    return dtype


def _round_to_precision(value: float, precision: str) -> float:
    # The returned float64 is exactly representable at the requested width.
    rounded = float(np.dtype(precision).type(value))
    if not math.isfinite(rounded):
        raise ValueError(f"{value} is not finite at {precision} precision")
    return rounded


class CelestialBody(pydantic.BaseModel):
    """
    A massive body that other bodies orbit.

    CelestialBody instances are immutable values. Construct one directly from
    its radius and gravitational parameter, or from its mass with
    :meth:`CelestialBody.from_mass`. Inputs are assumed to be physically valid;
    non-positive or non-finite radius or mu is rejected by validation, including
    values that overflow the requested precision.

    Attributes:
        name: Name of the body (e.g., "Earth"). Optional.
        radius: Mean radius of the body (km)
        mu: Gravitational parameter G*M (km^3/s^2)
        precision: Name of the floating point type the values are stored at
            ('float32' or 'float64'). Values are rounded to this precision.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ''
    radius: float = Field(..., gt=0.0, allow_inf_nan=False)
    mu: float = Field(..., gt=0.0, allow_inf_nan=False)
    precision: str = 'float64'

    @model_validator(mode='before')
    @classmethod
    def round_values(cls, data):
        if not isinstance(data, dict):
            return data
        precision = check_precision(data.get('precision', 'float64'))
        data = dict(data)
        data['precision'] = precision.name
        for key in ('radius', 'mu'):
            value = data.get(key)
            if isinstance(value, numbers.Real) or (hasattr(value, 'dtype') and np.ndim(value) == 0):
                data[key] = _round_to_precision(value, precision.name)
        return data

    @classmethod
    def from_mass(cls, mass: float, radius: float, mass_units: str = MASS_UNITS,
                  distance_units: str = DISTANCE_UNITS, precision: str = 'float64',
                  name: str = '') -> 'CelestialBody':
        """
        Create a body from its mass and radius, computing mu = G * mass.

        Args:
            mass: Mass of the body in mass_units
            radius: Radius of the body in distance_units
            mass_units: Units of mass (default 'kg')
            distance_units: Units of radius (default 'km')
            precision: Floating point type to store the values at
            name: Optional name of the body

        Examples:
            >>> earth = CelestialBody.from_mass(5.97216787e24, 6371.0, name='Earth')
            >>> earth.mu
            398600.4...
        """
        mass_kg = float(convert(mass, mass_units, MASS_UNITS))
        radius_km = float(convert(radius, distance_units, DISTANCE_UNITS))
        return cls(name=name, radius=radius_km, mu=G * mass_kg, precision=precision)

    @classmethod
    def from_mu(cls, radius: float, mu: float, distance_units: str = DISTANCE_UNITS,
                mu_units: str = MU_UNITS, precision: str = 'float64',
                name: str = '') -> 'CelestialBody':
        """Create a body from its radius and gravitational parameter given in arbitrary units."""
        return cls(name=name,
                   radius=float(convert(radius, distance_units, DISTANCE_UNITS)),
                   mu=float(convert(mu, mu_units, MU_UNITS)),
                   precision=precision)

    def astype(self, dtype) -> 'CelestialBody':
        """
        Return this body with its values re-expressed at the precision of ``dtype``.

        Raises:
            ValueError: If dtype is not float32 or float64.
        """
        return CelestialBody(name=self.name, radius=self.radius, mu=self.mu,
                             precision=check_precision(dtype).name)

    @property
    def mass(self) -> float:
        """Mass of the body (kg), recovered from mu."""
        return self.mu / G

    def get_radius(self, units: str = DISTANCE_UNITS) -> float:
        return convert(self.radius, DISTANCE_UNITS, units)

    def get_mu(self, units: str = MU_UNITS) -> float:
        return convert(self.mu, MU_UNITS, units)

    def get_mass(self, units: str = MASS_UNITS) -> float:
        return convert(self.mass, MASS_UNITS, units)

    def __repr__(self) -> str:
        return f"CelestialBody(name='{self.name}', radius={self.radius}, mu={self.mu}, precision='{self.precision}')"

    def __str__(self) -> str:
        return self.name or 'CelestialBody'


# Solar system bodies. Data from:
# https://en.wikipedia.org/wiki/List_of_Solar_System_objects_by_size
# https://docs.astropy.org/en/stable/constants/
Sun = CelestialBody.from_mass(1.98840987e30, 696342.0, name='Sun')
Mercury = CelestialBody.from_mass(330.1e21, 2439.7, name='Mercury')
Venus = CelestialBody.from_mass(4867.5e21, 6051.8, name='Venus')
Earth = CelestialBody.from_mass(5.97216787e24, 6371.0, name='Earth')
Moon = CelestialBody.from_mass(73.42e21, 1737.4, name='Moon')
Luna = Moon
Mars = CelestialBody.from_mass(641.7e21, 3389.5, name='Mars')
Jupiter = CelestialBody.from_mass(1.8981246e27, 69911.0, name='Jupiter')
Saturn = CelestialBody.from_mass(568340e21, 58232.0, name='Saturn')
Uranus = CelestialBody.from_mass(86813e21, 25362.0, name='Uranus')
Neptune = CelestialBody.from_mass(102413e21, 24622.0, name='Neptune')
Pluto = CelestialBody.from_mass(13.03e21, 1188.3, name='Pluto')

solar_system_bodies = {
    'Sun': Sun,
    'Mercury': Mercury,
    'Venus': Venus,
    'Earth': Earth,
    'Moon': Moon,
    'Luna': Luna,
    'Mars': Mars,
    'Jupiter': Jupiter,
    'Saturn': Saturn,
    'Uranus': Uranus,
    'Neptune': Neptune,
    'Pluto': Pluto,
}
