# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements
from .cartesian_state import CartesianState

from .constants import (
    # Constants
    G,
    G_SI,
    DISTANCE_UNITS,
    TIME_UNITS,
    VELOCITY_UNITS,
    ANGLE_UNITS,
    MASS_UNITS,
    MU_UNITS,
    ECCENTRICITY_TOL,
)

from .config import (
    ConversionConfig,
    KeplerConfig,
    DEFAULT_CONVERSION_CONFIG,
    DEFAULT_KEPLER_CONFIG,
)

from .bodies import (
    # Body class
    CelestialBody,
    solar_system_bodies,
    Sun,
    Mercury,
    Venus,
    Earth,
    Moon,
    Luna,
    Mars,
    Jupiter,
    Saturn,
    Uranus,
    Neptune,
    Pluto,
)

from .conic import Conic, classify

from .astrodynamics import (
    # Functions
    cartesian_to_keplerian,
    keplerian_to_cartesian,
    perifocal_state,
    perifocal_to_inertial_matrix,
    wrap_angle,
)

from .frames import (
    AstrodynamicsFrame,
    INERTIAL,
    PERIFOCAL,
    IdentityMap,
    LinearMap,
    RotatingVelocityMap,
    Transform,
    rotation_transform,
    rotating_frame_transform,
    perifocal_transform,
)

from .orbit import (
    Orbit,
    invalid_orbit,
    is_invalid,
    is_valid,
    promote_orbits,
)

from .propagation import (
    solve_kepler,
    solve_kepler_hyperbolic,
    solve_barker,
    propagate_kepler,
)

__all__ = [
    # Constants
    "G",
    "G_SI",
    "DISTANCE_UNITS",
    "TIME_UNITS",
    "VELOCITY_UNITS",
    "ANGLE_UNITS",
    "MASS_UNITS",
    "MU_UNITS",
    "ECCENTRICITY_TOL",

    # Configuration
    "ConversionConfig",
    "KeplerConfig",
    "DEFAULT_CONVERSION_CONFIG",
    "DEFAULT_KEPLER_CONFIG",

    # Named tuples
    "OrbitalElements",
    "CartesianState",

    # Bodies
    "CelestialBody",
    "solar_system_bodies",
    "Sun",
    "Mercury",
    "Venus",
    "Earth",
    "Moon",
    "Luna",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
    "Pluto",

    # Conic sections
    "Conic",
    "classify",

    # Conversions
    "cartesian_to_keplerian",
    "keplerian_to_cartesian",
    "perifocal_state",
    "perifocal_to_inertial_matrix",
    "wrap_angle",

    # Frames
    "AstrodynamicsFrame",
    "INERTIAL",
    "PERIFOCAL",
    "IdentityMap",
    "LinearMap",
    "RotatingVelocityMap",
    "Transform",
    "rotation_transform",
    "rotating_frame_transform",
    "perifocal_transform",

    # Orbits
    "Orbit",
    "invalid_orbit",
    "is_invalid",
    "is_valid",
    "promote_orbits",

    # Propagation
    "solve_kepler",
    "solve_kepler_hyperbolic",
    "solve_barker",
    "propagate_kepler",
]
