from __future__ import annotations

from dataclasses import dataclass

from twobody.constants import ECCENTRICITY_TOL, EQUATORIAL_TOL, KEPLER_TOL, KEPLER_MAX_ITER


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Tolerances used when deriving Keplerian elements from a Cartesian state."""
    eccentricity_tol: float = ECCENTRICITY_TOL
    equatorial_tol: float = EQUATORIAL_TOL


@dataclass(frozen=True, slots=True)
class KeplerConfig:
    """Settings for the iterative Kepler equation solvers."""
    tol: float = KEPLER_TOL
    max_iter: int = KEPLER_MAX_ITER


DEFAULT_CONVERSION_CONFIG = ConversionConfig()
DEFAULT_KEPLER_CONFIG = KeplerConfig()
