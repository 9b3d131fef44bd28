"""
Impact physics (first-order estimates).

Turns a `CanonicalAsteroid` into the scalar quantities the rest of the system needs:
- kinetic energy in megatons TNT (spherical rocky body, KE = 1/2 m v^2)
- a simple crater-diameter scaling law
- an "affected radius" used to size map overlays
- a coarse threat level label

These feed the geometry layer (`neoimpact.core.geo`) with the radius to render.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import pi

from neoimpact.domain.models import CanonicalAsteroid

ROCK_DENSITY_KG_M3 = 3000.0
TARGET_DENSITY_KG_M3 = 2700.0
GRAVITY_M_S2 = 9.81
JOULES_PER_MEGATON = 4.184e15
AFFECTED_RADIUS_FACTOR = 10.0

# (exclusive lower bound in Mt, label), checked in order.
_THREAT_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (10_000, "GLOBAL_CATASTROPHE"),
    (1_000, "CONTINENTAL"),
    (100, "REGIONAL"),
    (10, "LOCAL"),
    (1, "MINIMAL"),
)


@dataclass(frozen=True)
class ImpactAssessment:
    """Derived impact quantities for one asteroid."""

    mass_kg: float
    energy_joules: float
    energy_mt: float
    crater_diameter_km: float
    affected_radius_km: float
    threat_level: str


def mass_kg(diameter_m: float, density: float = ROCK_DENSITY_KG_M3) -> float:
    volume = (4 / 3) * pi * (diameter_m / 2) ** 3
    return volume * density


def kinetic_energy_joules(diameter_m: float, velocity_km_s: float, density: float = ROCK_DENSITY_KG_M3) -> float:
    velocity_m_s = velocity_km_s * 1000
    return 0.5 * mass_kg(diameter_m, density) * velocity_m_s**2


def kinetic_energy_mt(diameter_m: float, velocity_km_s: float, density: float = ROCK_DENSITY_KG_M3) -> float:
    """Kinetic energy in megatons of TNT."""
    return kinetic_energy_joules(diameter_m, velocity_km_s, density) / JOULES_PER_MEGATON


def crater_diameter_km(energy_joules: float) -> float:
    """Simplified crater scaling: D = 1.8 * (E / (rho * g))^0.25, in km."""
    if energy_joules <= 0:
        return 0.0
    return 1.8 * (energy_joules / (TARGET_DENSITY_KG_M3 * GRAVITY_M_S2)) ** 0.25 / 1000


def threat_level(energy_mt: float, is_hazardous: bool) -> str:
    for bound, label in _THREAT_THRESHOLDS:
        if energy_mt > bound:
            return label
    if is_hazardous:
        return "POTENTIALLY_HAZARDOUS"
    return "NEGLIGIBLE"


def assess_impact(asteroid: CanonicalAsteroid) -> ImpactAssessment:
    """Compute mass, energy, crater size and affected radius for `asteroid`."""
    energy = kinetic_energy_joules(asteroid.diameter_meters, asteroid.velocity_km_per_sec)
    energy_mt = energy / JOULES_PER_MEGATON
    crater = crater_diameter_km(energy)
    return ImpactAssessment(
        mass_kg=mass_kg(asteroid.diameter_meters),
        energy_joules=energy,
        energy_mt=energy_mt,
        crater_diameter_km=crater,
        affected_radius_km=crater * AFFECTED_RADIUS_FACTOR,
        threat_level=threat_level(energy_mt, asteroid.is_hazardous),
    )
