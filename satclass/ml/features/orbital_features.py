"""
Orbital feature derivation.

Turns a raw ECI state (position in km, velocity in km/s) plus ground-track
latitude/longitude into the scalar features the classifier works with:

    total_velocity   = |v|
    radial_distance  = |r|
    altitude         = |r| - R_earth
    orbital_velocity = sqrt(GM / |r|)   (circular-orbit speed, informational)

Author: Space AI Team
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

import numpy as np

from satclass.core.exceptions import DegenerateInputError
from satclass.utils.config_loader import PhysicalConstants

# Field name -> accepted input aliases (form fields and CSV-era names)
SAMPLE_FIELDS: Dict[str, tuple] = {
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon"),
    "x_eci_km": ("x_eci_km", "x_eci", "x"),
    "y_eci_km": ("y_eci_km", "y_eci", "y"),
    "z_eci_km": ("z_eci_km", "z_eci", "z"),
    "velocity_x": ("velocity_x", "vel_x", "vx"),
    "velocity_y": ("velocity_y", "vel_y", "vy"),
    "velocity_z": ("velocity_z", "vel_z", "vz"),
}


@dataclass(frozen=True)
class OrbitalSample:
    """One observed orbital state."""
    latitude: float      # degrees
    longitude: float     # degrees
    x_eci_km: float
    y_eci_km: float
    z_eci_km: float
    velocity_x: float    # km/s
    velocity_y: float
    velocity_z: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrbitalSample":
        """
        Build a sample from a mapping, accepting field aliases.

        Values are passed through unchanged; use
        ``satclass.ml.classifier.validate_input`` to check them.
        """
        values = {}
        for name, aliases in SAMPLE_FIELDS.items():
            values[name] = next((data[a] for a in aliases if a in data), None)
        return cls(**values)

    @classmethod
    def from_values(cls, values) -> "OrbitalSample":
        """Build a sample from 8 values in CSV column order."""
        return cls(*values[:8])

    def as_vector(self) -> np.ndarray:
        return np.array(
            [
                self.latitude, self.longitude,
                self.x_eci_km, self.y_eci_km, self.z_eci_km,
                self.velocity_x, self.velocity_y, self.velocity_z,
            ],
            dtype=np.float64,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DerivedFeatures:
    """Scalar features computed from an OrbitalSample."""
    total_velocity: float     # km/s
    radial_distance: float    # km
    altitude: float           # km
    orbital_velocity: float   # km/s, informational only

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def derive_features(
    sample: OrbitalSample,
    constants: Optional[PhysicalConstants] = None,
) -> DerivedFeatures:
    """
    Compute derived features for a sample.

    Raises:
        DegenerateInputError: if the position is the origin or any derived
            value is not finite.
    """
    constants = constants or PhysicalConstants()

    # Products overflow to inf instead of raising; caught by the finiteness check
    total_velocity = math.sqrt(
        sample.velocity_x * sample.velocity_x
        + sample.velocity_y * sample.velocity_y
        + sample.velocity_z * sample.velocity_z
    )
    radial_distance = math.sqrt(
        sample.x_eci_km * sample.x_eci_km
        + sample.y_eci_km * sample.y_eci_km
        + sample.z_eci_km * sample.z_eci_km
    )
    if radial_distance <= 0.0:
        raise DegenerateInputError(
            "Radial distance is zero; orbital velocity is undefined at Earth's center."
        )

    altitude = radial_distance - constants.earth_radius_km
    orbital_velocity = math.sqrt(constants.gm_km3_s2 / radial_distance)

    derived = DerivedFeatures(
        total_velocity=total_velocity,
        radial_distance=radial_distance,
        altitude=altitude,
        orbital_velocity=orbital_velocity,
    )
    if not all(math.isfinite(v) for v in (total_velocity, radial_distance, altitude, orbital_velocity)):
        raise DegenerateInputError(f"Derived features are not finite: {derived}")
    return derived


def build_feature_vector(sample: OrbitalSample, derived: DerivedFeatures) -> np.ndarray:
    """Ordered 10-element vector: raw state followed by |v| and |r|."""
    return np.concatenate(
        [sample.as_vector(), [derived.total_velocity, derived.radial_distance]]
    )
