"""
Configuration management for the satellite classification system.
Loads YAML configs with pydantic validation. All models are frozen: the
configuration is built once at startup and shared read-only.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Range = Tuple[float, float]

FEATURE_NAMES: List[str] = [
    "latitude",
    "longitude",
    "x_eci_km",
    "y_eci_km",
    "z_eci_km",
    "velocity_x",
    "velocity_y",
    "velocity_z",
    "total_velocity",
    "radial_distance",
]


def _check_range(value: Range) -> Range:
    low, high = value
    if low > high:
        raise ValueError(f"range lower bound {low} exceeds upper bound {high}")
    return value


class ClassRule(BaseModel):
    """Closed numeric ranges that identify one satellite class."""

    model_config = ConfigDict(frozen=True)

    altitude_range: Range = Field(..., description="km above Earth surface")
    velocity_range: Range = Field(..., description="km/s")
    radial_distance_range: Range = Field(..., description="km from Earth center")

    # Informational only, never consulted by the classifier
    inclination_range: Optional[Range] = Field(None, description="degrees")
    orbital_period_range: Optional[Range] = Field(None, description="minutes")

    @field_validator(
        "altitude_range",
        "velocity_range",
        "radial_distance_range",
        "inclination_range",
        "orbital_period_range",
    )
    @classmethod
    def ordered_bounds(cls, value):
        if value is None:
            return value
        return _check_range(value)


class PhysicalConstants(BaseModel):
    """Physical constants used by feature derivation."""

    model_config = ConfigDict(frozen=True)

    earth_radius_km: float = Field(6371.0, gt=0)
    gm_km3_s2: float = Field(398600.4418, gt=0, description="Earth gravitational parameter")
    speed_of_light_km_s: float = Field(299792.458, gt=0)


class ScalerParams(BaseModel):
    """StandardScaler parameters, positionally aligned with FEATURE_NAMES."""

    model_config = ConfigDict(frozen=True)

    mean: List[float] = Field(
        [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 7.5, 6900.0],
    )
    std: List[float] = Field(
        [90.0, 180.0, 1000.0, 1000.0, 1000.0, 1.5, 1.5, 1.5, 0.15, 200.0],
    )

    @model_validator(mode="after")
    def aligned(self):
        if len(self.mean) != len(self.std):
            raise ValueError(f"mean has {len(self.mean)} entries but std has {len(self.std)}")
        if any(s == 0 for s in self.std):
            raise ValueError("std entries must be non-zero")
        return self


def _default_rules() -> Dict[str, ClassRule]:
    return {
        "ISS": ClassRule(
            altitude_range=(400.0, 410.0),
            velocity_range=(7.60, 7.70),
            radial_distance_range=(6771.0, 6781.0),
            inclination_range=(51.5, 51.7),
            orbital_period_range=(92.0, 93.0),
        ),
        "Sentinel1A": ClassRule(
            altitude_range=(690.0, 710.0),
            velocity_range=(7.40, 7.50),
            radial_distance_range=(7061.0, 7081.0),
            inclination_range=(98.0, 98.5),  # Sun-synchronous
            orbital_period_range=(98.0, 99.0),
        ),
    }


def _default_importance() -> Dict[str, float]:
    # Exported from rf_model.featureImportances
    return {
        "radial_distance": 0.15,
        "x_eci_km": 0.15,
        "y_eci_km": 0.14,
        "z_eci_km": 0.13,
        "velocity_x": 0.12,
        "velocity_y": 0.11,
        "velocity_z": 0.10,
        "longitude": 0.09,
        "total_velocity": 0.09,
        "latitude": 0.08,
    }


class ClassifierConfig(BaseModel):
    """Configuration for the rule classifier and explainer."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    # Model metadata
    model_type: str = Field("RandomForest", description="Model the rules were extracted from")
    model_version: str = Field("1.0.0")
    trained_date: str = Field("2025-10-29")
    framework: str = Field("PySpark MLlib")

    # Declaration order is the match order
    rules: Dict[str, ClassRule] = Field(default_factory=_default_rules)
    feature_names: List[str] = Field(default_factory=lambda: list(FEATURE_NAMES))
    feature_importance: Dict[str, float] = Field(default_factory=_default_importance)
    scaler: ScalerParams = Field(default_factory=ScalerParams)
    constants: PhysicalConstants = Field(default_factory=PhysicalConstants)

    # Decision heuristics
    fallback_altitude_km: float = Field(500.0, description="Below: first class, else second")
    fallback_confidence: float = Field(0.70, ge=0, le=1)
    match_confidence_floor: float = Field(0.90, ge=0, le=1)
    confidence_floor: float = Field(0.50, ge=0, le=1)
    altitude_weight: float = Field(0.6, ge=0, le=1)
    velocity_weight: float = Field(0.4, ge=0, le=1)

    @field_validator("feature_importance")
    @classmethod
    def normalized_importance(cls, value: Dict[str, float]) -> Dict[str, float]:
        # The exported table does not sum to one; rescale, keep the ranking
        if any(weight < 0 for weight in value.values()):
            raise ValueError("feature importance weights must be non-negative")
        total = sum(value.values())
        if total <= 0:
            raise ValueError("feature importance weights must not all be zero")
        return {name: weight / total for name, weight in value.items()}

    @property
    def classes(self) -> List[str]:
        return list(self.rules.keys())

    @model_validator(mode="after")
    def consistent(self):
        if len(self.rules) < 2:
            raise ValueError("at least two classes must be configured")
        # Keeps every confidence inside [confidence_floor, 1]
        if self.altitude_weight + self.velocity_weight > 1.0 + 1e-9:
            raise ValueError(
                f"altitude_weight + velocity_weight must not exceed 1.0, got "
                f"{self.altitude_weight + self.velocity_weight:g}"
            )
        for name in ("fallback_confidence", "match_confidence_floor"):
            if getattr(self, name) < self.confidence_floor:
                raise ValueError(f"{name} must be at least confidence_floor ({self.confidence_floor:g})")
        if len(self.feature_names) != len(self.scaler.mean):
            raise ValueError(
                f"{len(self.feature_names)} feature names but "
                f"{len(self.scaler.mean)} scaler entries"
            )
        unknown = set(self.feature_importance) - set(self.feature_names)
        if unknown:
            raise ValueError(f"importance given for unknown features: {sorted(unknown)}")
        return self


class ValidationConfig(BaseModel):
    """Input plausibility limits applied before classification."""

    model_config = ConfigDict(frozen=True)

    latitude_range: Range = Field((-90.0, 90.0))
    longitude_range: Range = Field((-180.0, 180.0))
    max_velocity_component_km_s: float = Field(20.0, gt=0)
    min_radial_distance_km: float = Field(6371.0, ge=0, description="Inside Earth below this")
    max_radial_distance_km: float = Field(100000.0, gt=0)


class BatchConfig(BaseModel):
    """Configuration for CSV batch processing."""

    model_config = ConfigDict(frozen=True)

    required_columns: int = Field(8, ge=1)
    header_tokens: Tuple[str, ...] = Field(("lat", "lon"))
    max_error_summary: int = Field(5, ge=1)
    max_workers: int = Field(1, ge=1, description="Threads for per-row classification")


class SessionConfig(BaseModel):
    """Configuration for the demo session store."""

    model_config = ConfigDict(frozen=True)

    expiry_hours: float = Field(24.0, gt=0)
    credentials: Dict[str, str] = Field(
        default_factory=lambda: {
            "demo": "demo123",
            "admin": "admin123",
            "mauro": "satellite2025",
        }
    )


class APIConfig(BaseModel):
    """Configuration for API server."""

    model_config = ConfigDict(frozen=True)

    host: str = Field("0.0.0.0", description="API host")
    port: int = Field(8000, ge=1024, le=65535, description="API port")
    reload: bool = Field(False, description="Auto-reload on code changes")
    result_delay_s: float = Field(0.0, ge=0, description="Artificial pacing before single results")
    max_log_entries: Optional[int] = Field(None, ge=1, description="Prediction log bound")


class Config:
    """Main configuration manager."""

    def __init__(self, config_dir: Path = Path("config")):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir)
        self.classifier: Optional[ClassifierConfig] = None
        self.validation: Optional[ValidationConfig] = None
        self.batch: Optional[BatchConfig] = None
        self.session: Optional[SessionConfig] = None
        self.api: Optional[APIConfig] = None

    def load_all(self) -> "Config":
        """Load all configuration files."""
        self.classifier = self.load_config("classifier.yaml", ClassifierConfig)
        self.validation = self.load_config("validation.yaml", ValidationConfig)
        self.batch = self.load_config("batch.yaml", BatchConfig)
        self.session = self.load_config("session.yaml", SessionConfig)
        self.api = self.load_config("api.yaml", APIConfig)
        return self

    def load_config(self, filename: str, config_class: type[BaseModel]) -> BaseModel:
        """
        Load and validate a configuration file.

        Args:
            filename: Config file name
            config_class: Pydantic model class for validation

        Returns:
            Validated configuration object

        Example:
            >>> config = Config()
            >>> batch_config = config.load_config("batch.yaml", BatchConfig)
            >>> print(f"Rows need {batch_config.required_columns} columns")
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            return config_class()

        with open(filepath, "r") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            return config_class()

        return config_class(**config_dict)

    def save_config(self, config: BaseModel, filename: str):
        """
        Save configuration to YAML file.

        Args:
            config: Configuration object to save
            filename: Output filename
        """
        filepath = self.config_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            yaml.safe_dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def create_default_configs(self):
        """Create default configuration files if they don't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        configs = [
            ("classifier.yaml", ClassifierConfig()),
            ("validation.yaml", ValidationConfig()),
            ("batch.yaml", BatchConfig()),
            ("session.yaml", SessionConfig()),
            ("api.yaml", APIConfig()),
        ]

        for filename, config in configs:
            filepath = self.config_dir / filename
            if not filepath.exists():
                self.save_config(config, filename)


@lru_cache(maxsize=None)
def default_classifier_config() -> ClassifierConfig:
    """Default classifier configuration, built once and shared (it is frozen)."""
    return ClassifierConfig()


if __name__ == "__main__":
    config_manager = Config()
    config_manager.create_default_configs()
    config_manager.load_all()

    print(f"Classes: {', '.join(config_manager.classifier.classes)}")
    print(f"Batch: {config_manager.batch.required_columns} required columns")
    print(f"Session expiry: {config_manager.session.expiry_hours} h")
