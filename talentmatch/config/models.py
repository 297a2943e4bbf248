"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

WEIGHT_TOLERANCE = 1e-6


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class Weekday(str, Enum):
    """Day of week accepted by the weekly digest trigger."""

    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


class ScoringWeights(BaseModel):
    """Weights of the numeric score dimensions.

    The defaults are the production weights; location is a veto signal and
    carries no weight.
    """

    skills: float = Field(0.50, ge=0.0, le=1.0, description="Weight of the skill sub-score")
    experience: float = Field(0.20, ge=0.0, le=1.0, description="Weight of the experience sub-score")
    rate: float = Field(0.15, ge=0.0, le=1.0, description="Weight of the daily rate sub-score")
    availability: float = Field(
        0.15, ge=0.0, le=1.0, description="Weight of the availability sub-score"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_total(self):
        total = self.skills + self.experience + self.rate + self.availability
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.4f}")
        return self

    def is_default(self) -> bool:
        return self == DEFAULT_WEIGHTS


DEFAULT_WEIGHTS = ScoringWeights()


class AlertsConfig(BaseModel):
    """Alert subscription and digest settings."""

    max_alerts_per_talent: int = Field(
        10, ge=1, le=100, description="Maximum number of alerts a talent may create"
    )
    preview_limit: Optional[int] = Field(
        None,
        ge=1,
        description="Cap on offers scanned by the preview (unset = all published offers)",
    )
    offer_link_prefix: str = Field(
        "/offers", min_length=1, description="Path prefix of offer links in notifications"
    )
    daily_digest_hour: int = Field(8, ge=0, le=23, description="UTC hour of the daily digest")
    weekly_digest_day: Weekday = Field(Weekday.MON, description="Weekday of the weekly digest")
    weekly_digest_hour: int = Field(8, ge=0, le=23, description="UTC hour of the weekly digest")

    model_config = {"use_enum_values": True}

    @field_validator("offer_link_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped.startswith("/"):
            stripped = "/" + stripped
        return stripped


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the talent matching service."""

    scoring: ScoringWeights = Field(default_factory=ScoringWeights, description="Score weights")
    alerts: AlertsConfig = Field(default_factory=AlertsConfig, description="Alert settings")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
