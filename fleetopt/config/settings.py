"""
Settings for the Fleet Optimization Engine

Provides Pydantic settings with environment variable support.

Three groups of configuration are exposed:
- PolicyConfig: hard safety limits applied to candidate placements
- RiskConfig: interruption-risk model parameters
- Settings: application-level options (logging, default region) that
  bundle the other two
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List
from functools import lru_cache


DEFAULT_ALLOWED_FAMILIES = ["t3", "m5", "m6g", "c5", "c6g", "r5", "r6g"]


class PolicyConfig(BaseSettings):
    """
    Safety policy for automated optimization

    Every candidate instance type is checked against these limits before
    the optimizer is allowed to recommend it. Immutable once loaded.
    """

    max_churn_percent: float = Field(
        20.0, ge=0, description="Maximum share of infrastructure changed per run (percent)"
    )
    max_spend_limit: float = Field(
        10000.0, ge=0, description="Absolute monthly spend ceiling (USD)"
    )
    allowed_families: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_FAMILIES),
        description="Instance family prefixes permitted in a plan (case-sensitive)"
    )

    model_config = SettingsConfigDict(
        env_prefix="FLEETOPT_POLICY_",
        frozen=True,
        case_sensitive=False,
    )


class RiskConfig(BaseSettings):
    """
    Parameters of the interruption-risk model

    decay_factor must stay strictly below 1.0, otherwise scores never
    converge back to baseline_risk.
    """

    baseline_risk: float = Field(0.05, ge=0, le=1, description="Floor for every risk score")
    decay_factor: float = Field(0.95, gt=0, lt=1, description="Multiplier applied on each decay tick")
    interruption_penalty: float = Field(
        1.0, ge=0, le=1, description="Score assigned to a pool right after an interruption"
    )

    model_config = SettingsConfigDict(
        env_prefix="FLEETOPT_RISK_",
        frozen=True,
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """
    Application settings

    Policy and risk sections are loaded from their own environment
    prefixes (FLEETOPT_POLICY_*, FLEETOPT_RISK_*).
    """

    # Application
    app_name: str = Field("fleetopt", description="Application name")
    environment: str = Field("development", description="Environment (development, staging, production)")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("json", description="Log format (json, text)")
    log_file: Optional[str] = Field(None, description="Log file path (None for stdout only)")

    # Pricing
    default_region: str = Field("us-east-1", description="Region used when building the catalog")

    # Engine
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)

    model_config = SettingsConfigDict(
        env_prefix="FLEETOPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get global settings instance (cached)

    Returns:
        Settings instance
    """
    return Settings()
