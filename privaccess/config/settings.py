"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# RFC 3526 MODP group 14 (2048-bit safe prime), generator 2
RFC3526_GROUP14_PRIME_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD129024E088A67CC74"
    "020BBEA63B139B22514A08798E3404DDEF9519B3CD3A431B302B0A6DF25F1437"
    "4FE1356D6D51C245E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3DC2007CB8A163BF05"
    "98DA48361C55D39A69163FA8FD24CF5F83655D23DCA3AD961C62F356208552BB"
    "9ED529077096966D670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9DE2BCBF695581718"
    "3995497CEA956AE515D2261898FA051015728E5A8AACAA68FFFFFFFFFFFFFFFF"
)


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GroupSettings(BaseSettings):
    """Discrete-log group used by the Schnorr protocol."""

    model_config = SettingsConfigDict(env_prefix="GROUP_")

    prime_hex: str = RFC3526_GROUP14_PRIME_HEX
    generator: int = 2
    strict_validation: bool = False

    @field_validator("prime_hex", mode="before")
    @classmethod
    def strip_prime_hex(cls, v: str) -> str:
        """Allow whitespace and an optional 0x prefix in the prime."""
        v = "".join(str(v).split())
        return v[2:] if v.lower().startswith("0x") else v

    @property
    def prime(self) -> int:
        """Safe prime P as an integer."""
        return int(self.prime_hex, 16)


class GeofenceSettings(BaseSettings):
    """Geohash precision and circuit prefix length."""

    model_config = SettingsConfigDict(env_prefix="GEOFENCE_")

    precision: int = Field(default=7, ge=1, le=22)
    prefix_length: int = Field(default=6, ge=1, le=22)

    @model_validator(mode="after")
    def check_precision_covers_prefix(self) -> "GeofenceSettings":
        """A fingerprint shorter than the circuit prefix can never be proved."""
        if self.precision < self.prefix_length:
            raise ValueError(
                f"precision ({self.precision}) must be at least prefix_length ({self.prefix_length})"
            )
        return self


class EngineSettings(BaseSettings):
    """External snarkjs proving engine configuration."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    build_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent / "circuits" / "build"
    )
    circuit_name: str = "geohash_prefix"
    snarkjs_command: str = "npx snarkjs"
    timeout_seconds: float = 120.0

    @property
    def command(self) -> list[str]:
        """Split the snarkjs command into argv form."""
        return self.snarkjs_command.split()


class LocationSettings(BaseSettings):
    """Geolocation acquisition configuration."""

    model_config = SettingsConfigDict(env_prefix="LOCATION_")

    timeout_seconds: float = Field(default=5.0, gt=0)


class AccessSettings(BaseSettings):
    """Access-decision configuration."""

    model_config = SettingsConfigDict(env_prefix="ACCESS_")

    allow_demo_proofs: bool = False


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO

    group: GroupSettings = Field(default_factory=GroupSettings)
    geofence: GeofenceSettings = Field(default_factory=GeofenceSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    location: LocationSettings = Field(default_factory=LocationSettings)
    access: AccessSettings = Field(default_factory=AccessSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING

    @property
    def demo_proofs_enabled(self) -> bool:
        """Demonstration proofs are never honoured in production."""
        return self.access.allow_demo_proofs and not self.is_production


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
