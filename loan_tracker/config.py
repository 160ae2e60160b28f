"""Configuration management for loan-tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from loan_tracker.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "loan_tracker"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class SeedConfig:
    """Configuration for seeding a loan book."""

    num_borrowers: int = 5
    num_loans: int = 10
    teardown: bool = False
    auto_settle_past_due: bool = True
    max_backdate_days: int = 365

    def __post_init__(self) -> None:
        if self.num_borrowers <= 0:
            raise ConfigurationError(f"num_borrowers must be positive, got {self.num_borrowers}")
        if self.num_loans < 0:
            raise ConfigurationError(f"num_loans cannot be negative, got {self.num_loans}")
        if self.max_backdate_days <= 0:
            raise ConfigurationError(
                f"max_backdate_days must be positive, got {self.max_backdate_days}"
            )


@dataclass
class LoanTrackerConfig:
    """Main configuration for loan-tracker."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    seeding: SeedConfig = field(default_factory=SeedConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> LoanTrackerConfig:
        """Create config from environment variables."""
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_env_int("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "loan_tracker"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        seeding = SeedConfig(
            num_borrowers=_env_int("SEED_BORROWERS", 5),
            num_loans=_env_int("SEED_LOANS", 10),
            teardown=os.getenv("SEED_TEARDOWN", "false").lower() == "true",
            auto_settle_past_due=os.getenv("SEED_AUTO_SETTLE", "true").lower() == "true",
        )

        return cls(
            postgres=postgres,
            seeding=seeding,
            seed=_env_int("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _env_int(name: str, default: int | None) -> int | None:
    """Read an integer environment variable."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
