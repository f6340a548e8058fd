"""Configuration management for the payroll engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_RATE_TABLE_DIR = Path(__file__).resolve().parent / "data" / "rate_tables"


@dataclass(frozen=True)
class Settings:
    """Engine settings loaded from environment."""

    engine_version: str
    rate_table_dir: Path
    default_tax_year: int
    tax_proration_policy: str
    pro_rata_method: str
    host: str
    port: int
    debug: bool
    log_level: str

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            rate_table_dir=Path(
                os.getenv("RATE_TABLE_DIR", str(DEFAULT_RATE_TABLE_DIR))
            ),
            default_tax_year=int(os.getenv("DEFAULT_TAX_YEAR", "2025")),
            tax_proration_policy=os.getenv("TAX_PRORATION_POLICY", "prorate_result"),
            pro_rata_method=os.getenv("PRO_RATA_METHOD", "calendar"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


settings = get_settings()
