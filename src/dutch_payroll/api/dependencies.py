"""FastAPI dependencies for dependency injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from dutch_payroll.calculators.engine import PayrollEngine
from dutch_payroll.calculators.rate_table import RateTableRegistry, get_default_registry


def get_registry() -> RateTableRegistry:
    """Get the shared rate table registry dependency."""
    return get_default_registry()


@lru_cache(maxsize=1)
def get_engine() -> PayrollEngine:
    """Get the shared payroll engine dependency."""
    return PayrollEngine(registry=get_default_registry())


# Type aliases for cleaner dependency injection
Registry = Annotated[RateTableRegistry, Depends(get_registry)]
Engine = Annotated[PayrollEngine, Depends(get_engine)]
