"""API routes."""

from dutch_payroll.api.routes.health import router as health_router
from dutch_payroll.api.routes.payroll import router as payroll_router
from dutch_payroll.api.routes.rate_tables import router as rate_tables_router
from dutch_payroll.api.routes.validation import router as validation_router

__all__ = ["health_router", "payroll_router", "rate_tables_router", "validation_router"]
