"""HTTP adapter for the payroll engine."""
