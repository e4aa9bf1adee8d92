"""
Error types raised by the financial analysis engine.

Routes never catch these; app.main maps each kind to an HTTP status.
"""


class FinancialAnalysisError(Exception):
    """Base class for engine errors surfaced to the caller."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinancialAnalysisError):
    """Input is missing or malformed (project/vendor/category, negative cost)."""
    status_code = 400


class PreconditionError(FinancialAnalysisError):
    """Operation was requested before the data it depends on exists."""
    status_code = 409


class NotFoundError(FinancialAnalysisError):
    """Unknown project, vendor, scenario, cost entry or assumption."""
    status_code = 404
