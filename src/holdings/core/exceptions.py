"""Application-level exceptions."""

from typing import Optional, Sequence


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class DuplicateSymbolError(AppError):
    """
    Raised when a parsed snapshot carries the same symbol twice.

    Aggregation guarantees one position per symbol, so this always
    indicates a bug upstream rather than bad user data.
    """

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(
            f"Duplicate symbol in parsed positions: {symbol}",
            code="DUPLICATE_SYMBOL",
        )


class ApplyError(AppError):
    """Raised when a step of the import apply sequence fails."""

    def __init__(
        self,
        step: str,
        completed_steps: Sequence[str],
        cause: Optional[BaseException] = None,
        rolled_back: bool = True,
    ):
        self.step = step
        self.completed_steps = list(completed_steps)
        self.cause = cause
        self.rolled_back = rolled_back
        outcome = "no changes were saved" if rolled_back else (
            "steps already applied were kept: " + ", ".join(self.completed_steps)
        )
        super().__init__(
            f"Import failed at step '{step}' ({cause}); {outcome}",
            code="APPLY_FAILED",
        )
