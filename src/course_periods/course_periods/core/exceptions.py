class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""


class PeriodNotFoundError(NotFoundError):
    """Raised when no period exists for a (term, period number) pair."""

    def __init__(self, term_id: int, period_no: int):
        super().__init__(f"Tiết {period_no} không tồn tại trong học kỳ {term_id}")
        self.term_id = term_id
        self.period_no = period_no
