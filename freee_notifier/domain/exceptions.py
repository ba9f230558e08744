"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class FreeeAPIError(DomainException):
    """freee API returned an error, is unavailable, or sent malformed data"""

    pass


class PeriodNotFoundError(FreeeAPIError):
    """Requested fiscal year does not exist for the company"""

    def __init__(self, company_id: int, fiscal_year: int, end_month: int | None = None):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        self.end_month = end_month
        super().__init__(f"Fiscal year {fiscal_year} not found for company {company_id}")


class NotLinkedError(DomainException):
    """LINE user has no linked freee company"""

    def __init__(self, line_user_id: str):
        self.line_user_id = line_user_id
        super().__init__(f"User {line_user_id} is not linked to a freee company")


class LineAPIError(DomainException):
    """LINE Messaging API rejected or failed to deliver a message"""

    pass
