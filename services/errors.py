class BillingError(Exception):
    """Base class for billing failures that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NothingToUpdate(BillingError):
    status_code = 400

    def __init__(self, message: str = "Nothing to update"):
        super().__init__(message)


class LedgerRowNotFound(BillingError):
    status_code = 404


class SubjectNotFound(BillingError):
    status_code = 404


class CronUnauthorized(BillingError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class VoucherNotFound(BillingError):
    status_code = 404
