class TxdbError(Exception):
    ...


class RecordNotFound(TxdbError):
    ...


class Cancelled(TxdbError):
    """Raised when the bound context has been cancelled"""


class DeadlineExceeded(Cancelled):
    """Raised when the bound context deadline has passed"""
