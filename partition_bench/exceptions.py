class PartitionBenchError(Exception):
    """Base error for the seeding and benchmarking tools."""


class DatabaseUnavailableError(PartitionBenchError):
    def __init__(self, attempts: int, cause: BaseException | None = None):
        self.attempts = attempts
        self.cause = cause
        super().__init__(f'Database did not answer after {attempts} attempt(s): {cause}')


__all__ = ['PartitionBenchError', 'DatabaseUnavailableError']
