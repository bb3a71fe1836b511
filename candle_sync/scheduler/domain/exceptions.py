class SchedulerError(Exception):
    """Base class for scheduler errors. None of them is process-fatal."""
    pass


class ConfigurationError(SchedulerError):
    """Raised when a configuration value cannot be used as given."""
    pass


class ScoringError(SchedulerError):
    """Raised by scoring adapters that cannot produce a result."""
    pass
