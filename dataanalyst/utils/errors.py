class EmptyDatasetError(ValueError):
    """Raised when an analysis is requested for a dataset with no rows."""


class DegenerateColumnWarning(UserWarning):
    """A column typed numeric ended up with no coercible values."""


class InsightGenerationError(RuntimeError):
    """The LLM-backed insight service could not produce an answer."""
