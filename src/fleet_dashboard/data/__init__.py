"""Fleet API payload models and validation helpers."""

from .models import *  # noqa: F401,F403
from .models import __all__ as _models_all
from .validation import ResponseValidator, ValidationIssue

__all__ = [*_models_all, "ResponseValidator", "ValidationIssue"]
