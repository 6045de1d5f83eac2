"""
Engine exceptions.
"""

from typing import List


class InvalidInputError(ValueError):
    """Raised when a calculation receives input outside its contract."""


class ConfigValidationError(ValueError):
    """Raised when a configuration is rejected by the validation gate."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
