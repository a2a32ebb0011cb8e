"""Settings implementation."""

from typing import Mapping

from .base import BaseSettings


class Settings(BaseSettings):
    """Mutable settings backed by a flat dictionary of dotted names."""

    def __init__(self, values: Mapping[str, object] = None):
        """Initialize a Settings object.

        Args:
            values: An optional dictionary of settings
        """
        self._values = dict(values or {})

    def get_value(self, *var_names, default=None):
        """Fetch the first defined setting among name alternatives."""
        return next(
            (self._values[name] for name in var_names if name in self._values),
            default,
        )

    def set_value(self, var_name: str, value):
        """Add or replace a setting.

        Raises:
            TypeError: If the name is not a string
            ValueError: If the name is empty

        """
        if not isinstance(var_name, str):
            raise TypeError("Setting name must be a string")
        if not var_name:
            raise ValueError("Setting name must be non-empty")
        self._values[var_name] = value

    def clear_value(self, var_name: str):
        """Remove a setting, if defined."""
        self._values.pop(var_name, None)

    def __contains__(self, index):
        """Define 'in' operator."""
        return index in self._values

    def __iter__(self):
        """Iterate settings keys."""
        return iter(self._values)

    def __setitem__(self, index, value):
        """Implement update operator for array index."""
        self.set_value(index, value)

    def __delitem__(self, index):
        """Implement del operator for array index."""
        self.clear_value(index)

    def __len__(self):
        """Fetch the length of the mapping."""
        return len(self._values)

    def __bool__(self):
        """Settings are truthy even when empty."""
        return True

    def copy(self) -> BaseSettings:
        """Produce a copy of the settings instance."""
        return Settings(self._values)

    def extend(self, other: Mapping[str, object]) -> BaseSettings:
        """Merge another mapping to produce a new instance."""
        return Settings({**self._values, **other})

    def update(self, other: Mapping[str, object]):
        """Update the settings in place."""
        self._values.update(other)
