"""Type aliases shared across SQLProxy."""

from typing import Union

from typing_extensions import TypeAlias

__all__ = ("ParameterKeyValue",)

ParameterKeyValue: TypeAlias = Union[int, str]
"""A 1-based parameter index or a parameter name."""
