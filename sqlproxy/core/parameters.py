"""Parameter binding state captured from prepared and callable statements.

Binding calls (``set_string``, ``set_int``, ``register_out_parameter`` ...) are
recorded as :class:`ParameterSetOperation` snapshots keyed by
:class:`ParameterKey`. The :class:`ParameterRegistry` keeps the bindings of the
statement currently being built plus the snapshots accumulated by
``add_batch``.
"""

from functools import total_ordering
from typing import Any, Final

from sqlproxy.typing import ParameterKeyValue

__all__ = (
    "REGISTER_OUT_PARAMETER_METHOD",
    "ParameterKey",
    "ParameterRegistry",
    "ParameterSet",
    "ParameterSetOperation",
)

REGISTER_OUT_PARAMETER_METHOD: Final = "register_out_parameter"


@total_ordering
class ParameterKey:
    """Identifies a bound parameter by 1-based index or by name."""

    __slots__ = ("_value",)

    def __init__(self, value: ParameterKeyValue) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            msg = f"Parameter key must be an int index or a str name, got {type(value).__name__}"
            raise TypeError(msg)
        self._value = value

    @property
    def value(self) -> ParameterKeyValue:
        return self._value

    @property
    def is_index(self) -> bool:
        return isinstance(self._value, int)

    @property
    def is_name(self) -> bool:
        return isinstance(self._value, str)

    def _sort_key(self) -> "tuple[int, Any]":
        # indexes sort before names
        return (0, self._value) if self.is_index else (1, self._value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterKey):
            return NotImplemented
        return type(self._value) is type(other._value) and self._value == other._value

    def __lt__(self, other: "ParameterKey") -> bool:
        if not isinstance(other, ParameterKey):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash((type(self._value), self._value))

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_value"):
            msg = "ParameterKey is immutable"
            raise AttributeError(msg)
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"ParameterKey({self._value!r})"

    def __str__(self) -> str:
        return str(self._value)


class ParameterSetOperation:
    """Immutable record of one parameter binding call.

    Args:
        method: Name of the binding method, e.g. ``"set_string"``.
        args: Arguments exactly as supplied by the caller.
    """

    __slots__ = ("args", "method")

    method: str
    args: "tuple[Any, ...]"

    def __init__(self, method: str, args: "tuple[Any, ...]") -> None:
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "args", tuple(args))

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "ParameterSetOperation is immutable"
        raise AttributeError(msg)

    @property
    def key(self) -> Any:
        """The index or name the operation binds to."""
        return self.args[0] if self.args else None

    @property
    def value(self) -> Any:
        """The bound value, ``None`` for ``set_null`` style calls."""
        if self.method == "set_null":
            return None
        return self.args[1] if len(self.args) > 1 else None

    @property
    def is_register_out_parameter(self) -> bool:
        return self.method == REGISTER_OUT_PARAMETER_METHOD

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSetOperation):
            return NotImplemented
        return self.method == other.method and self.args == other.args

    def __hash__(self) -> int:
        return hash((self.method, self.args))

    def __repr__(self) -> str:
        return f"ParameterSetOperation(method={self.method!r}, args={self.args!r})"


ParameterSet = tuple[ParameterSetOperation, ...]


class ParameterRegistry:
    """Current and batched parameter bindings of one statement proxy.

    Re-binding a key replaces the previous operation but keeps the key at the
    position where it was first bound, so iteration order reflects binding
    order. Batch entries are copies and never change after being taken.
    """

    __slots__ = ("_batch", "_current")

    def __init__(self) -> None:
        self._current: dict[ParameterKey, ParameterSetOperation] = {}
        self._batch: list[dict[ParameterKey, ParameterSetOperation]] = []

    def bind(self, key: ParameterKey, operation: ParameterSetOperation) -> None:
        self._current[key] = operation

    def clear_current(self) -> None:
        self._current.clear()

    def snapshot_to_batch(self) -> None:
        self._batch.append(dict(self._current))
        self._current.clear()

    def clear_batch(self) -> None:
        self._batch.clear()

    def collect_for_single_execution(self) -> ParameterSet:
        """Return the current bindings as one parameter set.

        The registry is not cleared; a prepared statement may be executed again
        with the same bindings.
        """
        return tuple(self._current.values())

    def collect_for_batch_execution(self) -> "tuple[ParameterSet, ...]":
        """Return every batched parameter set and consume the batch."""
        collected = tuple(tuple(entry.values()) for entry in self._batch)
        self._batch.clear()
        return collected

    @property
    def current(self) -> "dict[ParameterKey, ParameterSetOperation]":
        """A copy of the current bindings."""
        return dict(self._current)

    @property
    def batch_size(self) -> int:
        return len(self._batch)

    def __repr__(self) -> str:
        return f"ParameterRegistry(current={len(self._current)}, batch={len(self._batch)})"
