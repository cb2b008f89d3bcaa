# sqltk/utils.py
"""
Utility functions for sqltk.
"""

from typing import Any, Dict, Iterable, Tuple, Union

from .exceptions import ConfigError

try:
    from typing import Mapping
except ImportError:
    from collections.abc import Mapping


class _Undefined:
    """
    Marker for a field that has no value at all.

    Python has no ``undefined``; a missing key is undefined, and ``UNDEFINED``
    lets a record carry a key whose value is deliberately not set. ``None``
    always means SQL NULL.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'UNDEFINED'

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


def is_text(value: Any) -> bool:
    """True for a string with at least one non-whitespace character."""
    return isinstance(value, str) and bool(value.strip())


def is_record(value: Any) -> bool:
    """True for a non-null mapping usable as an insert record."""
    return isinstance(value, Mapping)


def to_names(names: Union[str, Iterable[str], None], parameter: str = 'names') -> Tuple[str, ...]:
    """
    Normalize a name option into a tuple of names.

    Accepts None, a single name, or any iterable of names; duplicates are
    dropped keeping first-seen order.
    """
    if names is None:
        return ()
    if isinstance(names, str):
        names = [names]
    seen: Dict[str, None] = {}
    for name in names:
        if not isinstance(name, str):
            raise ConfigError(parameter, f"Column names must be strings, got {type(name).__name__}.")
        seen.setdefault(name, None)
    return tuple(seen)


RecordLike = Union[Dict[str, Any], Mapping]
