# sqltk/formatting.py
"""
Safe SQL formatting: value literals, identifiers and placeholder templates.

Every value is escaped according to its runtime kind (see :class:`ValueKind`):

========  =====================================  ===========================
Kind      Python types                           SQL output
========  =====================================  ===========================
NULL      ``None``                               ``NULL``
BOOL      ``bool``                               ``true`` / ``false``
NUMBER    ``int``, ``float``, ``Decimal``        bare literal, NaN/Inf rejected
TEXT      ``str``                                ``'...'`` with ``'`` doubled
DATE      ``date``, ``datetime``, ``time``       quoted ISO-8601
JSON      ``dict`` / any Mapping                 quoted JSON text
ARRAY     ``list``, ``tuple``                    ``array[...]``
BINARY    ``bytes``, ``bytearray``               ``'\\x<hex>'``
RAW       :class:`Raw`                           verbatim, caller guarantees safety
========  =====================================  ===========================

Identifiers are always double-quoted, with embedded double quotes doubled.

Example
-------
::

    >>> format_query('SELECT * FROM $1~ WHERE id = $2', ['users', 7])
    'SELECT * FROM "users" WHERE id = 7'
"""

import datetime as dt
import json
import math
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence, Set, Union

from .config import get_setting
from .exceptions import ConfigError, FormatError, UnsupportedValueError
from .utils import UNDEFINED, Mapping, is_text

# $1, $1^, $1~, $1:raw, $1:name, $1:json, $1:csv and the same for ${name}; any other :word is an error
_PLACEHOLDER = re.compile(r'\$(?:(\d+)|\{\s*([A-Za-z_]\w*)\s*\})(\^|~|:\w+)?')


class Raw:
    """
    Text emitted verbatim, bypassing escaping.

    Use for SQL expressions such as ``Raw('now()')`` or ``Raw('DEFAULT')``.
    The caller is responsible for the safety of the text.
    """
    __slots__ = ('text',)

    def __init__(self, text: str):
        if not isinstance(text, str):
            raise ConfigError('text', f"Raw text must be a string, got {type(text).__name__}.")
        self.text = text

    def __eq__(self, other):
        return isinstance(other, Raw) and other.text == self.text

    def __hash__(self):
        return hash(('Raw', self.text))

    def __repr__(self):
        return f"Raw({self.text!r})"


class TableName:
    """
    Table name with an optional schema, rendered as ``"schema"."table"``.

    A plain string passed where a table is expected is always one identifier;
    use TableName (or :meth:`TableName.parse`) for schema-qualified names.
    """

    def __init__(self, table: str, schema: Optional[str] = None):
        if not is_text(table):
            raise ConfigError('table', "Table name must be a non-empty text string.")
        if schema is not None and not is_text(schema):
            raise ConfigError('schema', "Schema name must be a non-empty text string.")
        self.table = table
        self.schema = schema

    @classmethod
    def parse(cls, path: str) -> 'TableName':
        """Split 'schema.table' on the first dot; a name without a dot has no schema."""
        if not is_text(path):
            raise ConfigError('table', "Table name must be a non-empty text string.")
        schema, sep, table = path.partition('.')
        if not sep:
            return cls(path)
        return cls(table, schema)

    @property
    def name(self) -> str:
        """Escaped, schema-qualified name."""
        if self.schema:
            return f"{_quote_name(self.schema)}.{_quote_name(self.table)}"
        return _quote_name(self.table)

    def __eq__(self, other):
        return isinstance(other, TableName) and (other.table, other.schema) == (self.table, self.schema)

    def __hash__(self):
        return hash((self.schema, self.table))

    def __str__(self):
        return self.name

    def __repr__(self):
        if self.schema:
            return f"TableName({self.table!r}, schema={self.schema!r})"
        return f"TableName({self.table!r})"


class ValueKind(Enum):
    """Runtime kind of a value, deciding how it is escaped."""
    NULL = 'null'
    BOOL = 'bool'
    NUMBER = 'number'
    TEXT = 'text'
    DATE = 'date'
    JSON = 'json'
    ARRAY = 'array'
    BINARY = 'binary'
    RAW = 'raw'


def classify(value: Any) -> ValueKind:
    """
    Determine the ValueKind of a value.

    Raises:
        UnsupportedValueError: For NaN/Infinity, UNDEFINED, callables and any
            type without an escaping rule.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, Raw):
        return ValueKind.RAW
    # bool is a subclass of int, must come first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float, Decimal)):
        if isinstance(value, float) and not math.isfinite(value):
            raise UnsupportedValueError(value, f"Number {value!r} cannot be formatted.")
        if isinstance(value, Decimal) and not value.is_finite():
            raise UnsupportedValueError(value, f"Number {value!r} cannot be formatted.")
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (dt.date, dt.time)):
        return ValueKind.DATE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, Mapping):
        return ValueKind.JSON
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if value is UNDEFINED:
        raise UnsupportedValueError(value, "Undefined value cannot be formatted.")
    if callable(value):
        raise UnsupportedValueError(value, "Function values must be wrapped in Raw to be formatted.")
    raise UnsupportedValueError(value)


def quote_text(text: str) -> str:
    """Single-quote text, doubling embedded single quotes."""
    return "'" + text.replace("'", "''") + "'"


def _quote_name(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _format_number(value: Union[int, float, Decimal]) -> str:
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return repr(float(value))
    return str(value)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (dt.date, dt.time)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, Mapping):
        return dict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def as_json(value: Any) -> str:
    """Format any value as quoted JSON text."""
    try:
        text = json.dumps(value, default=_json_default, allow_nan=False,
                          sort_keys=bool(get_setting('json_sort_keys', False)))
    except (TypeError, ValueError) as e:
        raise UnsupportedValueError(value, f"Value cannot be formatted as JSON: {e}")
    return quote_text(text)


def _format_array(values: Sequence[Any], seen: Set[int], nested: bool = False) -> str:
    if id(values) in seen:
        raise UnsupportedValueError(values, "Circular array cannot be formatted.")
    if not values:
        if nested:
            raise UnsupportedValueError(values, "Empty nested array cannot be formatted.")
        return "'{}'"
    seen.add(id(values))
    items = []
    for item in values:
        if isinstance(item, (list, tuple)):
            items.append(_format_array(item, seen, nested=True))
        else:
            items.append(as_value(item))
    seen.discard(id(values))
    body = '[' + ','.join(items) + ']'
    return body if nested else 'array' + body


def as_value(value: Any) -> str:
    """
    Escape a single value as an SQL literal, according to its ValueKind.

    Raises:
        UnsupportedValueError: If the value has no escaping rule.
    """
    kind = classify(value)
    if kind is ValueKind.NULL:
        return 'NULL'
    if kind is ValueKind.BOOL:
        return 'true' if value else 'false'
    if kind is ValueKind.NUMBER:
        return _format_number(value)
    if kind is ValueKind.TEXT:
        return quote_text(value)
    if kind is ValueKind.DATE:
        return quote_text(value.isoformat())
    if kind is ValueKind.JSON:
        return as_json(value)
    if kind is ValueKind.ARRAY:
        return _format_array(value, set())
    if kind is ValueKind.BINARY:
        return "'\\x" + bytes(value).hex() + "'"
    return value.text


def as_name(name: Union[str, TableName, Sequence[str]]) -> str:
    """
    Escape an SQL identifier.

    A TableName renders schema-qualified; a list/tuple of names renders as a
    comma-separated list of quoted names.

    Raises:
        FormatError: For empty or non-text names.
    """
    if isinstance(name, TableName):
        return name.name
    if isinstance(name, (list, tuple)):
        if not name:
            raise FormatError("Cannot format an empty list of names.")
        return ','.join(as_name(n) for n in name)
    if not is_text(name):
        raise FormatError(f"Invalid sql name: {name!r}")
    return _quote_name(name)


def as_csv(values: Any) -> str:
    """Comma-separated escaped values; a non-sequence is formatted as one value."""
    if isinstance(values, (list, tuple)):
        return ','.join(as_value(v) for v in values)
    return as_value(values)


def _apply_modifier(value: Any, modifier: Optional[str]) -> str:
    if modifier is None:
        return as_value(value)
    if modifier in ('^', ':raw'):
        if isinstance(value, Raw):
            return value.text
        return 'NULL' if value is None else str(value)
    if modifier in ('~', ':name'):
        return as_name(value)
    if modifier == ':json':
        return as_json(value)
    if modifier == ':csv':
        return as_csv(value)
    raise FormatError(f"Unknown modifier '{modifier}'.")


def format_query(template: str, args: Any = None) -> str:
    """
    Substitute placeholders in a query template with escaped arguments.

    Placeholders are ``$1`` .. ``$N`` (positional, 1-based) or ``${name}``
    (properties of a mapping argument), optionally followed by a modifier:

    * none - escaped value (see :func:`as_value`)
    * ``^`` or ``:raw`` - inserted verbatim
    * ``~`` or ``:name`` - escaped identifier(s)
    * ``:json`` - quoted JSON text
    * ``:csv`` - comma-separated escaped values

    A mapping argument serves both ``${name}`` lookups and ``$1`` (the mapping
    itself). A single non-sequence argument is treated as ``[arg]``.

    Raises:
        FormatError: Bad template, out-of-range index, missing property or
            unknown modifier.
        UnsupportedValueError: A value has no escaping rule.
    """
    if not isinstance(template, str):
        raise FormatError(f"Parameter 'template' must be a text string, got {type(template).__name__}.")

    named = None
    if args is None:
        positional = ()
    elif isinstance(args, Mapping):
        positional = (args,)
        named = args
    elif isinstance(args, (list, tuple)):
        positional = tuple(args)
    else:
        positional = (args,)

    def replace(match):
        index, prop, modifier = match.groups()
        if index is not None:
            i = int(index)
            if i < 1 or i > len(positional):
                raise FormatError(f"Index ${i} exceeds the number of arguments ({len(positional)}).")
            value = positional[i - 1]
        else:
            if named is None or prop not in named:
                raise FormatError(f"Property '{prop}' doesn't exist.")
            value = named[prop]
        return _apply_modifier(value, modifier)

    return _PLACEHOLDER.sub(replace, template)
