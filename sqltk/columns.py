# sqltk/columns.py
"""
Column descriptors and reusable column sets for INSERT generation.

A :class:`ColumnSet` is derived once, from an explicit column list or from the
keys of a sample record, and then prepares any number of records into ordered
value lists that line up element-for-element with its column names.
"""

import copy
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .config import get_setting
from .exceptions import ConfigError, MissingValueError
from .formatting import TableName, as_name
from .utils import UNDEFINED, Mapping, RecordLike, is_record, is_text, to_names

logger = logging.getLogger(__name__)

ColumnConfig = Union[str, Dict[str, Any], 'Column']


class Column:
    """
    One output column of an INSERT statement.

    Column Configuration
    --------------------
        A column can be given as a bare name or as a dict containing:

        * **name** (str):
          Column name as used in SQL. Required.

        * **field** (str, optional):
          Source key in the input record. Defaults to ``name``.

        * **value** (any, optional):
          Static default used when the source field is missing or ``UNDEFINED``.
          ``None`` is a valid default (NULL).

        * **fn** (callable, optional):
          Computed default ``fn(value, record)``. Receives the looked-up value
          (``UNDEFINED`` when missing) and the whole original record, so it can
          read sibling fields. It is called for EVERY record, including ones
          where the field is populated, and whatever it returns is used. A
          function that only wants to fill gaps must return ``value`` unchanged
          when it is not ``UNDEFINED``.

        * **skip** (bool, optional, default False):
          Exclude the column from output. Its ``fn`` is never called.

        * **nullable** (bool, optional, default False):
          Write NULL instead of raising when no value can be resolved.

    Example
    -------
    ::

        Column('rank', value='private')
        Column.from_config({'name': 'nation', 'field': 'home',
                            'fn': lambda v, rec: 'Fire' if rec.get('firebender') else v})
    """

    OPTIONS = ('name', 'field', 'value', 'fn', 'skip', 'nullable')

    def __init__(
            self,
            name: str,
            field: Optional[str] = None,
            value: Any = UNDEFINED,
            fn: Optional[Callable[[Any, RecordLike], Any]] = None,
            skip: bool = False,
            nullable: bool = False,
    ):
        if not is_text(name):
            raise ConfigError('name', f"Invalid column name: {name!r}")
        if field is None:
            field = name
        elif not is_text(field):
            raise ConfigError('field', f"Invalid source field for column '{name}': {field!r}")
        if fn is not None and not callable(fn):
            raise ConfigError('fn', f"Default function for column '{name}' is not callable.")
        self.name = name
        self.field = field
        self.value = value
        self.fn = fn
        self.skip = bool(skip)
        self.nullable = bool(nullable)

    @classmethod
    def from_config(cls, config: ColumnConfig) -> 'Column':
        """Build a Column from a name, an options dict or another Column."""
        if isinstance(config, Column):
            return config
        if isinstance(config, str):
            return cls(config)
        if isinstance(config, Mapping):
            unknown = set(config) - set(cls.OPTIONS)
            if unknown:
                raise ConfigError('columns', f"Unknown column options: {sorted(unknown)}")
            if 'name' not in config:
                raise ConfigError('columns', "Column options must include 'name'.")
            return cls(**config)
        raise ConfigError('columns', f"Invalid column definition: {config!r}")

    @property
    def has_default(self) -> bool:
        """True if a static default value is configured."""
        return self.value is not UNDEFINED

    def with_options(self, **options) -> 'Column':
        """Return a copy of this column with some options changed."""
        column = copy.copy(self)
        for key, val in options.items():
            if key not in self.OPTIONS:
                raise ConfigError('columns', f"Unknown column option: {key}")
            setattr(column, key, val)
        # re-run validation on the result
        return Column(column.name, column.field, column.value, column.fn, column.skip, column.nullable)

    def resolve(self, record: RecordLike, nullable: bool = False, index: Optional[int] = None) -> Any:
        """
        Resolve this column's value from a record.

        Args:
            record: Source record. Never modified.
            nullable: Set-wide null policy; the column's own ``nullable`` also applies.
            index: Record position in a batch, reported in errors.

        Raises:
            MissingValueError: If no value can be resolved and NULL is not allowed.
        """
        value = record.get(self.field, UNDEFINED)
        if self.fn is not None:
            value = self.fn(value, record)
        if value is UNDEFINED and self.has_default:
            value = self.value
        if value is UNDEFINED:
            if self.nullable or nullable:
                return None
            raise MissingValueError(self.name, index)
        return value

    def __eq__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return all(getattr(self, opt) == getattr(other, opt) for opt in self.OPTIONS)

    def __repr__(self) -> str:
        parts = [repr(self.name)]
        if self.field != self.name:
            parts.append(f"field={self.field!r}")
        if self.has_default:
            parts.append(f"value={self.value!r}")
        if self.fn is not None:
            parts.append(f"fn={getattr(self.fn, '__name__', 'fn')}")
        if self.skip:
            parts.append("skip=True")
        if self.nullable:
            parts.append("nullable=True")
        return f"Column({', '.join(parts)})"


class ColumnSet:
    """
    Ordered, de-duplicated set of columns, reusable across many records.

    Columns come from, in order of precedence:

    * ``columns`` - a name, an options dict, a Column, a list of those, or a
      dict of ``{column_name: {options}}`` in the style of a table definition;
    * ``sample`` - when ``columns`` is None, one column per key of the sample
      record, in the record's insertion order.

    Duplicate names keep the first occurrence and its position.

    Args:
        columns: Explicit column definitions, or None to infer from ``sample``.
        sample: Representative record used for inference only.
        table: Remembered table, used when the INSERT call gives none.
        exclude: Column name(s) to skip.
        defaults: ``{column_name: value_or_fn}``. Callables become computed
            defaults, anything else a static default. A default for a column
            that does not exist yet appends that column.
        nullable: Write NULL for any column that resolves to no value.

    Example
    -------
    ::

        cs = ColumnSet(['name', 'temple', {'name': 'rank', 'value': 'novice'}],
                       table='air_nomads')
        cs.names                                   # ('name', 'temple', 'rank')
        cs.prepare({'name': 'Aang', 'temple': 'Southern'})
        # ['Aang', 'Southern', 'novice']

    The set never caches anything derived from a record, so one instance can be
    shared between threads.
    """

    def __init__(
            self,
            columns: Union[ColumnConfig, List[ColumnConfig], Dict[str, Dict[str, Any]], None] = None,
            sample: Optional[RecordLike] = None,
            table: Union[str, TableName, None] = None,
            exclude: Union[str, List[str], None] = None,
            defaults: Optional[Dict[str, Any]] = None,
            nullable: bool = False,
    ):
        if table is not None and not isinstance(table, TableName) and not is_text(table):
            raise ConfigError('table', "Table name must be a non-empty text string.")

        if columns is None:
            if not is_record(sample):
                raise ConfigError('sample', "Parameter 'sample' must be a non-null mapping when no columns are given.")
            parsed = self._collect(list(sample.keys()))
        else:
            parsed = self._collect(self._normalize(columns))

        if defaults is not None:
            parsed = self._apply_defaults(parsed, defaults)

        self._columns: Tuple[Column, ...] = tuple(parsed.values())
        self._table = table
        self._nullable = bool(nullable)
        self._names_sql: Optional[str] = None

        excluded = to_names(exclude, 'exclude')
        if excluded:
            self._columns = self._skip(self._columns, excluded)

        if not self._columns:
            raise ConfigError('columns', "Cannot create a ColumnSet without columns.")
        logger.debug(f"Created {self!r}")

    @staticmethod
    def _normalize(columns) -> List[ColumnConfig]:
        """Turn any accepted columns argument into a flat list of column configs."""
        if isinstance(columns, (str, Column)):
            return [columns]
        if isinstance(columns, Mapping):
            if isinstance(columns.get('name'), str):
                return [columns]
            configs = []
            for name, options in columns.items():
                if options is None:
                    options = {}
                if not isinstance(options, Mapping):
                    raise ConfigError('columns', f"Options for column '{name}' must be a dict.")
                if 'name' in options and options['name'] != name:
                    raise ConfigError('columns', f"Column '{name}' has a conflicting name option.")
                configs.append({**options, 'name': name})
            return configs
        if isinstance(columns, (list, tuple)):
            return list(columns)
        raise ConfigError('columns', f"Invalid columns: {type(columns).__name__}")

    @staticmethod
    def _collect(configs: List[ColumnConfig]) -> Dict[str, Column]:
        parsed: Dict[str, Column] = {}
        for config in configs:
            column = Column.from_config(config)
            if column.name in parsed:
                logger.debug(f"Duplicate column '{column.name}' ignored")
                continue
            parsed[column.name] = column
        return parsed

    @staticmethod
    def _apply_defaults(parsed: Dict[str, Column], defaults: Dict[str, Any]) -> Dict[str, Column]:
        if not isinstance(defaults, Mapping):
            raise ConfigError('defaults', "Parameter 'defaults' must be a mapping of column name to value or function.")
        result = dict(parsed)
        for name, default in defaults.items():
            option = {'fn': default} if callable(default) else {'value': default}
            if name in result:
                result[name] = result[name].with_options(**option)
            else:
                result[name] = Column(name, **option)
        return result

    @staticmethod
    def _skip(columns: Tuple[Column, ...], names: Tuple[str, ...]) -> Tuple[Column, ...]:
        known = {col.name for col in columns}
        unknown = [name for name in names if name not in known]
        if unknown:
            logger.warning(f"Excluded columns not in column set: {unknown}")
        return tuple(col.with_options(skip=True) if col.name in names and not col.skip else col
                     for col in columns)

    def _derive(self, columns: Tuple[Column, ...]) -> 'ColumnSet':
        """New ColumnSet with the same table and null policy but different columns."""
        derived = copy.copy(self)
        derived._columns = columns
        derived._names_sql = None
        return derived

    @property
    def table(self) -> Union[str, TableName, None]:
        """Remembered table, used when an INSERT is generated without one."""
        return self._table

    @property
    def nullable(self) -> bool:
        """Set-wide null policy."""
        return self._nullable

    @property
    def columns(self) -> Tuple[Column, ...]:
        """All columns including skipped ones."""
        return self._columns

    @property
    def names(self) -> Tuple[str, ...]:
        """Names of the columns that appear in output, in order."""
        return tuple(col.name for col in self)

    def format_names(self) -> str:
        """Escaped, comma-separated column names, e.g. ``"one","two"``."""
        if self._names_sql is None:
            self._names_sql = as_name(list(self.names))
        return self._names_sql

    def with_exclusions(self, names: Union[str, List[str]]) -> 'ColumnSet':
        """
        Return a view of this set with the given columns skipped.

        Excluding an already excluded column has no further effect. Unknown
        names are ignored with a warning.
        """
        excluded = to_names(names, 'exclude')
        if not excluded:
            return self
        return self._derive(self._skip(self._columns, excluded))

    def extend(self, columns) -> 'ColumnSet':
        """Return a new set with columns appended; an existing name raises ConfigError."""
        added = self._collect(self._normalize(columns))
        existing = {col.name for col in self._columns}
        for name in added:
            if name in existing:
                raise ConfigError('columns', f"Duplicate column name '{name}'.")
        return self._derive(self._columns + tuple(added.values()))

    def merge(self, columns) -> 'ColumnSet':
        """Return a new set where same-named columns are replaced and new ones appended."""
        added = self._collect(self._normalize(columns))
        merged = [added.pop(col.name, col) for col in self._columns]
        merged.extend(added.values())
        return self._derive(tuple(merged))

    def prepare(self, record: RecordLike, index: Optional[int] = None) -> List[Any]:
        """
        Resolve a record into values aligned with :attr:`names`.

        Each output column looks up its source field, then applies its computed
        default (always, see :class:`Column`), then its static default, then
        the null policy.

        Args:
            record: Source mapping. Extra keys are ignored; it is never modified.
            index: Record position in a batch, reported in errors.

        Returns:
            One value per output column, in column order.

        Raises:
            ConfigError: If record is not a mapping.
            MissingValueError: If a column resolves to no value and NULL is not allowed.
        """
        if not is_record(record):
            where = '' if index is None else f" (record {index})"
            raise ConfigError('record', f"Record must be a non-null mapping{where}, got {type(record).__name__}.")
        nullable = self._nullable or bool(get_setting('undefined_as_null', False))
        return [col.resolve(record, nullable, index) for col in self]

    def __iter__(self) -> Iterator[Column]:
        return (col for col in self._columns if not col.skip)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, name) -> bool:
        return any(col.name == name for col in self)

    def __repr__(self) -> str:
        return f"ColumnSet({list(self.names)}, table={self._table!r})"
