# sqltk/insert.py
"""
INSERT statement generation.

Provides the InsertBuilder class, which turns one record or a batch of
records into a complete, escaped ``INSERT`` query string.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from .columns import ColumnSet
from .config import get_setting
from .exceptions import ConfigError, UnsupportedValueError
from .formatting import Raw, TableName, as_csv, format_query
from .utils import RecordLike, is_record, is_text

logger = logging.getLogger(__name__)

TableLike = Union[str, TableName]


class InsertBuilder:
    """
    Generate INSERT statements from records and a column schema.

    Columns are either a prepared :class:`~sqltk.columns.ColumnSet`, reused as-is,
    or anything ColumnSet accepts as ``columns`` (including None to infer the
    columns from the record). Data is a single mapping or a list of mappings;
    a list produces one multi-row statement.

    Generation is all-or-nothing: every record is resolved and escaped before
    the query is assembled, and the first failure is raised with its record
    index.

    Example
    -------
    ::

        from sqltk import InsertBuilder, ColumnSet

        builder = InsertBuilder()
        builder.generate('myTable', None, {'one': 123, 'two': 'test'})
        # INSERT INTO "myTable"("one","two") VALUES(123,'test')

        cs = ColumnSet(['name', 'nation'], table='avatars')
        builder.generate(None, cs, [{'name': 'Aang', 'nation': 'Air'},
                                    {'name': 'Korra', 'nation': 'Water'}])
        # INSERT INTO "avatars"("name","nation") VALUES('Aang','Air'), ('Korra','Water')

    Args:
        capitalize: Upper-case the ``INSERT INTO`` and ``VALUES`` keywords.
            None uses the ``capitalize_sql`` setting (default True).
    """

    TEMPLATE = 'insert into $1~($2^) values$3^'

    def __init__(self, capitalize: Optional[bool] = None):
        self.capitalize = capitalize

    def __repr__(self) -> str:
        return f"InsertBuilder(capitalize={self.capitalize!r})"

    def _use_capitals(self, capitalize: Optional[bool]) -> bool:
        if capitalize is not None:
            return bool(capitalize)
        if self.capitalize is not None:
            return bool(self.capitalize)
        return bool(get_setting('capitalize_sql', True))

    @staticmethod
    def _check_table(table: Any) -> TableLike:
        if isinstance(table, TableName) or is_text(table):
            return table
        raise ConfigError('table', "Unknown table name.")

    @staticmethod
    def _records(data: Any) -> Tuple[List[RecordLike], bool]:
        """Return (records, is_batch) after validating the data argument."""
        if is_record(data):
            return [data], False
        if isinstance(data, (list, tuple)):
            if not data:
                raise ConfigError('data', "Batch insert requires at least one record.")
            for index, record in enumerate(data):
                if not is_record(record):
                    raise ConfigError('data', f"Record {index} must be a non-null mapping, got {type(record).__name__}.")
            return list(data), True
        raise ConfigError('data', "Parameter 'data' must be a non-null mapping or a list of mappings.")

    def _resolve_columns(self, columns: Any, sample: RecordLike, exclude, defaults, nullable) -> ColumnSet:
        if isinstance(columns, ColumnSet):
            if defaults is not None:
                raise ConfigError('defaults', "Defaults cannot be applied to an existing ColumnSet.")
            if nullable is not None:
                raise ConfigError('nullable', "Null policy cannot be changed on an existing ColumnSet.")
            if exclude is not None:
                columns = columns.with_exclusions(exclude)
            return columns
        return ColumnSet(columns, sample=sample, exclude=exclude, defaults=defaults,
                         nullable=bool(nullable))

    def generate(
            self,
            table: Optional[TableLike],
            columns: Any,
            data: Union[RecordLike, List[RecordLike]],
            capitalize: Optional[bool] = None,
            exclude: Union[str, List[str], None] = None,
            defaults: Optional[Dict[str, Any]] = None,
            nullable: Optional[bool] = None,
    ) -> str:
        """
        Generate an INSERT statement.

        Args:
            table: Target table. May be empty when ``columns`` is a ColumnSet
                with a remembered table.
            columns: ColumnSet to reuse, or a column definition / None to build
                one from the (first) record.
            data: A mapping, or a list of mappings for a multi-row insert.
            capitalize: Override the builder's keyword capitalization.
            exclude: Column name(s) left out of the statement.
            defaults: ``{column: value_or_fn}``, only when building a ColumnSet.
            nullable: NULL instead of an error for unresolved columns, only
                when building a ColumnSet.

        Returns:
            The query string.

        Raises:
            ConfigError: Bad table, columns, data or options.
            MissingValueError: A column has no value and no default.
            UnsupportedValueError: A value cannot be escaped.
        """
        if isinstance(columns, ColumnSet) and not table:
            table = columns.table
        table = self._check_table(table)

        records, batch = self._records(data)
        column_set = self._resolve_columns(columns, records[0], exclude, defaults, nullable)
        if not len(column_set):
            raise ConfigError('columns', "No columns left to insert: every column is excluded.")

        rows = []
        for index, record in enumerate(records):
            position = index if batch else None
            values = column_set.prepare(record, position)
            try:
                rows.append('(' + as_csv(values) + ')')
            except UnsupportedValueError as e:
                if position is None:
                    raise
                raise UnsupportedValueError(e.value, str(e), position) from e

        query = self.TEMPLATE.upper() if self._use_capitals(capitalize) else self.TEMPLATE
        sql = format_query(query, [table, Raw(column_set.format_names()), Raw(', '.join(rows))])
        logger.debug(f"Generated insert SQL for {table} ({len(rows)} row(s)):\n{sql}")
        return sql


def insert(
        table: Optional[TableLike],
        columns: Any,
        data: Union[RecordLike, List[RecordLike]],
        **options
) -> str:
    """
    Generate an INSERT statement with a default :class:`InsertBuilder`.

    Accepts the same arguments as :meth:`InsertBuilder.generate`.

    Example
    -------
    ::

        import sqltk

        sqltk.insert('myTable', None, {'zero': 0, 'one': 1, 'two': sqltk.UNDEFINED, 'four': True},
                     exclude='zero',
                     defaults={'one': 123,
                               'three': 555,
                               'two': lambda v, rec: 'second' if v is sqltk.UNDEFINED else v,
                               'four': lambda v, rec: False if rec.get('one') == 1 else v})
        # INSERT INTO "myTable"("one","two","four","three") VALUES(1,'second',false,555)
    """
    return InsertBuilder().generate(table, columns, data, **options)
