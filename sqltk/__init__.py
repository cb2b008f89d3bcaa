# sqltk/__init__.py
"""
SQLTK - SQL statement ToolKit

Generates complete, safely escaped INSERT statements from Python records:

- Column sets inferred from a sample record or declared explicitly
- Static and computed per-column defaults
- Exclusions and a configurable null policy
- Escaping of strings, numbers, booleans, NULL, dates, JSON, arrays and raw SQL
- Single-row and multi-row (batch) INSERTs
- YAML-based settings and script logging helpers

Basic usage::

    import sqltk

    sqltk.insert('myTable', None, {'one': 123, 'two': 'test'})
    # INSERT INTO "myTable"("one","two") VALUES(123,'test')

    cs = sqltk.ColumnSet(['name', {'name': 'nation', 'value': 'Air'}], table='nomads')
    sqltk.insert(None, cs, [{'name': 'Aang'}, {'name': 'Tenzin'}])
    # INSERT INTO "nomads"("name","nation") VALUES('Aang','Air'), ('Tenzin','Air')
"""

__version__ = '0.1.0'

from .columns import Column, ColumnSet
from .config import get_setting, set_config_file
from .exceptions import ConfigError, FormatError, MissingValueError, SqltkError, UnsupportedValueError
from .formatting import Raw, TableName, ValueKind, as_name, as_value, format_query
from .insert import InsertBuilder, insert
from .logging_utils import setup_logging, errors_logged
from .utils import UNDEFINED

__all__ = [
    'Column',
    'ColumnSet',
    'InsertBuilder',
    'insert',
    'Raw',
    'TableName',
    'ValueKind',
    'UNDEFINED',
    'as_name',
    'as_value',
    'format_query',
    'SqltkError',
    'ConfigError',
    'MissingValueError',
    'UnsupportedValueError',
    'FormatError',
    'get_setting',
    'set_config_file',
    'setup_logging',
    'errors_logged',
]
