# sqltk/defaults.py
"""Default settings - no imports to avoid circular dependencies."""

settings = {
    'capitalize_sql': True,       # INSERT INTO ... VALUES vs insert into ... values
    'undefined_as_null': False,   # missing values become NULL instead of raising
    'json_sort_keys': False,      # sort keys when formatting dicts as JSON text
    'logging': {
        'directory': './logs',
        'level': 'INFO',
        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        'timestamp_format': '%Y-%m-%d %H:%M:%S',
        'filename_format': '%Y%m%d_%H%M%S',  # Set to '' for single log file (no timestamp)
        'split_errors': True,
        'console': True,
    }
}
