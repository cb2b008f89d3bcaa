# tests/test_insert.py
import datetime as dt
import logging

import pytest

import sqltk
from sqltk import (
    ColumnSet, ConfigError, InsertBuilder, MissingValueError, Raw, TableName, UNDEFINED,
    UnsupportedValueError, insert
)


@pytest.fixture
def builder():
    return InsertBuilder()


@pytest.fixture
def fire_nation_columns():
    """Reusable column set for Fire Nation army records."""
    return ColumnSet({
        'soldier_id': {'field': 'recruit_id'},
        'name': {'field': 'full_name'},
        'rank': {'value': 'private'},
        'enlisted': {'field': 'joined', 'nullable': True},
    }, table='fire_nation_army')


class TestInsertSingle:
    """Test single-record INSERT generation."""

    def test_default_usage(self):
        sql = insert('myTable', None, {'one': 123, 'two': 'test'})
        assert sql == 'INSERT INTO "myTable"("one","two") VALUES(123,\'test\')'

    def test_exclude_and_defaults(self):
        record = {'zero': 0, 'one': 1, 'two': UNDEFINED, 'four': True}
        sql = insert('myTable', None, record,
                     exclude='zero',
                     defaults={
                         'one': 123,
                         'three': 555,
                         'two': lambda value, rec: 'second' if value is UNDEFINED else value,
                         'four': lambda value, rec: False if rec['one'] == 1 else value,
                     })
        assert sql == 'INSERT INTO "myTable"("one","two","four","three") VALUES(1,\'second\',false,555)'

    def test_builder_generate(self, builder, avatar_record):
        sql = builder.generate('avatars', None, avatar_record)
        assert sql == ('INSERT INTO "avatars"("name","nation","age","airbender") '
                       "VALUES('Aang','Air Nomads',112,true)")

    def test_explicit_columns(self, builder, avatar_record):
        sql = builder.generate('avatars', ['nation', 'name'], avatar_record)
        assert sql == 'INSERT INTO "avatars"("nation","name") VALUES(\'Air Nomads\',\'Aang\')'

    def test_value_kinds(self, builder):
        record = {
            'nothing': None,
            'born': dt.date(2024, 3, 15),
            'stats': {'power': 9},
            'tags': ['fire', 'lightning'],
            'created': Raw('now()'),
            'ratio': 0.25,
        }
        sql = builder.generate('kinds', None, record)
        assert sql.endswith("VALUES(NULL,'2024-03-15','{\"power\": 9}',array['fire','lightning'],now(),0.25)")

    def test_identifier_escaping(self, builder):
        sql = builder.generate('odd"table', None, {'we"ird': 1})
        assert sql == 'INSERT INTO "odd""table"("we""ird") VALUES(1)'

    def test_padded_column_name(self, builder):
        sql = builder.generate('t', None, {'first name ': 1})
        assert sql == 'INSERT INTO "t"("first name ") VALUES(1)'

    def test_value_escaping(self, builder):
        sql = builder.generate('t', None, {'quote': "Ozai's war"})
        assert sql.endswith("VALUES('Ozai''s war')")

    def test_schema_qualified_table(self, builder):
        sql = builder.generate(TableName('army', 'fire_nation'), None, {'a': 1})
        assert sql == 'INSERT INTO "fire_nation"."army"("a") VALUES(1)'

    def test_null_policy_option(self, builder):
        sql = builder.generate('t', ['a', 'b'], {'a': 1}, nullable=True)
        assert sql == 'INSERT INTO "t"("a","b") VALUES(1,NULL)'


class TestInsertColumnSet:
    """Test INSERT generation with a reused ColumnSet."""

    def test_uses_remembered_table(self, builder, fire_nation_columns):
        sql = builder.generate(None, fire_nation_columns, {'recruit_id': 'FN001', 'full_name': 'Zuko'})
        assert sql == ('INSERT INTO "fire_nation_army"("soldier_id","name","rank","enlisted") '
                       "VALUES('FN001','Zuko','private',NULL)")

    def test_explicit_table_wins(self, builder, fire_nation_columns):
        sql = builder.generate('deserters', fire_nation_columns, {'recruit_id': 'FN002', 'full_name': 'Iroh'})
        assert sql.startswith('INSERT INTO "deserters"(')

    def test_empty_table_falls_back(self, builder, fire_nation_columns):
        sql = builder.generate('', fire_nation_columns, {'recruit_id': 'FN003', 'full_name': 'Lee'})
        assert sql.startswith('INSERT INTO "fire_nation_army"(')

    def test_exclude_with_column_set(self, builder, fire_nation_columns):
        sql = builder.generate(None, fire_nation_columns, {'recruit_id': 'FN004', 'full_name': 'Mai'},
                               exclude=['rank', 'enlisted'])
        assert sql == 'INSERT INTO "fire_nation_army"("soldier_id","name") VALUES(\'FN004\',\'Mai\')'
        assert fire_nation_columns.names == ('soldier_id', 'name', 'rank', 'enlisted')

    def test_defaults_rejected_for_column_set(self, builder, fire_nation_columns):
        with pytest.raises(ConfigError) as exc:
            builder.generate(None, fire_nation_columns, {'recruit_id': 'x', 'full_name': 'y'},
                             defaults={'rank': 'general'})
        assert exc.value.parameter == 'defaults'

    def test_nullable_rejected_for_column_set(self, builder, fire_nation_columns):
        with pytest.raises(ConfigError):
            builder.generate(None, fire_nation_columns, {'recruit_id': 'x', 'full_name': 'y'}, nullable=True)

    def test_all_columns_excluded(self, builder):
        with pytest.raises(ConfigError, match="every column"):
            builder.generate('t', ColumnSet(['a']), {'a': 1}, exclude='a')


class TestInsertBatch:
    """Test multi-row INSERT generation."""

    def test_batch(self, builder, team_avatar):
        sql = builder.generate('team_avatar', None, team_avatar)
        assert sql == ('INSERT INTO "team_avatar"("name","nation","age") VALUES'
                       "('Aang','Air Nomads',112), ('Katara','Water Tribe',14), ('Toph','Earth Kingdom',12)")

    def test_batch_shares_one_column_list(self, builder, team_avatar):
        sql = builder.generate('team_avatar', None, team_avatar)
        assert sql.count('"name"') == 1
        assert sql.count('), (') == len(team_avatar) - 1

    def test_batch_tuple(self, builder, fire_nation_columns):
        records = ({'recruit_id': 'FN1', 'full_name': 'Azula'}, {'recruit_id': 'FN2', 'full_name': 'Ty Lee'})
        sql = builder.generate(None, fire_nation_columns, records)
        assert sql.endswith("VALUES('FN1','Azula','private',NULL), ('FN2','Ty Lee','private',NULL)")

    def test_batch_inferred_from_first_record(self, builder):
        records = [{'a': 1, 'b': 2}, {'b': 4, 'a': 3, 'c': 'ignored'}]
        sql = builder.generate('t', None, records)
        assert sql == 'INSERT INTO "t"("a","b") VALUES(1,2), (3,4)'

    def test_batch_missing_value_reports_index(self, builder):
        records = [{'a': 1, 'b': 2}, {'a': 3, 'b': 4}, {'a': 5}]
        with pytest.raises(MissingValueError) as exc:
            builder.generate('t', None, records)
        assert exc.value.column == 'b'
        assert exc.value.index == 2

    def test_batch_unsupported_value_reports_index(self, builder):
        records = [{'a': 1}, {'a': float('nan')}]
        with pytest.raises(UnsupportedValueError) as exc:
            builder.generate('t', None, records)
        assert exc.value.index == 1
        assert 'record 1' in str(exc.value)

    def test_empty_batch(self, builder):
        with pytest.raises(ConfigError) as exc:
            builder.generate('t', None, [])
        assert exc.value.parameter == 'data'

    def test_batch_member_not_mapping(self, builder):
        with pytest.raises(ConfigError, match="Record 1"):
            builder.generate('t', None, [{'a': 1}, 'oops'])


class TestInsertCapitalization:
    """Test keyword capitalization."""

    def test_lower_case(self, builder):
        sql = builder.generate('myTable', None, {'one': 123, 'two': 'test'}, capitalize=False)
        assert sql == 'insert into "myTable"("one","two") values(123,\'test\')'

    def test_builder_option(self):
        sql = InsertBuilder(capitalize=False).generate('t', None, {'a': 1})
        assert sql.startswith('insert into ')

    def test_call_overrides_builder(self):
        sql = InsertBuilder(capitalize=False).generate('t', None, {'a': 1}, capitalize=True)
        assert sql.startswith('INSERT INTO ')

    def test_setting(self):
        from sqltk.defaults import settings
        settings['capitalize_sql'] = False
        assert insert('t', None, {'a': 1}).startswith('insert into ')

    def test_identifiers_and_values_untouched(self, builder):
        sql = builder.generate('Values', None, {'Insert': 'Values'}, capitalize=True)
        assert sql == 'INSERT INTO "Values"("Insert") VALUES(\'Values\')'
        sql = builder.generate('Values', None, {'Insert': 'Values'}, capitalize=False)
        assert sql == 'insert into "Values"("Insert") values(\'Values\')'


class TestInsertErrors:
    """Test precondition failures."""

    @pytest.mark.parametrize('table', [None, '', '   ', 42])
    def test_bad_table(self, builder, table):
        with pytest.raises(ConfigError) as exc:
            builder.generate(table, None, {'a': 1})
        assert exc.value.parameter == 'table'

    def test_column_set_without_table(self, builder):
        with pytest.raises(ConfigError) as exc:
            builder.generate(None, ColumnSet(['a']), {'a': 1})
        assert exc.value.parameter == 'table'

    @pytest.mark.parametrize('data', [None, 'record', 123, True])
    def test_bad_data(self, builder, data):
        with pytest.raises(ConfigError) as exc:
            builder.generate('t', None, data)
        assert exc.value.parameter == 'data'

    def test_config_error_is_type_error(self, builder):
        with pytest.raises(TypeError):
            builder.generate('t', None, None)

    def test_missing_value(self, builder):
        with pytest.raises(MissingValueError) as exc:
            builder.generate('t', ['a', 'b'], {'a': 1})
        assert exc.value.column == 'b'
        assert exc.value.index is None

    def test_undefined_value_without_default(self, builder):
        with pytest.raises(MissingValueError, match="'two'"):
            builder.generate('t', None, {'one': 1, 'two': UNDEFINED})

    def test_function_value(self, builder):
        with pytest.raises(UnsupportedValueError):
            builder.generate('t', None, {'fn': print})

    def test_errors_share_base(self, builder):
        with pytest.raises(sqltk.SqltkError):
            builder.generate('', None, {'a': 1})


class TestInsertLogging:
    """Test debug logging of generated SQL."""

    def test_debug_log(self, builder, caplog):
        with caplog.at_level(logging.DEBUG, logger='sqltk.insert'):
            sql = builder.generate('t', None, {'a': 1})
        assert sql in caplog.text
