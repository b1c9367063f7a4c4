"""Tests for the end-to-end schema build."""

import logging

import pytest

from relql import RelationalSchemaTransformer
from relql.exceptions import IntrospectionError, PrimaryKeyError, SchemaError

from example_schemas import FOUR_TABLE_REFERENCES, FakeSchemaReader, column, four_tables, id_column


class TestBuild:
    """Test a successful build over the four-table layout."""

    @pytest.mark.asyncio
    async def test_build_result(self, four_table_reader):
        result = await RelationalSchemaTransformer(four_table_reader).build('shop')

        assert result.database_name == 'shop'
        assert result.table_names == ['a', 'b', 'c', 'd']
        assert len(result.document.definitions) == 20
        assert result.contexts[0].primary_key_field == 'id'

    @pytest.mark.asyncio
    async def test_reader_call_order(self, four_table_reader):
        """Reader calls are strictly sequential, one table at a time."""
        await RelationalSchemaTransformer(four_table_reader).build('shop')

        assert four_table_reader.calls == [
            ('begin', 'shop'),
            ('list_tables', 'shop'),
            ('describe_table', 'a'),
            ('get_referencing_tables', 'a'),
            ('describe_table', 'b'),
            ('get_referencing_tables', 'b'),
            ('describe_table', 'c'),
            ('get_referencing_tables', 'c'),
            ('describe_table', 'd'),
            ('get_referencing_tables', 'd'),
            ('end', None),
        ]

    @pytest.mark.asyncio
    async def test_schema_outputs(self, four_table_reader):
        result = await RelationalSchemaTransformer(four_table_reader).build('shop')

        sdl = result.schema_sdl()
        assert 'type a {' in sdl
        assert 'b: bConnection' in sdl
        assert result.graphql_schema().get_type('a') is not None

    @pytest.mark.asyncio
    async def test_resolvers_per_table(self, four_table_reader):
        result = await RelationalSchemaTransformer(four_table_reader).build('shop')

        resolvers = result.resolvers()
        assert list(resolvers) == ['a', 'b', 'c', 'd']
        assert sorted(resolvers['b']) == ['create', 'delete', 'get', 'list', 'update']

    @pytest.mark.asyncio
    async def test_repeated_builds_are_identical(self):
        first = await RelationalSchemaTransformer(
            FakeSchemaReader(four_tables(), references=FOUR_TABLE_REFERENCES)
        ).build('shop')
        second = await RelationalSchemaTransformer(
            FakeSchemaReader(four_tables(), references=FOUR_TABLE_REFERENCES)
        ).build('shop')

        assert first.schema_sdl() == second.schema_sdl()

    @pytest.mark.asyncio
    async def test_type_overrides(self):
        reader = FakeSchemaReader({'events': [id_column('UUID'), column('name', 'VARCHAR')]})
        result = await RelationalSchemaTransformer(reader, type_overrides={'UUID': 'ID'}).build('db')

        assert 'getevents(id: ID!): events' in result.schema_sdl()


class TestBuildFailures:
    """Test that failures abort the build and always release the reader."""

    @pytest.mark.asyncio
    async def test_begin_failure(self):
        reader = FakeSchemaReader(four_tables(), fail_on={'begin': 'shop'})

        with pytest.raises(IntrospectionError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        error = exc_info.value
        assert error.message == 'Failed to set database to shop'
        assert error.context['operation'] == 'begin'
        assert error.context['database'] == 'shop'
        assert error.context['error_type'] == 'RuntimeError'

    @pytest.mark.asyncio
    async def test_begin_failure_releases_reader(self):
        """A reader that fails part way through begin is still ended."""
        reader = FakeSchemaReader(four_tables(), fail_on={'begin': 'shop'})

        with pytest.raises(IntrospectionError):
            await RelationalSchemaTransformer(reader).build('shop')

        assert reader.calls == [('begin', 'shop'), ('end', None)]

    @pytest.mark.asyncio
    async def test_list_tables_failure_releases_reader(self):
        reader = FakeSchemaReader(four_tables(), fail_on={'list_tables': 'shop'})

        with pytest.raises(IntrospectionError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        assert exc_info.value.context['operation'] == 'list_tables'
        assert reader.calls[-1] == ('end', None)

    @pytest.mark.asyncio
    async def test_describe_failure_names_table(self):
        reader = FakeSchemaReader(four_tables(), fail_on={'describe_table': 'c'})

        with pytest.raises(IntrospectionError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        error = exc_info.value
        assert error.message == 'Failed to describe table c'
        assert error.context['table'] == 'c'
        assert 'c' in error.context['original_error']
        assert isinstance(error.__cause__, RuntimeError)
        # No later tables are read after the failure
        assert ('describe_table', 'd') not in reader.calls
        assert reader.calls[-1] == ('end', None)

    @pytest.mark.asyncio
    async def test_foreign_key_failure(self):
        reader = FakeSchemaReader(four_tables(), fail_on={'get_referencing_tables': 'a'})

        with pytest.raises(IntrospectionError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        assert exc_info.value.context['operation'] == 'get_referencing_tables'
        assert reader.calls[-1] == ('end', None)

    @pytest.mark.asyncio
    async def test_missing_primary_key_aborts(self):
        tables = {'users': [id_column()], 'logs': [column('message', 'TEXT')]}
        reader = FakeSchemaReader(tables)

        with pytest.raises(PrimaryKeyError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        assert exc_info.value.context['table'] == 'logs'
        assert reader.calls[-1] == ('end', None)

    @pytest.mark.asyncio
    async def test_empty_database(self):
        reader = FakeSchemaReader({})

        with pytest.raises(SchemaError) as exc_info:
            await RelationalSchemaTransformer(reader).build('empty')

        assert exc_info.value.context['database'] == 'empty'
        assert reader.calls == [('begin', 'empty'), ('list_tables', 'empty'), ('end', None)]

    @pytest.mark.asyncio
    async def test_invalid_document(self):
        reader = FakeSchemaReader({'Query': [id_column()]})

        with pytest.raises(SchemaError):
            await RelationalSchemaTransformer(reader).build('shop')

    @pytest.mark.asyncio
    async def test_validation_can_be_skipped(self):
        reader = FakeSchemaReader({'Query': [id_column()]})

        result = await RelationalSchemaTransformer(reader, validate=False).build('shop')
        assert result.table_names == ['Query']


class TestNonStrictBuild:
    """Test builds that keep tables without a single primary key."""

    @pytest.mark.asyncio
    async def test_keyless_table_kept(self):
        tables = {'users': [id_column()], 'logs': [column('message', 'TEXT')]}
        result = await RelationalSchemaTransformer(
            FakeSchemaReader(tables), strict_primary_keys=False
        ).build('shop')

        sdl = result.schema_sdl()
        assert 'listlogss(nextToken: String): logsConnection' in sdl
        assert 'getlogs' not in sdl
        assert 'deletelogs' not in sdl
        assert list(result.resolvers()['logs']) == ['list', 'create']


class TestCorrelationIds:
    """Errors raised by a build carry the correlation id its log lines use."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize('operation, argument, logged', [
        ('begin', 'shop', "Failed to open database 'shop'"),
        ('list_tables', 'shop', "Failed to list tables in 'shop'"),
        ('describe_table', 'b', "Failed to describe table 'b'"),
        ('get_referencing_tables', 'c', "Failed to read foreign keys of 'c'"),
    ])
    async def test_reader_failures(self, caplog, operation, argument, logged):
        reader = FakeSchemaReader(four_tables(), fail_on={operation: argument})

        with pytest.raises(IntrospectionError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        assert f"[{exc_info.value.correlation_id}] {logged}" in caplog.text

    @pytest.mark.asyncio
    async def test_validation_failure(self, caplog):
        reader = FakeSchemaReader({'Query': [id_column()]})

        with pytest.raises(SchemaError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        correlation_id = exc_info.value.correlation_id
        assert f"[{correlation_id}] Generated schema failed validation" in caplog.text

    @pytest.mark.asyncio
    async def test_primary_key_failure(self, caplog):
        caplog.set_level(logging.INFO, logger='relql')
        reader = FakeSchemaReader({'logs': [column('message', 'TEXT')]})

        with pytest.raises(PrimaryKeyError) as exc_info:
            await RelationalSchemaTransformer(reader).build('shop')

        assert f"[{exc_info.value.correlation_id}] Building schema for database 'shop'" in caplog.text
