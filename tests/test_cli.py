"""Tests for the command line interface."""

import duckdb
import pytest
from click.testing import CliRunner

from relql.cli import cli

from example_schemas import create_four_table_database


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def shop_db(tmp_path):
    """A four-table DuckDB file named shop.duckdb."""
    path = tmp_path / 'shop.duckdb'
    conn = duckdb.connect(str(path))
    create_four_table_database(conn)
    conn.close()
    return path


@pytest.fixture
def keyless_db(tmp_path):
    path = tmp_path / 'logs.duckdb'
    conn = duckdb.connect(str(path))
    conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR)")
    conn.execute("CREATE TABLE events (message VARCHAR, logged_at TIMESTAMP)")
    conn.close()
    return path


class TestSchemaCommand:
    """Test printing the generated schema."""

    def test_prints_sdl(self, runner, shop_db):
        result = runner.invoke(cli, ['schema', str(shop_db)])

        assert result.exit_code == 0, result.output
        assert 'type a {' in result.output
        assert 'b: bConnection' in result.output
        assert 'schema {' in result.output

    def test_strict_mode_rejects_keyless_table(self, runner, keyless_db):
        result = runner.invoke(cli, ['schema', str(keyless_db)])

        assert result.exit_code == 1
        assert 'PRIMARY_KEY_ERROR' in result.output
        assert 'events' in result.output

    def test_no_strict_keeps_keyless_table(self, runner, keyless_db):
        result = runner.invoke(cli, ['schema', str(keyless_db), '--no-strict'])

        assert result.exit_code == 0, result.output
        assert 'listeventss(nextToken: String): eventsConnection' in result.output
        assert 'getevents' not in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ['schema', str(tmp_path / 'nope.duckdb')])
        assert result.exit_code != 0


class TestBuildCommand:
    """Test writing build artifacts."""

    def test_writes_files(self, runner, shop_db, tmp_path):
        output = tmp_path / 'build'
        result = runner.invoke(cli, ['build', str(shop_db), '-o', str(output)])

        assert result.exit_code == 0, result.output
        assert 'Found 4 tables: a, b, c, d' in result.output
        assert 'Wrote 41 files' in result.output
        assert (output / 'schema.graphql').exists()
        assert (output / 'resolvers' / 'Mutation.createb.req.vtl').exists()


class TestTablesCommand:
    """Test listing tables."""

    def test_lists_tables(self, runner, shop_db):
        result = runner.invoke(cli, ['tables', str(shop_db)])

        assert result.exit_code == 0, result.output
        assert '- a (2 columns, key: id) <- b' in result.output
        assert '- b (3 columns, key: id)' in result.output

    def test_keyless_table(self, runner, keyless_db):
        result = runner.invoke(cli, ['tables', str(keyless_db)])

        assert result.exit_code == 0, result.output
        assert '- events (2 columns, key: none)' in result.output
