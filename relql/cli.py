"""CLI interface for RelQL."""

import asyncio
import logging
from pathlib import Path

import click
import duckdb

from .core import RelationalSchemaTransformer, TransformResult
from .emitter import FileEmitter
from .exceptions import RelQLError
from .schema import DuckDBSchemaReader


@click.group()
def cli():
    """RelQL - GraphQL schemas and resolvers from relational databases."""
    pass


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _report_error(e: RelQLError, verbose: bool) -> None:
    click.echo(f"\n❌ {e.error_code}: {e.message}", err=True)
    if e.context:
        click.echo(f"📍 Context: {e.context}", err=True)
    if e.suggestions:
        click.echo("\n💡 Suggestions:", err=True)
        for suggestion in e.suggestions:
            click.echo(f"   • {suggestion}", err=True)
    if verbose:
        click.echo(f"\n🔍 Correlation ID: {e.correlation_id}", err=True)


def _transform(database: str, strict: bool, verbose: bool) -> TransformResult:
    """Open a DuckDB file and run a full build, aborting the command on failure."""
    try:
        conn = duckdb.connect(database, read_only=True)
    except duckdb.Error as e:
        click.echo(f"❌ Could not open {database}: {e}", err=True)
        raise click.Abort()

    try:
        transformer = RelationalSchemaTransformer(
            DuckDBSchemaReader(conn),
            strict_primary_keys=strict
        )
        return asyncio.run(transformer.build(Path(database).stem))
    except RelQLError as e:
        _report_error(e, verbose)
        raise click.Abort()
    finally:
        conn.close()


@cli.command()
@click.argument('database', type=click.Path(exists=True, dir_okay=False))
@click.option('--strict/--no-strict', default=True,
              help='Fail on tables without exactly one primary key')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging and error output')
def schema(database: str, strict: bool, verbose: bool):
    """Print the GraphQL schema generated for a DuckDB database."""
    _setup_logging(verbose)
    result = _transform(database, strict, verbose)
    click.echo(result.schema_sdl())


@cli.command()
@click.argument('database', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='build', type=click.Path(file_okay=False),
              help='Directory for schema.graphql and resolver templates')
@click.option('--strict/--no-strict', default=True,
              help='Fail on tables without exactly one primary key')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging and error output')
def build(database: str, output: str, strict: bool, verbose: bool):
    """Write the schema and resolver templates for a DuckDB database."""
    _setup_logging(verbose)
    result = _transform(database, strict, verbose)

    click.echo(f"📊 Found {len(result.contexts)} tables: {', '.join(result.table_names)}")
    written = FileEmitter(output).emit(result)
    click.echo(f"✅ Wrote {len(written)} files to {output}")


@cli.command()
@click.argument('database', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema-name', default='main', help='Schema to list tables from')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
def tables(database: str, schema_name: str, verbose: bool):
    """List tables and their column counts."""
    _setup_logging(verbose)

    async def _list(reader: DuckDBSchemaReader):
        await reader.begin(Path(database).stem)
        try:
            rows = []
            for table in await reader.list_tables(Path(database).stem):
                columns = await reader.describe_table(table)
                referencing = await reader.get_referencing_tables(table)
                rows.append((table, columns, referencing))
            return rows
        finally:
            await reader.end()

    try:
        conn = duckdb.connect(database, read_only=True)
        try:
            rows = asyncio.run(_list(DuckDBSchemaReader(conn, schema=schema_name)))
        finally:
            conn.close()
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise click.Abort()

    click.echo("📊 Tables:")
    for table, columns, referencing in rows:
        keys = [c.field for c in columns if c.is_primary_key]
        line = f"  - {table} ({len(columns)} columns, key: {', '.join(keys) or 'none'})"
        if referencing:
            line += f" <- {', '.join(referencing)}"
        click.echo(line)


if __name__ == '__main__':
    cli()
