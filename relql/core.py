"""Core RelQL implementation."""

from dataclasses import dataclass, field
from typing import Dict, Optional, List
import logging
import uuid

from graphql import DocumentNode, GraphQLSchema

from .exceptions import RelQLError, SchemaError, wrap_reader_error
from .resolvers import ResolverTemplate, ResolverTemplateGenerator
from .schema import (
    SchemaAssembler,
    SchemaReader,
    TableContext,
    TableContextBuilder,
    build_graphql_schema,
    print_schema,
)

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    """Output of one schema build."""
    database_name: str
    document: DocumentNode
    contexts: List[TableContext]
    generator: ResolverTemplateGenerator = field(default_factory=ResolverTemplateGenerator, repr=False)

    @property
    def table_names(self) -> List[str]:
        return [context.table_name for context in self.contexts]

    def schema_sdl(self) -> str:
        """The schema document as SDL text."""
        return print_schema(self.document)

    def graphql_schema(self) -> GraphQLSchema:
        """The schema document built into a graphql-core schema."""
        return build_graphql_schema(self.document)

    def resolvers(self) -> Dict[str, Dict[str, ResolverTemplate]]:
        """Resolver templates per table, keyed by operation."""
        return {
            context.table_name: self.generator.generate(context)
            for context in self.contexts
        }


class RelationalSchemaTransformer:
    """Builds a GraphQL schema and resolvers from a relational database."""

    def __init__(self,
                 reader: SchemaReader,
                 strict_primary_keys: bool = True,
                 type_overrides: Optional[Dict[str, str]] = None,
                 validate: bool = True):
        """
        Initialize the transformer with a schema reader.

        Args:
            reader: Source of table and column metadata
            strict_primary_keys: Fail on tables without exactly one primary key.
                When False such tables are kept without get/update/delete
            type_overrides: SQL type to GraphQL scalar mappings checked before
                the built-in ones, e.g. ``{"UUID": "ID"}``
            validate: Build the document into a graphql-core schema before
                returning it
        """
        self.reader = reader
        self.context_builder = TableContextBuilder(
            strict_primary_keys=strict_primary_keys,
            type_overrides=type_overrides
        )
        self.assembler = SchemaAssembler()
        self.generator = ResolverTemplateGenerator()
        self.validate = validate

    async def build(self, database_name: str) -> TransformResult:
        """
        Introspect a database and build its schema document.

        Tables are read one at a time in the order the reader lists them.
        Any failure aborts the whole build.

        Raises:
            IntrospectionError: A reader call failed
            PrimaryKeyError: A table has no single primary key (strict mode)
            SchemaError: The database has no tables or the result is invalid
        """
        correlation_id = str(uuid.uuid4())
        logger.info(f"[{correlation_id}] Building schema for database '{database_name}'")

        try:
            await self.reader.begin(database_name)
        except Exception as e:
            logger.error(f"[{correlation_id}] Failed to open database '{database_name}': {e}")
            # begin may have acquired resources before failing
            await self.reader.end()
            raise wrap_reader_error(
                e, "begin", f"Failed to set database to {database_name}",
                correlation_id=correlation_id, database=database_name
            ) from e

        try:
            contexts = await self._read_tables(database_name, correlation_id)
        finally:
            await self.reader.end()

        if not contexts:
            raise SchemaError(
                f"Database '{database_name}' has no tables",
                context={"database": database_name},
                suggestions=["Create at least one table before generating a schema"],
                correlation_id=correlation_id
            )

        document = self.assembler.assemble(contexts)
        if self.validate:
            try:
                build_graphql_schema(document)
            except SchemaError as e:
                logger.error(
                    f"[{correlation_id}] Generated schema failed validation: "
                    f"{e.context.get('original_error')}"
                )
                e.correlation_id = correlation_id
                raise

        logger.info(
            f"[{correlation_id}] Built schema with {len(document.definitions)} definitions "
            f"for {len(contexts)} tables"
        )
        return TransformResult(
            database_name=database_name,
            document=document,
            contexts=contexts,
            generator=self.generator
        )

    async def _read_tables(self, database_name: str, correlation_id: str) -> List[TableContext]:
        try:
            table_names = await self.reader.list_tables(database_name)
        except Exception as e:
            logger.error(f"[{correlation_id}] Failed to list tables in '{database_name}': {e}")
            raise wrap_reader_error(
                e, "list_tables", f"Failed to list tables in {database_name}",
                correlation_id=correlation_id, database=database_name
            ) from e

        contexts = []
        for table_name in table_names:
            try:
                columns = await self.reader.describe_table(table_name)
            except Exception as e:
                logger.error(f"[{correlation_id}] Failed to describe table '{table_name}': {e}")
                raise wrap_reader_error(
                    e, "describe_table", f"Failed to describe table {table_name}",
                    correlation_id=correlation_id, table_name=table_name
                ) from e

            try:
                references = await self.reader.get_referencing_tables(table_name)
            except Exception as e:
                logger.error(f"[{correlation_id}] Failed to read foreign keys of '{table_name}': {e}")
                raise wrap_reader_error(
                    e, "get_referencing_tables", f"Failed to read foreign keys referencing {table_name}",
                    correlation_id=correlation_id, table_name=table_name
                ) from e

            logger.debug(
                f"[{correlation_id}] Table '{table_name}': {len(columns)} columns, "
                f"referenced by {list(references)}"
            )
            try:
                contexts.append(self.context_builder.build(table_name, columns, references))
            except RelQLError as e:
                e.correlation_id = correlation_id
                raise

        return contexts
