"""Schema reader contract and DuckDB-backed schema discovery."""

import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any, Optional, Sequence
import logging

import duckdb

from .types import normalize_sql_type

logger = logging.getLogger(__name__)


class KeyRole(Enum):
    """Key tag reported for a column by DESCRIBE."""
    NONE = ""
    PRIMARY = "PRI"
    FOREIGN_INDEX = "MUL"

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> "KeyRole":
        """Map a DESCRIBE ``Key`` value; UNI and unknown tags count as NONE."""
        tag = (tag or "").strip().upper()
        for role in cls:
            if role.value == tag:
                return role
        return cls.NONE


@dataclass(frozen=True)
class ColumnDescription:
    """One column as reported by a schema reader."""
    field: str
    type: str
    nullable: bool
    key: KeyRole = KeyRole.NONE

    @property
    def is_primary_key(self) -> bool:
        return self.key is KeyRole.PRIMARY

    @classmethod
    def from_describe_row(cls, row: Dict[str, Any]) -> "ColumnDescription":
        """Build from a MySQL ``DESCRIBE`` row (Field/Type/Null/Key)."""
        return cls(
            field=row["Field"],
            type=row["Type"],
            nullable=str(row.get("Null", "YES")).upper() == "YES",
            key=KeyRole.from_tag(row.get("Key")),
        )


class SchemaReader(ABC):
    """Reads table metadata from a relational database.

    Each call is a suspend point; the transformer awaits them strictly in
    sequence and never shares a reader between builds.
    """

    @abstractmethod
    async def begin(self, database_name: str) -> None:
        """Select the database to introspect."""

    @abstractmethod
    async def list_tables(self, database_name: str) -> List[str]:
        """Return table names in output order."""

    @abstractmethod
    async def describe_table(self, table_name: str) -> List[ColumnDescription]:
        """Return the table's columns in declaration order."""

    @abstractmethod
    async def get_referencing_tables(self, table_name: str) -> List[str]:
        """Return tables holding a foreign key that points at ``table_name``."""

    @abstractmethod
    async def end(self) -> None:
        """Release anything acquired by ``begin``."""


# DuckDB spellings rewritten to the MySQL names the type mapper knows
DUCKDB_TYPE_ALIASES = {
    'BOOLEAN': 'BOOL',
    'LOGICAL': 'BOOL',
    'TIMESTAMP WITH TIME ZONE': 'TIMESTAMP',
    'TIMESTAMP WITHOUT TIME ZONE': 'TIMESTAMP',
    'TIMESTAMPTZ': 'TIMESTAMP',
    'TIMESTAMP_S': 'TIMESTAMP',
    'TIMESTAMP_MS': 'TIMESTAMP',
    'TIMESTAMP_NS': 'TIMESTAMP',
    'TIME WITH TIME ZONE': 'TIME',
    'TIMETZ': 'TIME',
    'HUGEINT': 'BIGINT',
    'UHUGEINT': 'BIGINT',
    'UBIGINT': 'BIGINT',
    'UINTEGER': 'INTEGER',
    'USMALLINT': 'SMALLINT',
    'UTINYINT': 'TINYINT',
}


def duckdb_to_mysql_type(duckdb_type: str) -> str:
    """Rename a DuckDB type to its MySQL spelling, keeping unknown names as-is."""
    return DUCKDB_TYPE_ALIASES.get(normalize_sql_type(duckdb_type), duckdb_type)


class DuckDBSchemaReader(SchemaReader):
    """Introspects a DuckDB database.

    The connection belongs to the caller; ``end`` only stops the worker
    thread used to run the blocking DuckDB calls.
    """

    def __init__(self, connection: duckdb.DuckDBPyConnection, schema: str = 'main'):
        self.connection = connection
        self.schema = schema
        self._executor: Optional[ThreadPoolExecutor] = None

    async def _run(self, func, *args):
        """Run a blocking DuckDB call on the reader's worker thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="relql-reader")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    def _fetchall(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        logger.debug(f"Introspection query: {' '.join(sql.split())}")
        if params is None:
            return self.connection.execute(sql).fetchall()
        return self.connection.execute(sql, list(params)).fetchall()

    def _use_database(self, database_name: str) -> None:
        current = self._fetchall("SELECT current_database()")[0][0]
        if not database_name or database_name == current:
            return
        quoted = database_name.replace('"', '""')
        self.connection.execute(f'USE "{quoted}"')

    async def begin(self, database_name: str) -> None:
        await self._run(self._use_database, database_name)

    async def list_tables(self, database_name: str) -> List[str]:
        rows = await self._run(
            self._fetchall,
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_catalog = current_database()
                AND table_schema = ?
                AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            [self.schema]
        )
        return [row[0] for row in rows]

    async def describe_table(self, table_name: str) -> List[ColumnDescription]:
        return await self._run(self._describe_table, table_name)

    def _describe_table(self, table_name: str) -> List[ColumnDescription]:
        escaped = table_name.replace("'", "''")
        # cid, name, type, notnull, dflt_value, pk
        rows = self._fetchall(f"PRAGMA table_info('{escaped}')")
        if not rows:
            raise LookupError(f"Table '{table_name}' does not exist")

        foreign_columns = set()
        for (column_names,) in self._fetchall(
            """
            SELECT constraint_column_names
            FROM duckdb_constraints()
            WHERE database_name = current_database()
                AND table_name = ?
                AND schema_name = ?
                AND constraint_type = 'FOREIGN KEY'
            """,
            [table_name, self.schema]
        ):
            foreign_columns.update(column_names or [])

        columns = []
        for _, name, column_type, not_null, _, is_pk in rows:
            if is_pk:
                key = KeyRole.PRIMARY
            elif name in foreign_columns:
                key = KeyRole.FOREIGN_INDEX
            else:
                key = KeyRole.NONE
            columns.append(ColumnDescription(
                field=name,
                type=duckdb_to_mysql_type(column_type),
                nullable=not not_null,
                key=key,
            ))
        return columns

    async def get_referencing_tables(self, table_name: str) -> List[str]:
        rows = await self._run(
            self._fetchall,
            """
            SELECT DISTINCT table_name
            FROM duckdb_constraints()
            WHERE database_name = current_database()
                AND constraint_type = 'FOREIGN KEY'
                AND schema_name = ?
                AND referenced_table = ?
            ORDER BY table_name
            """,
            [self.schema, table_name]
        )
        return [row[0] for row in rows]

    async def end(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
