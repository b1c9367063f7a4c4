"""SQL statement text for generated resolvers, built with sqlglot."""

from typing import Optional

from sqlglot import exp

# Statements target the MySQL dialect; backtick quoting keeps the text
# JSON-safe inside the request envelope.
DIALECT = "mysql"


def quote_identifier(name: str) -> str:
    """Quote a table or column name for the target dialect."""
    return exp.to_identifier(name, quoted=True).sql(dialect=DIALECT)


def placeholder(name: str) -> str:
    """Named parameter marker bound through the request's variableMap."""
    return f":{name}"


class StatementBuilder:
    """Builds the fixed SQL statements of one table's resolvers."""

    def __init__(self, table_name: str, primary_key: Optional[str] = None):
        self.table_name = table_name
        self.primary_key = primary_key

    @property
    def table(self) -> str:
        return quote_identifier(self.table_name)

    def _table_expression(self) -> exp.Table:
        return exp.Table(this=exp.to_identifier(self.table_name, quoted=True))

    def _key_condition(self) -> exp.EQ:
        if self.primary_key is None:
            raise ValueError(f"Table '{self.table_name}' has no primary key")
        return exp.EQ(
            this=exp.column(self.primary_key, quoted=True),
            expression=exp.Placeholder(this=self.primary_key),
        )

    def _render(self, expression: exp.Expression) -> str:
        return expression.sql(dialect=DIALECT)

    def select_all(self) -> str:
        """``SELECT * FROM <table>``"""
        return self._render(exp.select("*").from_(self._table_expression()))

    def select_by_key(self) -> str:
        """``SELECT * FROM <table> WHERE <pk> = :<pk>``"""
        return self._render(
            exp.select("*").from_(self._table_expression()).where(self._key_condition())
        )

    def delete_by_key(self) -> str:
        """``DELETE FROM <table> WHERE <pk> = :<pk>``"""
        return self._render(
            exp.Delete(this=self._table_expression(), where=exp.Where(this=self._key_condition()))
        )

    def key_clause(self) -> str:
        """``WHERE <pk> = :<pk>`` for statements finished at request time."""
        return "WHERE " + self._render(self._key_condition())

    def insert_prefix(self) -> str:
        """``INSERT INTO <table>``; column and value lists are appended per request."""
        return f"INSERT INTO {self.table}"

    def update_prefix(self) -> str:
        """``UPDATE <table> SET``; assignments are appended per request."""
        return f"UPDATE {self.table} SET"

    @staticmethod
    def assignment(column: str) -> str:
        return f"{quote_identifier(column)} = {placeholder(column)}"
