"""GraphQL scalar mapping for SQL column types."""

from typing import Dict, Optional


# Scalars provided by the managed GraphQL API
AWS_SCALARS = ('AWSDate', 'AWSTime', 'AWSDateTime', 'AWSTimestamp', 'AWSJSON')

# Exact-match mapping from SQL base type to GraphQL scalar
SQL_TYPE_MAP = {
    'BOOL': 'Boolean',
    'JSON': 'AWSJSON',
    'TIME': 'AWSTime',
    'DATE': 'AWSDate',
    'DATETIME': 'AWSDateTime',
    'TIMESTAMP': 'AWSTimestamp',
}

INT_TYPES = frozenset([
    'INTEGER', 'INT', 'SMALLINT', 'TINYINT', 'MEDIUMINT', 'BIGINT', 'BIT',
])

FLOAT_TYPES = frozenset([
    'FLOAT', 'DOUBLE', 'REAL', 'REAL_AS_FLOAT', 'DOUBLE PRECISION',
    'DEC', 'DECIMAL', 'FIXED', 'NUMERIC',
])

DEFAULT_SCALAR = 'String'


def normalize_sql_type(sql_type: str) -> str:
    """Uppercase a column type and drop its length/precision qualifier."""
    base_type = sql_type.upper()
    if '(' in base_type:
        base_type = base_type.split('(')[0]
    return base_type.strip()


def sql_to_graphql_type(sql_type: str, overrides: Optional[Dict[str, str]] = None) -> str:
    """Convert a SQL column type to a GraphQL scalar name.

    Unknown types degrade to String; this never raises.
    """
    base_type = normalize_sql_type(sql_type)

    if overrides and base_type in overrides:
        return overrides[base_type]

    if base_type in SQL_TYPE_MAP:
        return SQL_TYPE_MAP[base_type]
    if base_type in INT_TYPES:
        return 'Int'
    if base_type in FLOAT_TYPES:
        return 'Float'

    return DEFAULT_SCALAR
