"""RelQL - GraphQL schemas and resolvers from relational databases."""

from .core import RelationalSchemaTransformer, TransformResult
from .emitter import FileEmitter

__version__ = "0.1.0"
__all__ = ["RelationalSchemaTransformer", "TransformResult", "FileEmitter"]
