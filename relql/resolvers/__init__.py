"""Resolver mapping template generation."""

from .ast import print_template
from .generator import OPERATIONS, ResolverTemplate, ResolverTemplateGenerator
from .statements import StatementBuilder

__all__ = [
    "OPERATIONS",
    "ResolverTemplate",
    "ResolverTemplateGenerator",
    "StatementBuilder",
    "print_template",
]
