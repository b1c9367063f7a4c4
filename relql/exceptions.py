"""Error types raised while compiling a database schema to GraphQL."""

from typing import Optional, Dict, Any, List
import uuid


class RelQLError(Exception):
    """Root of the RelQL error hierarchy.

    Every error names a stable ``error_code``, the table/column/operation it
    concerns in ``context``, fixes to try in ``suggestions``, and the
    ``correlation_id`` of the build whose log lines describe it.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "RELQL_ERROR"
        self.context = context or {}
        self.suggestions = suggestions or []
        # Builds overwrite this with their own id before re-raising
        self.correlation_id = correlation_id or str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form, e.g. for a JSON build report."""
        return {
            "code": self.error_code,
            "message": self.message,
            "context": dict(self.context),
            "suggestions": list(self.suggestions),
            "correlation_id": self.correlation_id
        }

    def __str__(self) -> str:
        lines = [f"{self.error_code}: {self.message}"]
        lines.extend(f"  {key}: {value}" for key, value in self.context.items())
        if self.suggestions:
            lines.append("Try:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        lines.append(f"(build {self.correlation_id})")
        return "\n".join(lines)


class SchemaError(RelQLError):
    """Error while building GraphQL type definitions or the schema document."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        column_name: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if table_name:
            context["table"] = table_name
        if column_name:
            context["column"] = column_name

        error_code = kwargs.pop("error_code", "SCHEMA_ERROR")

        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            **kwargs
        )


class PrimaryKeyError(SchemaError):
    """A table has no primary key, or more than one primary-key column."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        key_columns: Optional[List[str]] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if key_columns is not None:
            context["primary_keys"] = list(key_columns)

        suggestions = kwargs.pop("suggestions", [])
        if not suggestions:
            suggestions = [
                "Declare exactly one PRIMARY KEY column on the table",
                "Composite primary keys are not supported",
                "Use --no-strict to skip get/update/delete operations for keyless tables"
            ]

        super().__init__(
            message=message,
            table_name=table_name,
            error_code="PRIMARY_KEY_ERROR",
            context=context,
            suggestions=suggestions,
            **kwargs
        )


class IntrospectionError(RelQLError):
    """A schema reader call failed (connection error, malformed result)."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table_name: Optional[str] = None,
        database: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation
        if table_name:
            context["table"] = table_name
        if database:
            context["database"] = database

        suggestions = kwargs.pop("suggestions", [])
        if not suggestions:
            suggestions = [
                "Check that the database is reachable and the name is spelled correctly",
                "Verify the user can read the table definitions",
                "Re-run the build; partial schemas are never produced"
            ]

        super().__init__(
            message=message,
            error_code="INTROSPECTION_ERROR",
            context=context,
            suggestions=suggestions,
            **kwargs
        )


class TemplateError(RelQLError):
    """Error while building or rendering a resolver mapping template."""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if table_name:
            context["table"] = table_name
        if operation:
            context["operation"] = operation

        super().__init__(
            message=message,
            error_code="TEMPLATE_ERROR",
            context=context,
            **kwargs
        )


def wrap_reader_error(original_error: Exception, operation: str, message: str,
                      correlation_id: Optional[str] = None, **context) -> IntrospectionError:
    """
    Transform a schema reader failure into an IntrospectionError.

    Args:
        original_error: The exception raised by the reader
        operation: The reader call that failed
        message: Human readable description of the failure
        correlation_id: ID of the build that made the call
        **context: table_name and/or database of the failing call

    Returns:
        IntrospectionError carrying the failing operation and the original cause
    """
    return IntrospectionError(
        message,
        operation=operation,
        table_name=context.get("table_name"),
        database=context.get("database"),
        context={
            "original_error": str(original_error),
            "error_type": type(original_error).__name__
        },
        correlation_id=correlation_id
    )
