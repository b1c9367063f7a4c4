"""Resolver mapping templates for the generated queries and mutations."""

from dataclasses import dataclass
from typing import Dict, List
import logging

from ..exceptions import TemplateError
from ..schema.assembler import (
    create_field_name,
    delete_field_name,
    get_field_name,
    list_field_name,
    update_field_name,
)
from ..schema.context import TableContext
from .ast import (
    Expression,
    comment,
    compound,
    for_each,
    iff,
    list_,
    null,
    obj,
    print_template,
    qref,
    raw,
    ref,
    set_,
    str_,
)
from .statements import StatementBuilder, placeholder, quote_identifier

logger = logging.getLogger(__name__)

# Relational data source request envelope version
RDS_VERSION = "2018-05-29"

OPERATIONS = ("get", "list", "create", "update", "delete")


@dataclass(frozen=True)
class ResolverTemplate:
    """Request and response mapping programs for one GraphQL field."""
    type_name: str
    field_name: str
    request: Expression
    response: Expression

    def render_request(self) -> str:
        return print_template(self.request)

    def render_response(self) -> str:
        return print_template(self.response)


def _rds_request(statements: List[Expression], variable_map: Expression) -> Expression:
    return obj({
        "version": str_(RDS_VERSION),
        "statements": list_(statements),
        "variableMap": variable_map,
    })


def _raise_data_source_error() -> Expression:
    return iff(ref("ctx.error"), ref("util.error($ctx.error.message, $ctx.error.type)"))


def _first_row(statement_index: int) -> Expression:
    return ref(f"utils.toJson($utils.rds.toJsonObject($ctx.result)[{statement_index}][0])")


class ResolverTemplateGenerator:
    """Generates get/list/create/update/delete resolvers for a table.

    Values only ever reach the database through named placeholders bound in
    the request's variableMap. Column names come from the table's type
    definitions, so generated column lists follow declaration order rather
    than the order of keys in the client's input.
    """

    def generate(self, context: TableContext) -> Dict[str, ResolverTemplate]:
        """Build every resolver the table supports, keyed by operation."""
        resolvers = {}
        for operation in OPERATIONS:
            if operation in ("get", "update", "delete") and not context.has_primary_key:
                logger.debug(f"Skipping {operation} resolver for keyless table '{context.table_name}'")
                continue
            resolvers[operation] = self.make_resolver(context, operation)
        return resolvers

    def make_resolver(self, context: TableContext, operation: str) -> ResolverTemplate:
        makers = {
            "get": self.make_get_resolver,
            "list": self.make_list_resolver,
            "create": self.make_create_resolver,
            "update": self.make_update_resolver,
            "delete": self.make_delete_resolver,
        }
        if operation not in makers:
            raise TemplateError(
                f"Unknown resolver operation '{operation}'",
                table_name=context.table_name,
                operation=operation,
                suggestions=[f"Use one of: {', '.join(OPERATIONS)}"]
            )
        if operation in ("get", "update", "delete") and not context.has_primary_key:
            raise TemplateError(
                f"Cannot generate a {operation} resolver for a table without a primary key",
                table_name=context.table_name,
                operation=operation
            )
        return makers[operation](context)

    @staticmethod
    def _statements(context: TableContext) -> StatementBuilder:
        return StatementBuilder(context.table_name, context.primary_key_field)

    @staticmethod
    def _key_variables(context: TableContext) -> Expression:
        key = context.primary_key_field
        return obj({placeholder(key): ref(f"util.toJson($ctx.args.{key})")})

    def make_get_resolver(self, context: TableContext) -> ResolverTemplate:
        sql = self._statements(context)
        request = compound([
            comment("[Start] Get Request"),
            _rds_request([str_(sql.select_by_key())], self._key_variables(context)),
        ])
        response = compound([
            _raise_data_source_error(),
            _first_row(0),
        ])
        return ResolverTemplate("Query", get_field_name(context.table_name), request, response)

    def make_list_resolver(self, context: TableContext) -> ResolverTemplate:
        # nextToken is accepted by the schema but pagination is not applied
        sql = self._statements(context)
        request = compound([
            comment("[Start] List Request"),
            _rds_request([str_(sql.select_all())], obj({})),
        ])
        response = compound([
            _raise_data_source_error(),
            obj({
                "items": ref("utils.toJson($utils.rds.toJsonObject($ctx.result)[0])"),
                "nextToken": null(),
            }),
        ])
        return ResolverTemplate("Query", list_field_name(context.table_name), request, response)

    def make_create_resolver(self, context: TableContext) -> ResolverTemplate:
        sql = self._statements(context)
        table = context.table_name
        columns = context.column_names

        request = [
            comment("[Start] Create Request"),
            set_(ref("input"), ref(f"ctx.args.create{table}Input")),
            set_(ref("cols"), list_([])),
            set_(ref("vals"), list_([])),
            set_(ref("variables"), obj({})),
            # Columns and values are appended together so both lists stay aligned
            for_each(ref("col"), list_([str_(c) for c in columns]), [
                iff(ref("input.containsKey($col)"), compound([
                    qref(f'$cols.add("{quote_identifier("$col")}")'),
                    qref('$vals.add(":$col")'),
                    qref('$variables.put(":$col", $input.get($col))'),
                ])),
            ]),
            set_(ref("colStr"), raw('$cols.toString().replace("[", "(").replace("]", ")")')),
            set_(ref("valStr"), raw('$vals.toString().replace("[", "(").replace("]", ")")')),
        ]

        statements = [str_(f"{sql.insert_prefix()} $colStr VALUES $valStr")]
        if context.has_primary_key:
            statements.append(str_(sql.select_by_key()))
            response = compound([_raise_data_source_error(), _first_row(1)])
        else:
            response = compound([_raise_data_source_error(), ref(f"util.toJson($ctx.args.create{table}Input)")])

        request.append(_rds_request(statements, ref("util.toJson($variables)")))
        return ResolverTemplate("Mutation", create_field_name(table), compound(request), response)

    def make_update_resolver(self, context: TableContext) -> ResolverTemplate:
        sql = self._statements(context)
        table = context.table_name
        key = context.primary_key_field
        columns = [c for c in context.column_names if c != key]

        request = compound([
            comment("[Start] Update Request"),
            set_(ref("input"), ref(f"ctx.args.update{table}Input")),
            set_(ref("assignments"), list_([])),
            set_(ref("variables"), obj({})),
            for_each(ref("col"), list_([str_(c) for c in columns]), [
                iff(ref("input.containsKey($col)"), compound([
                    qref(f'$assignments.add("{StatementBuilder.assignment("$col")}")'),
                    qref('$variables.put(":$col", $input.get($col))'),
                ])),
            ]),
            iff(ref("assignments.isEmpty()"),
                ref(f'util.error("No fields to update on {table}", "ValidationError")')),
            qref(f'$variables.put("{placeholder(key)}", $input.{key})'),
            set_(ref("assignmentList"), raw('$assignments.toString().replace("[", "").replace("]", "")')),
            _rds_request(
                [
                    str_(f"{sql.update_prefix()} $assignmentList {sql.key_clause()}"),
                    str_(sql.select_by_key()),
                ],
                ref("util.toJson($variables)")
            ),
        ])
        response = compound([_raise_data_source_error(), _first_row(1)])
        return ResolverTemplate("Mutation", update_field_name(table), request, response)

    def make_delete_resolver(self, context: TableContext) -> ResolverTemplate:
        # The data source does not echo deleted rows, so snapshot first
        sql = self._statements(context)
        request = compound([
            comment("[Start] Delete Request"),
            _rds_request(
                [str_(sql.select_by_key()), str_(sql.delete_by_key())],
                self._key_variables(context)
            ),
        ])
        response = compound([_raise_data_source_error(), _first_row(0)])
        return ResolverTemplate("Mutation", delete_field_name(context.table_name), request, response)

