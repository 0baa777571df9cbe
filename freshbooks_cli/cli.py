"""
FreshBooks CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from freshbooks_cli.core.builders import FilterBuilder, IncludesBuilder, PaginateBuilder, QueryBuilder, SortBuilder
from freshbooks_cli.core.errors import FreshBooksError, ValidationError
from freshbooks_cli.core.types import DataModel, ListResult
from freshbooks_cli.sdk import FreshBooksClient, ResourceAccessor

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_PER_PAGE = 20  # Default page size for human-readable output

# CLI name -> (client attribute, table columns)
RESOURCES: dict[str, tuple[str, list[str]]] = {
    "clients": ("clients", ["id", "organization", "first_name", "last_name", "email"]),
    "invoices": ("invoices", ["id", "invoice_number", "customer_id", "v3_status", "amount"]),
    "payments": ("payments", ["id", "invoice_id", "payment_date", "type", "amount"]),
    "taxes": ("taxes", ["id", "name", "amount", "number"]),
    "team": ("team_members", ["uuid", "first_name", "last_name", "email", "business_role_name"]),
}


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: FreshBooksError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def model_output(model: DataModel) -> dict[str, Any]:
    """Wire-format dict of a model for JSON output."""
    return model.to_dict()


def cell(model: DataModel, column: str) -> str:
    value = getattr(model, column, None)
    if value is None:
        return ""
    if isinstance(value, DataModel):
        # Money
        return " ".join(str(v) for v in value.to_dict().values())
    return str(value)


# =============================================================================
# Argument Helpers
# =============================================================================


def read_json_arg(value: str) -> dict[str, Any]:
    """Parse a JSON object argument, reading stdin for '-'."""
    raw = sys.stdin.read() if value == "-" else value
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def parse_search(values: list[str] | None) -> FilterBuilder | None:
    """Turn FIELD=VALUE arguments into a FilterBuilder."""
    if not values:
        return None
    filters = FilterBuilder()
    for item in values:
        field, sep, value = item.partition("=")
        if not sep or not field:
            raise ValidationError(f"Invalid search '{item}', expected FIELD=VALUE")
        filters = filters.equals(field, value)
    return filters


def list_builders(args: argparse.Namespace) -> list[QueryBuilder | None]:
    per_page = args.per_page
    if per_page is None and is_tty():
        per_page = HUMAN_PER_PAGE
    paginate = PaginateBuilder(args.page, per_page) if args.page or per_page else None
    sort = None
    if args.sort:
        sort = SortBuilder.descending(args.sort) if args.desc else SortBuilder.ascending(args.sort)
    includes = IncludesBuilder(args.include) if args.include else None
    return [parse_search(args.search), paginate, includes, sort]


def accessor(client: FreshBooksClient, args: argparse.Namespace) -> ResourceAccessor:
    attribute, _ = RESOURCES[args.resource]
    return getattr(client, attribute)


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_me(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Show the authenticated identity and its businesses."""
    try:
        identity = client.current_user()

        if is_tty():
            print(f"Identity: {identity.identity_id}")
            print(f"Name: {identity.first_name or ''} {identity.last_name or ''}".rstrip())
            print(f"Email: {identity.email or ''}")
            if identity.business_memberships:
                print("\nBusinesses:")
                table_output(
                    ["Business ID", "Account ID", "Name", "Role"],
                    [
                        [
                            str(m.business.id if m.business else ""),
                            (m.business.account_id if m.business else "") or "",
                            (m.business.name if m.business else "") or "",
                            m.role or "",
                        ]
                        for m in identity.business_memberships
                    ],
                    [12, 12, 40, 16],
                )
        else:
            success_output(identity.to_dict())
    except FreshBooksError as e:
        error_output(e)


def cmd_auth_url(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Print the OAuth authorization URL."""
    try:
        success_output({"url": client.get_auth_request_uri(args.scope)})
    except FreshBooksError as e:
        error_output(e)


def cmd_list(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """List resources."""
    try:
        result: ListResult = accessor(client, args).list(args.account_id, list_builders(args))

        if is_tty():
            if not result.items:
                print(f"No {args.resource} found.")
                return

            _, columns = RESOURCES[args.resource]
            table_output(
                [c.upper() for c in columns],
                [[cell(item, c) for c in columns] for item in result.items],
                [12] + [24] * (len(columns) - 1),
            )
            meta = result.meta
            print(f"\nPage {meta.page} of {meta.pages} ({meta.total} total)")
        else:
            success_output(
                {
                    "data": [model_output(item) for item in result.items],
                    "meta": result.meta.to_dict(),
                }
            )
    except FreshBooksError as e:
        error_output(e)


def cmd_get(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Get a resource by ID."""
    try:
        includes = IncludesBuilder(args.include) if args.include else None
        item = accessor(client, args).get(args.account_id, args.resource_id, includes)
        success_output(model_output(item))
    except FreshBooksError as e:
        error_output(e)


def cmd_create(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Create a resource."""
    try:
        data = read_json_arg(args.data)
        item = accessor(client, args).create(args.account_id, data)
        success_output(model_output(item))
    except FreshBooksError as e:
        error_output(e)


def cmd_update(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Update a resource."""
    try:
        data = read_json_arg(args.data)
        item = accessor(client, args).update(args.account_id, args.resource_id, data)
        success_output(model_output(item))
    except FreshBooksError as e:
        error_output(e)


def cmd_delete(client: FreshBooksClient, args: argparse.Namespace) -> None:
    """Delete a resource."""
    try:
        accessor(client, args).delete(args.account_id, args.resource_id)
        success_output({"deleted": True, "id": args.resource_id})
    except FreshBooksError as e:
        error_output(e)


# =============================================================================
# Argument Parser
# =============================================================================


def add_resource_parser(subparsers: argparse._SubParsersAction, name: str, help_text: str) -> None:
    """Add list/get/create/update/delete subcommands for one resource."""
    res = subparsers.add_parser(name, help=help_text)
    res.set_defaults(func=lambda _c, _a: res.print_help(), resource=name)
    res_sub = res.add_subparsers(dest="subcommand")

    r_list = res_sub.add_parser("list", help=f"List {name}")
    r_list.add_argument("account_id", help="Account or business ID")
    r_list.add_argument("--page", "-p", type=int, help="Page number")
    r_list.add_argument("--per-page", "-n", type=int, help="Results per page (max 100)")
    r_list.add_argument(
        "--search",
        "-s",
        action="append",
        metavar="FIELD=VALUE",
        help="Filter on a field (repeatable)",
    )
    r_list.add_argument("--include", "-i", action="append", help="Include related data (repeatable)")
    r_list.add_argument("--sort", help="Field to sort by")
    r_list.add_argument("--desc", action="store_true", help="Sort descending")
    r_list.set_defaults(func=cmd_list)

    r_get = res_sub.add_parser("get", help=f"Get one of {name}")
    r_get.add_argument("account_id", help="Account or business ID")
    r_get.add_argument("resource_id", help="Resource ID")
    r_get.add_argument("--include", "-i", action="append", help="Include related data (repeatable)")
    r_get.set_defaults(func=cmd_get)

    r_create = res_sub.add_parser("create", help=f"Create one of {name}")
    r_create.add_argument("account_id", help="Account or business ID")
    r_create.add_argument("--data", "-d", required=True, help="JSON object with fields (or - for stdin)")
    r_create.set_defaults(func=cmd_create)

    r_update = res_sub.add_parser("update", help=f"Update one of {name}")
    r_update.add_argument("account_id", help="Account or business ID")
    r_update.add_argument("resource_id", help="Resource ID")
    r_update.add_argument("--data", "-d", required=True, help="JSON object with fields (or - for stdin)")
    r_update.set_defaults(func=cmd_update)

    r_delete = res_sub.add_parser("delete", help=f"Delete one of {name}")
    r_delete.add_argument("account_id", help="Account or business ID")
    r_delete.add_argument("resource_id", help="Resource ID")
    r_delete.set_defaults(func=cmd_delete)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="freshbooks",
        description="FreshBooks API command-line interface",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command")

    # ========== Auth ==========
    me = subparsers.add_parser("me", help="Show the authenticated user")
    me.set_defaults(func=cmd_me)

    auth_url = subparsers.add_parser("auth-url", help="Print the OAuth authorization URL")
    auth_url.add_argument("--scope", action="append", help="OAuth scope to request (repeatable)")
    auth_url.set_defaults(func=cmd_auth_url)

    # ========== Resources ==========
    add_resource_parser(subparsers, "clients", "Manage clients")
    add_resource_parser(subparsers, "invoices", "Manage invoices")
    add_resource_parser(subparsers, "payments", "Manage payments")
    add_resource_parser(subparsers, "taxes", "Manage taxes")
    add_resource_parser(subparsers, "team", "Manage business team members")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    load_dotenv(override=False)

    # Create client
    try:
        client = FreshBooksClient()
    except FreshBooksError as e:
        error_output(e)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
