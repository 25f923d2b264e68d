"""Chart of accounts commands."""

import click
from ledgercore.cli.account_resolution import resolve_account_or_exit
from ledgercore.cli.error_handling import handle_domain_error
from ledgercore.domain.account import AccountService
from ledgercore.domain.entities import AccountTreeNode, AccountType
from ledgercore.domain.errors import DomainError

ACCOUNT_TYPES = [t.value for t in AccountType]


def print_account_tree(nodes: tuple[AccountTreeNode, ...]) -> None:
    """Print account tree recursively."""
    for node in nodes:
        acc = node.account
        prefix = "  " * node.level
        label = f"{prefix}{acc.code} {acc.name}"
        flags = "" if acc.is_postable else " [header]"
        if not acc.is_active:
            flags += " [inactive]"
        click.echo(f"{label:<50s} {acc.account_type.value:<10s}{flags}")
        if node.children:
            print_account_tree(node.children)


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), required=True, help="Account type")
@click.option("--parent", help="Parent header account code or ID")
@click.option("--header", is_flag=True, help="Create a non-postable header account")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, parent: str | None, header: bool, description: str | None):
    """Create a new account.

    Examples:
        ledgercore account create 1000 "Cash" --type asset
        ledgercore account create 1 "Assets" --type asset --header
        ledgercore account create 1010 "Petty Cash" --type asset --parent 1
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent).id

    try:
        account_id = service.create_account(
            code=code,
            name=name,
            account_type=AccountType(account_type),
            parent_id=parent_id,
            is_postable=not header,
            description=description,
        )
        click.echo(f"Created account {code} '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="Filter by account type")
@click.option("--include-inactive", is_flag=True, help="Include deactivated accounts")
@click.option("--search", help="Match code or name")
@click.pass_context
def list_accounts(ctx, account_type: str | None, include_inactive: bool, search: str | None):
    """List accounts ordered by code."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(
        account_type=AccountType(account_type) if account_type else None,
        is_active=None if include_inactive else True,
        search=search,
    )
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Code':<10s} {'Name':<30s} {'Type':<10s} {'Balance':>15s}")
    click.echo("-" * 70)
    for acc in accounts:
        balance = f"{acc.current_balance:,.2f}" if acc.is_postable else ""
        suffix = "" if acc.is_active else " (inactive)"
        click.echo(f"{acc.code:<10s} {acc.name[:30]:<30s} {acc.account_type.value:<10s} {balance:>15s}{suffix}")


@account_group.command("tree")
@click.pass_context
def account_tree(ctx):
    """Show the chart of accounts as a tree."""
    db = ctx.obj["db"]
    service = AccountService(db)

    tree = service.get_account_tree()
    if not tree:
        click.echo("No accounts found.")
        return
    print_account_tree(tree)


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show account details.

    ACCOUNT can be an account code or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    acc = resolve_account_or_exit(ctx, service, account)

    parent = service.get_account(acc.parent_id) if acc.parent_id is not None else None
    click.echo(f"Account {acc.code} - {acc.name} (ID: {acc.id})")
    click.echo(f"  Type: {acc.account_type.value} (normal balance: {acc.normal_balance.value})")
    click.echo(f"  Parent: {f'{parent.code} {parent.name}' if parent else '-'}")
    click.echo(f"  Postable: {'yes' if acc.is_postable else 'no (header)'}")
    click.echo(f"  Active: {'yes' if acc.is_active else 'no'}")
    click.echo(f"  Balance: {acc.current_balance:,.2f}")
    if acc.description:
        click.echo(f"  Description: {acc.description}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--description", help="New description")
@click.option("--parent", help="New parent header account code or ID")
@click.option("--top-level", is_flag=True, help="Remove the account from its parent")
@click.option("--postable/--header", default=None, help="Allow or disallow journal lines")
@click.option("--activate/--deactivate", default=None, help="Reactivate or deactivate the account")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    description: str | None,
    parent: str | None,
    top_level: bool,
    postable: bool | None,
    activate: bool | None,
) -> None:
    """Update an account.

    Updates only the fields that are provided. Deactivating an account blocks
    new lines but keeps its history in reports.

    Examples:
        ledgercore account update 1000 --name "Cash on Hand"
        ledgercore account update 1010 --deactivate
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    acc = resolve_account_or_exit(ctx, service, account)

    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent).id

    try:
        service.update_account(
            account_id=acc.id,
            name=name,
            description=description,
            parent_id=parent_id,
            clear_parent=top_level,
            is_postable=postable,
            is_active=activate,
        )
        click.echo(f"Updated account {acc.code}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account code or ID. Only accounts without journal lines
    or child accounts can be deleted; deactivate the others instead.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    acc = resolve_account_or_exit(ctx, service, account)

    if not yes and not click.confirm(f"Are you sure you want to delete account {acc.code} '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(acc.id)
        click.echo(f"Deleted account {acc.code} '{acc.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
