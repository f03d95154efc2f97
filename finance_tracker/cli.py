# finance_tracker/cli.py
import logging
import os

import click
from dotenv import load_dotenv

from finance_tracker.config import DEFAULT_CONFIG, LOG_LEVEL_ENV, load_config, save_config
from finance_tracker.core.models import format_amount, to_amount
from finance_tracker.core.validation import (
    validate_amount,
    validate_date,
    validate_email,
    validate_month,
    validate_name,
    validate_password,
)
from finance_tracker.store import StoreIOError
from finance_tracker.trackers import SCHEMAS, get_tracker, monthly_summary
from finance_tracker.users import UserRepository

TRACKER_CHOICE = click.Choice(sorted(SCHEMAS))


def _check(validator):
    """Turn a validation function into a click parameter callback."""
    def callback(ctx, param, value):
        if value is None:
            return value
        result = validator(value)
        if not result.ok:
            raise click.BadParameter(result.reason)
        return value
    return callback


def _amount(ctx, param, value):
    result = validate_amount(value)
    if not result.ok:
        raise click.BadParameter(result.reason)
    return to_amount(value)


def _login(repo, email, password):
    user = repo.authenticate(email, password)
    if user is None:
        raise click.ClickException("Invalid email or password")
    return user


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINANCE_TRACKER_* settings'
)
@click.option(
    '--file', 'data_file',
    default=None,
    type=click.Path(dir_okay=False),
    help='Data file holding the [Transactions], [Income] and [Expense] sections'
)
@click.pass_context
def main(ctx, config_path, env_file, data_file):
    """
    Keep transactions, income and expenses in one sectioned text file,
    with monthly totals and per-user budgets.
    """
    if env_file:
        load_dotenv(env_file)
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        click.echo(f"Unknown log level {level_name!r}, using WARNING.", err=True)
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(config_path)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    if data_file:
        cfg['data_file'] = data_file
    ctx.obj = {'config': cfg, 'config_path': config_path}


@main.command()
@click.option('--force', is_flag=True, default=False, help='Overwrite an existing config file')
@click.pass_obj
def init(obj, force):
    """Write the default config to --config."""
    path = obj['config_path']
    if not path:
        raise click.UsageError("init needs --config")
    if os.path.exists(path) and not force:
        raise click.ClickException(f"{path} already exists (use --force)")
    save_config(DEFAULT_CONFIG, path)
    click.echo(f"Wrote default config to {path}.")


@main.command()
@click.argument('tracker', type=TRACKER_CHOICE)
@click.argument('date', callback=_check(validate_date))
@click.argument('category')
@click.argument('amount', callback=_amount)
@click.argument('description')
@click.pass_obj
def add(obj, tracker, date, category, amount, description):
    """Add an entry to TRACKER."""
    trk = get_tracker(tracker, obj['config'])
    try:
        trk.add(date, category, amount, description)
    except (ValueError, StoreIOError) as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{trk.section} entry added.")


@main.command()
@click.argument('tracker', type=TRACKER_CHOICE)
@click.argument('date')
@click.argument('category')
@click.argument('amount', callback=_amount)
@click.argument('description')
@click.pass_obj
def delete(obj, tracker, date, category, amount, description):
    """Delete the first TRACKER entry matching every field."""
    trk = get_tracker(tracker, obj['config'])
    try:
        deleted = trk.delete(date, category, amount, description)
    except (ValueError, StoreIOError) as exc:
        raise click.ClickException(str(exc))
    if not deleted:
        click.echo(f"{trk.section} entry not found.", err=True)
        raise SystemExit(1)
    click.echo(f"{trk.section} entry deleted.")


@main.command()
@click.argument('tracker', type=TRACKER_CHOICE)
@click.argument('month', callback=_check(validate_month))
@click.option('--category', default=None, help='Only count entries of this category (case-insensitive)')
@click.pass_obj
def total(obj, tracker, month, category):
    """Total of TRACKER entries for MONTH (yyyy-MM)."""
    trk = get_tracker(tracker, obj['config'])
    try:
        amount = trk.total_for_month(month, category)
    except StoreIOError as exc:
        raise click.ClickException(str(exc))
    click.echo(format_amount(amount))


@main.command(name='list')
@click.argument('tracker', type=TRACKER_CHOICE)
@click.pass_obj
def list_entries(obj, tracker):
    """Print every TRACKER entry in file order."""
    trk = get_tracker(tracker, obj['config'])
    click.echo(f"=== [{trk.section}] Records ===")
    try:
        for line in trk.lines():
            click.echo(line)
    except StoreIOError as exc:
        raise click.ClickException(str(exc))


@main.command()
@click.argument('month', callback=_check(validate_month))
@click.pass_obj
def summary(obj, month):
    """Income, expense and net balance for MONTH (yyyy-MM)."""
    try:
        result = monthly_summary(obj['config'], month)
    except StoreIOError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Summary for {month}")
    for key in ('income', 'expense', 'transactions', 'net'):
        click.echo(f"{key.capitalize():<14}{format_amount(result[key]):>12}")


@main.command()
@click.option('--name', prompt='Enter your name', callback=_check(validate_name))
@click.option('--email', prompt='Enter your email', callback=_check(validate_email))
@click.option('--password', prompt='Enter your password', hide_input=True,
              callback=_check(validate_password))
@click.pass_obj
def register(obj, name, email, password):
    """Register a new user."""
    repo = UserRepository(obj['config']['users_file'])
    try:
        user = repo.register(name, email, password)
    except (ValueError, StoreIOError) as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Registration successful! Your user id is {user.id}.")


@main.command()
@click.option('--email', prompt='Enter email')
@click.option('--password', prompt='Enter password', hide_input=True)
@click.pass_obj
def login(obj, email, password):
    """Check a user's credentials."""
    user = _login(UserRepository(obj['config']['users_file']), email, password)
    click.echo(f"Login successful! Welcome, {user.name}.")


@main.group()
def budget():
    """Per-user monthly budgets."""


@budget.command(name='set')
@click.option('--email', prompt='Enter email')
@click.option('--password', prompt='Enter password', hide_input=True)
@click.argument('category')
@click.argument('amount', callback=_amount)
@click.pass_obj
def budget_set(obj, email, password, category, amount):
    """Set the budget for CATEGORY to AMOUNT."""
    repo = UserRepository(obj['config']['users_file'])
    user = _login(repo, email, password)
    try:
        value = repo.set_budget(user.id, category, amount)
    except (ValueError, StoreIOError) as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Budget for {category} set to ${format_amount(value)}")


@budget.command(name='list')
@click.option('--email', prompt='Enter email')
@click.option('--password', prompt='Enter password', hide_input=True)
@click.option('--month', default=None, callback=_check(validate_month),
              help='Also show what was spent per category in this month (yyyy-MM)')
@click.pass_obj
def budget_list(obj, email, password, month):
    """Show the current budgets."""
    repo = UserRepository(obj['config']['users_file'])
    user = _login(repo, email, password)
    budgets = repo.budgets(user.id)
    if not budgets:
        click.echo("No budgets set yet.")
        return

    expense = get_tracker('expense', obj['config']) if month else None
    for category, amount in budgets.items():
        line = f"{category:<20}: ${format_amount(amount)}"
        if expense is not None:
            try:
                spent = expense.total_for_month(month, category)
            except StoreIOError as exc:
                raise click.ClickException(str(exc))
            line += f"  spent ${format_amount(spent)}, left ${format_amount(amount - spent)}"
        click.echo(line)
