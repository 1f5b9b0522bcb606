# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# Commands Legend:
# - flask system init-db
#   Create all tables (idempotent).
# - flask system seed
#   Load demo accounts, categories, suppliers, products and transactions (safe to rerun).
# - flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask users list
#   List all users with role and active status.
# - flask users create --username kasir2 --full-name "Kasir Dua" --role KASIR
#   Create a user (prompts for the password).
# - flask users deactivate kasir2
#   Deactivate an account; its sessions stop working on the next request.
# - flask perms list
#   List every capability grouped by category.
# - flask perms matrix
#   Print which roles can open which modules.
# - flask perms check KASIR inventory
#   Check whether a role can open a module.

import click
from flask.cli import with_appcontext

from .constants import Role
from .errors import KoperasiError
from .extensions import db
from .models import User
from .permissions import (
    Module,
    can_access_module,
    capabilities_by_category,
    describe_capability,
    get_role_display_name,
    get_role_permissions,
)
from .services import auth_service
from .services.seed_service import DEFAULT_PASSWORD, seed_database


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('seed')
@click.option('--password', default=DEFAULT_PASSWORD, show_default=True, help='Password for seeded accounts')
@with_appcontext
def seed(password):
    """Seed the demo dataset. Records that already exist are skipped."""
    db.create_all()
    created = seed_database(password=password)
    for kind, count in created.items():
        click.echo(f"   {kind}: {count} created")
    click.echo("PASS Seed completed")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("CREATE Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users_cli():
    users = db.session.query(User).order_by(User.username).all()
    if not users:
        click.echo("No users found. Run 'flask system seed' first.")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<16} {user.role:<12} {status:<8} {user.full_name}")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--full-name', prompt=True, help='Display name')
@click.option('--email', default=None, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(Role.ALL)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, full_name, email, password, role):
    """Create a new user."""
    try:
        user = auth_service.create_user(
            username=username,
            password=password,
            full_name=full_name,
            email=email,
            role=role,
        )
    except KoperasiError as e:
        click.echo(f"FAIL Failed to create user: {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Created user: {user.username} ({get_role_display_name(user.role)})")


@users_group.command('deactivate')
@click.argument('username')
@with_appcontext
def deactivate_user_cli(username):
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        click.echo(f"FAIL User '{username}' not found")
        raise SystemExit(1)
    auth_service.set_active(user.id, False, actor=None)
    click.echo(f"PASS Deactivated user: {username}")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
def perms_list():
    """List capabilities by category."""
    for category, codes in capabilities_by_category().items():
        click.echo(category)
        for code in codes:
            info = describe_capability(code)
            click.echo(f"   {code:<18} {info['description']}")


@perms_group.command('matrix')
def perms_matrix():
    """Print the role x module access matrix."""
    width = max(len(m) for m in Module.ALL) + 2
    click.echo("ROLE".ljust(14) + "".join(m.ljust(width) for m in Module.ALL))
    for role in Role.ALL:
        cells = "".join(("yes" if can_access_module(role, m) else "-").ljust(width) for m in Module.ALL)
        click.echo(role.ljust(14) + cells)


@perms_group.command('check')
@click.argument('role')
@click.argument('module')
def perms_check(role, module):
    """Check whether ROLE can open MODULE."""
    role = role.upper()
    if role not in Role.ALL:
        click.echo(f"FAIL Unknown role '{role}'. Choose from: {', '.join(Role.ALL)}")
        raise SystemExit(1)
    allowed = can_access_module(role, module)
    click.echo(f"{'PASS' if allowed else 'DENY'} {role} -> {module}")
    click.echo(f"     Capabilities: {', '.join(sorted(get_role_permissions(role))) or '(none)'}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
