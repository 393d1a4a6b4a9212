"""
Command line tools.

``flask license ...`` (or the standalone ``helpdesk-license`` script) is the
vendor's offline signing tool. Private keys are read from a file for the
duration of the command and never written anywhere else.
"""
import json
import os
from datetime import datetime, timedelta, timezone

import click
from flask import current_app, has_app_context
from flask.cli import ScriptInfo, with_appcontext

from helpdesk.exceptions import LicenseException
from helpdesk.services.licensing.keys import (
    LicenseData, generate_key_pair, generate_license_key, verify_license_key,
)


def _read_key(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _configured_public_key():
    """LICENSE_PUBLIC_KEY of the app when run as ``flask license``, None for the standalone script."""
    if has_app_context():
        return current_app.config.get('LICENSE_PUBLIC_KEY')
    info = click.get_current_context().find_object(ScriptInfo)
    if info is None:
        return None
    return info.load_app().config.get('LICENSE_PUBLIC_KEY')


@click.group('license')
def license_cli():
    """Issue and inspect license keys."""


@license_cli.command('keypair')
@click.option('--out-dir', type=click.Path(file_okay=False), default=None,
              help='Write private.pem and public.pem here instead of printing them.')
def keypair_command(out_dir):
    """Generate a new RSA-2048 signing key pair."""
    private_pem, public_pem = generate_key_pair()
    if out_dir is None:
        click.echo(private_pem)
        click.echo(public_pem)
        return

    os.makedirs(out_dir, exist_ok=True)
    private_path = os.path.join(out_dir, 'private.pem')
    public_path = os.path.join(out_dir, 'public.pem')
    with open(private_path, 'w', encoding='utf-8') as f:
        f.write(private_pem)
    os.chmod(private_path, 0o600)
    with open(public_path, 'w', encoding='utf-8') as f:
        f.write(public_pem)
    click.echo(f"Private key written to {private_path} (keep it offline)")
    click.echo(f"Public key written to {public_path}")


@license_cli.command('generate')
@click.option('--company', required=True, help='Licensed company name.')
@click.option('--email', required=True, help='Contact email.')
@click.option('--users', type=int, default=50, show_default=True, help='Maximum active users.')
@click.option('--days', type=int, default=365, show_default=True, help='Validity from today.')
@click.option('--expires', default=None, help='Explicit ISO-8601 expiration date (overrides --days).')
@click.option('--feature', 'features', multiple=True, help='Feature tag, repeatable.')
@click.option('--private-key', 'private_key_path', required=True,
              type=click.Path(exists=True, dir_okay=False), help='PEM private key file.')
def generate_command(company, email, users, days, expires, features, private_key_path):
    """Sign a license key."""
    if expires is None:
        expires = (datetime.now(timezone.utc) + timedelta(days=days)).date().isoformat()
    try:
        data = LicenseData(company_name=company, contact_email=email, expiration_date=expires,
                           max_users=users, features=frozenset(features))
        license_key = generate_license_key(data, _read_key(private_key_path))
    except LicenseException as e:
        raise click.ClickException(e.message)

    click.echo(f"Company:  {data.company_name}")
    click.echo(f"Email:    {data.contact_email}")
    click.echo(f"Users:    {data.max_users}")
    click.echo(f"Expires:  {data.expiration_date}")
    if data.features:
        click.echo(f"Features: {', '.join(sorted(data.features))}")
    click.echo('')
    click.echo(license_key)


@license_cli.command('verify')
@click.argument('license_key')
@click.option('--public-key', 'public_key_path', default=None,
              type=click.Path(exists=True, dir_okay=False),
              help='PEM public key file; defaults to the app key under flask, else the embedded key.')
def verify_command(license_key, public_key_path):
    """Verify a license key and print its claims."""
    public_key = _read_key(public_key_path) if public_key_path else _configured_public_key()
    result = verify_license_key(license_key, public_key)
    if not result.valid:
        click.echo(f"Invalid: {result.error}", err=True)
        raise SystemExit(1)
    click.echo(json.dumps(result.data.to_dict(), indent=2, ensure_ascii=False))


@click.command('seed-admin')
@with_appcontext
def seed_admin_command():
    """Create the default roles and administrator if missing."""
    from helpdesk.seeds import seed_defaults
    admin = seed_defaults()
    click.echo(f"Administrator: {admin.email}")


def register_commands(app):
    app.cli.add_command(license_cli)
    app.cli.add_command(seed_admin_command)


def main():
    license_cli()
