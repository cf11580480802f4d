import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .constants import Role

@click.command('init-db')
@with_appcontext
def init_db_command():
    """Drop every table and create a fresh schema."""
    try:
        db.drop_all()
        db.create_all()
        click.echo('Initialized the database.')
    except Exception as e:
        click.echo(f'Error initializing database: {e}')

@click.command('create-admin')
@click.option('--email', required=True)
@click.option('--password', required=True)
@click.option('--name', default='Admin')
@with_appcontext
def create_admin_command(email, password, name):
    """Create an Admin staff account."""
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo(f'User already exists: {email}')
        return

    user = User(email=email, name=name, role=Role.ADMIN)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f'Created admin: {email}')
