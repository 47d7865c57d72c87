"""
Clockbook - Flask application factory.

Record keeping for irrigation-inspection businesses: contacts, their
properties, the irrigation clocks at each property and each clock's
inspection history.
"""

import logging

import click
from flask import Flask

from config import Config
from db import Database
from errors import register_error_handlers
from logging_config import setup_logging
from routes import DB_EXTENSION, api_bp

logger = logging.getLogger(__name__)


def create_app(config_overrides=None, database=None):
    """Build the Flask app.

    Args:
        config_overrides: dict applied on top of config.Config.
        database: an existing Database; by default one is opened at
                  DATABASE_PATH.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    app.json.sort_keys = False

    setup_logging(app.config['LOG_DIR'], app.config['LOG_FORMAT'], app.config['LOG_LEVEL'])

    if database is None:
        database = Database(app.config['DATABASE_PATH'])
    if app.config['AUTO_MIGRATE']:
        database.migrate()
    app.extensions[DB_EXTENSION] = database

    app.register_blueprint(api_bp)
    register_error_handlers(app)

    @app.cli.command('migrate')
    @click.option('--revision', default='head', help='Target Alembic revision.')
    def migrate_command(revision):
        """Apply database migrations."""
        app.extensions[DB_EXTENSION].migrate(revision)
        click.echo(f"Database at {database.path} is at revision {database.schema_version()}")

    logger.info(f"Clockbook ready (database={database.path})")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config['DEBUG'], port=app.config['PORT'])
