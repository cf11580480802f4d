import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from sqlalchemy import text
from apscheduler.schedulers.background import BackgroundScheduler

from .config import Config
from .extensions import db, login_manager, celery_app, migrate, cache, csrf
from .blueprints.auth import auth_bp
from .blueprints.api import api_bp
from .commands import init_db_command, create_admin_command

def keep_db_awake(app):
    """Ping the database so a serverless Postgres does not suspend."""
    try:
        with app.app_context():
            db.session.execute(text('SELECT 1'))
            app.logger.info("DB keep-awake (from scheduler).")
    except Exception as e:
        app.logger.error(f"Keep-awake scheduler error: {e}")

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)
    csrf.init_app(app)

    celery_app.conf.update(
        broker_url=app.config.get('CELERY_BROKER_URL'),
        result_backend=app.config.get('CELERY_RESULT_BACKEND'),
        broker_connection_retry_on_startup=app.config.get('CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP', True),
        worker_max_tasks_per_child=app.config.get('CELERY_WORKER_MAX_TASKS_PER_CHILD', 50),
        task_always_eager=app.config.get('CELERY_TASK_ALWAYS_EAGER', False),
    )
    # Tasks open an app context through this reference
    celery_app.flask_app = app

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)

    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)

    from .models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'status': 'error', 'message': 'Login required.'}), 401

    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/printflow.log', maxBytes=102400, backupCount=10)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)

    if os.environ.get('RENDER') and not app.testing:
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(lambda: keep_db_awake(app), 'interval', minutes=3)
        scheduler.start()
        app.logger.info("APScheduler started (Render environment).")

    return app
