from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from celery import Celery
from flask_caching import Cache
from flask_wtf.csrf import CSRFProtect

db = SQLAlchemy()
migrate = Migrate()

# Staff sessions only; API callers get a JSON 401 instead of a redirect.
login_manager = LoginManager()
login_manager.session_protection = 'strong'

celery_app = Celery('printflow', broker='redis://redis:6379/0')
cache = Cache()
csrf = CSRFProtect()
