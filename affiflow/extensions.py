"""Extension singletons, bound to the app in ``create_app``."""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect

db = SQLAlchemy()
migrate = Migrate(compare_type=True)

login_manager = LoginManager()
login_manager.login_message = "Please sign in to continue."
login_manager.login_message_category = "info"

csrf = CSRFProtect()

# Storage and defaults come from the RATELIMIT_* settings
limiter = Limiter(key_func=get_remote_address)

__all__ = [
    "db",
    "migrate",
    "login_manager",
    "csrf",
    "limiter",
]
