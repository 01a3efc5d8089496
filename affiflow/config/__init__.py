import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


class Config:
    # Provide a safe development fallback to avoid 500s when SECRET_KEY is missing.
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-me'
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///affiflow.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_URL = os.getenv('APP_URL', 'http://localhost:5000')

    # Sessions are fixed-lifetime signed tokens: never slid forward on activity
    SESSION_LIFETIME_SECONDS = int(os.getenv('SESSION_LIFETIME_SECONDS', str(30 * 24 * 3600)))
    PERMANENT_SESSION_LIFETIME = SESSION_LIFETIME_SECONDS
    SESSION_REFRESH_EACH_REQUEST = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    # None lets the app decide: secure everywhere except debug and testing
    SESSION_COOKIE_SECURE = None if os.getenv('SESSION_COOKIE_SECURE') is None else _env_flag('SESSION_COOKIE_SECURE', 'true')
    BCRYPT_LOG_ROUNDS = int(os.getenv('BCRYPT_LOG_ROUNDS', '12'))

    # Client-held hint for the dashboard redirect
    LAST_WORKSPACE_COOKIE = os.getenv('LAST_WORKSPACE_COOKIE', 'affiflow_last_workspace')

    ANALYTICS_TRACK_VIEWS = _env_flag('ANALYTICS_TRACK_VIEWS', 'true')

    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '1000 per day;200 per hour')
    WTF_CSRF_TIME_LIMIT = None

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    # Development convenience: create tables on startup when no migrations were run
    AUTO_CREATE_TABLES = _env_flag('AUTO_CREATE_TABLES', 'false')
