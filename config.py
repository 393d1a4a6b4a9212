import os
from pydantic_settings import BaseSettings
from pydantic import model_validator, field_validator
from typing import Optional

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DEFAULT_DB_URI = f'sqlite:///{os.path.join(BASE_DIR, "helpdesk.db")}'


class Config(BaseSettings):
    # Security configuration
    SECRET_KEY: str

    # Database
    DATABASE_URL: str = DEFAULT_DB_URI
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    @model_validator(mode='after')
    def set_database_config(self) -> 'Config':
        """Set SQLALCHEMY_DATABASE_URI from DATABASE_URL and configure engine options"""
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL

        if 'mysql' in self.DATABASE_URL or 'mariadb' in self.DATABASE_URL:
            self.SQLALCHEMY_ENGINE_OPTIONS = {
                'pool_size': 10,
                'pool_recycle': 3600,
                'pool_pre_ping': True,
                'max_overflow': 20,
                'connect_args': {
                    'charset': 'utf8mb4',
                }
            }

        return self

    # Licensing
    # PEM encoded RSA public key used to verify license keys. When unset the
    # key embedded in helpdesk.services.licensing.keys is used.
    LICENSE_PUBLIC_KEY: Optional[str] = None
    LICENSE_PUBLIC_KEY_FILE: Optional[str] = None

    # Signing endpoints are for vendor installations only; customer
    # deployments never hold the private key.
    LICENSE_GENERATOR_ENABLED: bool = False
    LICENSE_ENFORCE_USER_LIMIT: bool = True
    LICENSE_EXPIRY_WARNING_DAYS: int = 30

    @model_validator(mode='after')
    def load_license_public_key(self) -> 'Config':
        """Read LICENSE_PUBLIC_KEY from LICENSE_PUBLIC_KEY_FILE when only the path is given"""
        if self.LICENSE_PUBLIC_KEY_FILE and not self.LICENSE_PUBLIC_KEY:
            with open(self.LICENSE_PUBLIC_KEY_FILE, 'r', encoding='utf-8') as f:
                self.LICENSE_PUBLIC_KEY = f.read()
        return self

    @field_validator('LICENSE_PUBLIC_KEY', mode='before')
    def unescape_public_key(cls, v):
        """Allow the PEM to be given on one line in .env with literal '\\n' separators."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if '\\n' in v:
                v = v.replace('\\n', '\n')
        return v

    # Default administrator created by manage_db.py / `flask seed-admin`
    DEFAULT_ADMIN_EMAIL: str = 'admin@helpdesk.local'
    DEFAULT_ADMIN_PASSWORD: str = 'admin'

    # Internationalization
    LANGUAGES: list = ['en']
    BABEL_DEFAULT_LOCALE: str = 'en'
    BABEL_DEFAULT_TIMEZONE: str = 'UTC'
    BABEL_TRANSLATION_DIRECTORIES: str = os.path.join(BASE_DIR, 'translations')

    # Caching configuration
    CACHE_TYPE: str = 'SimpleCache'  # in-memory cache suitable for single-server deployments
    CACHE_DEFAULT_TIMEOUT: int = 3600
    CACHE_SETTINGS_TIMEOUT: int = 300  # settings snapshot, invalidated on every write

    # Rate limiting. Development uses the in-memory store; production should
    # point RATELIMIT_STORAGE_URI at Redis.
    RATELIMIT_ENABLED: bool = True
    RATELIMIT_STORAGE_URI: str = 'memory://'

    # CSRF protection for session-authenticated API calls (X-CSRFToken header)
    WTF_CSRF_ENABLED: bool = True

    # Background jobs (license expiry checks)
    SCHEDULER_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = 'INFO'
    AUDIT_LOG_FILE: Optional[str] = None

    # Application environment: development | staging | production
    APP_ENV: str = os.getenv('FLASK_ENV', 'development')

    # Session and cookie security. A production deployment must serve the
    # cookie over HTTPS only; see enforce_cookie_security below.
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SECURE: bool = False
    SESSION_COOKIE_SAMESITE: str = 'Lax'
    PERMANENT_SESSION_LIFETIME: int = 3600  # 1 hour session timeout

    @model_validator(mode='after')
    def enforce_cookie_security(self) -> 'Config':
        """Promote SESSION_COOKIE_SECURE in production unless explicitly set."""
        if self.APP_ENV.lower() != 'production':
            self.SESSION_COOKIE_SECURE = False
        elif 'SESSION_COOKIE_SECURE' not in os.environ:
            self.SESSION_COOKIE_SECURE = True
        return self

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        case_sensitive = False
        extra = 'ignore'  # Ignore extra fields from .env
