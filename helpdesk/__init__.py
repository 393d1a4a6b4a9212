import logging

from flask import Flask
from config import Config
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_babel import Babel
from flask_wtf.csrf import CSRFProtect
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask import current_app, has_request_context, request, jsonify

__version__ = '1.4.0'

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
babel = Babel()
csrf = CSRFProtect()
cache = Cache()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class=Config, **overrides):
    """Application factory.

    ``overrides`` are applied on top of the settings object before any
    extension is initialised, so tests can swap the database or keys.
    """
    app = Flask(__name__)
    app.config.from_object(config_class())
    app.config.update(overrides)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)

    def get_locale():
        if not has_request_context():
            return None
        lang = request.cookies.get("language")
        if lang and lang in app.config["LANGUAGES"]:
            current_app.logger.debug(
                f"Locale selector: found language in cookie: {lang}")
            return lang
        return request.accept_languages.best_match(app.config["LANGUAGES"])

    babel.init_app(app, locale_selector=get_locale)

    from helpdesk.routes import register_blueprints
    register_blueprints(app)

    from helpdesk.cli import register_commands
    register_commands(app)

    from helpdesk import models  # noqa: F401

    if app.config.get('SCHEDULER_ENABLED') and not app.config.get('TESTING'):
        from helpdesk.utils.scheduler import init_scheduler
        init_scheduler(app)

    return app


def configure_logging(app):
    """Set the application log level and attach the JSON audit handler."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger('helpdesk').setLevel(level)

    from helpdesk.utils.audit_log import configure_audit_logger
    configure_audit_logger(app.config.get('AUDIT_LOG_FILE'))


@login_manager.user_loader
def load_user(user_id):
    from helpdesk.models import User
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    from helpdesk.utils.messages import AUTH_LOGIN_REQUIRED
    return jsonify({'message': str(AUTH_LOGIN_REQUIRED)}), 401
