from helpdesk.routes.main import bp as main_bp
from helpdesk.routes.auth import bp as auth_bp
from helpdesk.routes.licenses import bp as licenses_bp
from helpdesk.routes.admin import bp as admin_bp
from helpdesk.routes.settings import bp as settings_bp
from helpdesk.routes.users import bp as users_bp
from helpdesk.routes.cmdb import bp as cmdb_bp
from helpdesk.utils.responses import register_error_handlers


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(licenses_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(cmdb_bp)
    register_error_handlers(app)
