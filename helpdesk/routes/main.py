from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from helpdesk import __version__
from helpdesk.models import License, Role, User
from helpdesk.services.licensing.manager import check_license
from helpdesk.services.modules import get_enabled_modules
from helpdesk.services.navigation import build_navigation
from helpdesk.services.settings_store import load_settings_map
from helpdesk.utils.decorators import get_permission_checker, page_permission_required

bp = Blueprint("main", __name__)


@bp.route("/")
def home():
    return jsonify({'name': 'ITSM Helpdesk', 'version': __version__})


@bp.route("/admin/")
@page_permission_required('canManageUsers', 'main.home')
def admin_overview():
    """Admin landing data: license state, enabled modules and record counts."""
    settings = load_settings_map()
    return jsonify({
        'license': check_license().to_dict(),
        'modules': sorted(m.value for m in get_enabled_modules(settings)),
        'counts': {
            'users': User.query.count(),
            'roles': Role.query.count(),
            'licenses': License.query.count(),
        },
        'generatorEnabled': current_app.config.get('LICENSE_GENERATOR_ENABLED', False),
    })


@bp.route("/api/navigation")
@login_required
def navigation():
    return jsonify(build_navigation(get_permission_checker(), load_settings_map()))
