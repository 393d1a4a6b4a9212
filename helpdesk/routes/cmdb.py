from flask import Blueprint, jsonify
from flask_login import current_user

from helpdesk.services.modules import ModuleKey
from helpdesk.services.permissions import get_tenant_filter
from helpdesk.utils.decorators import module_required, permission_required

bp = Blueprint("cmdb", __name__, url_prefix="/api/cmdb")


@bp.route("", methods=['GET'])
@module_required(ModuleKey.CMDB)
@permission_required('canViewCMDB')
def index():
    # Configuration items are stored by the asset service; this endpoint
    # only reports the caller's scope.
    return jsonify({'items': [], 'customerId': get_tenant_filter(current_user)})
