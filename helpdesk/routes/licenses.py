"""
License endpoints: public status and activation, admin listing.
"""
from flask import Blueprint, current_app, jsonify

from helpdesk import limiter
from helpdesk.forms import LicenseActivationForm
from helpdesk.services.licensing.manager import (
    activate_license, check_license, deactivate_license, get_active_license, list_licenses,
)
from helpdesk.utils.decorators import permission_required
from helpdesk.utils.messages import LICENSE_ACTIVATED, LICENSE_DEACTIVATED
from helpdesk.utils.responses import form_error_response

bp = Blueprint("licenses", __name__, url_prefix="/api/licenses")


@bp.route("/status")
def status():
    license_status = check_license()
    payload = license_status.to_dict()
    payload['active'] = get_active_license() is not None
    payload['warningDays'] = current_app.config.get('LICENSE_EXPIRY_WARNING_DAYS', 30)
    return jsonify(payload)


@bp.route("/activate", methods=['POST'])
@limiter.limit("10 per minute")
def activate():
    form = LicenseActivationForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    # InvalidLicenseKeyError / LicenseExpiredError become 400 JSON
    license_row = activate_license(form.licenseKey.data)
    return jsonify({
        'message': str(LICENSE_ACTIVATED),
        'license': license_row.to_dict(),
        'status': check_license().to_dict(),
    })


@bp.route("", methods=['GET'])
@permission_required('canManageUsers')
def index():
    return jsonify([license_row.to_dict() for license_row in list_licenses()])


@bp.route("/<int:license_id>/deactivate", methods=['POST'])
@permission_required('canManageUsers')
def deactivate(license_id):
    license_row = deactivate_license(license_id)
    return jsonify({'message': str(LICENSE_DEACTIVATED), 'license': license_row.to_dict()})
