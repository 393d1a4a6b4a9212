"""
Vendor tooling exposed over the API.

Only enabled on the vendor's own installation (LICENSE_GENERATOR_ENABLED).
The private key arrives with the request and is used for that one signature.
"""
from datetime import datetime, timezone
from functools import wraps

from flask import Blueprint, current_app, jsonify

from helpdesk.forms import LicenseGeneratorForm
from helpdesk.services.licensing.keys import LicenseData, generate_key_pair, generate_license_key
from helpdesk.utils.audit_log import log_action
from helpdesk.utils.decorators import permission_required
from helpdesk.utils.messages import LICENSE_GENERATOR_DISABLED
from helpdesk.utils.responses import form_error_response, json_error

bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def generator_enabled(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_app.config.get('LICENSE_GENERATOR_ENABLED', False):
            return json_error(LICENSE_GENERATOR_DISABLED, 404, code='GENERATOR_DISABLED')
        return f(*args, **kwargs)
    return decorated_function


@bp.route('/generate-license', methods=['POST'])
@permission_required('canManageUsers')
@generator_enabled
def generate_license():
    form = LicenseGeneratorForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    # LicenseDataError / LicenseSigningError become 400 JSON
    data = LicenseData(
        company_name=form.companyName.data.strip(),
        contact_email=form.contactEmail.data.strip(),
        expiration_date=form.expirationDate.data.strip(),
        max_users=form.maxUsers.data,
        features=frozenset(form.features.data or []),
    )
    license_key = generate_license_key(data, form.privateKey.data)

    log_action('LICENSE_GENERATED', f'License generated for {data.company_name}',
               additional_info={'max_users': data.max_users, 'expires': data.expiration_date})
    return jsonify({'licenseKey': license_key, 'data': data.to_dict()})


@bp.route('/generate-keypair', methods=['POST'])
@permission_required('canManageUsers')
@generator_enabled
def generate_keypair():
    private_pem, public_pem = generate_key_pair()
    log_action('LICENSE_KEYPAIR_GENERATED', 'New license signing key pair generated')
    return jsonify({
        'privateKey': private_pem,
        'publicKey': public_pem,
        'generatedAt': datetime.now(timezone.utc).isoformat(),
    })
