from flask_wtf import FlaskForm
from wtforms import BooleanField, Field, IntegerField, PasswordField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional, ValidationError
from flask_babel import lazy_gettext as _

from helpdesk.services.licensing.policy import parse_expiration_date


class TagListField(Field):
    """Accepts a JSON list of strings or a comma-separated string."""

    def _value(self):
        return ', '.join(self.data or [])

    def process_formdata(self, valuelist):
        tags = []
        for value in valuelist:
            if value is None:
                continue
            if isinstance(value, str):
                tags.extend(t.strip() for t in value.split(','))
            else:
                tags.append(str(value).strip())
        self.data = sorted({t for t in tags if t})


class LoginForm(FlaskForm):
    email = StringField(_('Email'), validators=[DataRequired()])
    password = PasswordField(_('Password'), validators=[DataRequired()])


class LicenseActivationForm(FlaskForm):
    licenseKey = TextAreaField(_('License key'), validators=[DataRequired()])


class LicenseGeneratorForm(FlaskForm):
    companyName = StringField(_('Company name'), validators=[DataRequired(), Length(max=255)])
    contactEmail = StringField(_('Contact email'), validators=[DataRequired(), Email()])
    expirationDate = StringField(_('Expiration date'), validators=[DataRequired()])
    maxUsers = IntegerField(_('Maximum users'), default=50,
                            validators=[DataRequired(), NumberRange(min=1)])
    features = TagListField(_('Features'), default=list)
    privateKey = TextAreaField(_('Private key'), validators=[DataRequired()])

    def validate_expirationDate(self, field):
        try:
            parse_expiration_date(field.data)
        except ValueError:
            raise ValidationError(_('Please enter a valid ISO-8601 date (e.g. 2027-12-31).'))


class SettingForm(FlaskForm):
    key = StringField(_('Key'), validators=[DataRequired(), Length(max=100)])
    value = StringField(_('Value'), validators=[Optional()])


class ModuleToggleForm(FlaskForm):
    enabled = BooleanField(_('Enabled'))


class UserForm(FlaskForm):
    email = StringField(_('Email'), validators=[DataRequired(), Email(), Length(max=120)],
                        render_kw={'placeholder': _('user@example.com')})
    firstName = StringField(_('First name'), validators=[Optional(), Length(max=50)])
    lastName = StringField(_('Last name'), validators=[Optional(), Length(max=50)])
    password = PasswordField(_('Password'), validators=[DataRequired(), Length(min=8)])
    role = SelectField(_('Role'), choices=[('user', _('User')), ('agent', _('Agent')), ('admin', _('Administrator'))],
                       default='user')
    roleId = IntegerField(_('Role'), validators=[Optional()])
    customerId = StringField(_('Customer'), validators=[Optional(), Length(max=64)])


class RoleForm(FlaskForm):
    name = StringField(_('Name'), validators=[DataRequired(), Length(max=100)])
    description = TextAreaField(_('Description'), validators=[Optional()])
