# core/forms.py
"""
Form definitions and validation messages

CSRF is enforced globally by CSRFProtect, so the per-form token is switched
off here to avoid checking the same token twice.
"""

from typing import Optional

from flask_wtf import FlaskForm
from wtforms import IntegerField, PasswordField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, EqualTo, Length

NOT_BLANK = 'This field cannot be blank'
PERMITTED_EXPIRES = [1, 7, 365]


class BaseForm(FlaskForm):
    class Meta:
        csrf = False

    def add_error(self, message: str, field: Optional[str] = None) -> None:
        """Record an error found after validation (for example by a store)"""
        if field is None:
            self.form_errors.append(message)
        else:
            getattr(self, field).errors.append(message)


class SnippetCreateForm(BaseForm):
    title = StringField('Title', validators=[
        DataRequired(message=NOT_BLANK),
        Length(max=100, message='This field cannot be more than 100 characters long'),
    ])
    content = TextAreaField('Content', validators=[
        DataRequired(message=NOT_BLANK),
    ])
    expires = IntegerField('Delete in', validators=[
        AnyOf(PERMITTED_EXPIRES, message='This field must equal 1, 7 or 365'),
    ])


class UserSignupForm(BaseForm):
    name = StringField('Name', validators=[DataRequired(message=NOT_BLANK)])
    email = StringField('Email', validators=[
        DataRequired(message=NOT_BLANK),
        Email(message='This field must be a valid email address'),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message=NOT_BLANK),
        Length(min=8, message='This field must be at least 8 characters long'),
    ])


class UserLoginForm(BaseForm):
    email = StringField('Email', validators=[
        DataRequired(message=NOT_BLANK),
        Email(message='This field must be a valid email address'),
    ])
    password = PasswordField('Password', validators=[DataRequired(message=NOT_BLANK)])


class AccountPasswordUpdateForm(BaseForm):
    current_password = PasswordField('Current password', validators=[
        DataRequired(message=NOT_BLANK),
    ])
    new_password = PasswordField('New password', validators=[
        DataRequired(message=NOT_BLANK),
        Length(min=8, message='This field must be at least 8 characters long'),
    ])
    new_password_confirmation = PasswordField('Confirm new password', validators=[
        DataRequired(message=NOT_BLANK),
        EqualTo('new_password', message='Passwords do not match'),
    ])
