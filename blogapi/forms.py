# Request body validation
import re
from datetime import date

from flask import request

from blogapi.errors import ValidationError
from blogapi.models import MAX_ID, Role, Status

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

MIN_PASSWORD_LENGTH = 6
MIN_PHONE_LENGTH = 10
MIN_BLOG_BODY_LENGTH = 10


def validate_email(email):
    return isinstance(email, str) and EMAIL_RE.match(email.strip()) is not None


def validate_password(password):
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _text(data, field):
    value = data.get(field)
    if not isinstance(value, str):
        return ''
    return value.strip()


def _parse_status(value):
    try:
        return Status(value)
    except ValueError:
        return None


def _parse_id(value):
    # JSON booleans are ints in Python
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            value = int(value.strip())
        except ValueError:
            # Past the interpreter's digit limit
            return None
    if isinstance(value, int) and 0 < value <= MAX_ID:
        return value
    return None


class Form:
    """Collects field errors and raises them together."""

    def __init__(self, data):
        self.data = data
        self.errors = []
        self.cleaned = {}

    def error(self, field, message):
        self.errors.append({'field': field, 'message': message})

    def validate(self):
        self.clean()
        if self.errors:
            raise ValidationError(details=self.errors)
        return self.cleaned

    def clean(self):
        raise NotImplementedError


class RegisterForm(Form):
    def clean(self):
        data = self.data
        for field, label in (('firstName', 'First name'), ('lastName', 'Last name')):
            value = _text(data, field)
            if not value:
                self.error(field, f'{label} is required')
            self.cleaned[field] = value

        self.cleaned['middleName'] = _text(data, 'middleName') or None

        try:
            self.cleaned['dob'] = date.fromisoformat(str(data.get('dob', ''))[:10])
        except ValueError:
            self.error('dob', 'Valid date of birth is required')

        if validate_email(data.get('email')):
            self.cleaned['email'] = data['email'].strip().lower()
        else:
            self.error('email', 'Valid email is required')

        phone_no = _text(data, 'phoneNo')
        if len(phone_no) < MIN_PHONE_LENGTH:
            self.error('phoneNo', 'Valid phone number is required')
        self.cleaned['phoneNo'] = phone_no

        if validate_password(data.get('password')):
            self.cleaned['password'] = data['password']
        else:
            self.error('password', f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

        try:
            self.cleaned['role'] = Role(data.get('role'))
        except ValueError:
            self.error('role', 'Role must be author or reader')


class LoginForm(Form):
    def clean(self):
        if validate_email(self.data.get('email')):
            self.cleaned['email'] = self.data['email'].strip().lower()
        else:
            self.error('email', 'Valid email is required')

        password = self.data.get('password')
        if not isinstance(password, str) or not password:
            self.error('password', 'Password is required')
        self.cleaned['password'] = password


class CategoryForm(Form):
    def clean(self):
        name = _text(self.data, 'name')
        if not name:
            self.error('name', 'Category name is required')
        self.cleaned['name'] = name

        status = _parse_status(self.data.get('status'))
        if status is None:
            self.error('status', 'Status must be ACTIVE or INACTIVE')
        self.cleaned['status'] = status


class BlogForm(Form):
    def __init__(self, data, require_status=True):
        super().__init__(data)
        self.require_status = require_status

    def clean(self):
        title = _text(self.data, 'title')
        if not title:
            self.error('title', 'Blog title is required')
        self.cleaned['title'] = title

        body = _text(self.data, 'body')
        if len(body) < MIN_BLOG_BODY_LENGTH:
            self.error('body', f'Blog body must be at least {MIN_BLOG_BODY_LENGTH} characters')
        self.cleaned['body'] = body

        category_id = _parse_id(self.data.get('categoryId'))
        if category_id is None:
            self.error('categoryId', 'Valid category ID is required')
        self.cleaned['categoryId'] = category_id

        if 'status' not in self.data and not self.require_status:
            self.cleaned['status'] = Status.ACTIVE
            return
        status = _parse_status(self.data.get('status'))
        if status is None:
            self.error('status', 'Status must be ACTIVE or INACTIVE')
        self.cleaned['status'] = status


class CommentForm(Form):
    def clean(self):
        content = _text(self.data, 'content')
        if not content:
            self.error('content', 'Comment content is required')
        self.cleaned['content'] = content
