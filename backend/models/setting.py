import json
from datetime import datetime
from . import db

TRUE_WORDS = ('true', '1', 'yes', 'on')


def encode_value(value, value_type):
    if value is None:
        return None
    if value_type == 'json':
        return json.dumps(value)
    if value_type == 'boolean' and isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def decode_value(raw, value_type, default=None):
    """Stored text back to a Python value; empty or unreadable falls back to default"""
    if not raw:
        return default
    if value_type == 'boolean':
        return raw.lower() in TRUE_WORDS
    try:
        if value_type == 'json':
            return json.loads(raw)
        if value_type == 'number':
            return float(raw)
    except ValueError:
        return default
    return raw


class Setting(db.Model):
    """
    Runtime shop settings edited from the admin: Facebook pixel and CAPI
    credentials, SMS gateway, shipping fee overrides.
    """
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)
    value_type = db.Column(db.String(20), default='string', nullable=False)  # string, json, number, boolean
    category = db.Column(db.String(50), nullable=False, index=True)  # marketing, sms, shipping
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Setting {self.key}={self.value!r}>'

    @staticmethod
    def get(key, default=None):
        row = Setting.query.filter_by(key=key).first()
        if row is None:
            return default
        return decode_value(row.value, row.value_type, default)

    @staticmethod
    def set(key, value, value_type='string', category='general', description=None, commit=True):
        """Create or overwrite one setting; commit=False leaves it for the caller's transaction"""
        row = Setting.query.filter_by(key=key).first()
        if row is None:
            row = Setting(key=key)
            db.session.add(row)

        row.value = encode_value(value, value_type)
        row.value_type = value_type
        row.category = category
        if description:
            row.description = description

        if commit:
            db.session.commit()
        return row
