from datetime import datetime
from flask import session
from werkzeug.security import generate_password_hash, check_password_hash
from models import db
from models.user import User

MIN_PASSWORD_LENGTH = 8


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def authenticate(login, password):
    """Active admin user matching a username or email plus password, else None"""
    user = User.query.filter(
        (User.username == login) | (User.email == login.lower())
    ).first()
    if user is None or not user.is_active:
        return None
    return user if verify_password(user.password_hash, password) else None


def login_user(user):
    session['user_id'] = user.id
    session['username'] = user.username
    session['role'] = user.role.name if user.role else None

    user.last_login = datetime.utcnow()
    db.session.commit()


def logout_user():
    """Drop the whole session, including any cart the admin had"""
    session.clear()


def get_current_user():
    user_id = session.get('user_id')
    if user_id is None:
        return None
    return db.session.get(User, user_id)


def is_authenticated():
    return session.get('user_id') is not None
