from flask import Blueprint, request
from models import db
from utils.auth import (authenticate, hash_password, verify_password, login_user, logout_user,
                        get_current_user, MIN_PASSWORD_LENGTH)
from utils.permissions import login_required
from api.utils import success_response, error_response, validate_request_json

auth = Blueprint('auth', __name__, url_prefix='/admin/auth')

@auth.route('/login', methods=['POST'])
@validate_request_json(['username', 'password'])
def login():
    """Log in with username (or email) and password"""
    data = request.get_json()
    username = str(data.get('username') or '').strip()
    password = str(data.get('password') or '')

    if not username or not password:
        return error_response("Please enter both username and password.", "MISSING_FIELDS", 400)

    user = authenticate(username, password)
    if not user:
        return error_response("Invalid username or password.", "INVALID_CREDENTIALS", 401)

    login_user(user)
    return success_response({"user": user.to_dict()}, f"Welcome back, {user.username}!")

@auth.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return success_response(message="Logged out")

@auth.route('/me', methods=['GET'])
@login_required
def me():
    user = get_current_user()
    if not user:
        logout_user()
        return error_response("Authentication required", "UNAUTHORIZED", 401)
    return success_response({"user": user.to_dict()})

@auth.route('/change-password', methods=['POST'])
@login_required
@validate_request_json(['current_password', 'new_password'])
def change_password():
    data = request.get_json()
    user = get_current_user()

    if not verify_password(user.password_hash, data['current_password']):
        return error_response("Current password is incorrect.", "INVALID_CREDENTIALS", 400)

    new_password = str(data['new_password'])
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return error_response(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
                              "WEAK_PASSWORD", 400)

    user.password_hash = hash_password(new_password)
    db.session.commit()
    return success_response(message="Password updated successfully.")
