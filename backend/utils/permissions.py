from functools import wraps
from utils.auth import get_current_user, is_authenticated

def _unauthorized():
    from api.utils import error_response
    return error_response("Authentication required", "UNAUTHORIZED", 401)

def _forbidden():
    from api.utils import error_response
    return error_response("You do not have permission to perform this action", "FORBIDDEN", 403)

def login_required(f):
    """Decorator to require login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated():
            return _unauthorized()
        return f(*args, **kwargs)
    return decorated_function

def require_permission(permission):
    """Decorator to require a specific permission"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if not user or not user.is_active:
                return _unauthorized()

            if not user.check_permission(permission):
                return _forbidden()

            return f(*args, **kwargs)
        return decorated_function
    return decorator
