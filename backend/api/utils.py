from flask import jsonify, request
from functools import wraps

def success_response(data=None, message=None, status_code=200):
    """Create a standardized success response"""
    response = {
        "success": True,
        "data": data if data is not None else {}
    }
    if message:
        response["message"] = message
    return jsonify(response), status_code

def error_response(error_message, error_code=None, status_code=400, details=None):
    """Create a standardized error response"""
    response = {
        "success": False,
        "error": error_message
    }
    if error_code:
        response["code"] = error_code
    if details is not None:
        response["details"] = details
    return jsonify(response), status_code

def get_json_body():
    """Parsed JSON body (cached on the request) or an empty dict"""
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}

def validate_request_json(required_fields=None):
    """Decorator to validate JSON request data"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # force=True caches the parsed body, later get_json() calls reuse it
            data = request.get_json(force=True, silent=True)

            if not isinstance(data, dict):
                return error_response("Request must be JSON", "INVALID_CONTENT_TYPE", 400)

            if required_fields:
                missing_fields = [field for field in required_fields if field not in data or data[field] is None]
                if missing_fields:
                    return error_response(
                        f"Missing required fields: {', '.join(missing_fields)}",
                        "MISSING_FIELDS",
                        400
                    )

            return f(*args, **kwargs)
        return decorated_function
    return decorator

def paginate_query(query, default_per_page=20, max_per_page=100):
    """Apply ?page=&per_page= to a query, returning (items, meta)"""
    page = max(request.args.get('page', 1, type=int), 1)
    per_page = min(max(request.args.get('per_page', default_per_page, type=int), 1), max_per_page)
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, {
        'page': page,
        'per_page': per_page,
        'total': total,
        'pages': (total + per_page - 1) // per_page,
    }
