from flask import Blueprint, request, jsonify
from api.utils import success_response, error_response, validate_request_json
from services import facebook_capi

tracking_bp = Blueprint('tracking', __name__)

@tracking_bp.route('/pixel-config', methods=['GET'])
def pixel_config():
    return success_response(facebook_capi.pixel_config())

@tracking_bp.route('/events', methods=['POST'])
@validate_request_json(['event_name'])
def send_event():
    """
    Relay a browser event to the Conversions API.
    Body: {event_name, event_id?, event_source_url?, user_data?, custom_data?}
    """
    data = request.get_json()
    result = facebook_capi.send_event(
        data['event_name'],
        user_data=data.get('user_data'),
        custom_data=data.get('custom_data'),
        event_source_url=data.get('event_source_url') or request.headers.get('Referer'),
        client_ip=facebook_capi.client_ip_from_headers(request.headers, request.remote_addr),
        user_agent=request.headers.get('User-Agent'),
        event_id=data.get('event_id'),
    )

    if result.get('success'):
        return success_response(result.get('result'))
    if result.get('message'):
        return jsonify({"success": False, "message": result["message"]}), 200
    return error_response("Failed to send event", "CAPI_ERROR", 400, details=result.get('error'))
