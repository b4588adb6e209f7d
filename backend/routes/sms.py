from flask import Blueprint, request
from models import db
from models.order import Order
from models.sms import SmsTemplate, SmsLog
from services import sms_service
from utils.permissions import require_permission
from utils.validators import is_bangladesh_phone, to_bool
from api.utils import success_response, error_response, validate_request_json, paginate_query

sms = Blueprint('sms', __name__, url_prefix='/admin/sms')

@sms.route('/templates', methods=['GET'])
@require_permission('sms')
def list_templates():
    sms_service.ensure_default_templates()
    templates = SmsTemplate.query.order_by(SmsTemplate.id.asc()).all()
    return success_response({
        "templates": [template.to_dict() for template in templates],
        "events": list(SmsTemplate.EVENTS),
        "placeholders": ['name', 'order_number', 'total', 'tracking_number', 'status', 'phone'],
    })

@sms.route('/templates', methods=['POST'])
@require_permission('sms')
@validate_request_json(['event', 'body'])
def create_template():
    data = request.get_json()
    if data['event'] not in SmsTemplate.EVENTS:
        return error_response("Unknown event", "VALIDATION_ERROR", 400)
    if SmsTemplate.query.filter_by(event=data['event']).first():
        return error_response("A template for this event already exists", "DUPLICATE", 400)

    template = SmsTemplate(
        name=data.get('name') or data['event'].replace('_', ' ').capitalize(),
        event=data['event'],
        body=data['body'],
        is_active=to_bool(data.get('is_active'), True),
    )
    db.session.add(template)
    db.session.commit()
    return success_response({"template": template.to_dict()}, "Template created", 201)

@sms.route('/templates/<int:template_id>', methods=['PUT'])
@require_permission('sms')
@validate_request_json()
def update_template(template_id):
    template = db.session.get(SmsTemplate, template_id)
    if not template:
        return error_response("Template not found", "NOT_FOUND", 404)

    data = request.get_json()
    if 'name' in data:
        template.name = data['name']
    if 'body' in data:
        if not str(data['body']).strip():
            return error_response("Message body is required", "VALIDATION_ERROR", 400)
        template.body = data['body']
    if 'is_active' in data:
        template.is_active = to_bool(data['is_active'])
    db.session.commit()
    return success_response({"template": template.to_dict()}, "Template updated")

@sms.route('/templates/<int:template_id>', methods=['DELETE'])
@require_permission('sms')
def delete_template(template_id):
    template = db.session.get(SmsTemplate, template_id)
    if not template:
        return error_response("Template not found", "NOT_FOUND", 404)
    db.session.delete(template)
    db.session.commit()
    return success_response(message="Template deleted")

@sms.route('/send', methods=['POST'])
@require_permission('sms')
@validate_request_json(['phone', 'message'])
def send():
    """Send a one-off message, optionally rendered against an order"""
    data = request.get_json()
    phone = str(data['phone']).strip()
    if not is_bangladesh_phone(phone):
        return error_response("Invalid phone number", "VALIDATION_ERROR", 400)

    message = str(data['message'])
    order = db.session.get(Order, data['order_id']) if data.get('order_id') else None
    if order:
        message = sms_service.render_message(message, sms_service.order_context(order))

    sent = sms_service.send_sms(phone, message, event='manual', order_id=order.id if order else None)
    if not sent:
        return error_response("SMS could not be sent", "SMS_FAILED", 400)
    return success_response({"sent": True}, "SMS sent")

@sms.route('/logs', methods=['GET'])
@require_permission('sms')
def logs():
    query = SmsLog.query
    if request.args.get('order_id'):
        query = query.filter_by(order_id=request.args['order_id'])
    items, pagination = paginate_query(query.order_by(SmsLog.created_at.desc()))
    return success_response({"logs": [log.to_dict() for log in items], "pagination": pagination})
