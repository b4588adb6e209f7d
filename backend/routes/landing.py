from datetime import datetime
from flask import Blueprint, request
from models.landing_page import LandingPage
from services import sms_service, section_editor
from services.order_service import place_landing_order, order_summary
from services.page_renderer import render_page, render_not_found, resolve_product, countdown_state
from utils.exceptions import NotFoundError, ShopError
from api.utils import success_response, error_response

landing = Blueprint('landing', __name__, url_prefix='/lp')

def get_public_page(slug):
    page = LandingPage.query.filter_by(slug=slug).first()
    if not page or not page.is_public:
        return None
    return page

def find_block(page, block_id):
    """Top-level section or a widget inside one of the page's rows, by id"""
    if not block_id:
        return None
    for element in page.sections or []:
        if element.get('id') == block_id:
            return element
        if element.get('type') == section_editor.ROW_TYPE:
            for column in element.get('columns') or []:
                for widget in column.get('widgets') or []:
                    if widget.get('id') == block_id:
                        return widget
    return None

def form_product(page, section_id):
    """Product attached to the submitting checkout-form section or form widget"""
    block = find_block(page, section_id)
    if block is None:
        return None
    return resolve_product((block.get('settings') or {}).get('productId'))

@landing.route('/<slug>', methods=['GET'])
def view_page(slug):
    page = get_public_page(slug)
    if not page:
        return render_not_found(), 404
    return render_page(page, slide=request.args.get('slide', 0, type=int))

@landing.route('/<slug>/order', methods=['POST'])
def submit_order(slug):
    """
    Order form on a published page. JSON callers get the order summary,
    plain form posts get the page back with a confirmation message.
    """
    page = get_public_page(slug)
    wants_json = request.is_json
    if not page:
        if wants_json:
            return error_response("Landing page not found", "NOT_FOUND", 404)
        return render_not_found(), 404

    form = request.get_json(silent=True) if wants_json else request.form.to_dict()
    form = form or {}
    product = form_product(page, form.get('section_id'))

    try:
        order = place_landing_order(page, form, product)
    except ShopError as e:
        if wants_json:
            raise
        return render_page(page, error=e.message), e.status_code

    sms_service.notify_order_event(order, 'order_placed')

    if wants_json:
        return success_response(order_summary(order), "Order placed successfully", 201)
    message = f"ধন্যবাদ! আপনার অর্ডার {order.order_number} গ্রহণ করা হয়েছে।"
    return render_page(page, message=message), 201

@landing.route('/<slug>/countdown/<section_id>', methods=['GET'])
def countdown(slug, section_id):
    """Remaining time for a countdown section or row widget, for clients that poll"""
    page = get_public_page(slug)
    if not page:
        return error_response("Landing page not found", "NOT_FOUND", 404)
    block = find_block(page, section_id)
    if block is None:
        raise NotFoundError(f"Section {section_id} not found")
    state = countdown_state(block.get('settings') or {}, datetime.utcnow())
    if state is None:
        return error_response("Countdown has no end date", "NO_END_DATE", 400)
    return success_response(state)
