from datetime import datetime
from flask import Blueprint, request
from models import db
from models.landing_page import LandingPage
from services import section_editor, row_builder, section_registry
from services.page_renderer import render_page
from utils.exceptions import NotFoundError, ValidationError
from utils.permissions import require_permission
from utils.validators import generate_slug, to_bool
from routes.products import unique_slug
from api.utils import success_response, error_response, validate_request_json

landing_pages = Blueprint('landing_pages', __name__, url_prefix='/admin/landing-pages')

JSON_LIST_FIELDS = ('features', 'product_ids', 'testimonials', 'faqs')
BOOL_FIELDS = ('is_active', 'features_enabled', 'products_enabled', 'cta_enabled',
               'testimonials_enabled', 'faq_enabled')

def get_page_or_404(page_id):
    page = db.session.get(LandingPage, page_id)
    if not page:
        raise NotFoundError("Landing page not found")
    return page

def page_elements(page):
    return list(page.sections or [])

def save_elements(page, elements, message="Page updated"):
    section_editor.validate_elements(elements)
    page.sections = elements
    page.updated_at = datetime.utcnow()
    db.session.commit()
    return success_response({"sections": page.sections}, message)

def normalize_elements(elements):
    """Incoming full list: order follows list position, legacy settings get defaults"""
    if not isinstance(elements, list):
        raise ValidationError("Sections must be a list")
    normalized = []
    for element in elements:
        if not isinstance(element, dict):
            raise ValidationError("Every section must be an object")
        element = dict(element)
        if element.get('type') != section_editor.ROW_TYPE and section_registry.is_section_type(element.get('type')):
            element['settings'] = section_registry.normalize_settings(element['type'], element.get('settings'))
        normalized.append(element)
    return section_editor.resequence(normalized)

def apply_page_data(page, data):
    for field in LandingPage.EDITABLE_FIELDS:
        if field not in data or field == 'slug':
            continue
        value = data[field]
        if field in BOOL_FIELDS:
            value = to_bool(value)
        elif field in JSON_LIST_FIELDS:
            if value is not None and not isinstance(value, list):
                raise ValidationError(f"{field} must be a list")
            value = value or []
        setattr(page, field, value)

    if 'slug' in data:
        slug = generate_slug(data['slug'] or '')
        if not slug:
            raise ValidationError("Slug is required")
        if LandingPage.query.filter(LandingPage.slug == slug, LandingPage.id != page.id).first():
            raise ValidationError("Slug is already in use")
        page.slug = slug

    if 'theme_settings' in data:
        page.theme_settings = section_registry.merge_theme(data['theme_settings'])
    if 'sections' in data:
        elements = normalize_elements(data['sections'])
        section_editor.validate_elements(elements)
        page.sections = elements

@landing_pages.route('', methods=['GET'])
@require_permission('landing_pages')
def list_pages():
    pages = LandingPage.query.order_by(LandingPage.created_at.desc()).all()
    return success_response({"pages": [
        {
            'id': page.id,
            'title': page.title,
            'slug': page.slug,
            'is_active': page.is_active,
            'is_published': page.is_published,
            'section_count': len(page.sections or []),
            'updated_at': page.updated_at.isoformat() if page.updated_at else None,
        }
        for page in pages
    ]})

@landing_pages.route('/builder/catalog', methods=['GET'])
@require_permission('landing_pages')
def builder_catalog():
    """Section kinds, column layouts, widget types and the default theme"""
    catalog = row_builder.layout_catalog()
    catalog['sections'] = section_registry.builder_catalog()
    catalog['theme'] = dict(section_registry.DEFAULT_THEME)
    catalog['button_styles'] = list(section_registry.BUTTON_STYLES)
    return success_response(catalog)

@landing_pages.route('', methods=['POST'])
@require_permission('landing_pages')
@validate_request_json(['title'])
def create_page():
    """New pages start as drafts"""
    data = request.get_json()
    title = str(data['title']).strip()
    if not title:
        return error_response("Title is required", "VALIDATION_ERROR", 400)

    page = LandingPage(
        title=title,
        slug=unique_slug(generate_slug(data.get('slug') or title) or 'page', LandingPage),
        is_active=False,
        is_published=False,
        sections=[],
        theme_settings=dict(section_registry.DEFAULT_THEME),
    )
    apply_page_data(page, {key: value for key, value in data.items() if key != 'slug'})
    db.session.add(page)
    db.session.commit()
    return success_response({"page": page.to_dict()}, "Landing page created", 201)

@landing_pages.route('/<page_id>', methods=['GET'])
@require_permission('landing_pages')
def get_page(page_id):
    return success_response({"page": get_page_or_404(page_id).to_dict()})

@landing_pages.route('/<page_id>', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json()
def update_page(page_id):
    page = get_page_or_404(page_id)
    apply_page_data(page, request.get_json())
    page.updated_at = datetime.utcnow()
    db.session.commit()
    return success_response({"page": page.to_dict()}, "Landing page saved")

@landing_pages.route('/<page_id>', methods=['DELETE'])
@require_permission('landing_pages')
def delete_page(page_id):
    page = get_page_or_404(page_id)
    db.session.delete(page)
    db.session.commit()
    return success_response(message="Landing page deleted")

@landing_pages.route('/<page_id>/publish', methods=['POST'])
@require_permission('landing_pages')
def publish_page(page_id):
    """Publish and activate; the page is then served at /lp/<slug>"""
    page = get_page_or_404(page_id)
    section_editor.validate_elements(page_elements(page))
    page.is_published = True
    page.is_active = True
    page.published_at = datetime.utcnow()
    db.session.commit()
    return success_response({"page": page.to_dict(), "url": f"/lp/{page.slug}"}, "Landing page published")

@landing_pages.route('/<page_id>/unpublish', methods=['POST'])
@require_permission('landing_pages')
def unpublish_page(page_id):
    page = get_page_or_404(page_id)
    page.is_published = False
    db.session.commit()
    return success_response({"page": page.to_dict()}, "Landing page moved back to draft")

@landing_pages.route('/<page_id>/preview', methods=['GET'])
@require_permission('landing_pages')
def preview_page(page_id):
    """Rendered HTML, also for drafts"""
    page = get_page_or_404(page_id)
    return render_page(page, slide=request.args.get('slide', 0, type=int))

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

@landing_pages.route('/<page_id>/sections', methods=['POST'])
@require_permission('landing_pages')
@validate_request_json(['type'])
def add_section(page_id):
    """Body: {type, position?}"""
    page = get_page_or_404(page_id)
    data = request.get_json()
    elements = section_editor.add_section(page_elements(page), data['type'], data.get('position'))
    return save_elements(page, elements, "Section added")

@landing_pages.route('/<page_id>/sections/<section_id>', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json(['settings'])
def update_section(page_id, section_id):
    """Replace a section's settings wholesale"""
    page = get_page_or_404(page_id)
    elements = section_editor.update_section(page_elements(page), section_id, request.get_json())
    return save_elements(page, elements, "Section updated")

@landing_pages.route('/<page_id>/sections/<section_id>/settings', methods=['PATCH'])
@require_permission('landing_pages')
@validate_request_json(['key'])
def update_section_setting(page_id, section_id):
    """Body: {key, value}"""
    page = get_page_or_404(page_id)
    data = request.get_json()
    elements = page_elements(page)
    section = section_editor.get_element(elements, section_id)
    if section.get('type') == section_editor.ROW_TYPE:
        raise ValidationError("Use the row endpoints to edit rows")
    updated = section_editor.update_setting(section, data['key'], data.get('value'))
    updated['settings'] = section_registry.normalize_settings(updated['type'], updated['settings'])
    return save_elements(page, section_editor.replace_element(elements, section_id, updated), "Section updated")

@landing_pages.route('/<page_id>/sections/<section_id>/items/<field>', methods=['POST'])
@require_permission('landing_pages')
def append_section_item(page_id, section_id, field):
    """Append to an array setting; body {item} is optional"""
    page = get_page_or_404(page_id)
    data = request.get_json(force=True, silent=True) or {}
    elements = page_elements(page)
    section = section_editor.get_element(elements, section_id)
    updated = section_editor.append_item(section, field, data.get('item'))
    return save_elements(page, section_editor.replace_element(elements, section_id, updated), "Item added")

@landing_pages.route('/<page_id>/sections/<section_id>/items/<field>/<int:index>', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json(['item'])
def replace_section_item(page_id, section_id, field, index):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    section = section_editor.get_element(elements, section_id)
    updated = section_editor.replace_item(section, field, index, request.get_json()['item'])
    return save_elements(page, section_editor.replace_element(elements, section_id, updated), "Item updated")

@landing_pages.route('/<page_id>/sections/<section_id>/items/<field>/<int:index>', methods=['DELETE'])
@require_permission('landing_pages')
def remove_section_item(page_id, section_id, field, index):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    section = section_editor.get_element(elements, section_id)
    updated = section_editor.remove_item(section, field, index)
    return save_elements(page, section_editor.replace_element(elements, section_id, updated), "Item removed")

@landing_pages.route('/<page_id>/sections/<section_id>', methods=['DELETE'])
@require_permission('landing_pages')
def delete_section(page_id, section_id):
    """Removes a section or a row"""
    page = get_page_or_404(page_id)
    elements = section_editor.delete_section(page_elements(page), section_id)
    return save_elements(page, elements, "Section deleted")

@landing_pages.route('/<page_id>/sections/<section_id>/move', methods=['POST'])
@require_permission('landing_pages')
@validate_request_json(['direction'])
def move_section(page_id, section_id):
    """Body: {direction: 'up' | 'down'}; works for sections and rows"""
    page = get_page_or_404(page_id)
    elements = section_editor.move_section(page_elements(page), section_id, request.get_json()['direction'])
    return save_elements(page, elements, "Section moved")

# ---------------------------------------------------------------------------
# Rows and widgets
# ---------------------------------------------------------------------------

def get_row(elements, row_id):
    row = section_editor.get_element(elements, row_id)
    if row.get('type') != section_editor.ROW_TYPE:
        raise ValidationError(f"{row_id} is not a row")
    return row

def save_row(page, elements, row, message):
    row_builder.assert_row_columns(row)
    return save_elements(page, section_editor.replace_element(elements, row['id'], row), message)

@landing_pages.route('/<page_id>/rows', methods=['POST'])
@require_permission('landing_pages')
def add_row(page_id):
    """Body: {layout?: '100', position?}"""
    page = get_page_or_404(page_id)
    data = request.get_json(force=True, silent=True) or {}
    row = row_builder.create_default_row(data.get('layout') or '100')
    elements = section_editor.insert_element(page_elements(page), row, data.get('position'))
    return save_elements(page, elements, "Row added")

@landing_pages.route('/<page_id>/rows/<row_id>/layout', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json(['layout'])
def change_row_layout(page_id, row_id):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    row = row_builder.change_row_layout(get_row(elements, row_id), request.get_json()['layout'])
    return save_row(page, elements, row, "Row layout changed")

@landing_pages.route('/<page_id>/rows/<row_id>/settings', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json(['settings'])
def update_row_settings(page_id, row_id):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    row = row_builder.update_row_settings(get_row(elements, row_id), request.get_json()['settings'])
    return save_row(page, elements, row, "Row updated")

@landing_pages.route('/<page_id>/rows/<row_id>/widgets', methods=['POST'])
@require_permission('landing_pages')
@validate_request_json(['type'])
def add_widget(page_id, row_id):
    """Body: {type, column?: 0}"""
    page = get_page_or_404(page_id)
    data = request.get_json()
    elements = page_elements(page)
    row = row_builder.add_widget(get_row(elements, row_id), data.get('column', 0), data['type'])
    return save_row(page, elements, row, "Widget added")

@landing_pages.route('/<page_id>/rows/<row_id>/widgets/<widget_id>', methods=['PUT'])
@require_permission('landing_pages')
@validate_request_json(['settings'])
def update_widget(page_id, row_id, widget_id):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    row = row_builder.update_widget(get_row(elements, row_id), widget_id, request.get_json()['settings'])
    return save_row(page, elements, row, "Widget updated")

@landing_pages.route('/<page_id>/rows/<row_id>/widgets/<widget_id>', methods=['DELETE'])
@require_permission('landing_pages')
def remove_widget(page_id, row_id, widget_id):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    row = row_builder.remove_widget(get_row(elements, row_id), widget_id)
    return save_row(page, elements, row, "Widget removed")

@landing_pages.route('/<page_id>/rows/<row_id>/widgets/<widget_id>/move', methods=['POST'])
@require_permission('landing_pages')
@validate_request_json(['direction'])
def move_widget(page_id, row_id, widget_id):
    page = get_page_or_404(page_id)
    elements = page_elements(page)
    row = row_builder.move_widget(get_row(elements, row_id), widget_id, request.get_json()['direction'])
    return save_row(page, elements, row, "Widget moved")
