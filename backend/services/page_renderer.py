"""
Server-side rendering of landing pages.

Elements are rendered in stored order; each section kind is dispatched to
its template through the section registry, rows go through the row
template and its widget macros. Kinds the registry does not know render as
nothing.
"""
import logging
from datetime import datetime

from flask import render_template
from markupsafe import Markup

from models.product import Product
from services import facebook_capi, section_registry
from services.countdown import countdown_remaining, parse_end_date
from services.row_builder import COLUMN_LAYOUTS
from services.section_editor import ROW_TYPE
from utils.validators import is_uuid

logger = logging.getLogger(__name__)

CAROUSEL_KINDS = ('hero-product', 'image-gallery')
PRODUCT_KINDS = ('product-info', 'checkout-form')


def carousel_index(current, step, count):
    """Next slide index, wrapping around in both directions"""
    if count <= 0:
        return 0
    return (current + step) % count


def resolve_product(product_id):
    """Active catalog product for a section's productId, else None"""
    if not is_uuid(product_id):
        return None
    return Product.query.filter_by(id=product_id, is_active=True).first()


def countdown_state(settings, now=None):
    end = parse_end_date(settings.get('endDate'))
    if end is None:
        return None
    state = countdown_remaining(end, now)
    # Epoch milliseconds (UTC) for the ticking script
    state['end_ms'] = int((end - datetime(1970, 1, 1)).total_seconds() * 1000)
    return state


def _section_context(section, page, now, slide):
    settings = section.get('settings') or {}
    context = {}
    if section['type'] in CAROUSEL_KINDS:
        images = settings.get('images') or []
        context['images'] = images
        context['slide'] = carousel_index(slide, 0, len(images))
        context['prev_slide'] = carousel_index(context['slide'], -1, len(images))
        context['next_slide'] = carousel_index(context['slide'], 1, len(images))
    if section['type'] in PRODUCT_KINDS:
        context['product'] = resolve_product(settings.get('productId'))
    if section['type'] == 'checkout-form':
        context['form_action'] = f'/lp/{page.slug}/order'
    if section['type'] == 'countdown':
        context['countdown'] = countdown_state(settings, now)
    return context


def render_section(section, theme, page, now=None, slide=0):
    """HTML for one element, or an empty string for unknown kinds"""
    section_type = section.get('type')

    if section_type == ROW_TYPE:
        if section.get('layout') not in COLUMN_LAYOUTS:
            logger.warning(f"Skipping row {section.get('id')} with unknown layout {section.get('layout')}")
            return Markup('')
        return Markup(render_template(
            'landing/row.html',
            row=section,
            widths=COLUMN_LAYOUTS[section['layout']]['widths'],
            theme=theme,
            page=page,
            now=now,
            countdown_state=countdown_state,
            resolve_product=resolve_product,
            default_fields=section_registry.DEFAULT_CHECKOUT_FIELDS,
        ))

    if not section_registry.is_section_type(section_type):
        logger.warning(f"Skipping section {section.get('id')} of unknown type {section_type}")
        return Markup('')

    kind = section_registry.get_kind(section_type)
    settings = kind.default_settings()
    settings.update(section.get('settings') or {})
    return Markup(render_template(
        kind.template,
        section=section,
        settings=settings,
        theme=theme,
        page=page,
        **_section_context(dict(section, settings=settings), page, now, slide)
    ))


def render_sections(elements, theme, page, now=None, slide=0):
    return Markup('').join(
        render_section(element, theme, page, now=now, slide=slide) for element in elements or []
    )


def legacy_products(page):
    """Products listed on a page that has no builder sections"""
    ids = [pid for pid in (page.product_ids or []) if is_uuid(pid)]
    if not ids:
        return []
    products = Product.query.filter(Product.id.in_(ids), Product.is_active.is_(True)).all()
    by_id = {product.id: product for product in products}
    return [by_id[pid] for pid in ids if pid in by_id]


def render_page(page, now=None, slide=0, message=None, error=None):
    theme = section_registry.merge_theme(page.theme_settings, strict=False)
    elements = page.sections or []
    body = render_sections(elements, theme, page, now=now, slide=slide) if elements else None

    return render_template(
        'landing/page.html',
        page=page,
        theme=theme,
        body=body,
        products=legacy_products(page) if body is None else [],
        message=message,
        error=error,
        pixel=facebook_capi.pixel_config(),
    )


def render_not_found():
    return render_template('landing/not_found.html')
