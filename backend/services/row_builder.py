"""Rows, columns and widgets for the free-form part of the page builder."""
import copy
import uuid

from services.section_editor import ROW_TYPE
from utils.exceptions import NotFoundError, PageLayoutError, ValidationError

COLUMN_LAYOUTS = {
    '100': {'label': '1 Column', 'widths': ['100%']},
    '50-50': {'label': '2 Columns', 'widths': ['50%', '50%']},
    '33-33-33': {'label': '3 Columns', 'widths': ['33.333%', '33.333%', '33.333%']},
    '25-25-25-25': {'label': '4 Columns', 'widths': ['25%', '25%', '25%', '25%']},
    '66-33': {'label': '2 Columns (2/3 + 1/3)', 'widths': ['66.666%', '33.333%']},
    '33-66': {'label': '2 Columns (1/3 + 2/3)', 'widths': ['33.333%', '66.666%']},
    '25-50-25': {'label': '3 Columns (1/4 + 1/2 + 1/4)', 'widths': ['25%', '50%', '25%']},
    '25-75': {'label': '2 Columns (1/4 + 3/4)', 'widths': ['25%', '75%']},
    '75-25': {'label': '2 Columns (3/4 + 1/4)', 'widths': ['75%', '25%']},
}

WIDGET_TEMPLATES = {
    'heading': {'text': 'Heading', 'tag': 'h2', 'alignment': 'center', 'color': '', 'fontSize': ''},
    'text': {'content': 'Enter your text here...', 'alignment': 'left', 'color': '', 'fontSize': '16px'},
    'image': {'src': '', 'alt': '', 'width': '100%', 'alignment': 'center', 'link': '', 'borderRadius': ''},
    'button': {
        'text': 'Click Here',
        'link': '#',
        'style': 'filled',
        'size': 'md',
        'alignment': 'center',
        'backgroundColor': '',
        'textColor': '',
        'fullWidth': False,
    },
    'spacer': {'height': '40px'},
    'divider': {'style': 'solid', 'color': '#e5e7eb', 'thickness': '1px', 'width': '100%'},
    'video': {'url': '', 'autoplay': False, 'loop': False, 'controls': True},
    'icon-box': {
        'icon': '⭐',
        'title': 'Feature Title',
        'description': 'Feature description goes here',
        'iconPosition': 'top',
        'alignment': 'center',
    },
    'image-box': {'image': '', 'title': 'Image Box Title', 'description': 'Description text', 'link': ''},
    'counter': {'number': '100', 'suffix': '+', 'title': 'Happy Customers', 'duration': 2000},
    'countdown': {'endDate': '', 'title': 'Offer Ends In', 'backgroundColor': '#ef4444', 'textColor': '#ffffff'},
    'form': {
        'title': 'অর্ডার করতে নিচের ফর্মটি পূরণ করুন',
        'buttonText': 'অর্ডার কনফার্ম করুন',
        'productId': '',
        'backgroundColor': '#f9fafb',
        'accentColor': '#ef4444',
    },
    'testimonial': {
        'name': 'Customer Name',
        'role': 'Verified Buyer',
        'content': 'This is an amazing product!',
        'avatar': '',
        'rating': 5,
    },
    'faq-item': {
        'question': 'What is this product?',
        'answer': 'This is a great product that solves your problems.',
    },
    'price-box': {
        'title': 'Product Name',
        'price': '1350',
        'originalPrice': '1500',
        'currency': '৳',
        'buttonText': 'অর্ডার করুন',
        'buttonLink': '#checkout',
        'features': [],
    },
    'gallery': {'images': [], 'columns': 3, 'gap': '8px'},
    'html': {'code': '<div>Custom HTML</div>'},
}

DEFAULT_COLUMN_SETTINGS = {
    'verticalAlign': 'top',
    'padding': '16px',
    'backgroundColor': 'transparent',
}

DEFAULT_ROW_SETTINGS = {
    'backgroundColor': 'transparent',
    'backgroundImage': '',
    'backgroundOverlay': '',
    'padding': '24px 16px',
    'margin': '0',
    'minHeight': '',
    'maxWidth': 'boxed',
    'verticalAlign': 'top',
    'gap': '16px',
}


def layout_widths(layout):
    if layout not in COLUMN_LAYOUTS:
        raise ValidationError(f"Unknown column layout: {layout}")
    return COLUMN_LAYOUTS[layout]['widths']


def new_column():
    return {
        'id': str(uuid.uuid4()),
        'widgets': [],
        'settings': dict(DEFAULT_COLUMN_SETTINGS),
    }


def create_default_row(layout='100'):
    """Empty row with one column per width in the layout"""
    widths = layout_widths(layout)
    return {
        'id': str(uuid.uuid4()),
        'type': ROW_TYPE,
        'layout': layout,
        'columns': [new_column() for _ in widths],
        'settings': dict(DEFAULT_ROW_SETTINGS),
    }


def create_widget(widget_type):
    if widget_type not in WIDGET_TEMPLATES:
        raise ValidationError(f"Unknown widget type: {widget_type}")
    return {
        'id': str(uuid.uuid4()),
        'type': widget_type,
        'settings': copy.deepcopy(WIDGET_TEMPLATES[widget_type]),
    }


def assert_row_columns(row):
    """A row has exactly as many columns as its layout has widths"""
    layout = row.get('layout')
    if layout not in COLUMN_LAYOUTS:
        raise PageLayoutError(f"Unknown column layout: {layout}")

    columns = row.get('columns')
    expected = len(COLUMN_LAYOUTS[layout]['widths'])
    if not isinstance(columns, list) or len(columns) != expected:
        found = len(columns) if isinstance(columns, list) else 0
        raise PageLayoutError(
            f"Layout {layout} needs {expected} columns, row {row.get('id')} has {found}"
        )

    for column in columns:
        for widget in column.get('widgets') or []:
            if widget.get('type') not in WIDGET_TEMPLATES:
                raise PageLayoutError(f"Unknown widget type: {widget.get('type')}")


def change_row_layout(row, layout):
    """
    Switch layout keeping columns in place. Columns that no longer fit hand
    their widgets to the last remaining column; new columns start empty.
    """
    count = len(layout_widths(layout))
    columns = copy.deepcopy(row.get('columns') or [])

    if len(columns) > count:
        kept, overflow = columns[:count], columns[count:]
        for column in overflow:
            kept[-1]['widgets'].extend(column.get('widgets') or [])
        columns = kept
    while len(columns) < count:
        columns.append(new_column())

    updated = copy.deepcopy(row)
    updated['layout'] = layout
    updated['columns'] = columns
    return updated


def update_row_settings(row, settings):
    updated = copy.deepcopy(row)
    updated['settings'] = dict(updated.get('settings') or DEFAULT_ROW_SETTINGS)
    updated['settings'].update(settings or {})
    return updated


def _column(row, column_index):
    columns = row.get('columns') or []
    if not isinstance(column_index, int) or not 0 <= column_index < len(columns):
        raise ValidationError(f"Column index {column_index} out of range")
    return columns[column_index]


def add_widget(row, column_index, widget_type):
    updated = copy.deepcopy(row)
    _column(updated, column_index)['widgets'].append(create_widget(widget_type))
    return updated


def _locate_widget(row, widget_id):
    for column in row.get('columns') or []:
        for index, widget in enumerate(column.get('widgets') or []):
            if widget.get('id') == widget_id:
                return column, index
    raise NotFoundError(f"Widget {widget_id} not found")


def update_widget(row, widget_id, settings):
    updated = copy.deepcopy(row)
    column, index = _locate_widget(updated, widget_id)
    widget = column['widgets'][index]
    widget['settings'] = dict(widget.get('settings') or {})
    widget['settings'].update(settings or {})
    return updated


def remove_widget(row, widget_id):
    updated = copy.deepcopy(row)
    column, index = _locate_widget(updated, widget_id)
    del column['widgets'][index]
    return updated


def move_widget(row, widget_id, direction):
    """Move a widget up or down within its column; no-op at the ends"""
    if direction not in ('up', 'down'):
        raise ValidationError("Direction must be 'up' or 'down'")
    updated = copy.deepcopy(row)
    column, index = _locate_widget(updated, widget_id)
    widgets = column['widgets']
    target = index - 1 if direction == 'up' else index + 1
    if 0 <= target < len(widgets):
        widgets[index], widgets[target] = widgets[target], widgets[index]
    return updated


def layout_catalog():
    return {
        'layouts': [{'key': key, **value} for key, value in COLUMN_LAYOUTS.items()],
        'widgets': sorted(WIDGET_TEMPLATES),
    }
