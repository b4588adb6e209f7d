"""
Landing page section kinds.

Every kind is declared once: its editor label, default settings, the
array fields the editor edits item by item, and the template that renders
it. Adding a kind means adding one entry to SECTION_KINDS.
"""
import copy
import uuid

from utils.exceptions import UnknownSectionType, ValidationError

BUTTON_STYLES = ('filled', 'outline', 'ghost')

DEFAULT_THEME = {
    'primaryColor': '#000000',
    'secondaryColor': '#f5f5f5',
    'accentColor': '#ef4444',
    'backgroundColor': '#ffffff',
    'textColor': '#1f2937',
    'fontFamily': 'Inter',
    'borderRadius': '8px',
    'buttonStyle': 'filled',
}

DEFAULT_CHECKOUT_FIELDS = [
    {'name': 'name', 'label': 'আপনার নাম', 'required': True, 'type': 'text'},
    {'name': 'phone', 'label': 'মোবাইল নম্বর', 'required': True, 'type': 'tel'},
    {'name': 'address', 'label': 'সম্পূর্ণ ঠিকানা', 'required': True, 'type': 'textarea'},
]


class SectionKind:
    """Everything the builder knows about one section kind"""

    def __init__(self, key, label, defaults, list_fields=None, int_fields=(), bool_fields=()):
        self.key = key
        self.label = label
        self.defaults = defaults
        # field name -> template for a freshly appended item
        self.list_fields = list_fields or {}
        self.int_fields = tuple(int_fields)
        self.bool_fields = tuple(bool_fields)

    @property
    def template(self):
        return f'landing/sections/{self.key}.html'

    def default_settings(self):
        return copy.deepcopy(self.defaults)

    def new_item(self, field):
        if field not in self.list_fields:
            raise ValidationError(f"'{field}' is not a list field of {self.key}")
        return copy.deepcopy(self.list_fields[field])

    def to_dict(self):
        return {
            'type': self.key,
            'label': self.label,
            'defaults': self.default_settings(),
            'list_fields': {name: copy.deepcopy(item) for name, item in self.list_fields.items()},
        }


SECTION_KINDS = {kind.key: kind for kind in (
    SectionKind(
        'hero-product', 'Hero Product',
        {
            'images': [],
            'title': 'Product Title',
            'subtitle': 'Product description goes here',
            'price': '1350',
            'originalPrice': '',
            'buttonText': 'এখনই কিনুন',
            'buttonLink': '#checkout',
            'badges': [
                {'text': '100%', 'subtext': 'Quality Guarantee'},
                {'text': 'Size 36-46', 'subtext': 'Size Options'},
                {'text': 'All Bangladesh', 'subtext': 'Delivery Service'},
            ],
            'backgroundColor': '#ffffff',
            'textColor': '#1f2937',
            'layout': 'left-image',
        },
        list_fields={'badges': {'text': '', 'subtext': ''}},
    ),
    SectionKind(
        'image-gallery', 'Image Gallery',
        {'images': [], 'columns': 3, 'gap': '16px', 'aspectRatio': 'square'},
        int_fields=('columns',),
    ),
    SectionKind(
        'feature-badges', 'Feature Badges',
        {
            'title': 'Features',
            'badges': [],
            'columns': 3,
            'backgroundColor': '#1f2937',
            'textColor': '#ffffff',
        },
        list_fields={'badges': {'icon': 'Star', 'title': '', 'description': ''}},
        int_fields=('columns',),
    ),
    SectionKind(
        'text-block', 'Text Block',
        {
            'content': 'Enter your text here...',
            'alignment': 'center',
            'fontSize': '16px',
            'backgroundColor': 'transparent',
            'textColor': '#1f2937',
            'padding': '32px',
        },
    ),
    SectionKind(
        'product-info', 'Product Info',
        {
            'productId': '',
            'showPrice': True,
            'showDescription': True,
            'showImages': True,
            'layout': 'horizontal',
        },
        bool_fields=('showPrice', 'showDescription', 'showImages'),
    ),
    SectionKind(
        'checkout-form', 'Checkout Form',
        {
            'title': 'অর্ডার করতে নিচের ফর্মটি পূরণ করুন',
            'buttonText': 'অর্ডার কনফার্ম করুন',
            'productId': '',
            'fields': DEFAULT_CHECKOUT_FIELDS,
            'backgroundColor': '#f9fafb',
            'accentColor': '#ef4444',
        },
        list_fields={'fields': {'name': '', 'label': '', 'required': False, 'type': 'text'}},
    ),
    SectionKind(
        'cta-banner', 'CTA Banner',
        {
            'title': 'Ready to Order?',
            'subtitle': 'Get yours today!',
            'buttonText': 'Order Now',
            'buttonLink': '#checkout',
            'backgroundColor': '#000000',
            'textColor': '#ffffff',
        },
    ),
    SectionKind(
        'testimonials', 'Testimonials',
        {'title': 'Customer Reviews', 'items': [], 'layout': 'grid', 'columns': 3},
        list_fields={'items': {'name': '', 'role': '', 'content': '', 'avatar': ''}},
        int_fields=('columns',),
    ),
    SectionKind(
        'faq', 'FAQ',
        {'title': 'Frequently Asked Questions', 'items': [], 'backgroundColor': '#ffffff'},
        list_fields={'items': {'question': '', 'answer': ''}},
    ),
    SectionKind(
        'image-text', 'Image + Text',
        {
            'image': '',
            'title': 'Title',
            'description': 'Description',
            'buttonText': 'Learn More',
            'buttonLink': '#',
            'imagePosition': 'left',
            'backgroundColor': '#ffffff',
        },
    ),
    SectionKind(
        'video', 'Video',
        {'videoUrl': '', 'autoplay': False, 'controls': True, 'loop': False},
        bool_fields=('autoplay', 'controls', 'loop'),
    ),
    SectionKind(
        'countdown', 'Countdown Timer',
        {
            'title': 'Offer Ends In',
            'endDate': '',
            'backgroundColor': '#ef4444',
            'textColor': '#ffffff',
        },
    ),
    SectionKind(
        'divider', 'Divider',
        {'style': 'solid', 'color': '#e5e7eb', 'thickness': '1px', 'width': '100%'},
    ),
    SectionKind(
        'spacer', 'Spacer',
        {'height': '48px'},
    ),
)}


def get_kind(section_type):
    kind = SECTION_KINDS.get(section_type)
    if kind is None:
        raise UnknownSectionType(f"Unknown section type: {section_type}")
    return kind


def is_section_type(section_type):
    return section_type in SECTION_KINDS


def new_section(section_type, order=0):
    """A section of the given kind carrying its default settings"""
    kind = get_kind(section_type)
    return {
        'id': str(uuid.uuid4()),
        'type': kind.key,
        'order': order,
        'settings': kind.default_settings(),
    }


def split_lines(value):
    """Textarea input, one URL per line, blanks dropped"""
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if not value:
        return []
    return [line.strip() for line in str(value).splitlines() if line.strip()]


def normalize_settings(section_type, settings):
    """Merge settings over the kind's defaults and coerce editor input types"""
    kind = get_kind(section_type)
    merged = kind.default_settings()
    merged.update(settings or {})

    if 'images' in merged:
        merged['images'] = split_lines(merged['images'])
    for field in kind.int_fields:
        try:
            merged[field] = int(merged[field])
        except (TypeError, ValueError):
            merged[field] = kind.defaults[field]
    for field in kind.bool_fields:
        value = merged[field]
        if not isinstance(value, bool):
            merged[field] = str(value).strip().lower() in ('true', '1', 'yes', 'on')
    for field in kind.list_fields:
        if not isinstance(merged.get(field), list):
            merged[field] = []
    return merged


def merge_theme(theme, strict=True):
    """
    Fill missing theme tokens from DEFAULT_THEME. An unknown buttonStyle is
    rejected when strict, otherwise replaced by the default.
    """
    merged = dict(DEFAULT_THEME)
    for key, value in (theme or {}).items():
        if key in DEFAULT_THEME and value not in (None, ''):
            merged[key] = value
    if merged['buttonStyle'] not in BUTTON_STYLES:
        if strict:
            raise ValidationError(f"Invalid button style: {merged['buttonStyle']}")
        merged['buttonStyle'] = DEFAULT_THEME['buttonStyle']
    return merged


def builder_catalog():
    """What the admin editor offers in its 'add section' menu"""
    return [kind.to_dict() for kind in SECTION_KINDS.values()]
