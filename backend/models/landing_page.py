from datetime import datetime
from . import db, generate_uuid

class LandingPage(db.Model):
    """Marketing page served publicly at /lp/<slug> once published"""
    __tablename__ = 'landing_pages'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    is_published = db.Column(db.Boolean, default=False, nullable=False)

    # Hero
    hero_title = db.Column(db.String(255), nullable=True)
    hero_subtitle = db.Column(db.Text, nullable=True)
    hero_image = db.Column(db.Text, nullable=True)
    hero_button_text = db.Column(db.String(100), default='Shop Now')
    hero_button_link = db.Column(db.Text, nullable=True)
    hero_button_style = db.Column(db.String(20), default='primary')

    # Features
    features_enabled = db.Column(db.Boolean, default=False, nullable=False)
    features_title = db.Column(db.String(255), default='Features')
    features = db.Column(db.JSON, nullable=True)  # [{icon, title, description}]

    # Products
    products_enabled = db.Column(db.Boolean, default=False, nullable=False)
    products_title = db.Column(db.String(255), default='Featured Products')
    product_ids = db.Column(db.JSON, nullable=True)

    # Call to action
    cta_enabled = db.Column(db.Boolean, default=False, nullable=False)
    cta_title = db.Column(db.String(255), nullable=True)
    cta_subtitle = db.Column(db.Text, nullable=True)
    cta_button_text = db.Column(db.String(100), default='Get Started')
    cta_button_link = db.Column(db.Text, nullable=True)
    cta_background_color = db.Column(db.String(20), default='#000000')

    # Testimonials
    testimonials_enabled = db.Column(db.Boolean, default=False, nullable=False)
    testimonials_title = db.Column(db.String(255), default='What Our Customers Say')
    testimonials = db.Column(db.JSON, nullable=True)  # [{name, role, content, avatar}]

    # FAQ
    faq_enabled = db.Column(db.Boolean, default=False, nullable=False)
    faq_title = db.Column(db.String(255), default='Frequently Asked Questions')
    faqs = db.Column(db.JSON, nullable=True)  # [{question, answer}]

    # Builder content: ordered sections and rows
    sections = db.Column(db.JSON, nullable=True)
    theme_settings = db.Column(db.JSON, nullable=True)

    custom_css = db.Column(db.Text, nullable=True)
    meta_title = db.Column(db.String(255), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)

    published_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Columns the admin editor may write directly
    EDITABLE_FIELDS = (
        'title', 'slug', 'description', 'is_active',
        'hero_title', 'hero_subtitle', 'hero_image', 'hero_button_text',
        'hero_button_link', 'hero_button_style',
        'features_enabled', 'features_title', 'features',
        'products_enabled', 'products_title', 'product_ids',
        'cta_enabled', 'cta_title', 'cta_subtitle', 'cta_button_text',
        'cta_button_link', 'cta_background_color',
        'testimonials_enabled', 'testimonials_title', 'testimonials',
        'faq_enabled', 'faq_title', 'faqs',
        'custom_css', 'meta_title', 'meta_description',
    )

    def __repr__(self):
        return f'<LandingPage {self.slug}>'

    @property
    def is_public(self):
        return bool(self.is_published and self.is_active)

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data.update({
            'id': self.id,
            'is_published': self.is_published,
            'sections': self.sections or [],
            'theme_settings': self.theme_settings or {},
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        })
        return data
