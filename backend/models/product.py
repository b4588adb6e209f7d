from datetime import datetime
from . import db, generate_uuid

class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.Text, nullable=True)
    parent_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=True)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    parent = db.relationship('Category', remote_side=[id], backref='children')
    products = db.relationship('Product', backref='category', lazy=True)

    def __repr__(self):
        return f'<Category {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'image_url': self.image_url,
            'parent_id': self.parent_id,
            'sort_order': self.sort_order,
        }

class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)

    # Pricing
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    original_price = db.Column(db.Numeric(10, 2), nullable=True)

    category_id = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=True)

    # Inventory
    stock = db.Column(db.Integer, default=0, nullable=False)

    images = db.Column(db.JSON, nullable=True)  # list of image URLs, first is primary
    tags = db.Column(db.JSON, nullable=True)

    # Status & Flags
    is_featured = db.Column(db.Boolean, default=False, nullable=False)
    is_new = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    rating = db.Column(db.Numeric(3, 2), nullable=True)
    review_count = db.Column(db.Integer, default=0, nullable=False)
    features = db.Column(db.JSON, nullable=True)
    composition = db.Column(db.Text, nullable=True)
    care_instructions = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Product {self.name}>'

    @property
    def primary_image(self):
        return self.images[0] if self.images else None

    @property
    def discount_percent(self):
        """Whole-number percentage off the original price, or None"""
        if not self.original_price or float(self.original_price) <= float(self.price or 0):
            return None
        original = float(self.original_price)
        return round((original - float(self.price)) / original * 100)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description or '',
            'price': float(self.price or 0),
            'original_price': float(self.original_price) if self.original_price else None,
            'discount': self.discount_percent,
            'category_id': self.category_id,
            'category': self.category.name if self.category else None,
            'stock': self.stock,
            'images': self.images or [],
            'image': self.primary_image,
            'tags': self.tags or [],
            'is_featured': self.is_featured,
            'is_new': self.is_new,
            'is_active': self.is_active,
            'rating': float(self.rating) if self.rating is not None else None,
            'review_count': self.review_count,
            'features': self.features or [],
            'composition': self.composition,
            'care_instructions': self.care_instructions,
        }
