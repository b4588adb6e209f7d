from datetime import datetime
from . import db, generate_uuid

class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    order_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    status = db.Column(db.String(50), default='pending', nullable=False)  # see services.order_lifecycle
    payment_method = db.Column(db.String(50), default='cod', nullable=False)  # cod, online
    payment_status = db.Column(db.String(50), default='pending', nullable=False)  # pending, paid, refunded

    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    shipping_cost = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    discount = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    total = db.Column(db.Numeric(10, 2), nullable=False, default=0.00)
    coupon_code = db.Column(db.String(50), nullable=True)

    # Shipping address (flat columns, as couriers want them)
    shipping_name = db.Column(db.String(100), nullable=False)
    shipping_phone = db.Column(db.String(30), nullable=False, index=True)
    shipping_street = db.Column(db.String(300), nullable=False)
    shipping_city = db.Column(db.String(100), nullable=False, default='N/A')
    shipping_district = db.Column(db.String(100), nullable=False, default='N/A')
    shipping_postal_code = db.Column(db.String(20), nullable=True)
    shipping_zone = db.Column(db.String(30), nullable=True)  # inside_dhaka, outside_dhaka

    notes = db.Column(db.Text, nullable=True)
    tracking_number = db.Column(db.String(100), nullable=True)
    consignment_id = db.Column(db.String(100), nullable=True)
    order_source = db.Column(db.String(150), default='website', nullable=False)  # website, manual, landing-page:<slug>

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship('OrderItem', backref='order', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Order {self.order_number}>'

    @property
    def shipping_address_line(self):
        """Street, district, city and postal code joined for couriers"""
        parts = [self.shipping_street, self.shipping_district, self.shipping_city]
        if self.shipping_postal_code:
            parts.append(self.shipping_postal_code)
        return ', '.join(p for p in parts if p)

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'status': self.status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'subtotal': float(self.subtotal or 0),
            'shipping_cost': float(self.shipping_cost or 0),
            'discount': float(self.discount or 0),
            'total': float(self.total or 0),
            'coupon_code': self.coupon_code,
            'shipping': {
                'name': self.shipping_name,
                'phone': self.shipping_phone,
                'street': self.shipping_street,
                'city': self.shipping_city,
                'district': self.shipping_district,
                'postal_code': self.shipping_postal_code,
                'zone': self.shipping_zone,
            },
            'notes': self.notes,
            'tracking_number': self.tracking_number,
            'consignment_id': self.consignment_id,
            'order_source': self.order_source,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

class OrderItem(db.Model):
    """Snapshot of a purchased line; never re-read from the catalog"""
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=False)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=True)
    product_name = db.Column(db.String(255), nullable=False)
    product_image = db.Column(db.Text, nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    def __repr__(self):
        return f'<OrderItem {self.id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'product_image': self.product_image,
            'quantity': self.quantity,
            'price': float(self.price),
            'subtotal': round(float(self.price) * self.quantity, 2),
        }
