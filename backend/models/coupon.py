from datetime import datetime
from . import db

class Coupon(db.Model):
    """Discount code entered at checkout or validated from the cart"""
    __tablename__ = 'coupons'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)  # stored upper-case
    discount_type = db.Column(db.String(20), nullable=False)  # percentage, fixed
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    min_order_amount = db.Column(db.Numeric(10, 2), nullable=True)
    max_discount_amount = db.Column(db.Numeric(10, 2), nullable=True)  # cap for percentage coupons
    usage_limit = db.Column(db.Integer, nullable=True)
    usage_count = db.Column(db.Integer, default=0, nullable=False)
    starts_at = db.Column(db.DateTime, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    DISCOUNT_TYPES = ('percentage', 'fixed')

    def __repr__(self):
        return f'<Coupon {self.code} {self.discount_value} {self.discount_type}>'

    @staticmethod
    def normalize_code(code):
        return (code or '').strip().upper()

    def is_valid(self, order_total=0, now=None):
        """(ok, reason) for using this coupon on an order of order_total"""
        now = now or datetime.utcnow()
        minimum = float(self.min_order_amount or 0)

        if not self.is_active:
            return False, "Coupon is disabled"
        if self.starts_at is not None and now < self.starts_at:
            return False, "Coupon is not active yet"
        if self.expires_at is not None and now > self.expires_at:
            return False, "Coupon has expired"
        if self.usage_limit and (self.usage_count or 0) >= self.usage_limit:
            return False, "Coupon usage limit reached"
        if minimum and order_total < minimum:
            return False, f"Minimum order amount of ৳{minimum:g} required"
        return True, "Valid"

    def calculate_discount(self, order_total):
        """Percentage discounts respect max_discount_amount; neither kind exceeds the total"""
        total = float(order_total)
        value = float(self.discount_value)
        if self.discount_type == 'percentage':
            discount = total * value / 100
            if self.max_discount_amount:
                discount = min(discount, float(self.max_discount_amount))
        else:
            discount = value
        return round(min(discount, total), 2)

    def apply(self):
        self.usage_count = (self.usage_count or 0) + 1

    def to_dict(self):
        def money(value):
            return float(value) if value else None

        return {
            'id': self.id,
            'code': self.code,
            'discount_type': self.discount_type,
            'discount_value': float(self.discount_value),
            'min_order_amount': money(self.min_order_amount),
            'max_discount_amount': money(self.max_discount_amount),
            'usage_limit': self.usage_limit,
            'usage_count': self.usage_count,
            'starts_at': self.starts_at.isoformat() if self.starts_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'is_active': self.is_active,
        }
