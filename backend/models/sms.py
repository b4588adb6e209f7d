from datetime import datetime
from . import db

class SmsTemplate(db.Model):
    """Message body sent to the customer when an order event happens"""
    __tablename__ = 'sms_templates'

    EVENTS = (
        'order_placed',
        'order_confirmed',
        'order_processing',
        'order_shipped',
        'order_delivered',
        'order_cancelled',
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    event = db.Column(db.String(50), unique=True, nullable=False, index=True)
    body = db.Column(db.Text, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<SmsTemplate {self.event}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'event': self.event,
            'body': self.body,
            'is_active': self.is_active,
        }

class SmsLog(db.Model):
    __tablename__ = 'sms_logs'

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(30), nullable=False)
    message = db.Column(db.Text, nullable=False)
    event = db.Column(db.String(50), nullable=True)
    order_id = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=True)
    success = db.Column(db.Boolean, default=False, nullable=False)
    response = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'phone': self.phone,
            'message': self.message,
            'event': self.event,
            'order_id': self.order_id,
            'success': self.success,
            'response': self.response,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
