import uuid
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def generate_uuid():
    """Primary keys for catalog and order rows are UUID strings"""
    return str(uuid.uuid4())


from .user import User, Role
from .product import Product, Category
from .banner import Banner
from .order import Order, OrderItem
from .setting import Setting
from .coupon import Coupon
from .sms import SmsTemplate, SmsLog
from .landing_page import LandingPage

__all__ = [
    'db',
    'generate_uuid',
    'User', 'Role',
    'Product', 'Category',
    'Banner',
    'Order', 'OrderItem',
    'Setting',
    'Coupon',
    'SmsTemplate', 'SmsLog',
    'LandingPage',
]
