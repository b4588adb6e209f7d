from datetime import datetime, timedelta
from flask import Blueprint, current_app
from sqlalchemy import func
from models import db
from models.product import Product
from models.order import Order
from models.user import User
from utils.permissions import login_required
from api.utils import success_response

dashboard = Blueprint('dashboard', __name__, url_prefix='/admin')

@dashboard.route('/dashboard', methods=['GET'])
@login_required
def index():
    """Dashboard statistics"""
    low_stock = current_app.config['LOW_STOCK_THRESHOLD']

    total_orders = Order.query.count()
    total_products = Product.query.count()
    total_users = User.query.count()
    total_revenue = db.session.query(func.coalesce(func.sum(Order.total), 0)) \
        .filter(Order.payment_status == 'paid').scalar()
    pending_orders = Order.query.filter_by(status='pending').count()
    low_stock_products = Product.query.filter(Product.stock < low_stock, Product.is_active.is_(True)).count()

    since = datetime.utcnow() - timedelta(days=7)
    recent_orders = Order.query.filter(Order.created_at >= since) \
        .order_by(Order.created_at.desc()).all()

    # Orders per day for the last week, oldest first
    daily = {}
    for offset in range(6, -1, -1):
        day = (datetime.utcnow() - timedelta(days=offset)).date().isoformat()
        daily[day] = {'date': day, 'orders': 0, 'revenue': 0.0}
    for order in recent_orders:
        day = order.created_at.date().isoformat()
        if day in daily:
            daily[day]['orders'] += 1
            daily[day]['revenue'] += float(order.total)

    return success_response({
        "totalOrders": total_orders,
        "totalProducts": total_products,
        "totalUsers": total_users,
        "totalRevenue": float(total_revenue or 0),
        "pendingOrders": pending_orders,
        "lowStockProducts": low_stock_products,
        "recentOrders": [order.to_dict(include_items=False) for order in recent_orders[:10]],
        "dailyOrders": list(daily.values()),
    })
