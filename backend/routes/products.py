from flask import Blueprint, request, current_app
from sqlalchemy import or_
from models import db
from models.product import Product, Category
from utils.permissions import require_permission
from utils.validators import generate_slug, validate_price, validate_stock, to_bool
from api.utils import success_response, error_response, validate_request_json, paginate_query

products = Blueprint('products', __name__, url_prefix='/admin/products')

TEXT_FIELDS = ('name', 'description', 'composition', 'care_instructions')
FLAG_FIELDS = ('is_featured', 'is_new', 'is_active')
LIST_FIELDS = ('images', 'tags', 'features')

def unique_slug(base, model=Product, exclude_id=None):
    slug = base or 'item'
    candidate, counter = slug, 2
    while True:
        query = model.query.filter_by(slug=candidate)
        if exclude_id:
            query = query.filter(model.id != exclude_id)
        if not query.first():
            return candidate
        candidate = f'{slug}-{counter}'
        counter += 1

def apply_product_data(product, data):
    """Copy validated fields from the request body onto a product"""
    for field in TEXT_FIELDS:
        if field in data:
            setattr(product, field, data[field])

    if 'price' in data:
        if not validate_price(data['price']):
            return "Price must be a positive number"
        product.price = float(data['price'])
    if 'original_price' in data:
        if data['original_price'] in (None, ''):
            product.original_price = None
        elif not validate_price(data['original_price']):
            return "Original price must be a positive number"
        else:
            product.original_price = float(data['original_price'])
    if 'stock' in data:
        if not validate_stock(data['stock']):
            return "Stock must be a non-negative integer"
        product.stock = int(data['stock'])

    if 'category_id' in data:
        if data['category_id'] and not db.session.get(Category, data['category_id']):
            return "Category not found"
        product.category_id = data['category_id'] or None

    for field in FLAG_FIELDS:
        if field in data:
            setattr(product, field, to_bool(data[field]))
    for field in LIST_FIELDS:
        if field in data:
            value = data[field]
            if value is not None and not isinstance(value, list):
                return f"{field} must be a list"
            setattr(product, field, value or [])

    if 'slug' in data and data['slug']:
        product.slug = unique_slug(generate_slug(data['slug']), exclude_id=product.id)
    return None

@products.route('', methods=['GET'])
@require_permission('products')
def list_products():
    """All products including inactive ones. ?q=, ?category_id=, ?status=active|inactive"""
    query = Product.query
    search = (request.args.get('q') or '').strip()
    if search:
        query = query.filter(or_(Product.name.ilike(f'%{search}%'), Product.slug.ilike(f'%{search}%')))
    if request.args.get('category_id'):
        query = query.filter(Product.category_id == request.args['category_id'])
    status = request.args.get('status')
    if status == 'active':
        query = query.filter(Product.is_active.is_(True))
    elif status == 'inactive':
        query = query.filter(Product.is_active.is_(False))

    items, pagination = paginate_query(query.order_by(Product.created_at.desc()))
    return success_response({
        "products": [product.to_dict() for product in items],
        "pagination": pagination,
    })

@products.route('/<product_id>', methods=['GET'])
@require_permission('products')
def get_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)
    return success_response({"product": product.to_dict()})

@products.route('', methods=['POST'])
@require_permission('products')
@validate_request_json(['name', 'price'])
def create_product():
    data = request.get_json()
    try:
        product = Product(name=data['name'], stock=0)
        error = apply_product_data(product, data)
        if error:
            return error_response(error, "VALIDATION_ERROR", 400)
        if not product.slug:
            product.slug = unique_slug(generate_slug(data['name']))

        db.session.add(product)
        db.session.commit()
        return success_response({"product": product.to_dict()}, "Product created successfully", 201)
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@products.route('/<product_id>', methods=['PUT'])
@require_permission('products')
@validate_request_json()
def update_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)

    try:
        error = apply_product_data(product, request.get_json())
        if error:
            db.session.rollback()
            return error_response(error, "VALIDATION_ERROR", 400)
        db.session.commit()
        return success_response({"product": product.to_dict()}, "Product updated successfully")
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@products.route('/<product_id>', methods=['DELETE'])
@require_permission('products')
def delete_product(product_id):
    """Delete a product; past order items keep their snapshot"""
    product = db.session.get(Product, product_id)
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)

    try:
        from models.order import OrderItem
        OrderItem.query.filter_by(product_id=product.id).update({'product_id': None})
        db.session.delete(product)
        db.session.commit()
        return success_response(message="Product deleted successfully")
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@products.route('/<product_id>/stock', methods=['PUT'])
@require_permission('products')
@validate_request_json(['stock'])
def update_stock(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)

    stock = request.get_json()['stock']
    if not validate_stock(stock):
        return error_response("Stock must be a non-negative integer", "VALIDATION_ERROR", 400)

    product.stock = int(stock)
    db.session.commit()
    return success_response({"product": product.to_dict()}, "Stock updated")

@products.route('/low-stock', methods=['GET'])
@require_permission('products')
def low_stock():
    """Active products below the low-stock threshold, emptiest first"""
    threshold = request.args.get('threshold', current_app.config['LOW_STOCK_THRESHOLD'], type=int)
    items = Product.query.filter(Product.stock < threshold, Product.is_active.is_(True)) \
        .order_by(Product.stock.asc()).all()
    return success_response({"products": [product.to_dict() for product in items], "threshold": threshold})
