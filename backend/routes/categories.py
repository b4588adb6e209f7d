from flask import Blueprint, request
from models import db
from models.product import Category, Product
from utils.permissions import require_permission
from utils.validators import generate_slug
from routes.products import unique_slug
from api.utils import success_response, error_response, validate_request_json

categories = Blueprint('categories', __name__, url_prefix='/admin/categories')

FIELDS = ('name', 'description', 'image_url', 'parent_id', 'sort_order')

@categories.route('', methods=['GET'])
@require_permission('categories')
def list_categories():
    items = Category.query.order_by(Category.sort_order.asc(), Category.name.asc()).all()
    data = []
    for category in items:
        row = category.to_dict()
        row['product_count'] = Product.query.filter_by(category_id=category.id).count()
        data.append(row)
    return success_response({"categories": data})

def apply_category_data(category, data):
    for field in FIELDS:
        if field in data:
            setattr(category, field, data[field])
    if 'sort_order' in data:
        try:
            category.sort_order = int(data['sort_order'] or 0)
        except (TypeError, ValueError):
            return "Sort order must be a number"
    if category.parent_id and category.parent_id == category.id:
        return "A category cannot be its own parent"
    if data.get('slug'):
        category.slug = unique_slug(generate_slug(data['slug']), Category, exclude_id=category.id)
    return None

@categories.route('', methods=['POST'])
@require_permission('categories')
@validate_request_json(['name'])
def create_category():
    data = request.get_json()
    try:
        category = Category(name=data['name'], sort_order=0)
        error = apply_category_data(category, data)
        if error:
            return error_response(error, "VALIDATION_ERROR", 400)
        if not category.slug:
            category.slug = unique_slug(generate_slug(data['name']), Category)
        db.session.add(category)
        db.session.commit()
        return success_response({"category": category.to_dict()}, "Category created successfully", 201)
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@categories.route('/<category_id>', methods=['PUT'])
@require_permission('categories')
@validate_request_json()
def update_category(category_id):
    category = db.session.get(Category, category_id)
    if not category:
        return error_response("Category not found", "NOT_FOUND", 404)
    try:
        error = apply_category_data(category, request.get_json())
        if error:
            db.session.rollback()
            return error_response(error, "VALIDATION_ERROR", 400)
        db.session.commit()
        return success_response({"category": category.to_dict()}, "Category updated successfully")
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@categories.route('/<category_id>', methods=['DELETE'])
@require_permission('categories')
def delete_category(category_id):
    """Delete a category; its products become uncategorised"""
    category = db.session.get(Category, category_id)
    if not category:
        return error_response("Category not found", "NOT_FOUND", 404)
    try:
        Product.query.filter_by(category_id=category.id).update({'category_id': None})
        Category.query.filter_by(parent_id=category.id).update({'parent_id': None})
        db.session.delete(category)
        db.session.commit()
        return success_response(message="Category deleted successfully")
    except Exception as e:
        db.session.rollback()
        return error_response(str(e), "INTERNAL_ERROR", 500)

@categories.route('/reorder', methods=['POST'])
@require_permission('categories')
@validate_request_json(['order'])
def reorder_categories():
    """Body: {order: [category_id, ...]}; list position becomes sort_order"""
    ids = request.get_json()['order']
    if not isinstance(ids, list):
        return error_response("Order must be a list of ids", "VALIDATION_ERROR", 400)
    for index, category_id in enumerate(ids):
        category = db.session.get(Category, category_id)
        if category:
            category.sort_order = index
    db.session.commit()
    return success_response(message="Categories reordered")
