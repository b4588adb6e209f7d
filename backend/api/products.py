from flask import Blueprint, request
from sqlalchemy import or_
from models.product import Product, Category
from models.banner import Banner
from api.utils import success_response, error_response, paginate_query

products_bp = Blueprint('products', __name__)

HOME_LIMIT = 8

def active_products():
    return Product.query.filter(Product.is_active.is_(True))

@products_bp.route('', methods=['GET'])
def list_products():
    """
    Active products. Filters: ?category=<slug>, ?featured=1, ?new=1, ?q=<text>,
    ?sort=newest|price_asc|price_desc
    """
    try:
        query = active_products()

        category_slug = request.args.get('category')
        if category_slug:
            category = Category.query.filter_by(slug=category_slug).first()
            if not category:
                return success_response({"products": [], "pagination": {"page": 1, "per_page": 0, "total": 0, "pages": 0}})
            query = query.filter(Product.category_id == category.id)

        if request.args.get('featured') in ('1', 'true'):
            query = query.filter(Product.is_featured.is_(True))
        if request.args.get('new') in ('1', 'true'):
            query = query.filter(Product.is_new.is_(True))

        search = (request.args.get('q') or '').strip()
        if search:
            like = f'%{search}%'
            query = query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))

        sort = request.args.get('sort', 'newest')
        if sort == 'price_asc':
            query = query.order_by(Product.price.asc())
        elif sort == 'price_desc':
            query = query.order_by(Product.price.desc())
        else:
            query = query.order_by(Product.created_at.desc())

        items, pagination = paginate_query(query)
        return success_response({
            "products": [product.to_dict() for product in items],
            "pagination": pagination,
        })
    except Exception as e:
        return error_response(str(e), "INTERNAL_ERROR", 500)

@products_bp.route('/<slug>', methods=['GET'])
def get_product(slug):
    """Single active product with a few related ones from its category"""
    product = active_products().filter(Product.slug == slug).first()
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)

    related = []
    if product.category_id:
        related = active_products().filter(
            Product.category_id == product.category_id,
            Product.id != product.id
        ).limit(4).all()

    return success_response({
        "product": product.to_dict(),
        "related": [item.to_dict() for item in related],
    })

def get_home_data():
    """Everything the storefront home page needs in one call"""
    try:
        featured = active_products().filter(Product.is_featured.is_(True)) \
            .order_by(Product.created_at.desc()).limit(HOME_LIMIT).all()
        new_arrivals = active_products().filter(Product.is_new.is_(True)) \
            .order_by(Product.created_at.desc()).limit(HOME_LIMIT).all()
        categories = Category.query.order_by(Category.sort_order.asc()).all()
        banners = Banner.query.filter_by(is_active=True).order_by(Banner.sort_order.asc()).all()

        return success_response({
            "banners": [banner.to_dict() for banner in banners],
            "categories": [category.to_dict() for category in categories],
            "featured_products": [product.to_dict() for product in featured],
            "new_arrivals": [product.to_dict() for product in new_arrivals],
        })
    except Exception as e:
        return error_response(str(e), "INTERNAL_ERROR", 500)
