import logging
import os
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate, upgrade
from flask_session import Session
from sqlalchemy.exc import OperationalError, ProgrammingError

from config import config_by_name
from errors import register_error_handlers
from models import db
from models.user import User, Role
from utils.auth import hash_password

logger = logging.getLogger(__name__)

# Default roles and what they may touch in the admin
DEFAULT_ROLES = {
    Role.SUPER_ADMIN: {'all': True},
    Role.MANAGER: {
        'products': True,
        'categories': True,
        'orders': True,
        'marketing': True,
        'landing_pages': True,
        'sms': True,
        'settings': True,
    },
    Role.EDITOR: {
        'products': True,
        'categories': True,
        'landing_pages': True,
    },
}

def create_app(config_class=None):
    """Application factory"""
    base_dir = os.path.dirname(os.path.abspath(__file__))

    if config_class is None:
        config_class = config_by_name.get(os.environ.get('FLASK_ENV', 'development'),
                                          config_by_name['development'])

    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    CORS(app, resources={r"/*": {"origins": "*"}})

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db, directory=os.path.join(base_dir, 'migrations'))

    with app.app_context():
        if app.config.get('AUTO_MIGRATE'):
            try:
                upgrade()
                logger.info("Database migrations applied successfully.")
            except (OperationalError, ProgrammingError) as e:
                logger.warning(f"Migration warning: {e}")
        elif app.config.get('CREATE_TABLES'):
            db.create_all()

    # Server-side sessions in the database; without a session type Flask's
    # signed cookie session is used
    if app.config.get('SESSION_TYPE'):
        app.config['SESSION_SQLALCHEMY'] = db
        Session(app)

    register_error_handlers(app)

    # Admin blueprints
    from routes.auth import auth
    from routes.dashboard import dashboard
    from routes.products import products
    from routes.categories import categories
    from routes.banners import banners
    from routes.coupons import coupons
    from routes.orders import orders
    from routes.courier import courier
    from routes.settings import settings
    from routes.sms import sms
    from routes.landing_pages import landing_pages

    app.register_blueprint(auth)
    app.register_blueprint(dashboard)
    app.register_blueprint(products)
    app.register_blueprint(categories)
    app.register_blueprint(banners)
    app.register_blueprint(coupons)
    app.register_blueprint(orders)
    app.register_blueprint(courier)
    app.register_blueprint(settings)
    app.register_blueprint(sms)
    app.register_blueprint(landing_pages)

    # Public landing pages
    from routes.landing import landing
    app.register_blueprint(landing)

    # Storefront API
    from api import api_v1
    app.register_blueprint(api_v1)

    with app.app_context():
        create_initial_data(app)

    # Template globals for the landing pages
    @app.context_processor
    def inject_shop():
        return dict(
            currency=app.config.get('CURRENCY_SYMBOL', '৳'),
            site_url=app.config.get('SITE_URL', ''),
        )

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}

    return app

def create_initial_data(app):
    """Create default roles and the first admin account"""
    try:
        roles = {}
        for name, permissions in DEFAULT_ROLES.items():
            role = Role.query.filter_by(name=name).first()
            if not role:
                role = Role(name=name, permissions=permissions)
                db.session.add(role)
            roles[name] = role
        db.session.flush()

        password = app.config.get('ADMIN_PASSWORD')
        username = app.config.get('ADMIN_USERNAME')
        if password and not User.query.filter_by(username=username).first():
            db.session.add(User(
                username=username,
                email=app.config.get('ADMIN_EMAIL'),
                password_hash=hash_password(password),
                role_id=roles[Role.SUPER_ADMIN].id,
            ))
            logger.info(f"Created admin user {username}")

        db.session.commit()
    except (ProgrammingError, OperationalError) as e:
        # Tables not there yet (fresh install before the first migration)
        db.session.rollback()
        logger.warning(f"Skipping initial data: {e}")
