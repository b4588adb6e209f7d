import os
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()

class Config:
    """Base configuration class"""
    # Production: SECRET_KEY must be set via environment variable
    # Development: Falls back to dev key (only for local development)
    _secret_key = os.environ.get('SECRET_KEY')
    if not _secret_key:
        if os.environ.get('FLASK_ENV', 'development') == 'production':
            raise ValueError("SECRET_KEY environment variable must be set in production!")
        _secret_key = 'dev-secret-key-change-in-production'
    SECRET_KEY = _secret_key

    # Database (MySQL through PyMySQL unless DATABASE_URL overrides it)
    DB_HOST = os.environ.get('DB_HOST', 'localhost')
    DB_PORT = os.environ.get('DB_PORT', '3306')
    DB_USER = os.environ.get('DB_USER', 'dokan')
    DB_PASSWORD = os.environ.get('DB_PASSWORD', '')
    DB_NAME = os.environ.get('DB_NAME', 'dokan')

    # URL-encode password to handle special characters like @, #, etc.
    encoded_password = quote_plus(DB_PASSWORD)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f"mysql+pymysql://{DB_USER}:{encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 3600,
        'pool_size': 10,
        'max_overflow': 20,
    }

    # Session Configuration
    SESSION_TYPE = 'sqlalchemy'
    SESSION_SQLALCHEMY_TABLE = 'sessions'
    SESSION_PERMANENT = False
    SESSION_USE_SIGNER = True
    SESSION_KEY_PREFIX = 'dokan:session:'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour

    # Schema
    AUTO_MIGRATE = os.environ.get('AUTO_MIGRATE', 'True') == 'True'
    CREATE_TABLES = False

    # Application Settings
    FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
    DEBUG = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Initial admin account, created on first start when missing
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

    # Storefront
    SITE_URL = os.environ.get('SITE_URL', 'http://localhost:5000')
    CURRENCY_SYMBOL = '৳'
    FREE_SHIPPING_THRESHOLD = 2000
    FLAT_SHIPPING_FEE = 100
    SHIPPING_ZONE_FEES = {
        'inside_dhaka': 80,
        'outside_dhaka': 130,
    }
    DEFAULT_SHIPPING_ZONE = 'outside_dhaka'
    LOW_STOCK_THRESHOLD = 10

    # Steadfast courier
    STEADFAST_BASE_URL = os.environ.get('STEADFAST_BASE_URL', 'https://portal.steadfast.com.bd/api/v1')
    STEADFAST_API_KEY = os.environ.get('STEADFAST_API_KEY')
    STEADFAST_SECRET_KEY = os.environ.get('STEADFAST_SECRET_KEY')
    STEADFAST_TIMEOUT = 15

    # Courier history aggregator
    BDCOURIER_BASE_URL = os.environ.get('BDCOURIER_BASE_URL', 'https://bdcourier.com/api')
    BDCOURIER_API_KEY = os.environ.get('BDCOURIER_API_KEY')
    BDCOURIER_TIMEOUT = 8

    # Facebook Conversions API
    FACEBOOK_GRAPH_URL = os.environ.get('FACEBOOK_GRAPH_URL', 'https://graph.facebook.com/v18.0')
    FACEBOOK_TIMEOUT = 10

    # SMS gateway (key and sender are stored in settings)
    SMS_API_URL = os.environ.get('SMS_API_URL', 'https://bulksmsbd.net/api/smsapi')
    SMS_TIMEOUT = 10


class DevelopmentConfig(Config):
    DEBUG = os.environ.get('FLASK_DEBUG', 'True') == 'True'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'change-me-now')


class ProductionConfig(Config):
    DEBUG = os.environ.get('FLASK_DEBUG', 'False') == 'True'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SESSION_TYPE = None
    AUTO_MIGRATE = False
    CREATE_TABLES = True
    ADMIN_USERNAME = 'admin'
    ADMIN_EMAIL = 'admin@test.local'
    ADMIN_PASSWORD = 'admin-pass-123'
    STEADFAST_API_KEY = 'test-api-key'
    STEADFAST_SECRET_KEY = 'test-secret-key'
    BDCOURIER_API_KEY = 'test-bdcourier-key'
    SITE_URL = 'http://shop.test'


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
