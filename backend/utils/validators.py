import re

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE
)
BD_PHONE_PATTERN = re.compile(r'^(\+?880)?01[3-9]\d{8}$')

def generate_slug(text):
    """Lowercase, runs of anything outside [a-z0-9] become one hyphen"""
    text = (text or '').lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')

def is_uuid(value):
    """True for canonical UUID strings (catalog product ids)"""
    if not isinstance(value, str):
        return False
    return UUID_PATTERN.match(value) is not None

def is_bangladesh_phone(phone):
    """Bangladeshi mobile number, optional +880/880 prefix, whitespace ignored"""
    if not isinstance(phone, str):
        return False
    return BD_PHONE_PATTERN.match(re.sub(r'\s+', '', phone)) is not None

def validate_price(price):
    """Validate price is positive number"""
    try:
        price_float = float(price)
        return price_float >= 0
    except (ValueError, TypeError):
        return False

def validate_stock(stock):
    """Validate stock quantity"""
    try:
        stock_int = int(stock)
        return stock_int >= 0
    except (ValueError, TypeError):
        return False

def to_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')
