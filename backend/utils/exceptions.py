class ShopError(Exception):
    """Base error carrying the API error code and HTTP status"""
    code = 'SHOP_ERROR'
    status_code = 400

    def __init__(self, message, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details


class ValidationError(ShopError):
    code = 'VALIDATION_ERROR'


class NotFoundError(ShopError):
    code = 'NOT_FOUND'
    status_code = 404


class InvalidTransition(ShopError):
    code = 'INVALID_STATUS_TRANSITION'


class PageLayoutError(ShopError):
    """Raised when landing page content breaks ordering or column rules"""
    code = 'INVALID_PAGE_LAYOUT'


class UnknownSectionType(PageLayoutError):
    code = 'UNKNOWN_SECTION_TYPE'


class IntegrationNotConfigured(ShopError):
    code = 'NOT_CONFIGURED'
    status_code = 500


class CourierError(ShopError):
    code = 'COURIER_ERROR'
