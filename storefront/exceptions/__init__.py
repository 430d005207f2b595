"""Custom exceptions for the storefront application."""


class StorefrontError(Exception):
    """Base exception for all application errors."""
    code = 'INTERNAL_ERROR'

    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['status'] = 'error'
        return rv


class BusinessLogicError(StorefrontError):
    """Exception raised for business logic violations."""
    code = 'BUSINESS_RULE'

    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(StorefrontError):
    """Exception raised when a resource is not found."""
    code = 'NOT_FOUND'

    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class InvalidPriceInput(StorefrontError):
    """Product pricing is malformed (missing or negative price, bad original price)."""
    code = 'INVALID_PRICE_INPUT'

    def __init__(self, message, product_id=None):
        payload = {'product_id': product_id} if product_id is not None else None
        super().__init__(message, 422, payload)
        self.product_id = product_id


class LineNotFound(StorefrontError):
    """
    The cart line being edited no longer exists.

    Usually the line was removed from another tab; callers recover by
    reloading the cart and presenting the form again.
    """
    code = 'LINE_NOT_FOUND'

    def __init__(self, line_id):
        super().__init__(f"Cart line {line_id} no longer exists", 409, {'line_id': line_id})
        self.line_id = line_id


class InvalidQuantity(BusinessLogicError):
    """Quantity below 1 or not an integer."""
    code = 'INVALID_QUANTITY'

    def __init__(self, value):
        super().__init__(f"Quantity must be a whole number of at least 1 (got {value!r})",
                         payload={'value': str(value)})
        self.value = value


class QuantityLimitExceeded(BusinessLogicError):
    """A cart line would hold more units than MAX_LINE_QUANTITY."""
    code = 'QUANTITY_LIMIT'

    def __init__(self, quantity, limit):
        super().__init__(f"Quantity cannot exceed {limit} per line (got {quantity})",
                         payload={'quantity': quantity, 'limit': limit})
        self.quantity = quantity
        self.limit = limit


class SelectionNotPurchasable(BusinessLogicError):
    """A commit was attempted while the buy control is not enabled."""
    code = 'SELECTION_NOT_PURCHASABLE'

    def __init__(self, cta_state):
        super().__init__(f"Selection cannot be added to the cart ({cta_state.value})",
                         status_code=409, payload={'cta': cta_state.value})
        self.cta_state = cta_state


class DuplicateVariant(BusinessLogicError):
    """Raised when a (color, size) combination already exists for a product."""
    code = 'DUPLICATE_VARIANT'

    def __init__(self, color, sizes):
        super().__init__(f"Combination already exists: {color} - {', '.join(sizes)}",
                         status_code=409, payload={'color': color, 'sizes': list(sizes)})
