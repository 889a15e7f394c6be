# sweetshop/errors.py


class ShopError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message}


class ValidationError(ShopError):
    status_code = 400
    default_message = 'Invalid request'


class InvalidQuantity(ValidationError):
    default_message = 'Quantity must be at least 1'


class DuplicateAccount(ValidationError):
    default_message = 'Username already exists'


class InsufficientStock(ShopError):
    status_code = 400
    default_message = 'Insufficient stock'


class Unauthorized(ShopError):
    status_code = 401
    default_message = 'Authentication required'


class InvalidCredentials(ShopError):
    status_code = 401
    default_message = 'Invalid username or password'


class Forbidden(ShopError):
    status_code = 403
    default_message = 'Invalid or expired token'


class NotFound(ShopError):
    status_code = 404
    default_message = 'Sweet not found'


class InternalError(ShopError):
    pass
