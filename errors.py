"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to, so the route boundary can
turn it into a ``{"message": ...}`` response without knowing where it came from.
"""


class InventoryError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InventoryError):
    status_code = 400
    default_message = "Invalid input"


class DuplicateKey(InventoryError):
    status_code = 400
    default_message = "Duplicate key"


class DuplicateUsername(DuplicateKey):
    default_message = "Username already exists"


class DuplicateSku(DuplicateKey):
    default_message = "Product with this SKU already exists"


class NotFound(InventoryError):
    status_code = 404
    default_message = "Not found"


class AuthError(InventoryError):
    status_code = 403
    default_message = "Invalid or expired token."


class MissingToken(AuthError):
    status_code = 401
    default_message = "Access denied. No token provided."


class InvalidToken(AuthError):
    pass


class ExpiredToken(AuthError):
    pass


# Same message and status whether the username or the password was wrong
class InvalidCredentials(AuthError):
    status_code = 400
    default_message = "Invalid username or password"
