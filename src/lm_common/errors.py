"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Catalog
  3xxx: Shop
  4xxx: Order
  5xxx: Notification
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class RoleForbiddenError(AppError):
    def __init__(self, required_role: str) -> None:
        super().__init__(1006, f"This action requires the {required_role} role", 403)


# --- 2xxx: Catalog ---

class ProductNotFoundError(AppError):
    def __init__(self, product_id: str) -> None:
        super().__init__(2001, f"Product not found: {product_id}", 404)


# --- 3xxx: Shop ---

class ShopkeeperNotFoundError(AppError):
    def __init__(self, shopkeeper_id: str) -> None:
        super().__init__(3001, f"Shopkeeper not found: {shopkeeper_id}", 404)


# --- 4xxx: Order ---

class EmptyOrderError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Order items are required", 400)


class InvalidOrderStatusError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(4002, f"Invalid status: {status}", 400)


class OrderTransitionNotAllowedError(AppError):
    def __init__(self, order_id: str, current: str, target: str) -> None:
        super().__init__(
            4003, f"Order {order_id} cannot move from {current} to {target}", 409
        )


class OrderNotFoundError(AppError):
    """Raised for absent orders and for orders not owned by the caller alike."""

    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class PaymentAlreadyRecordedError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4005, f"Payment already recorded for order {order_id}", 409)


# --- 5xxx: Notification ---

class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(5001, f"Notification not found: {notification_id}", 404)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(9002, message, 500)


class InvalidInputError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(9003, message, 400)
