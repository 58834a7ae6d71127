class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class ReferenceNotFound(NotFoundError):
    """A sale or purchase points at an item that does not exist."""


class InsufficientStockError(AppError):
    pass


class AuthorizationError(AppError):
    pass


PermissionDenied = AuthorizationError


class StorageError(AppError):
    pass
