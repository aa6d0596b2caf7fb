from .exceptions import (
    BadRequestError,
    CodeReviewError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    register_exception_handlers,
)
from .logging import get_logger, setup_logger
from .security import (
    TokenData,
    as_utc,
    create_access_token,
    decode_token,
    generate_token,
    hash_password,
    hash_token,
    utcnow,
    verify_password,
)
from .settings import CodeReviewSettings, get_config, reset_config

__all__ = [
    "CodeReviewSettings",
    "get_config",
    "reset_config",
    "get_logger",
    "setup_logger",
    "CodeReviewError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "register_exception_handlers",
    "TokenData",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "generate_token",
    "hash_token",
    "as_utc",
    "utcnow",
]
