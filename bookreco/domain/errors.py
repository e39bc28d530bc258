from typing import Any, Dict, Optional


class BookRecoError(Exception):
    """Base error for the recommendation domain."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProductNotFoundError(BookRecoError):
    """The requested catalog item does not exist."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class RefreshInProgressError(BookRecoError):
    """Another batch cluster refresh holds the lock."""

    def __init__(self, lock_key: str):
        super().__init__(
            "A cluster refresh is already running",
            details={"lock": lock_key},
        )
