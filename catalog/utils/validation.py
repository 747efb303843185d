"""Coercion of loosely-typed JSON fields into product values."""

import math
from typing import Any, Optional

from catalog.exceptions import ProductValidationError
from catalog.models.product import NAME_MAX_LENGTH


def to_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string; None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clean_name(value: Any, max_length: Optional[int] = NAME_MAX_LENGTH) -> str:
    """Trimmed product name; must be a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise ProductValidationError("name", "Product name is required")
    name = value.strip()
    if max_length is not None and len(name) > max_length:
        raise ProductValidationError(
            "name", f"Product name must be at most {max_length} characters"
        )
    return name


def clean_price(value: Any) -> float:
    """Price as a float; must be a finite, non-negative number."""
    price = to_number(value)
    if price is None:
        raise ProductValidationError("price", "Price must be a valid number")
    if price < 0:
        raise ProductValidationError("price", "Price must not be negative")
    return round(price, 2)


def clean_stock(value: Any) -> int:
    """Stock as an int. Missing or non-numeric values become 0."""
    number = to_number(value)
    if number is None:
        return 0
    stock = int(number)
    if stock < 0:
        raise ProductValidationError("stock", "Stock must not be negative")
    return stock
