# sweetshop/validation.py
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .errors import InvalidQuantity, ValidationError
from .models import CATEGORIES

PRICE_REGEX = re.compile(r"^\d+\.?\d{0,2}$")
MAX_PRICE = Decimal('100000000')
CENT = Decimal('0.01')
# Largest value the quantity column holds.
MAX_QUANTITY = 2**31 - 1

# JSON key -> model attribute, in the order fields are checked.
SWEET_FIELDS = {
    'name': 'name',
    'description': 'description',
    'category': 'category',
    'price': 'price',
    'quantity': 'quantity',
    'imageUrl': 'image_url',
}

REQUIRED_MESSAGES = {
    'name': 'Name is required',
    'category': 'Category is required',
    'price': 'Price is required',
    'quantity': 'Quantity is required',
}


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


@dataclass(frozen=True)
class SearchFilters:
    name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None


def require_object(data):
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def parse_price(raw):
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValidationError('Invalid price format')
    text = raw.strip() if isinstance(raw, str) else str(raw)
    if not PRICE_REGEX.match(text):
        raise ValidationError('Invalid price format')
    try:
        price = Decimal(text).quantize(CENT)
    except InvalidOperation:
        raise ValidationError('Invalid price format')
    if price >= MAX_PRICE:
        raise ValidationError('Price is too large')
    return price


def _as_int(raw):
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def parse_quantity(raw):
    """Positive integer; callers apply their own upper bound."""
    if raw is None:
        raise InvalidQuantity('Quantity is required')
    qty = _as_int(raw)
    if qty is None:
        raise InvalidQuantity('Quantity must be an integer')
    if qty < 1:
        raise InvalidQuantity('Quantity must be at least 1')
    return qty


def parse_stock_level(raw):
    qty = _as_int(raw)
    if qty is None:
        raise ValidationError('Quantity must be an integer')
    if qty < 0:
        raise ValidationError('Quantity must be non-negative')
    if qty > MAX_QUANTITY:
        raise ValidationError('Quantity is too large')
    return qty


def _optional_text(raw, label):
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(f'{label} must be a string')
    return raw


def _check_field(key, raw):
    if key == 'name':
        if not isinstance(raw, str) or not raw.strip():
            raise ValidationError('Name is required')
        return raw.strip()
    if key == 'category':
        if raw not in CATEGORIES:
            raise ValidationError('Invalid category')
        return raw
    if key == 'price':
        return parse_price(raw)
    if key == 'quantity':
        return parse_stock_level(raw)
    if key == 'description':
        return _optional_text(raw, 'Description')
    return _optional_text(raw, 'Image URL')


def parse_new_sweet(data):
    data = require_object(data)
    fields = {}
    for key, attr in SWEET_FIELDS.items():
        raw = data.get(key)
        if raw is None and key in REQUIRED_MESSAGES:
            raise ValidationError(REQUIRED_MESSAGES[key])
        fields[attr] = _check_field(key, raw)
    return fields


def parse_sweet_changes(data):
    # Unknown keys and id are dropped.
    data = require_object(data)
    changes = {}
    for key, attr in SWEET_FIELDS.items():
        if key in data:
            changes[attr] = _check_field(key, data[key])
    return changes


def parse_search(args):
    name = (args.get('name') or '').strip() or None
    category = args.get('category') or None
    if category is not None and category not in CATEGORIES:
        raise ValidationError('Invalid category')
    min_raw = args.get('minPrice') or None
    max_raw = args.get('maxPrice') or None
    return SearchFilters(
        name=name,
        category=category,
        min_price=parse_price(min_raw) if min_raw is not None else None,
        max_price=parse_price(max_raw) if max_raw is not None else None,
    )


def parse_registration(data):
    data = require_object(data)
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or len(username) < 3:
        raise ValidationError('Username must be at least 3 characters')
    if not isinstance(password, str) or len(password) < 6:
        raise ValidationError('Password must be at least 6 characters')
    return Credentials(username=username, password=password)


def parse_login(data):
    data = require_object(data)
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not username:
        raise ValidationError('Username is required')
    if not isinstance(password, str) or not password:
        raise ValidationError('Password is required')
    return Credentials(username=username, password=password)
