# sweetshop/inventory.py
import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import update

from .errors import InsufficientStock, InvalidQuantity, NotFound
from .models import Purchase, Sweet, db
from .validation import MAX_QUANTITY, SearchFilters, parse_quantity

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def line_total(unit_price, quantity):
    return (Decimal(unit_price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def _get_or_raise(sweet_id):
    sweet = db.session.get(Sweet, sweet_id)
    if sweet is None:
        raise NotFound('Sweet not found')
    return sweet


def purchase(sweet_id, account_id, quantity):
    """Decrement stock and record the sale in one transaction."""
    quantity = parse_quantity(quantity)
    try:
        if quantity > MAX_QUANTITY:
            _get_or_raise(sweet_id)
            raise InsufficientStock('Insufficient stock')
        result = db.session.execute(
            update(Sweet)
            .where(Sweet.id == sweet_id, Sweet.quantity >= quantity)
            .values(quantity=Sweet.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            _get_or_raise(sweet_id)
            logger.warning('Refused purchase of %s x sweet %s for account %s: insufficient stock',
                           quantity, sweet_id, account_id)
            raise InsufficientStock('Insufficient stock')

        sweet = db.session.get(Sweet, sweet_id, populate_existing=True)
        record = Purchase(
            user_id=account_id,
            sweet_id=sweet.id,
            quantity=quantity,
            total_price=line_total(sweet.price, quantity),
        )
        db.session.add(record)
        db.session.expunge(sweet)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info('Account %s bought %s x sweet %s for %s (remaining %s)',
                account_id, quantity, sweet.id, record.total_price, sweet.quantity)
    return sweet


def restock(sweet_id, quantity):
    quantity = parse_quantity(quantity)
    if quantity > MAX_QUANTITY:
        raise InvalidQuantity('Quantity is too large')
    try:
        result = db.session.execute(
            update(Sweet)
            .where(Sweet.id == sweet_id, Sweet.quantity <= MAX_QUANTITY - quantity)
            .values(quantity=Sweet.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            _get_or_raise(sweet_id)
            raise InvalidQuantity('Restock would exceed the maximum stock level')
        sweet = db.session.get(Sweet, sweet_id, populate_existing=True)
        # Keep the values read under the row lock; commit would expire them.
        db.session.expunge(sweet)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info('Restocked sweet %s by %s (now %s)', sweet_id, quantity, sweet.quantity)
    return sweet


def create_sweet(fields):
    sweet = Sweet(**fields)
    db.session.add(sweet)
    db.session.commit()
    logger.info('Created sweet %s (%s)', sweet.id, sweet.name)
    return sweet


def update_sweet(sweet_id, changes):
    # A quantity here overwrites stock outright; already checked non-negative.
    sweet = _get_or_raise(sweet_id)
    for attr, value in changes.items():
        setattr(sweet, attr, value)
    db.session.commit()
    logger.info('Updated sweet %s: %s', sweet.id, ', '.join(sorted(changes)) or 'no changes')
    return sweet


def delete_sweet(sweet_id):
    """Returns False if absent. Purchases referencing the item are kept."""
    sweet = db.session.get(Sweet, sweet_id)
    if sweet is None:
        return False
    db.session.delete(sweet)
    db.session.commit()
    logger.info('Deleted sweet %s', sweet_id)
    return True


def list_sweets():
    return Sweet.query.order_by(Sweet.id).all()


def search_sweets(filters: SearchFilters):
    query = Sweet.query
    if filters.name:
        query = query.filter(Sweet.name.icontains(filters.name, autoescape=True))
    if filters.category:
        query = query.filter(Sweet.category == filters.category)
    if filters.min_price is not None:
        query = query.filter(Sweet.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.filter(Sweet.price <= filters.max_price)
    return query.order_by(Sweet.id).all()


def purchase_history(account_id):
    # sweet is None once the item has been deleted from the catalog.
    rows = db.session.execute(
        db.select(Purchase, Sweet)
        .outerjoin(Sweet, Sweet.id == Purchase.sweet_id)
        .where(Purchase.user_id == account_id)
        .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
    ).all()
    return [(p, s) for p, s in rows]
