# sweetshop/accounts.py
import logging

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import DuplicateAccount, InvalidCredentials
from .models import ROLE_USER, User, db

logger = logging.getLogger(__name__)

# Checked against when the username is unknown, so both failure paths hash.
_DUMMY_HASH = generate_password_hash('not-a-real-password')


def register(username, password, role=ROLE_USER):
    """Create an account; the password is stored only as a salted hash."""
    if User.query.filter_by(username=username).first():
        raise DuplicateAccount('Username already exists')
    user = User(username=username, password_hash=generate_password_hash(password), role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateAccount('Username already exists')
    logger.info('Registered account %s (id=%s, role=%s)', user.username, user.id, user.role)
    return user


def authenticate(username, password):
    """Return the matching user, or raise the same error for any mismatch."""
    user = User.query.filter_by(username=username).first()
    if user is None:
        check_password_hash(_DUMMY_HASH, password)
        logger.warning('Failed login attempt')
        raise InvalidCredentials('Invalid username or password')
    if not check_password_hash(user.password_hash, password):
        logger.warning('Failed login attempt')
        raise InvalidCredentials('Invalid username or password')
    return user
