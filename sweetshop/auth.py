# sweetshop/auth.py
import logging
from dataclasses import dataclass
from functools import wraps

from flask import g
from flask_jwt_extended import (
    JWTManager, create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import PyJWTError

from .errors import Forbidden, Unauthorized
from .models import ROLE_ADMIN, ROLES

logger = logging.getLogger(__name__)

jwt = JWTManager()


@dataclass(frozen=True)
class Identity:
    id: int
    username: str
    role: str

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN


def issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={'username': user.username, 'role': user.role},
    )


def _identity_from_token():
    try:
        verify_jwt_in_request()
    except NoAuthorizationError:
        raise Unauthorized('Authentication required')
    except (JWTExtendedException, PyJWTError) as exc:
        logger.info('Rejected bearer token: %s', exc.__class__.__name__)
        raise Forbidden('Invalid or expired token')

    claims = get_jwt()
    try:
        identity = Identity(
            id=int(get_jwt_identity()),
            username=claims['username'],
            role=claims['role'],
        )
    except (KeyError, TypeError, ValueError):
        raise Forbidden('Invalid or expired token')
    if identity.role not in ROLES:
        raise Forbidden('Invalid or expired token')
    return identity


def login_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        g.identity = _identity_from_token()
        return f(*args, **kwargs)
    return wrapped


def admin_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        identity = g.get('identity')
        if identity is None or not identity.is_admin:
            raise Forbidden('Admin access required')
        return f(*args, **kwargs)
    return wrapped


def current_identity():
    return g.identity
