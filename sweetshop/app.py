# sweetshop/app.py
import logging

import click
from flask import Blueprint, Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from . import accounts, inventory
from .auth import admin_required, current_identity, issue_token, jwt, login_required
from .config import Config
from .errors import InternalError, NotFound, ShopError, ValidationError
from .models import ROLE_ADMIN, db
from .validation import (
    parse_login, parse_new_sweet, parse_quantity, parse_registration, parse_search,
    parse_sweet_changes, require_object,
)

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def create_app(config=None):
    app = Flask(__name__)
    if config is None:
        config = Config()
    if isinstance(config, dict):
        app.config.from_mapping(config)
    else:
        app.config.from_object(config)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)
    jwt.init_app(app)
    app.register_blueprint(api, url_prefix='/api')
    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):
    @app.errorhandler(ShopError)
    def handle_shop_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({'message': err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        db.session.rollback()
        internal = InternalError()
        return jsonify(internal.to_dict()), internal.status_code


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create database tables."""
        db.create_all()
        click.echo('Database initialised.')

    @app.cli.command('create-admin')
    @click.argument('username')
    @click.password_option()
    def create_admin(username, password):
        """Create an administrator account."""
        try:
            creds = parse_registration({'username': username, 'password': password})
            user = accounts.register(creds.username, creds.password, role=ROLE_ADMIN)
        except ValidationError as err:
            raise click.ClickException(err.message)
        click.echo(f'Administrator {user.username} created (id={user.id}).')


def json_body():
    return require_object(request.get_json(silent=True))


def auth_response(user, status=200):
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)}), status


# Auth

@api.route('/auth/register', methods=['POST'])
def register():
    creds = parse_registration(json_body())
    user = accounts.register(creds.username, creds.password)
    return auth_response(user, 201)


@api.route('/auth/login', methods=['POST'])
def login():
    creds = parse_login(json_body())
    user = accounts.authenticate(creds.username, creds.password)
    return auth_response(user)


# Catalog

@api.route('/sweets', methods=['GET'])
@login_required
def list_sweets():
    return jsonify([s.to_dict() for s in inventory.list_sweets()])


@api.route('/sweets/search', methods=['GET'])
@login_required
def search_sweets():
    filters = parse_search(request.args)
    return jsonify([s.to_dict() for s in inventory.search_sweets(filters)])


@api.route('/sweets', methods=['POST'])
@login_required
@admin_required
def create_sweet():
    sweet = inventory.create_sweet(parse_new_sweet(json_body()))
    return jsonify(sweet.to_dict()), 201


@api.route('/sweets/<int:sid>', methods=['PUT'])
@login_required
@admin_required
def update_sweet(sid):
    sweet = inventory.update_sweet(sid, parse_sweet_changes(json_body()))
    return jsonify(sweet.to_dict())


@api.route('/sweets/<int:sid>', methods=['DELETE'])
@login_required
@admin_required
def delete_sweet(sid):
    if not inventory.delete_sweet(sid):
        raise NotFound('Sweet not found')
    return '', 204


# Inventory

@api.route('/sweets/<int:sid>/purchase', methods=['POST'])
@login_required
def purchase_sweet(sid):
    quantity = parse_quantity(json_body().get('quantity'))
    sweet = inventory.purchase(sid, current_identity().id, quantity)
    return jsonify({'message': 'Purchase successful', 'sweet': sweet.to_dict()})


@api.route('/sweets/<int:sid>/restock', methods=['POST'])
@login_required
@admin_required
def restock_sweet(sid):
    quantity = parse_quantity(json_body().get('quantity'))
    sweet = inventory.restock(sid, quantity)
    return jsonify({'message': 'Restock successful', 'sweet': sweet.to_dict()})


@api.route('/user/purchases', methods=['GET'])
@login_required
def my_purchases():
    history = inventory.purchase_history(current_identity().id)
    return jsonify([p.to_dict(sweet) for p, sweet in history])
