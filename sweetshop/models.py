# sweetshop/models.py
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

ROLE_USER = 'user'
ROLE_ADMIN = 'admin'
ROLES = (ROLE_USER, ROLE_ADMIN)

CATEGORIES = [
    'chocolates',
    'gummies',
    'hard_candies',
    'lollipops',
    'caramels',
    'jellies',
    'licorice',
    'mints',
]


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_money(value):
    return f'{value:.2f}' if value is not None else None


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(*ROLES, name='role'), nullable=False, default=ROLE_USER)

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'role': self.role}


class Sweet(db.Model):
    __tablename__ = 'sweets'
    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_sweets_quantity_non_negative'),
    )
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.Enum(*CATEGORIES, name='category'), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(255), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'price': format_money(self.price),
            'quantity': self.quantity,
            'imageUrl': self.image_url,
        }


class Purchase(db.Model):
    __tablename__ = 'purchases'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    # No foreign key: ledger rows outlive deleted sweets.
    sweet_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)
    purchased_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self, sweet=None):
        return {
            'id': self.id,
            'userId': self.user_id,
            'sweetId': self.sweet_id,
            'quantity': self.quantity,
            'totalPrice': format_money(self.total_price),
            'purchasedAt': self.purchased_at.isoformat() if self.purchased_at else None,
            'sweet': sweet.to_dict() if sweet is not None else None,
        }
