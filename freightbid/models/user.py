# freightbid/models/user.py

from flask_login import UserMixin

from .base import db

ROLE_ADMIN = 'admin'
ROLE_FORWARDER = 'forwarder'
ROLES = (ROLE_ADMIN, ROLE_FORWARDER)


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), index=True, unique=True, nullable=False)
    # Stored and compared as plain text for compatibility with existing accounts
    password = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(120), index=True, unique=True, nullable=False)
    company_name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.Enum(*ROLES, name='user_role'), default=ROLE_FORWARDER, nullable=False)

    lanes = db.relationship('Lane', backref='creator', lazy='dynamic')
    bids = db.relationship('Bid', backref='user', lazy='dynamic')

    def check_password(self, password):
        return self.password == password

    def to_dict(self, include_password=False):
        data = {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'companyName': self.company_name,
            'role': self.role,
        }
        if include_password:
            data['password'] = self.password
        return data

    def __repr__(self):
        return f'<User id={self.id} username={self.username} role={self.role}>'
