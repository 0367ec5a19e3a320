# freightbid/models/bid.py

from .base import db, utcnow
from ..services.amounts import amount_to_json
from ..services.date_utils import format_datetime_for_response


class Bid(db.Model):
    __tablename__ = 'bids'

    id = db.Column(db.Integer, primary_key=True)
    lane_id = db.Column(db.Integer, db.ForeignKey('lanes.id'), index=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True, nullable=False)
    amount = db.Column(db.Numeric(10, 2, asdecimal=True), nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'laneId': self.lane_id,
            'userId': self.user_id,
            'amount': amount_to_json(self.amount),
            'comment': self.comment,
            'createdAt': format_datetime_for_response(self.created_at),
        }

    def __repr__(self):
        return f'<Bid id={self.id} lane={self.lane_id} user={self.user_id} amount={self.amount}>'
