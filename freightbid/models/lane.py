# freightbid/models/lane.py

from .base import db, utcnow
from ..services.date_utils import format_datetime_for_response

LANE_STATUSES = ('active', 'ending_soon', 'archived')
# Lanes that still accept bids
BIDDABLE_STATUSES = ('active', 'ending_soon')
VEHICLE_TYPES = ('40t', '12t', 'van')


class Lane(db.Model):
    __tablename__ = 'lanes'

    id = db.Column(db.Integer, primary_key=True)
    bid_name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.Enum(*LANE_STATUSES, name='lane_status'), default='active', nullable=False)
    vehicle_type = db.Column(db.Enum(*VEHICLE_TYPES, name='vehicle_type'), nullable=False)
    loading_location = db.Column(db.String(200), nullable=False)
    unloading_location = db.Column(db.String(200), nullable=False)
    valid_from = db.Column(db.DateTime, nullable=False)
    valid_until = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # No ORM cascade: bids are removed explicitly when a lane is deleted
    bids = db.relationship('Bid', backref='lane', lazy='dynamic', passive_deletes='all')

    @property
    def accepts_bids(self):
        return self.status in BIDDABLE_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'bidName': self.bid_name,
            'status': self.status,
            'vehicleType': self.vehicle_type,
            'loadingLocation': self.loading_location,
            'unloadingLocation': self.unloading_location,
            'validFrom': format_datetime_for_response(self.valid_from),
            'validUntil': format_datetime_for_response(self.valid_until),
            'createdAt': format_datetime_for_response(self.created_at),
            'createdBy': self.created_by,
        }

    def __repr__(self):
        return f'<Lane id={self.id} name={self.bid_name!r} status={self.status}>'
