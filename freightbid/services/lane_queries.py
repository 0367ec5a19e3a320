# freightbid/services/lane_queries.py
"""
Lane and bid queries.

Minimum bid and bid count are never stored; they are aggregated from the
bids table with SQL MIN/COUNT over the numeric amount column, so ordering is
always numeric.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func

from ..models import db, Lane, Bid, User, LANE_STATUSES, VEHICLE_TYPES
from .amounts import amount_to_json, to_decimal
from .date_utils import format_datetime_for_response

logger = logging.getLogger(__name__)

# Filter values meaning "no constraint"
UNCONSTRAINED = (None, '', 'all')

LIKE_ESCAPE = '\\'


@dataclass
class LaneFilters:
    status: Optional[str] = None
    vehicle_type: Optional[str] = None
    loading_location: Optional[str] = None
    unloading_location: Optional[str] = None

    @classmethod
    def from_args(cls, args):
        """Build filters from request query args, dropping "all" and blanks."""
        def pick(name):
            value = args.get(name)
            if value is not None:
                value = value.strip()
            return None if value in UNCONSTRAINED else value

        return cls(
            status=pick('status'),
            vehicle_type=pick('vehicleType'),
            loading_location=pick('loadingLocation'),
            unloading_location=pick('unloadingLocation'),
        )


@dataclass
class LaneSummary:
    lane: Lane
    min_bid: Optional[Decimal] = None
    bid_count: int = 0

    def to_dict(self):
        data = self.lane.to_dict()
        data['minBid'] = amount_to_json(self.min_bid)
        data['bidCount'] = self.bid_count
        return data


@dataclass
class LaneBid:
    bid: Bid
    username: str
    company_name: str

    def to_dict(self):
        data = self.bid.to_dict()
        data['username'] = self.username
        data['companyName'] = self.company_name
        return data


@dataclass
class LaneSnapshot:
    """Identifying fields of a lane as shown next to a forwarder's bid."""
    id: int
    bid_name: str
    status: str
    vehicle_type: str
    loading_location: str
    unloading_location: str
    valid_from: object
    valid_until: object
    min_bid: Optional[Decimal] = None

    @classmethod
    def from_lane(cls, lane, min_bid=None):
        return cls(
            id=lane.id,
            bid_name=lane.bid_name,
            status=lane.status,
            vehicle_type=lane.vehicle_type,
            loading_location=lane.loading_location,
            unloading_location=lane.unloading_location,
            valid_from=lane.valid_from,
            valid_until=lane.valid_until,
            min_bid=to_decimal(min_bid),
        )

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
            'minBid': amount_to_json(self.min_bid),
        }


@dataclass
class BidHistoryEntry:
    bid: Bid
    lane: LaneSnapshot
    username: str = ''
    company_name: str = ''

    def to_dict(self):
        data = self.bid.to_dict()
        data['username'] = self.username
        data['companyName'] = self.company_name
        data['lane'] = self.lane.to_dict()
        return data


def _contains(column, text):
    """Case-insensitive substring match with LIKE wildcards taken literally."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    if db.engine.dialect.name == 'sqlite':
        # ILIKE there ignores case for ASCII only; see register_sqlite_functions
        return func.casefold(column).like(f'%{escaped.casefold()}%', escape=LIKE_ESCAPE)
    return column.ilike(f'%{escaped}%', escape=LIKE_ESCAPE)


def bid_stats_subquery():
    """Per-lane MIN(amount) and COUNT(*) over the bids table."""
    return (
        db.session.query(
            Bid.lane_id.label('lane_id'),
            func.min(Bid.amount).label('min_bid'),
            func.count(Bid.id).label('bid_count'),
        )
        .group_by(Bid.lane_id)
        .subquery()
    )


def _lane_summary_query():
    stats = bid_stats_subquery()
    query = db.session.query(
        Lane,
        stats.c.min_bid,
        func.coalesce(stats.c.bid_count, 0),
    ).outerjoin(stats, stats.c.lane_id == Lane.id)
    return query


def get_lanes(filters=None) -> List[LaneSummary]:
    """All lanes matching ``filters``, newest first, with bid aggregates."""
    filters = filters or LaneFilters()
    # Values outside the enums match no lane and must not reach an enum-typed comparison
    if filters.status and filters.status not in LANE_STATUSES:
        return []
    if filters.vehicle_type and filters.vehicle_type not in VEHICLE_TYPES:
        return []

    query = _lane_summary_query()

    if filters.status:
        query = query.filter(Lane.status == filters.status)
    if filters.vehicle_type:
        query = query.filter(Lane.vehicle_type == filters.vehicle_type)
    if filters.loading_location:
        query = query.filter(_contains(Lane.loading_location, filters.loading_location))
    if filters.unloading_location:
        query = query.filter(_contains(Lane.unloading_location, filters.unloading_location))

    rows = query.order_by(Lane.created_at.desc(), Lane.id.desc()).all()
    return [
        LaneSummary(lane=lane, min_bid=to_decimal(min_bid), bid_count=int(bid_count))
        for lane, min_bid, bid_count in rows
    ]


def get_lane_summary(lane_id) -> Optional[LaneSummary]:
    row = _lane_summary_query().filter(Lane.id == lane_id).first()
    if row is None:
        return None
    lane, min_bid, bid_count = row
    return LaneSummary(lane=lane, min_bid=to_decimal(min_bid), bid_count=int(bid_count))


def get_lowest_bid_for_lane(lane_id) -> Optional[Decimal]:
    """Lowest amount bid on the lane, or None when nobody has bid yet."""
    lowest = (
        db.session.query(func.min(Bid.amount))
        .filter(Bid.lane_id == lane_id)
        .scalar()
    )
    return to_decimal(lowest)


def get_bid_count_for_lane(lane_id) -> int:
    return (
        db.session.query(func.count(Bid.id))
        .filter(Bid.lane_id == lane_id)
        .scalar()
    ) or 0


def get_bids_for_lane(lane_id) -> List[LaneBid]:
    """Every bid on the lane with its bidder, cheapest first."""
    rows = (
        db.session.query(Bid, User.username, User.company_name)
        .outerjoin(User, Bid.user_id == User.id)
        .filter(Bid.lane_id == lane_id)
        .order_by(Bid.amount.asc(), Bid.created_at.asc(), Bid.id.asc())
        .all()
    )
    return [
        LaneBid(
            bid=bid,
            username=username or 'Unknown',
            company_name=company_name or 'Unknown Company',
        )
        for bid, username, company_name in rows
    ]


def get_user_bid_history(user) -> List[BidHistoryEntry]:
    """
    Every bid ``user`` has placed, most recent first, each carrying a
    snapshot of its lane including the lane's current minimum bid.
    """
    rows = (
        db.session.query(Bid, Lane)
        .join(Lane, Bid.lane_id == Lane.id)
        .filter(Bid.user_id == user.id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
        .all()
    )
    if not rows:
        return []

    lane_ids = {lane.id for _, lane in rows}
    min_bids = dict(
        db.session.query(Bid.lane_id, func.min(Bid.amount))
        .filter(Bid.lane_id.in_(lane_ids))
        .group_by(Bid.lane_id)
        .all()
    )

    snapshots: Dict[int, LaneSnapshot] = {}
    history = []
    for bid, lane in rows:
        snapshot = snapshots.get(lane.id)
        if snapshot is None:
            snapshot = snapshots[lane.id] = LaneSnapshot.from_lane(lane, min_bids.get(lane.id))
        history.append(BidHistoryEntry(
            bid=bid,
            lane=snapshot,
            username=user.username,
            company_name=user.company_name,
        ))

    logger.debug(f"Bid history for user {user.id}: {len(history)} bids across {len(snapshots)} lanes")
    return history


def create_bid(lane, user, amount, comment=None) -> Bid:
    """Persist a bid. The caller has already checked role and lane status."""
    bid = Bid(lane_id=lane.id, user_id=user.id, amount=amount, comment=comment)
    db.session.add(bid)
    db.session.commit()
    logger.info(f"Bid {bid.id} of {amount} placed on lane {lane.id} by user {user.id}")
    return bid


def delete_lane(lane) -> int:
    """
    Delete a lane and its bids in one transaction.

    Returns:
        int: Number of bids removed with the lane
    """
    lane_id = lane.id
    removed_bids = Bid.query.filter(Bid.lane_id == lane_id).delete(synchronize_session=False)
    db.session.delete(lane)
    db.session.commit()
    logger.info(f"Lane {lane_id} deleted together with {removed_bids} bids")
    return removed_bids
