"""
Flask blueprints for the Freight Lane Tenders API.
"""

from .auth import auth_bp
from .lanes import lanes_bp
from .bids import bids_bp
from .health import health_bp

# (blueprint, url_prefix)
BLUEPRINTS = [
    (auth_bp, '/api'),
    (lanes_bp, '/api/lanes'),
    (bids_bp, '/api/user'),
    (health_bp, '/api'),
]

__all__ = ['auth_bp', 'lanes_bp', 'bids_bp', 'health_bp', 'BLUEPRINTS']
