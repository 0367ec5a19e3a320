"""Freight lane tendering: admins publish lanes, forwarders bid on them."""

__version__ = '1.0.0'
