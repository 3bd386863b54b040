"""DANGLESCAN — dangling-CNAME subdomain takeover scanner."""

__version__ = "1.0.0"
