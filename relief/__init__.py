"""
Insta-Relief: weather-alert notification and relief payout service.
"""

__version__ = "0.2.0"
