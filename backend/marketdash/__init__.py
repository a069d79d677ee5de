"""
MarketDash Analytics

Financial time-series analytics for the market dashboard:
technical indicators, macro beta, asset correlation, CAPE and
options open-interest sentiment.
"""

__version__ = "0.1.0"
