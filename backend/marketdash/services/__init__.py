"""
MarketDash Services

Service layer containing all analytics logic.
Each service has a defined interface (contract) and implementation.
"""

from marketdash.services.base import BaseService

__all__ = ["BaseService"]
