"""
Service layer
"""

from orderdesk.services.order_service import OrderService
from orderdesk.services.pricing_service import CatalogEntry, PricingService
from orderdesk.services.service_factory import ServiceFactory


__all__ = ["CatalogEntry", "OrderService", "PricingService", "ServiceFactory"]
