"""Pydantic schemas for data validation"""
from orderdesk.schemas.order import (
    LineItemCreateSchema,
    LineItemSchema,
    OrderCreateSchema,
    OrderSchema,
    OrderStatusUpdateSchema,
    StatusHistorySchema,
)
from orderdesk.schemas.pricing import PriceQuoteSchema, PricingOverrideSchema, ProductSchema


__all__ = [
    "LineItemCreateSchema",
    "LineItemSchema",
    "OrderCreateSchema",
    "OrderSchema",
    "OrderStatusUpdateSchema",
    "PriceQuoteSchema",
    "PricingOverrideSchema",
    "ProductSchema",
    "StatusHistorySchema",
]
