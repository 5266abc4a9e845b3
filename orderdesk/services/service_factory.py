"""
Factory wiring repositories into services
"""

import logging

import aiosqlite

from orderdesk.domain.order_state_machine import OrderStateMachine
from orderdesk.repositories import CatalogRepository, OrderRepository, OverrideRepository
from orderdesk.services.order_service import OrderService
from orderdesk.services.pricing_service import PricingService


logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Lazily built services sharing one connection
    """

    def __init__(self, db_connection: aiosqlite.Connection):
        self.db_connection = db_connection
        self._catalog_repo: CatalogRepository | None = None
        self._override_repo: OverrideRepository | None = None
        self._order_repo: OrderRepository | None = None
        self._state_machine: OrderStateMachine | None = None
        self._pricing_service: PricingService | None = None
        self._order_service: OrderService | None = None

    @property
    def catalog_repository(self) -> CatalogRepository:
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self.db_connection)
        return self._catalog_repo

    @property
    def override_repository(self) -> OverrideRepository:
        if self._override_repo is None:
            self._override_repo = OverrideRepository(self.db_connection)
        return self._override_repo

    @property
    def order_repository(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self.db_connection)
        return self._order_repo

    @property
    def state_machine(self) -> OrderStateMachine:
        if self._state_machine is None:
            self._state_machine = OrderStateMachine()
        return self._state_machine

    @property
    def pricing_service(self) -> PricingService:
        """PricingService bound to the shared repositories"""
        if self._pricing_service is None:
            self._pricing_service = PricingService(
                catalog_repo=self.catalog_repository,
                override_repo=self.override_repository,
            )
        return self._pricing_service

    @property
    def order_service(self) -> OrderService:
        """OrderService bound to the shared repositories"""
        if self._order_service is None:
            self._order_service = OrderService(
                order_repo=self.order_repository,
                catalog_repo=self.catalog_repository,
                override_repo=self.override_repository,
                state_machine=self.state_machine,
            )
        return self._order_service
