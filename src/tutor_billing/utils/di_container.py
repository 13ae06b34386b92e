"""
Dependency Injection Container.

Wires configuration, the logger, repositories and the ledger services
so the CLI and the surrounding application share one set of instances.
"""

import logging
from typing import Dict, Type, Callable, Any


logger = logging.getLogger(__name__)


class DIContainer:
    """
    Simple dependency injection container.

    Supports:
    - Service registration with factory functions
    - Singleton pattern for shared instances
    - Replacing a registration (e.g. a database-backed repository)

    Examples:
        >>> container = DIContainer()
        >>> configure_default_services(container)
        >>> ledger = container.resolve(MakeupCreditLedger)
    """

    def __init__(self):
        """Initialize empty container."""
        self._services: Dict[Type, Callable] = {}
        self._singletons: Dict[Type, Any] = {}
        self._singleton_flags: Dict[Type, bool] = {}

        logger.debug("DI Container initialized")

    def register(
        self,
        interface: Type,
        implementation: Callable,
        singleton: bool = False
    ):
        """
        Register a service in the container.

        Re-registering an interface replaces the factory and drops any
        cached singleton.

        Args:
            interface: Service interface or type
            implementation: Factory function that creates the service
            singleton: Whether to create a single shared instance
        """
        self._services[interface] = implementation
        self._singleton_flags[interface] = singleton
        self._singletons.pop(interface, None)

        logger.debug(
            f"Registered service: {interface.__name__} "
            f"(singleton={singleton})"
        )

    def resolve(self, interface: Type) -> Any:
        """
        Resolve a service from the container.

        Raises:
            ValueError: If service is not registered
        """
        if interface not in self._services:
            raise ValueError(
                f"Service not registered: {interface.__name__}. "
                f"Available services: {', '.join(s.__name__ for s in self._services.keys())}"
            )

        if self._singleton_flags.get(interface, False):
            if interface not in self._singletons:
                logger.debug(f"Creating singleton instance: {interface.__name__}")
                self._singletons[interface] = self._services[interface]()
            return self._singletons[interface]

        logger.debug(f"Creating transient instance: {interface.__name__}")
        return self._services[interface]()

    def is_registered(self, interface: Type) -> bool:
        """Check if a service is registered."""
        return interface in self._services

    def clear(self):
        """Clear all registered services."""
        self._services.clear()
        self._singletons.clear()
        self._singleton_flags.clear()
        logger.debug("DI Container cleared")

    def get_registered_services(self) -> list:
        """Names of all registered service types."""
        return [service.__name__ for service in self._services.keys()]


def configure_default_services(container: DIContainer):
    """
    Register the default services.

    Repositories default to the in-memory implementations; an application
    with a real record store registers its own afterwards.
    """
    from .config import BillingSettings, Config, config
    from .logger import setup_logger
    from ..ledger.interfaces import (
        CreditRepository,
        OtherChargeRepository,
        PaymentRepository,
    )
    from ..ledger.memory import (
        InMemoryCreditRepository,
        InMemoryOtherChargeRepository,
        InMemoryPaymentRepository,
    )
    from ..ledger.makeup_credits import MakeupCreditLedger
    from ..ledger.other_charges import OtherChargeBook
    from ..ledger.payment_tracker import PaymentStatusTracker

    container.register(Config, lambda: config, singleton=True)
    container.register(
        BillingSettings,
        lambda: container.resolve(Config).billing_settings,
        singleton=True
    )
    container.register(
        logging.Logger,
        lambda: setup_logger(
            "tutor_billing",
            level=getattr(logging, container.resolve(Config).log_level, logging.INFO)
        ),
        singleton=True
    )

    container.register(CreditRepository, InMemoryCreditRepository, singleton=True)
    container.register(PaymentRepository, InMemoryPaymentRepository, singleton=True)
    container.register(OtherChargeRepository, InMemoryOtherChargeRepository, singleton=True)

    container.register(
        MakeupCreditLedger,
        lambda: MakeupCreditLedger(
            container.resolve(CreditRepository),
            container.resolve(BillingSettings)
        ),
        singleton=True
    )
    container.register(
        PaymentStatusTracker,
        lambda: PaymentStatusTracker(container.resolve(PaymentRepository)),
        singleton=True
    )
    container.register(
        OtherChargeBook,
        lambda: OtherChargeBook(container.resolve(OtherChargeRepository)),
        singleton=True
    )

    logger.info("Default services configured")
