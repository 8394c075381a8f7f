"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, horloge, stockage, services métier, passerelle de
paiement). Chaque `Container` possède son propre stockage: les tests en construisent des instances
isolées, l'application par défaut utilise le singleton `container`.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from vetstock.core.settings import Settings, get_settings
from vetstock.domain.billing import BillingService
from vetstock.domain.services import (
    AccountService,
    AlertService,
    ClinicService,
    DashboardService,
    InventoryService,
)
from vetstock.infra.billing import StripeBillingGateway
from vetstock.infra.repositories import Store, build_memory_store, build_redis_store

log = structlog.get_logger(__name__)


def utc_now() -> datetime:
    """Horloge par défaut (UTC, consciente du fuseau)."""
    return datetime.now(UTC)


def _build_store(settings: Settings) -> Store:
    """Choisit Redis si configuré et joignable, sinon la mémoire."""
    if settings.REDIS_URL:
        try:
            return build_redis_store(url=settings.REDIS_URL)
        except Exception as err:
            if settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but unavailable") from err
            log.warning("redis_unavailable_memory_fallback", error=type(err).__name__)
            store = build_memory_store()
            store.backend = "memory-fallback"
            return store
    if settings.REQUIRE_REDIS:
        raise RuntimeError("Redis required but REDIS_URL not set")
    return build_memory_store()


class Container:
    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        store: Store | None = None,
        billing_gateway=None,
    ):
        self.settings = settings or get_settings()
        self.clock = clock or utc_now
        self.store = store or _build_store(self.settings)
        self.storage_backend = self.store.backend

        self.accounts = AccountService(self.store.users, trial_days=self.settings.TRIAL_DAYS)
        self.alerts = AlertService(self.store.alerts)
        self.inventory = InventoryService(self.store.products, self.alerts)
        self.clinic = ClinicService(
            self.store.animals,
            self.store.vaccines,
            self.alerts,
            vaccine_alert_days=self.settings.VACCINE_ALERT_DAYS,
        )
        self.dashboard = DashboardService(self.inventory, self.clinic)
        self.billing_gateway = billing_gateway or StripeBillingGateway(
            self.settings.STRIPE_SECRET_KEY
        )
        self.billing = BillingService(
            self.billing_gateway, self.accounts, self.settings.STRIPE_PRICE_ID
        )

        if self.settings.SEED_ADMIN:
            self.accounts.seed_admin(
                self.settings.ADMIN_NAME,
                self.settings.ADMIN_EMAIL,
                self.settings.ADMIN_PASSWORD,
                self.now(),
            )

    def now(self) -> datetime:
        """Instant courant selon l'horloge du conteneur."""
        return self.clock()


container = Container()
