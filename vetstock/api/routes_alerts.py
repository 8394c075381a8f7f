"""
Routes des alertes et du tableau de bord.

`/api/alerts` liste les alertes de l'utilisateur (plus récentes d'abord) et permet de les résoudre;
`/api/dashboard/stats` agrège l'état courant du stock, des animaux et des vaccins.
"""

from fastapi import APIRouter

from vetstock.api.deps import container_dep, subscribed_user_dep
from vetstock.core.container import Container
from vetstock.domain.entities import Alert, DashboardStats, User
from vetstock.domain.tenancy import ensure_can_access

router = APIRouter(prefix="/api", tags=["alerts"])


@router.get("/alerts", response_model=list[Alert])
def list_alerts(user: User = subscribed_user_dep, c: Container = container_dep):
    """Liste les alertes de l'utilisateur courant."""
    return c.alerts.list_for_user(user.id)


@router.put("/alerts/{alert_id}/resolve", response_model=Alert)
def resolve_alert(
    alert_id: int, user: User = subscribed_user_dep, c: Container = container_dep
):
    """Marque une alerte comme résolue (idempotent)."""
    alert = c.alerts.get(alert_id)
    ensure_can_access(user, alert.user_id)
    return c.alerts.resolve(alert_id)


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(user: User = subscribed_user_dep, c: Container = container_dep):
    """Retourne les compteurs du tableau de bord."""
    return c.dashboard.stats(user.id, c.now())
