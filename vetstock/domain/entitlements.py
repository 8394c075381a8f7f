"""
Calcul des droits d'accès (période d'essai et abonnement).

Ce module fournit les fonctions pures qui déterminent si un utilisateur peut accéder aux
fonctionnalités payantes: un abonnement Stripe actif, ou à défaut une période d'essai de
`TRIAL_DAYS` jours démarrant à `trial_start_date`.

Toutes les fonctions prennent `now` en paramètre: aucun appel à l'horloge système, résultat
déterministe.
"""

from datetime import datetime, timedelta

from vetstock.domain.entities import User
from vetstock.domain.errors import EntitlementError

DEFAULT_TRIAL_DAYS = 7
_SECONDS_PER_DAY = 86400


def days_between(start: datetime, end: datetime) -> int:
    """Nombre de jours entiers de `start` à `end`, tronqué vers zéro.

    Négatif si `end` précède `start` (ex.: -2.5 jours -> -2).
    """
    return int((end - start).total_seconds() / _SECONDS_PER_DAY)


def trial_end_date(user: User, trial_days: int = DEFAULT_TRIAL_DAYS) -> datetime:
    """Fin (exclue) de la fenêtre d'essai de l'utilisateur."""
    return user.trial_start_date + timedelta(days=trial_days)


def get_trial_days_left(
    user: User, now: datetime, trial_days: int = DEFAULT_TRIAL_DAYS
) -> int:
    """Jours d'essai restants (>= 0).

    Vaut `trial_days` à l'instant exact de l'inscription, puis décroît par troncature au jour;
    0 dès que `now >= fin d'essai`.
    """
    end = trial_end_date(user, trial_days)
    if now >= end:
        return 0
    return max(0, days_between(now, end))


def is_subscription_active(
    user: User, now: datetime, trial_days: int = DEFAULT_TRIAL_DAYS
) -> bool:
    """Vrai si l'utilisateur a un abonnement, ou s'il lui reste des jours d'essai."""
    if user.stripe_subscription_id:
        return True
    return get_trial_days_left(user, now, trial_days) > 0


def require_active_subscription(
    user: User, now: datetime, trial_days: int = DEFAULT_TRIAL_DAYS
) -> None:
    """
    Vérifie que l'utilisateur a accès aux fonctionnalités payantes.

    Raises:
        EntitlementError: Si l'essai est expiré et qu'aucun abonnement n'est actif.
    """
    if not is_subscription_active(user, now, trial_days):
        raise EntitlementError()
