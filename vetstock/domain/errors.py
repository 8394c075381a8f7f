"""
Erreurs du domaine métier.

Chaque erreur porte le code HTTP et le message (en portugais, destiné à l'utilisateur final) que
la couche API renvoie tel quel dans `{"message": ...}`.
"""

from __future__ import annotations

from vetstock.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_FORBIDDEN,
    HTTP_NOT_FOUND,
    HTTP_PAYMENT_REQUIRED,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
)


class AppError(Exception):
    """Erreur applicative avec statut HTTP et message lisible."""

    status_code = HTTP_BAD_REQUEST
    default_message = "Requisição inválida"

    def __init__(self, message: str | None = None) -> None:
        """Initialise l'erreur avec un message optionnel (sinon message par défaut)."""
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Entrée mal formée ou incohérente."""

    status_code = HTTP_BAD_REQUEST
    default_message = "Dados inválidos"


class AuthenticationError(AppError):
    """Session absente ou invalide."""

    status_code = HTTP_UNAUTHORIZED
    default_message = "Não autenticado"


class EntitlementError(AppError):
    """Période d'essai expirée sans abonnement actif."""

    status_code = HTTP_PAYMENT_REQUIRED
    default_message = "Seu período de teste expirou. Assine para continuar."


class AuthorizationError(AppError):
    """Utilisateur ni propriétaire ni administrateur."""

    status_code = HTTP_FORBIDDEN
    default_message = "Permissão negada"


class NotFoundError(AppError):
    """Ressource introuvable."""

    status_code = HTTP_NOT_FOUND
    default_message = "Recurso não encontrado"


class BillingError(AppError):
    """Erreur renvoyée par le fournisseur de paiement."""

    status_code = HTTP_BAD_REQUEST
    default_message = "Erro no processamento do pagamento"


class BillingUnavailableError(AppError):
    """Fournisseur de paiement non configuré."""

    status_code = HTTP_SERVICE_UNAVAILABLE
    default_message = "Pagamentos não configurados"
