"""
Erreurs métier levées par les services.

Les endpoints les laissent remonter : l'application les convertit
en réponses HTTP (voir backoffice.app.main).
"""


class DomainError(ValueError):
    status_code = 400


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class BookingError(DomainError):
    """Commande non éligible au conteneur / groupage demandé."""

    status_code = 400
