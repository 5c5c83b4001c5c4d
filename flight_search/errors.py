"""Erreurs levées par le moteur de recherche de vols."""

from typing import Optional


class FlightSearchError(Exception):
    """Classe de base pour toutes les erreurs du moteur de recherche."""


class InvalidQueryError(FlightSearchError, ValueError):
    """La requête de recherche est invalide (rejetée avant tout appel réseau)."""


class AuthError(FlightSearchError):
    """Impossible d'obtenir un token d'accès auprès du fournisseur."""


class UpstreamError(FlightSearchError):
    """Le fournisseur a répondu par une erreur ou n'a pas pu être joint."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.status is None:
            return message
        return f"{message} (HTTP {self.status}): {self.body[:200]}"


class ParseError(FlightSearchError):
    """Une réponse du fournisseur ne correspond pas au modèle attendu."""
