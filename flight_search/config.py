"""Gestion de la configuration du moteur de recherche."""

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from dotenv import load_dotenv


@dataclass
class AmadeusConfig:
    """Configuration pour l'API Amadeus."""

    api_key: str
    api_secret: str
    base_url: str = "https://test.api.amadeus.com"
    token_url: str = "/v1/security/oauth2/token"
    flight_offers_url: str = "/v2/shopping/flight-offers"
    locations_url: str = "/v1/reference-data/locations"


@dataclass
class SearchConfig:
    """Configuration principale du moteur de recherche."""

    currency: str = "USD"
    max_results: int = 50  # Une seule page de résultats côté fournisseur
    location_page_size: int = 10
    min_location_term_length: int = 2
    default_token_ttl: int = 1799  # Si expires_in est absent ou illisible (~30 minutes)
    request_timeout: float = 30.0
    db_path: str = "search_history.db"
    history_enabled: bool = True
    log_file: str = "flight_search.log"

    amadeus: AmadeusConfig = field(default=None)

    @classmethod
    def load(cls, config_path: str = "config.yaml", env_path: str = ".env") -> "SearchConfig":
        """Charge la configuration depuis les fichiers YAML et .env."""
        # Charger les variables d'environnement
        load_dotenv(env_path)

        # Charger le fichier YAML
        config_data = {}
        if Path(config_path).exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # Identifiants Amadeus depuis .env
        amadeus_config = AmadeusConfig(
            api_key=os.getenv("AMADEUS_API_KEY", ""),
            api_secret=os.getenv("AMADEUS_API_SECRET", ""),
            base_url=os.getenv("AMADEUS_BASE_URL", AmadeusConfig.base_url),
        )

        defaults = cls()
        return cls(
            currency=config_data.get("currency", defaults.currency),
            max_results=int(config_data.get("max_results", defaults.max_results)),
            location_page_size=int(config_data.get("location_page_size", defaults.location_page_size)),
            min_location_term_length=int(
                config_data.get("min_location_term_length", defaults.min_location_term_length)
            ),
            default_token_ttl=int(config_data.get("default_token_ttl", defaults.default_token_ttl)),
            request_timeout=float(config_data.get("request_timeout", defaults.request_timeout)),
            db_path=config_data.get("db_path", defaults.db_path),
            history_enabled=bool(config_data.get("history_enabled", defaults.history_enabled)),
            log_file=config_data.get("log_file", defaults.log_file),
            amadeus=amadeus_config,
        )
