"""Recherche d'offres de vols via l'API Amadeus."""
