"""Historique des recherches (journal d'audit SQLite)."""

import aiosqlite
import logging
from datetime import date, datetime, timezone
from typing import List, Optional
from flight_search.models import SearchQuery, SearchRecord

logger = logging.getLogger(__name__)


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


class SearchHistoryStorage:
    """Gestionnaire de l'historique des recherches."""

    def __init__(self, db_path: str):
        """
        Initialise le gestionnaire de stockage.

        Args:
            db_path: Chemin vers le fichier SQLite
        """
        self.db_path = db_path

    async def init_db(self):
        """Initialise la table de l'historique."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS search_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    trip_type TEXT NOT NULL,
                    origin TEXT NOT NULL,
                    origin_name TEXT,
                    destination TEXT NOT NULL,
                    destination_name TEXT,
                    departure_date DATE NOT NULL,
                    return_date DATE,
                    passengers INTEGER NOT NULL,
                    cabin_class TEXT,
                    searched_at TIMESTAMP NOT NULL
                )
            """)

            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_searched_at
                ON search_history(searched_at)
            """)

            await db.commit()
            logger.info("Base de données de l'historique initialisée")

    async def record_search(self, query: SearchQuery, searched_at: Optional[datetime] = None) -> bool:
        """
        Enregistre une recherche dans l'historique.

        L'écriture est best-effort : une erreur est journalisée mais ne doit
        jamais empêcher la recherche.

        Args:
            query: Recherche effectuée
            searched_at: Instant de la recherche (maintenant par défaut)

        Returns:
            True si l'entrée a été écrite, False sinon
        """
        searched_at = searched_at or datetime.now(timezone.utc)
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    INSERT INTO search_history
                    (trip_type, origin, origin_name, destination, destination_name,
                     departure_date, return_date, passengers, cabin_class, searched_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    query.trip_type.value,
                    query.origin,
                    query.origin_name,
                    query.destination,
                    query.destination_name,
                    query.departure_date.isoformat(),
                    query.return_date.isoformat() if query.return_date else None,
                    query.passengers,
                    query.cabin_class.value if query.cabin_class else None,
                    searched_at.isoformat(),
                ))
                await db.commit()
            return True
        except Exception as e:
            logger.warning(f"Impossible d'enregistrer la recherche dans l'historique: {e}")
            return False

    async def recent_searches(self, limit: int = 20) -> List[SearchRecord]:
        """
        Renvoie les dernières recherches, les plus récentes d'abord.

        Args:
            limit: Nombre maximum d'entrées

        Returns:
            Entrées de l'historique
        """
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute("""
                    SELECT id, trip_type, origin, origin_name, destination, destination_name,
                           departure_date, return_date, passengers, cabin_class, searched_at
                    FROM search_history
                    ORDER BY searched_at DESC, id DESC
                    LIMIT ?
                """, (limit,)) as cursor:
                    rows = await cursor.fetchall()
        except Exception as e:
            logger.error(f"Erreur lors de la lecture de l'historique: {e}")
            return []

        return [
            SearchRecord(
                id=row[0],
                trip_type=row[1],
                origin=row[2],
                origin_name=row[3],
                destination=row[4],
                destination_name=row[5],
                departure_date=_parse_date(row[6]),
                return_date=_parse_date(row[7]),
                passengers=row[8],
                cabin_class=row[9],
                searched_at=datetime.fromisoformat(row[10]),
            )
            for row in rows
        ]

    async def count_searches(self) -> int:
        """Compte les recherches enregistrées."""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute("SELECT COUNT(*) FROM search_history") as cursor:
                    row = await cursor.fetchone()
                    return row[0] if row else 0
        except Exception as e:
            logger.error(f"Erreur lors du comptage des recherches: {e}")
            return 0
