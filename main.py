"""Point d'entrée principal du moteur de recherche de vols."""

from flight_search.cli import cli


if __name__ == "__main__":
    cli()
