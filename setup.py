"""Script de setup pour faciliter l'installation."""

from setuptools import setup, find_packages

setup(
    name="flight-offer-search",
    version="1.0.0",
    description="Recherche d'offres de vols Amadeus avec normalisation, filtres et tri",
    author="Your Name",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9.0",
        "aiosqlite>=0.19.0",
        "click>=8.1.0",
        "pydantic>=2.5.0",
        "pyyaml>=6.0.1",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    python_requires=">=3.11",
)
