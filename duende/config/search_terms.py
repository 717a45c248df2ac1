"""Built-in search vocabulary for flamenco listings.

Used when ``config/config.yaml`` has no ``search`` section.  The lists
cover the places the scrapers actually produce listings for; extend them
in the YAML file rather than here.

``AMBIGUOUS_TERMS`` maps a search term to the facets it could mean.
"argentina" is both a country and the stage name of the cantaora
Argentina; "granaino" is a demonym for Granada and part of several
artists' names.
"""

from __future__ import annotations

from duende.models.search import SearchFacet, SearchVocabulary

AMBIGUOUS_TERMS: dict[str, tuple[SearchFacet, ...]] = {
    "argentina": (SearchFacet.COUNTRY, SearchFacet.ARTIST),
    "granaino": (SearchFacet.CITY, SearchFacet.ARTIST),
}

CITIES_AND_PROVINCES: tuple[str, ...] = (
    "Sevilla", "Málaga", "Granada", "Cádiz", "Córdoba", "Huelva", "Jaén", "Almería",
    "Madrid", "Barcelona", "Valencia", "Murcia", "Alicante", "Bilbao", "Zaragoza",
    "Jerez", "Úbeda", "Baeza", "Ronda", "Estepona", "Lebrija", "Morón de la Frontera",
    "Utrera", "Algeciras", "Cartagena", "Logroño", "Santander", "Vitoria", "Pamplona",
    "Vigo", "A Coruña", "Oviedo", "Gijón", "León", "Salamanca", "Valladolid", "Burgos",
    "Cáceres", "Badajoz", "Toledo", "Cuenca", "Guadalajara", "Albacete",
)

COUNTRIES: tuple[str, ...] = ("Argentina", "España", "Francia")


def default_vocabulary() -> SearchVocabulary:
    """Return a fresh vocabulary built from the constants above."""
    return SearchVocabulary(
        ambiguous_terms=dict(AMBIGUOUS_TERMS),
        cities=CITIES_AND_PROVINCES,
        countries=COUNTRIES,
    )
