"""
Zernsdorf Waste Calendar — Street Registry and SBAZV feed URL helpers.

Every address in Zernsdorf has its own SBAZV location id (StandortID), so
the pickup dates are NOT the same per street and cannot be derived from a
street name. Users fetch their personal calendar export URL from the SBAZV
portal; this module validates, builds and decodes those URLs. The street
list itself only drives autocomplete.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import parse_qs, urlsplit

from wastecal.data.models import FeedIds, WasteCategory

SBAZV_HOST = "fahrzeuge.sbazv.de"
SBAZV_BASE_URL = (
    "https://fahrzeuge.sbazv.de/WasteManagementSuedbrandenburg/WasteManagementServiceServlet"
)
SBAZV_PORTAL_URL = "https://www.sbazv.de/online-services/abfuhrtermine/"

# P = Papier, R = Restmüll, GS = Weihnachtsbäume, L = Laubsäcke, WB = Gelber Sack
SBAZV_ALL_CATEGORIES = "P;R;GS;L;WB"

_LOCATION_PARAM = "StandortID"
_SUBSCRIPTION_PARAM = "AboID"

_UMLAUTS = str.maketrans({"ä": "a", "ö": "o", "ü": "u", "ß": "ss"})


def street_sort_key(name: str) -> tuple[str, str]:
    """German dictionary order: umlauts sort with their base letter."""
    folded = name.lower().translate(_UMLAUTS)
    return folded, name


_STREET_NAMES = [
    "Ahornallee", "Akazienallee", "Alte Trift", "Alte Werftstraße", "Am Anger",
    "Am Bahndamm", "Am Fließ", "Am Graben", "Am Krüpelsee", "Am Lankensee",
    "Am Rehgrund", "Am Schiedeholz", "Am Schmulangsberg", "Am Stujangsberg",
    "Am Wiesengrund", "Am Wukrosch", "Amselgrund", "Amselsteg", "Amselweg",
    "An der Bahn", "An der Chaussee", "An der Dahme", "An der Lanke", "An der Ziegelei",
    "Asternsteg", "Bahnhofstraße", "Bahnhofsweg", "Bebelstraße", "Bergstraße",
    "Bindowbrück", "Bindower Weg", "Birkenallee", "Birkensteg", "Birkenweg",
    "Blackbergstell", "Brunhildstraße", "Buersweg", "Chausseestraße",
    "Clara-Zetkin-Straße", "Dahliensteg", "Dannenreicher Straße", "Dannenreicher Weg",
    "Dietrichstraße", "Dorfaue", "Dorfstraße", "Drosselgrund", "Drosselweg",
    "Eckardstraße", "Eichenweg", "Einsiedelweg", "Elfensteig", "Erwin-Schulze-Straße",
    "Feldstraße", "Feldweg", "Finkengrund", "Finkenstraße", "Fischerweg",
    "Fliederweg", "Flurweg", "Fontaneallee", "Fontanestraße", "Forstallee",
    "Friedensaue", "Friedenstraße", "Friedersdorfer Straße", "Friedhofsweg",
    "Friedrich-Engels-Straße", "Friesenstraße", "Fürstenwalder Weg", "Goethestraße",
    "Gräbendorfer Straße", "Grüner Weg", "Gudrunstraße", "Gunterstraße",
    "Gussower Straße", "Gutsstraße", "Hagenstraße", "Hasensprung", "Heidestraße",
    "Heideweg", "Heinrich-Heine-Straße", "Herderstraße", "Hinterkietz", "Hochstraße",
    "Im Gehölz", "Iris-Hahs-Hoffstetter-Straße", "Jägersteig", "Jahnstraße",
    "Johann-Theimer-Straße", "Kablower Chaussee", "Kablower Straße", "Karl-Marx-Straße",
    "Karlsweg", "Kastanienweg", "Kiefernweg", "Knorrsweg", "Körbiskruger Straße",
    "Krimhildstraße", "Krüpelweg", "Landhausstraße", "Lankensteg", "Lessingstraße",
    "Libellenweg", "Lilienthalstraße", "Lindenstraße", "Lindenweg", "Luchstraße",
    "Melli-Beese-Straße", "Mittelstraße", "Mittelweg", "Mühlenweg", "Nelkensteg",
    "Neptunstraße", "Niederlehmer Straße", "Nixenweg", "Nordstraße", "Pappelallee",
    "Parkallee", "Parkpromenade", "Pirolweg", "Platanenallee", "Poseidonstraße",
    "Ringstraße", "Robinienweg", "Roseggerstraße", "Rosensteg", "Rotdornstraße",
    "Rütgersstraße", "Schillerstraße", "Schillingstraße", "Seeblickstraße",
    "Seeidyll", "Seekorso", "Seesteg", "Seestraße", "Segelfliegerdamm",
    "Senziger Weg", "Siegfriedstraße", "Sonnenweg", "Straße A", "Strandweg",
    "Talstraße", "Triftstraße", "Triftweg", "Uckley", "Uckleysteg", "Uferpromenade",
    "Ufersteg", "Uferstraße", "Undinestraße", "Unter den Eichen", "Unter den Kiefern",
    "Vorderkietz", "Wacholderweg", "Wachtelweg", "Waldallee", "Waldsiedlung",
    "Waldstraße", "Weidengrund", "Wendenstraße", "Werftstraße", "Werner-Kubitza-Straße",
    "Wernsdorfer Straße", "Wiesendamm", "Wildpfad", "Wustroweg", "Zernsdorfer Straße",
    "Ziegeleier Straße", "Zum Bahnhof", "Zum Langen Berg", "Zur Heide",
]

ZERNSDORF_STREETS: tuple[str, ...] = tuple(sorted(set(_STREET_NAMES), key=street_sort_key))


def is_known_street(name: str) -> bool:
    return name.strip() in ZERNSDORF_STREETS


def street_options() -> list[dict[str, str]]:
    """Autocomplete entries for the address form."""
    return [{"value": street, "label": street} for street in ZERNSDORF_STREETS]


def build_feed_url(
    location_id: str,
    subscription_id: str,
    categories: Iterable[WasteCategory] | None = None,
) -> str:
    """Calendar export URL for one address.

    Requests every SBAZV category unless `categories` narrows it; categories
    SBAZV has no code for (Biotonne) are left out of the filter.
    """
    if categories is None:
        fractions = SBAZV_ALL_CATEGORIES
    else:
        fractions = ";".join(c.sbazv_code for c in categories if c.sbazv_code)
    return (
        f"{SBAZV_BASE_URL}?ApplicationName=Calendar&SubmitAction=sync"
        f"&{_LOCATION_PARAM}={location_id}&{_SUBSCRIPTION_PARAM}={subscription_id}"
        f"&Fra={fractions}"
    )


def parse_feed_url(url: str) -> FeedIds | None:
    """Extract StandortID and AboID from a feed URL, or None.

    Strings that don't parse as a URL with a query are searched with a
    regex instead, so pasted fragments still work.
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.query:
            raise ValueError("not an absolute URL with a query")
        query = parse_qs(parts.query)
        location = query.get(_LOCATION_PARAM, [""])[0]
        subscription = query.get(_SUBSCRIPTION_PARAM, [""])[0]
        if location and subscription:
            return FeedIds(location_id=location, subscription_id=subscription)
        return None
    except ValueError:
        location_match = re.search(rf"{_LOCATION_PARAM}=(\d+)", url)
        subscription_match = re.search(rf"{_SUBSCRIPTION_PARAM}=(\d+)", url)
        if location_match and subscription_match:
            return FeedIds(
                location_id=location_match.group(1),
                subscription_id=subscription_match.group(1),
            )
        return None


def is_valid_feed_url(url: str) -> bool:
    """SBAZV host plus both identifying query parameters."""
    return (
        SBAZV_HOST in url
        and f"{_LOCATION_PARAM}=" in url
        and f"{_SUBSCRIPTION_PARAM}=" in url
    )


def feed_url_for_street(street_name: str) -> str | None:
    """Feed URL for a street name. Always None.

    A street has no single StandortID (each house number has its own), and
    no mapping table exists; callers must use a user-supplied feed URL.
    """
    return None
