"""Constructeurs de réponses Amadeus pour les tests."""

from datetime import datetime, timedelta
from decimal import Decimal

from flight_search.models import Offer, Segment


def raw_segment(origin, destination, departure_at, arrival_at, duration="PT2H", number="100", carrier="AF"):
    return {
        "departure": {"iataCode": origin, "at": departure_at},
        "arrival": {"iataCode": destination, "at": arrival_at},
        "carrierCode": carrier,
        "number": number,
        "duration": duration,
        "numberOfStops": 0,
    }


def raw_offer(offer_id, total, *itineraries, currency="USD"):
    return {
        "type": "flight-offer",
        "id": offer_id,
        "source": "GDS",
        "itineraries": [{"duration": "PT8H", "segments": list(segments)} for segments in itineraries],
        "price": {"currency": currency, "total": total, "grandTotal": total},
        "validatingAirlineCodes": ["AF"],
    }


def nyc_par_offers():
    """Deux offres aller simple NYC -> PAR (une directe, une avec escale)."""
    return {
        "meta": {"count": 2},
        "data": [
            raw_offer(
                "1", "412.30",
                [raw_segment("JFK", "CDG", "2026-11-20T18:30:00", "2026-11-21T07:45:00", "PT7H15M", "7")],
            ),
            raw_offer(
                "2", "356.10",
                [
                    raw_segment("JFK", "LHR", "2026-11-20T09:00:00", "2026-11-20T21:10:00", "PT7H10M", "178", "BA"),
                    raw_segment("LHR", "CDG", "2026-11-20T23:00:00", "2026-11-21T01:15:00", "PT1H15M", "308", "BA"),
                ],
            ),
        ],
    }


def make_offer(offer_id, price=100, departure=datetime(2026, 11, 20, 9, 0), hours=2, stops=0, currency="USD"):
    """Offre normalisée dont l'aller compte ``stops + 1`` tronçons."""
    segments = []
    current = departure
    leg = timedelta(hours=hours) / (stops + 1)
    for i in range(stops + 1):
        segments.append(
            Segment(
                origin=f"A{i}",
                destination=f"A{i + 1}",
                departure_at=current,
                arrival_at=current + leg,
                duration=leg,
                flight_number=str(100 + i),
                carrier="AF",
            )
        )
        current += leg
    return Offer(
        id=offer_id,
        price=Decimal(str(price)),
        currency=currency,
        outbound_segments=tuple(segments),
    )
