"""
Result formatting utilities.

Turns raw car documents into the display cards shown for each match.
"""

from typing import Any, Dict, List, Optional

TRANSMISSION_TYPES = {
    "AUTOMATIC": "Automatic",
    "MANUAL": "Manual",
    "AUTOMATED_MANUAL": "Automated manual",
    "DIRECT_DRIVE": "Direct drive",
    "UNKNOWN": "Unknown",
}


def format_usd(amount: Optional[float]) -> str:
    """Format a price as whole US dollars, e.g. 32500 -> "$32,500"."""
    if amount is None:
        return "N/A"
    return f"${amount:,.0f}"


def capitalize_first_letter(text: Optional[str]) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:]


class ResultFormatter:
    """
    Formats car documents into a consistent card structure.
    """

    @staticmethod
    def format_hit(car: Dict[str, Any]) -> Dict[str, Any]:
        """
        Format a single car document.

        Args:
            car: Document from the cars collection

        Returns:
            Card dictionary with display strings
        """
        market_category = car.get("market_category")
        if isinstance(market_category, list):
            market_category = ", ".join(market_category)

        transmission = car.get("transmission_type")
        return {
            "id": car.get("id"),
            "title": " ".join(str(p) for p in (car.get("make"), car.get("model")) if p),
            "subtitle": " | ".join(str(p) for p in (car.get("year"), car.get("vehicle_style")) if p),
            "vehicle_size": car.get("vehicle_size"),
            "driven_wheels": capitalize_first_letter(car.get("driven_wheels")),
            "engine": f"V{car.get('engine_cylinders')} / {car.get('engine_hp')} horsepower",
            "transmission": TRANSMISSION_TYPES.get(transmission, transmission),
            "fuel_type": car.get("engine_fuel_type"),
            "number_of_doors": car.get("number_of_doors"),
            "market_categories": market_category or "N/A",
            "msrp": format_usd(car.get("msrp")),
            "mpg": f"{car.get('city_mpg')}/{car.get('highway_mpg')}",
        }

    @staticmethod
    def format_hits(hits: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [ResultFormatter.format_hit(hit) for hit in hits]
