"""
Schema of the cars collection.
"""

CARS_COLLECTION_NAME = "cars"

CARS_FIELDS = [
    {"name": "make", "type": "string", "facet": True},
    {"name": "model", "type": "string", "facet": True},
    {"name": "year", "type": "int32"},
    {"name": "engine_fuel_type", "type": "string", "facet": True},
    {"name": "engine_hp", "type": "float"},
    {"name": "engine_cylinders", "type": "int32"},
    {"name": "transmission_type", "type": "string", "facet": True},
    {"name": "driven_wheels", "type": "string", "facet": True},
    {"name": "number_of_doors", "type": "int32"},
    {"name": "market_category", "type": "string[]", "facet": True},
    {"name": "vehicle_size", "type": "string", "facet": True},
    {"name": "vehicle_style", "type": "string", "facet": True},
    {"name": "highway_mpg", "type": "int32"},
    {"name": "city_mpg", "type": "int32"},
    {"name": "popularity", "type": "int32"},
    {"name": "msrp", "type": "int32"},
]

# Field descriptions stored in the collection metadata and shown in the prompt.
DEFAULT_FIELD_DESCRIPTIONS = {
    "msrp": "in USD",
}


def cars_schema(collection_name: str = CARS_COLLECTION_NAME) -> dict:
    return {"name": collection_name, "fields": [dict(f) for f in CARS_FIELDS]}
