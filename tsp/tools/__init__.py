from .schema import AnnealingSettings, CityRecord, ProblemInstance
from .tour_io import format_tour, load_points, parse_points

__all__ = [
    "AnnealingSettings",
    "CityRecord",
    "ProblemInstance",
    "format_tour",
    "load_points",
    "parse_points",
]
