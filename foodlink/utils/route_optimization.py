# foodlink/utils/route_optimization.py
"""
Route estimation for pickups: pickup point -> waypoints -> delivery point.
Uses the Google Maps Distance Matrix API when a key is configured and falls
back to geodesic distances otherwise.
"""

import logging
import requests
from typing import List, Tuple, Dict, Optional
from geopy.distance import geodesic
from django.conf import settings

logger = logging.getLogger(__name__)

# Average city speed used when no road data is available.
FALLBACK_SPEED_KMH = 20


class Location:
    """A geographic point with an optional id and label"""
    def __init__(self, lat: float, lon: float, location_id: Optional[int] = None,
                 location_type: str = 'donation', name: str = ''):
        self.lat = lat
        self.lon = lon
        self.id = location_id
        self.type = location_type  # 'donation', 'pickup', 'delivery', 'volunteer'
        self.name = name

    def is_valid(self) -> bool:
        return self.lat is not None and self.lon is not None

    def distance_to(self, other: 'Location') -> float:
        """Geodesic distance to another location in kilometers"""
        if not (self.is_valid() and other.is_valid()):
            return float('inf')
        return geodesic((self.lat, self.lon), (other.lat, other.lon)).km

    def to_coords_string(self) -> str:
        return f"{self.lat},{self.lon}"


def fallback_minutes(distance_km: float) -> float:
    return distance_km / FALLBACK_SPEED_KMH * 60


class GoogleMapsService:
    """Thin client for the Google Maps Distance Matrix API"""

    BASE_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key: str = api_key or getattr(settings, 'GOOGLE_MAPS_API_KEY', '') or ''

    def is_available(self) -> bool:
        return bool(self.api_key)

    def get_distance_matrix(self, origins: List[Location], destinations: List[Location],
                            mode: str = 'driving') -> Optional[Dict]:
        """
        Fetch road distances (km) and durations (minutes) between every origin
        and destination. Returns None when the API is unavailable or fails.
        """
        if not self.is_available():
            return None

        params = {
            'origins': '|'.join(loc.to_coords_string() for loc in origins),
            'destinations': '|'.join(loc.to_coords_string() for loc in destinations),
            'mode': mode,
            'departure_time': 'now',
            'key': self.api_key,
        }

        try:
            response = requests.get(self.BASE_URL, params=params, timeout=10)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Google Maps request failed: %s", e)
            return None

        if data.get('status') != 'OK':
            logger.warning("Google Maps API error: %s", data.get('status'))
            return None

        return self._parse_distance_matrix(data, origins, destinations)

    def _parse_distance_matrix(self, data: Dict, origins: List[Location],
                               destinations: List[Location]) -> Dict:
        result = {'distances': [], 'durations': []}

        for i, row in enumerate(data.get('rows', [])):
            distance_row = []
            duration_row = []
            for j, element in enumerate(row.get('elements', [])):
                if element.get('status') == 'OK':
                    distance_km = element.get('distance', {}).get('value', 0) / 1000
                    # Prefer live traffic estimate when present
                    duration_s = element.get('duration_in_traffic', element.get('duration', {})).get('value', 0)
                    distance_row.append(distance_km)
                    duration_row.append(duration_s / 60)
                else:
                    fallback_dist = origins[i].distance_to(destinations[j])
                    distance_row.append(fallback_dist)
                    duration_row.append(fallback_minutes(fallback_dist))
            result['distances'].append(distance_row)
            result['durations'].append(duration_row)

        return result

    def get_single_route(self, origin: Location, destination: Location) -> Optional[Dict]:
        matrix = self.get_distance_matrix([origin], [destination])
        if matrix and matrix['distances'] and matrix['distances'][0]:
            return {
                'distance_km': matrix['distances'][0][0],
                'duration_minutes': matrix['durations'][0][0],
            }
        return None


class RouteOptimizer:
    """Estimates pickup routes using Google Maps or geodesic fallback"""

    def __init__(self, use_google_maps: bool = True):
        self.google_maps: Optional[GoogleMapsService] = GoogleMapsService() if use_google_maps else None
        self._use_google_maps = self.google_maps is not None and self.google_maps.is_available()

    def leg(self, origin: Location, destination: Location) -> Tuple[float, float]:
        """Distance (km) and duration (minutes) of a single leg"""
        if self._use_google_maps and self.google_maps is not None:
            route_data = self.google_maps.get_single_route(origin, destination)
            if route_data:
                return route_data['distance_km'], route_data['duration_minutes']
        distance = origin.distance_to(destination)
        return distance, fallback_minutes(distance)

    def estimate_route(self, start: Location, destination: Location,
                       waypoints: Optional[List[Location]] = None) -> Tuple[float, float]:
        """
        Total distance and duration for start -> waypoints (in order) -> destination.

        Returns:
            Tuple of (distance_km, duration_minutes), both rounded to 2 places
        """
        stops = [start] + [w for w in (waypoints or []) if w.is_valid()] + [destination]
        total_distance = 0.0
        total_time = 0.0
        for origin, target in zip(stops, stops[1:]):
            distance, minutes = self.leg(origin, target)
            total_distance += distance
            total_time += minutes
        return round(total_distance, 2), round(total_time, 2)

    @staticmethod
    def sort_by_distance(origin: Location, locations: List[Location]) -> List[Tuple[Location, float]]:
        """Pair each location with its geodesic distance from origin, nearest first"""
        ranked = [(loc, origin.distance_to(loc)) for loc in locations]
        ranked.sort(key=lambda item: item[1])
        return ranked


def get_route_optimizer(use_google_maps: bool = True) -> RouteOptimizer:
    """Get a configured RouteOptimizer instance"""
    return RouteOptimizer(use_google_maps=use_google_maps)
