import base64
from io import StringIO
from unittest import mock

import requests
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings

from foodlink.management.commands.generate_vapid_keys import generate_vapid_keypair
from foodlink.models import FoodDonation
from foodlink.utils.route_optimization import GoogleMapsService, Location, RouteOptimizer

from .helpers import make_donation, make_donor

START = Location(12.9716, 77.5946, location_type='pickup')
END = Location(12.9352, 77.6245, location_type='delivery')


def matrix_response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@override_settings(GOOGLE_MAPS_API_KEY='')
class RouteOptimizerTests(SimpleTestCase):

    def test_fallback_uses_city_speed(self):
        distance, minutes = RouteOptimizer().estimate_route(START, END)
        self.assertAlmostEqual(distance, START.distance_to(END), delta=0.01)
        self.assertAlmostEqual(minutes, distance * 3, delta=0.05)

    def test_waypoints_lengthen_route(self):
        detour = Location(13.05, 77.6, location_type='waypoint')
        direct, _ = RouteOptimizer().estimate_route(START, END)
        via, _ = RouteOptimizer().estimate_route(START, END, [detour, Location(None, None)])
        self.assertGreater(via, direct)

    def test_sort_by_distance_puts_unknown_last(self):
        unknown = Location(None, None, 3)
        ranked = RouteOptimizer.sort_by_distance(START, [unknown, END, Location(12.97, 77.59, 2)])
        self.assertEqual([loc.id for loc, _ in ranked], [2, None, 3])
        self.assertEqual(ranked[-1][1], float('inf'))


@override_settings(GOOGLE_MAPS_API_KEY='test-key')
class GoogleMapsTests(SimpleTestCase):

    @mock.patch('foodlink.utils.route_optimization.requests.get')
    def test_road_distance_used_when_available(self, get):
        get.return_value = matrix_response({
            'status': 'OK',
            'rows': [{'elements': [{
                'status': 'OK',
                'distance': {'value': 7400},
                'duration': {'value': 1500},
                'duration_in_traffic': {'value': 1800},
            }]}],
        })

        self.assertEqual(RouteOptimizer().estimate_route(START, END), (7.4, 30.0))
        self.assertEqual(get.call_args.kwargs['params']['key'], 'test-key')

    @mock.patch('foodlink.utils.route_optimization.requests.get')
    def test_failed_element_falls_back(self, get):
        get.return_value = matrix_response({'status': 'OK', 'rows': [{'elements': [{'status': 'ZERO_RESULTS'}]}]})
        route = GoogleMapsService().get_single_route(START, END)
        self.assertAlmostEqual(route['distance_km'], START.distance_to(END))

    @mock.patch('foodlink.utils.route_optimization.requests.get', side_effect=requests.ConnectionError('down'))
    def test_network_error_falls_back_to_geodesic(self, get):
        distance, _ = RouteOptimizer().estimate_route(START, END)
        self.assertAlmostEqual(distance, START.distance_to(END), delta=0.01)

    @mock.patch('foodlink.utils.route_optimization.requests.get')
    def test_api_error_status(self, get):
        get.return_value = matrix_response({'status': 'REQUEST_DENIED'})
        self.assertIsNone(GoogleMapsService().get_distance_matrix([START], [END]))


class VapidKeyTests(SimpleTestCase):

    def decode(self, value):
        return base64.urlsafe_b64decode(value + '=' * (-len(value) % 4))

    def test_keypair_shape(self):
        public_key, private_key = generate_vapid_keypair()
        public_bytes = self.decode(public_key)
        self.assertEqual(len(public_bytes), 65)
        self.assertEqual(public_bytes[0], 0x04)
        self.assertEqual(len(self.decode(private_key)), 32)
        self.assertNotIn('=', public_key + private_key)

    def test_command_prints_env_lines(self):
        out = StringIO()
        call_command('generate_vapid_keys', stdout=out)
        self.assertIn('VAPID_PUBLIC_KEY=', out.getvalue())
        self.assertIn('VAPID_PRIVATE_KEY=', out.getvalue())


class ExpireCommandTests(TestCase):

    def test_expire_donations(self):
        donation = make_donation(make_donor(), hours=-1)
        out = StringIO()
        call_command('expire_donations', stdout=out)

        donation.refresh_from_db()
        self.assertEqual(donation.status, FoodDonation.Status.EXPIRED)
        self.assertIn('Expired 1 donation(s)', out.getvalue())
