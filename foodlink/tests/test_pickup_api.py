from django.test import override_settings
from rest_framework.test import APITestCase

from foodlink import lifecycle
from foodlink.models import AuditLog, FoodDonation, PickupAssignment

from .helpers import authenticate, make_admin, make_donation, make_donor, make_ngo, make_volunteer

Status = PickupAssignment.Status


@override_settings(GOOGLE_MAPS_API_KEY='')
class PickupApiTestCase(APITestCase):

    def setUp(self):
        self.donor = make_donor()
        self.ngo = make_ngo()
        self.volunteer = make_volunteer()
        self.admin = make_admin()
        self.donation, self.pickup = lifecycle.claim_donation(make_donation(self.donor), self.ngo)

    def accept(self):
        return lifecycle.accept_pickup(self.pickup, self.volunteer)


class ListPickupTests(PickupApiTestCase):

    def test_list_is_scoped_by_role(self):
        other_ngo = make_ngo(email='other-ngo@example.com')
        lifecycle.claim_donation(make_donation(self.donor), other_ngo)

        authenticate(self.client, self.ngo)
        response = self.client.get('/api/pickups')
        self.assertEqual([p['id'] for p in response.data['data']], [self.pickup.pk])

        authenticate(self.client, self.donor)
        self.assertEqual(self.client.get('/api/pickups').data['pagination']['total'], 2)

        authenticate(self.client, self.volunteer)
        self.assertEqual(self.client.get('/api/pickups').data['data'], [])

    def test_available_sorted_by_distance(self):
        far_donor = make_donor(email='far@example.com', latitude=13.3, longitude=77.9)
        _, far_pickup = lifecycle.claim_donation(
            make_donation(far_donor, pickup_latitude=13.3, pickup_longitude=77.9), self.ngo,
        )

        authenticate(self.client, self.volunteer)
        response = self.client.get('/api/pickups/available', {'lat': 12.97, 'lng': 77.59})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([p['id'] for p in response.data['data']], [self.pickup.pk, far_pickup.pk])
        self.assertLess(response.data['data'][0]['distance_km'], 1)
        self.assertGreater(response.data['data'][1]['distance_km'], 30)

    def test_available_rejects_bad_coordinates(self):
        authenticate(self.client, self.volunteer)
        response = self.client.get('/api/pickups/available', {'lat': 'north', 'lng': 77.59})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'lat must be a number')

    def test_available_rejects_out_of_range_coordinates(self):
        authenticate(self.client, self.volunteer)
        response = self.client.get('/api/pickups/available', {'lat': 200, 'lng': 77.59})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'lat: Ensure this value is less than or equal to 90.')

        response = self.client.get('/api/pickups/available', {'lat': 12.9, 'lng': -181})
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.data['error'].startswith('lng:'))

    def test_available_is_for_volunteers(self):
        authenticate(self.client, self.ngo)
        self.assertEqual(self.client.get('/api/pickups/available').status_code, 403)


class AssignmentTests(PickupApiTestCase):

    def test_admin_assigns_volunteer(self):
        authenticate(self.client, self.admin)
        response = self.client.post('/api/pickups', {
            'donation': self.donation.pk,
            'volunteer': self.volunteer.pk,
            'scheduled_time': '2030-01-01T10:00:00Z',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Volunteer assigned')
        self.assertEqual(response.data['data']['status'], 'accepted')
        self.assertEqual(response.data['data']['volunteer']['id'], self.volunteer.pk)
        self.assertTrue(response.data['data']['scheduled_pickup_time'].startswith('2030-01-01T10:00:00'))

    def test_only_admin_assigns(self):
        authenticate(self.client, self.volunteer)
        response = self.client.post('/api/pickups', {'donation': self.donation.pk, 'volunteer': self.volunteer.pk}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_volunteer_accepts(self):
        authenticate(self.client, self.volunteer)
        response = self.client.post(f'/api/pickups/{self.pickup.pk}/accept')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'accepted')
        self.assertIsNotNone(response.data['data']['route']['estimated_distance'])

        other = make_volunteer(email='second@example.com')
        authenticate(self.client, other)
        response = self.client.post(f'/api/pickups/{self.pickup.pk}/accept')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Pickup already has a volunteer assigned')

    def test_volunteers_available_for_date(self):
        make_volunteer(email='busy@example.com', availability={'monday': {'available': False}})
        make_volunteer(email='driver@example.com', has_vehicle=True, completed_donations=25)

        authenticate(self.client, self.admin)
        # 2024-01-01 was a Monday
        response = self.client.get('/api/pickups/volunteers/available', {'date': '2024-01-01'})

        self.assertEqual(response.data['target_day'], 'monday')
        self.assertEqual([v['match_score'] for v in response.data['data']], [35, 0])
        self.assertEqual(response.data['data'][0]['match_reasons'], ['Highly experienced', 'Has vehicle'])

    def test_volunteers_available_bad_date(self):
        authenticate(self.client, self.admin)
        response = self.client.get('/api/pickups/volunteers/available', {'date': 'someday'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Invalid date')


class ProgressTests(PickupApiTestCase):

    def setUp(self):
        super().setUp()
        self.accept()
        authenticate(self.client, self.volunteer)

    def test_status_update(self):
        response = self.client.patch(f'/api/pickups/{self.pickup.pk}/status', {
            'status': 'in_transit',
            'gps_location': {'lat': 12.96, 'lng': 77.6},
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'in_transit')
        self.assertEqual(response.data['data']['route']['current_location']['coordinates'], [77.6, 12.96])
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, FoodDonation.Status.IN_TRANSIT)

    def test_invalid_transition(self):
        response = self.client.put(f'/api/pickups/{self.pickup.pk}/status', {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Cannot transition from accepted to delivered')

    def test_status_value_must_be_known(self):
        response = self.client.put(f'/api/pickups/{self.pickup.pk}/status', {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_location_update(self):
        response = self.client.put(f'/api/pickups/{self.pickup.pk}/location', {'lat': 12.95, 'lng': 77.61}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Location updated')
        self.pickup.refresh_from_db()
        self.assertEqual(self.pickup.current_latitude, 12.95)

    def test_handover_verification(self):
        lifecycle.advance_pickup(self.pickup, self.volunteer, Status.IN_TRANSIT)
        response = self.client.post(f'/api/pickups/{self.pickup.pk}/verification', {
            'stage': 'pickup',
            'condition': 'good',
            'photo_url': 'https://example.com/photo.jpg',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['data']['stage'], 'pickup')
        detail = self.client.get(f'/api/pickups/{self.pickup.pk}')
        self.assertEqual(len(detail.data['data']['verifications']), 1)

    def test_complete_and_rate(self):
        for step in (Status.IN_TRANSIT, Status.PICKED_UP, Status.DELIVERING):
            lifecycle.advance_pickup(self.pickup, self.volunteer, step)

        response = self.client.put(f'/api/pickups/{self.pickup.pk}/complete', {'actual_quantity': 8}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['status'], 'completed')
        self.assertEqual(AuditLog.objects.get(action=AuditLog.Action.PICKUP_COMPLETED).details['actual_quantity'], 8)

        authenticate(self.client, self.donor)
        response = self.client.post(f'/api/pickups/{self.pickup.pk}/rate', {'rating': 5}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['rating_by_donor'], 5)

    def test_detail_hidden_from_strangers(self):
        authenticate(self.client, make_volunteer(email='stranger@example.com'))
        response = self.client.get(f'/api/pickups/{self.pickup.pk}')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'Not authorized to view this pickup')

    def test_admin_cancels(self):
        authenticate(self.client, self.admin)
        response = self.client.delete(f'/api/pickups/{self.pickup.pk}')

        self.assertEqual(response.data['message'], 'Pickup cancelled successfully')
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, FoodDonation.Status.AVAILABLE)

    def test_volunteer_cannot_cancel(self):
        response = self.client.delete(f'/api/pickups/{self.pickup.pk}')
        self.assertEqual(response.status_code, 403)
