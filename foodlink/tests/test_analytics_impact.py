from rest_framework.test import APITestCase

from foodlink.models import AuditLog, FoodDonation, PickupAssignment
from foodlink.utils import impact

from .helpers import authenticate, make_admin, make_donation, make_donor, make_ngo, make_pickup, make_volunteer

Delivered = FoodDonation.Status.DELIVERED
Completed = FoodDonation.Status.COMPLETED


class ImpactCalculationTests(APITestCase):

    def test_environmental_impact(self):
        self.assertEqual(impact.environmental_impact(10), {
            'meals_provided': 20,
            'co2_saved': 25,
            'water_saved': 10000,
            'landfill_diverted': 10,
        })

    def test_badge_ladders(self):
        self.assertEqual(impact.donor_badges(0, 0), [])
        self.assertEqual(impact.donor_badges(5, 120), ['First Donation', 'Regular Donor', '100kg Saved'])
        self.assertEqual(impact.ngo_badges(10), ['First Claim', 'Active Recipient'])
        self.assertEqual(impact.volunteer_badges(4), ['First Delivery'])

    def test_personal_impact_for_donor(self):
        donor = make_donor()
        make_donation(donor, status=Completed, quantity=10)
        make_donation(donor, status=Delivered, quantity=5)
        make_donation(donor, quantity=100)

        summary = impact.personal_impact(donor)
        self.assertEqual(summary['total_donations'], 2)
        self.assertEqual(summary['total_quantity'], 15)
        self.assertEqual(summary['meals_provided'], 30)
        self.assertEqual(summary['badges'], ['First Donation'])

    def test_personal_impact_for_volunteer(self):
        volunteer = make_volunteer(completed_donations=6)
        summary = impact.personal_impact(volunteer)
        self.assertEqual(summary['distance_traveled'], 30)
        self.assertEqual(summary['hours_volunteered'], 4.5)
        self.assertEqual(summary['badges'], ['First Delivery', 'Helping Hand'])

    def test_admin_has_no_personal_impact(self):
        self.assertIsNone(impact.personal_impact(make_admin()))

    def test_leaderboards(self):
        donor = make_donor()
        ngo = make_ngo()
        make_donation(donor, status=Completed, quantity=40, claimed_by=ngo)
        make_volunteer(completed_donations=3)
        make_volunteer(email='idle@example.com')

        donors = impact.leaderboard('donors')
        self.assertEqual(donors[0]['id'], donor.pk)
        self.assertEqual(donors[0]['impact_score'], 5)

        ngos = impact.leaderboard('ngos')
        self.assertEqual(ngos[0]['name'], 'Food Bank')
        self.assertEqual(ngos[0]['people_served'], 80)

        self.assertEqual(len(impact.leaderboard('volunteers')), 1)
        self.assertIsNone(impact.leaderboard('sponsors'))


class ImpactApiTests(APITestCase):

    def setUp(self):
        self.donor = make_donor()
        authenticate(self.client, self.donor)

    def test_personal(self):
        make_donation(self.donor, status=Completed, quantity=4)
        response = self.client.get('/api/impact')
        self.assertEqual(response.data['data']['co2_saved'], 10)

    def test_platform(self):
        make_donation(self.donor, status=Completed, quantity=4)
        response = self.client.get('/api/impact', {'type': 'platform'})
        self.assertEqual(response.data['data']['total_donations'], 1)
        self.assertEqual(response.data['data']['active_donors'], 1)

    def test_leaderboard_via_summary(self):
        response = self.client.get('/api/impact', {'type': 'leaderboard', 'category': 'volunteers'})
        self.assertEqual(response.data['category'], 'volunteers')

    def test_invalid_type(self):
        response = self.client.get('/api/impact', {'type': 'cosmic'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Invalid type parameter')

    def test_invalid_category(self):
        response = self.client.get('/api/impact/leaderboard', {'category': 'sponsors'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Invalid category parameter')

    def test_admin_personal_impact_is_empty(self):
        authenticate(self.client, make_admin())
        response = self.client.get('/api/impact')
        self.assertEqual(response.data['data'], {})


class AnalyticsApiTests(APITestCase):

    def setUp(self):
        self.admin = make_admin()
        self.donor = make_donor()
        self.ngo = make_ngo()
        self.volunteer = make_volunteer()

    def test_admin_only(self):
        authenticate(self.client, self.donor)
        self.assertEqual(self.client.get('/api/analytics').status_code, 403)

    def test_analytics(self):
        donation = make_donation(self.donor, status=Completed, quantity=10, claimed_by=self.ngo)
        make_donation(self.donor, status=FoodDonation.Status.PENDING)
        make_pickup(donation, self.ngo, self.volunteer, status=PickupAssignment.Status.COMPLETED)

        authenticate(self.client, self.admin)
        response = self.client.get('/api/analytics', {'period': 7})
        data = response.data['data']

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data['period'], 7)
        self.assertEqual(data['users']['total'], 4)
        self.assertEqual(data['users']['by_role']['volunteer'], 1)
        self.assertEqual(data['donations']['total'], 2)
        self.assertEqual(data['donations']['by_status'], {'completed': 1, 'pending': 1})
        self.assertEqual(data['donations']['total_quantity'], 10)
        self.assertEqual(data['environmental_impact']['meals_provided'], 20)
        self.assertEqual(data['top_volunteers'][0]['id'], self.volunteer.pk)
        self.assertEqual(sum(day['count'] for day in data['trends']), 2)

    def test_bad_period(self):
        authenticate(self.client, self.admin)
        self.assertEqual(self.client.get('/api/analytics', {'period': 'soon'}).status_code, 400)
        self.assertEqual(self.client.get('/api/analytics', {'period': 0}).status_code, 400)

    def test_audit_log_filters(self):
        AuditLog.objects.create(action=AuditLog.Action.USER_LOGIN, performed_by=self.donor)
        AuditLog.objects.create(action=AuditLog.Action.USER_LOGIN, performed_by=self.ngo)
        AuditLog.objects.create(action=AuditLog.Action.ADMIN_ACTION, performed_by=self.admin, target_user=self.donor)

        authenticate(self.client, self.admin)
        response = self.client.get('/api/analytics/audit', {'action': 'USER_LOGIN'})
        self.assertEqual(response.data['pagination']['total'], 2)
        self.assertEqual(response.data['stats'][0], {'action': 'USER_LOGIN', 'count': 2})

        response = self.client.get('/api/analytics/audit', {'user_id': self.donor.pk})
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get('/api/analytics/audit', {'start_date': '2000-01-01', 'end_date': '2000-01-02'})
        self.assertEqual(response.data['pagination']['total'], 0)

        response = self.client.get('/api/analytics/audit', {'start_date': 'yesterday'})
        self.assertEqual(response.status_code, 400)


class DashboardTests(APITestCase):

    def test_dashboard_per_role(self):
        donor = make_donor()
        ngo = make_ngo()
        volunteer = make_volunteer()
        make_donation(donor)
        make_donation(donor, status=Completed, quantity=3)

        authenticate(self.client, donor)
        response = self.client.get('/api/analytics/dashboard')
        self.assertEqual(response.data['role'], 'donor')
        self.assertEqual(response.data['data']['total_donations'], 2)
        self.assertEqual(response.data['data']['active_donations'], 1)
        self.assertEqual(response.data['data']['total_quantity'], 3)
        self.assertEqual(response.data['data']['unread_notifications'], 0)

        authenticate(self.client, ngo)
        self.assertEqual(self.client.get('/api/analytics/dashboard').data['data']['available_donations'], 1)

        authenticate(self.client, volunteer)
        self.assertIn('trust_score', self.client.get('/api/analytics/dashboard').data['data'])

        authenticate(self.client, make_admin())
        self.assertEqual(self.client.get('/api/analytics/dashboard').data['data']['total_users'], 4)
