from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from foodlink.models import PickupAssignment, RouteWaypoint, User, compute_urgency_level

from .helpers import make_donation, make_donor, make_ngo, make_pickup, make_volunteer


class UrgencyLevelTests(TestCase):

    def setUp(self):
        self.now = timezone.now()

    def level_in(self, **delta):
        return compute_urgency_level(self.now + timedelta(**delta), now=self.now)

    def test_boundaries_are_inclusive(self):
        self.assertEqual(self.level_in(hours=2), 'critical')
        self.assertEqual(self.level_in(hours=6), 'high')
        self.assertEqual(self.level_in(hours=12), 'medium')

    def test_just_past_each_boundary(self):
        self.assertEqual(self.level_in(hours=2, seconds=1), 'high')
        self.assertEqual(self.level_in(hours=6, seconds=1), 'medium')
        self.assertEqual(self.level_in(hours=12, seconds=1), 'low')

    def test_already_expired_is_critical(self):
        self.assertEqual(self.level_in(hours=-3), 'critical')

    def test_save_recomputes_urgency(self):
        donation = make_donation(make_donor(), hours=48)
        self.assertEqual(donation.urgency_level, 'low')

        donation.expiry_date = timezone.now() + timedelta(hours=1)
        donation.save(update_fields=['expiry_date'])
        donation.refresh_from_db()
        self.assertEqual(donation.urgency_level, 'critical')


class UserModelTests(TestCase):

    def test_email_is_normalised(self):
        user = make_donor(email='  Someone@Example.COM ')
        self.assertEqual(user.email, 'someone@example.com')

    def test_password_is_hashed(self):
        user = make_donor()
        self.assertNotEqual(user.password, 'secret123')
        self.assertTrue(user.compare_password('secret123'))
        self.assertFalse(user.compare_password('secret124'))

    def test_display_name_prefers_organization(self):
        self.assertEqual(make_ngo().display_name, 'Food Bank')
        self.assertEqual(make_volunteer(name='Asha').display_name, 'Asha')

    def test_availability(self):
        volunteer = make_volunteer(availability={'monday': {'available': False}, 'tuesday': {'available': True}})
        self.assertFalse(volunteer.is_available_on('monday'))
        self.assertTrue(volunteer.is_available_on('tuesday'))
        self.assertTrue(volunteer.is_available_on('sunday'))
        self.assertTrue(make_volunteer(email='free@example.com').is_available_on('monday'))

    def test_superuser_defaults_to_admin(self):
        admin = User.objects.create_superuser(email='root@example.com', password='secret123', name='Root', phone='1')
        self.assertEqual(admin.role, User.Role.ADMIN)
        self.assertTrue(admin.is_verified)


class TrustScoreTests(TestCase):

    def setUp(self):
        self.donor = make_donor()
        self.ngo = make_ngo()
        self.volunteer = make_volunteer()

    def test_no_history_scores_full_marks(self):
        self.assertEqual(self.volunteer.refresh_trust_score(), 100.0)

    def test_score_combines_completion_cancellation_and_ratings(self):
        make_pickup(
            make_donation(self.donor), self.ngo, self.volunteer,
            status=PickupAssignment.Status.COMPLETED, rating_by_donor=1,
        )
        make_pickup(
            make_donation(self.donor), self.ngo, self.volunteer,
            status=PickupAssignment.Status.CANCELLED,
        )
        # 50 + 50% completion - 5 per cancellation + (1/5) * 20
        self.assertAlmostEqual(self.volunteer.refresh_trust_score(), 99.0)

    def test_score_is_capped(self):
        make_pickup(
            make_donation(self.donor), self.ngo, self.volunteer,
            status=PickupAssignment.Status.COMPLETED, rating_by_donor=5, rating_by_recipient=5,
        )
        self.assertEqual(self.volunteer.refresh_trust_score(), 100)


class PickupRouteTests(TestCase):

    def test_route_is_geojson(self):
        donor, ngo = make_donor(), make_ngo()
        pickup = make_pickup(make_donation(donor), ngo)
        RouteWaypoint.objects.create(pickup=pickup, position=0, latitude=12.95, longitude=77.61)

        route = pickup.route
        self.assertEqual(route['pickup_location'], {'type': 'Point', 'coordinates': [77.5946, 12.9716]})
        self.assertEqual(route['delivery_location']['coordinates'], [77.6245, 12.9352])
        self.assertIsNone(route['current_location'])
        self.assertEqual(route['waypoints'][0]['coordinates'], [77.61, 12.95])
        self.assertIsNone(route['waypoints'][0]['reached_at'])

    def test_is_party(self):
        donor, ngo, volunteer = make_donor(), make_ngo(), make_volunteer()
        pickup = make_pickup(make_donation(donor), ngo, volunteer)
        self.assertTrue(pickup.is_party(volunteer))
        self.assertFalse(pickup.is_party(make_volunteer(email='other@example.com')))
