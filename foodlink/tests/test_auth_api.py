from datetime import timedelta

from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from foodlink.models import AuditLog, User

from .helpers import PASSWORD, authenticate, make_admin, make_donor, make_volunteer


class HealthTests(APITestCase):

    def test_health_is_public(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['status'], 'ok')
        self.assertIn('timestamp', response.data)


class RegisterTests(APITestCase):
    url = '/api/auth/register'

    def payload(self, **overrides):
        data = {
            'email': 'New.Donor@Example.com',
            'password': PASSWORD,
            'name': 'New Donor',
            'role': 'donor',
            'phone': '9999999999',
            'location': {'type': 'Point', 'coordinates': [77.5946, 12.9716]},
        }
        data.update(overrides)
        return data

    def test_register_returns_user_and_token(self):
        response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['user']['email'], 'new.donor@example.com')
        self.assertEqual(response.data['data']['user']['location']['coordinates'], [77.5946, 12.9716])
        self.assertTrue(Token.objects.filter(key=response.data['data']['token']).exists())

        user = User.objects.get(email='new.donor@example.com')
        self.assertEqual((user.latitude, user.longitude), (12.9716, 77.5946))
        self.assertFalse(user.is_verified)
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.Action.USER_REGISTERED, target_user=user).exists())

    def test_duplicate_email_is_case_insensitive(self):
        make_donor(email='new.donor@example.com')
        response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        self.assertIn('User with this email already exists', response.data['error'])

    def test_cannot_register_as_admin(self):
        response = self.client.post(self.url, self.payload(role='admin'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('role', response.data['error'])

    def test_short_password(self):
        response = self.client.post(self.url, self.payload(password='123'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.data['error'])

    def test_out_of_range_location(self):
        response = self.client.post(
            self.url, self.payload(location={'lat': 95, 'lng': 10}), format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('Latitude must be within', response.data['error'])


class LoginTests(APITestCase):
    url = '/api/auth/login'

    def setUp(self):
        self.user = make_donor()

    def test_login(self):
        response = self.client.post(self.url, {'email': 'DONOR@example.com', 'password': PASSWORD}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['user']['id'], self.user.pk)
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_wrong_password(self):
        response = self.client.post(self.url, {'email': self.user.email, 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data, {'success': False, 'error': 'Invalid email or password'})

    def test_unknown_email(self):
        response = self.client.post(self.url, {'email': 'ghost@example.com', 'password': PASSWORD}, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_deactivated_account(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post(self.url, {'email': self.user.email, 'password': PASSWORD}, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'Your account has been deactivated')


class SessionTests(APITestCase):

    def setUp(self):
        self.user = make_volunteer()

    def test_me_requires_token(self):
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])

    def test_me(self):
        authenticate(self.client, self.user)
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['role'], 'volunteer')

    def test_expired_token(self):
        token = authenticate(self.client, self.user)
        Token.objects.filter(pk=token.pk).update(created=timezone.now() - timedelta(days=30))

        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], 'Token expired')
        self.assertFalse(Token.objects.filter(pk=token.pk).exists())

    def test_logout_revokes_token(self):
        token = authenticate(self.client, self.user)
        response = self.client.post('/api/auth/logout')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Token.objects.filter(pk=token.pk).exists())
        self.assertEqual(self.client.get('/api/auth/me').status_code, 401)

    def test_update_profile(self):
        authenticate(self.client, self.user)
        response = self.client.put('/api/auth/profile', {
            'city': 'Mysuru',
            'has_vehicle': True,
            'location': {'lat': 12.3, 'lng': 76.6},
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.city, 'Mysuru')
        self.assertTrue(self.user.has_vehicle)
        self.assertEqual(self.user.latitude, 12.3)

    def test_profile_cannot_change_role(self):
        authenticate(self.client, self.user)
        self.client.put('/api/auth/profile', {'role': 'admin'}, format='json')
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, 'volunteer')

    def test_change_password(self):
        authenticate(self.client, self.user)
        wrong = self.client.put('/api/auth/password', {'current_password': 'bad', 'new_password': 'fresh123'}, format='json')
        self.assertEqual(wrong.status_code, 400)
        self.assertEqual(wrong.data['error'], 'Current password is incorrect')

        response = self.client.put('/api/auth/password', {'current_password': PASSWORD, 'new_password': 'fresh123'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('fresh123'))
        self.assertTrue(Token.objects.filter(key=response.data['data']['token']).exists())


class UserAdminTests(APITestCase):

    def setUp(self):
        self.admin = make_admin()
        self.volunteer = make_volunteer(is_verified=False)
        authenticate(self.client, self.admin)

    def test_non_admin_is_forbidden(self):
        authenticate(self.client, self.volunteer)
        response = self.client.get('/api/users')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'Role volunteer is not authorized to access this route')

    def test_list_filters(self):
        make_donor()
        response = self.client.get('/api/users', {'role': 'volunteer'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u['id'] for u in response.data['data']], [self.volunteer.pk])
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get('/api/users', {'status': 'pending'})
        self.assertEqual([u['id'] for u in response.data['data']], [self.volunteer.pk])

    def test_pending_verifications(self):
        response = self.client.get('/api/users/verifications/pending')
        self.assertEqual(response.data['count'], 1)

    def test_verify_user(self):
        response = self.client.post(f'/api/users/{self.volunteer.pk}/verify', {'action': 'approve'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'User verified successfully')
        self.volunteer.refresh_from_db()
        self.assertTrue(self.volunteer.is_verified)
        self.assertEqual(self.volunteer.verified_by, self.admin)

    def test_reject_user_deactivates(self):
        response = self.client.post(
            f'/api/users/{self.volunteer.pk}/verify', {'action': 'reject', 'reason': 'Fake ID'}, format='json',
        )
        self.assertEqual(response.data['message'], 'User rejected successfully')
        self.volunteer.refresh_from_db()
        self.assertFalse(self.volunteer.is_active)
        self.assertIn('Fake ID', self.volunteer.notifications.get().message)

    def test_deactivate(self):
        response = self.client.delete(f'/api/users/{self.volunteer.pk}')
        self.assertEqual(response.status_code, 200)
        self.volunteer.refresh_from_db()
        self.assertFalse(self.volunteer.is_active)

        response = self.client.delete(f'/api/users/{self.admin.pk}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Cannot deactivate your own account')

    def test_missing_user(self):
        response = self.client.get('/api/users/9999')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'success': False, 'error': 'Not found'})
