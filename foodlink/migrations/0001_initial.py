# Generated migration for the initial FoodLink schema

from django.conf import settings
from django.db import migrations, models
import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import foodlink.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('role', models.CharField(choices=[('donor', 'Donor'), ('ngo', 'NGO'), ('volunteer', 'Volunteer'), ('admin', 'Admin')], max_length=10)),
                ('phone', models.CharField(max_length=20)),
                ('organization', models.CharField(blank=True, default='', max_length=255)),
                ('street', models.CharField(blank=True, default='', max_length=255)),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('state', models.CharField(blank=True, default='', max_length=100)),
                ('pincode', models.CharField(blank=True, default='', max_length=20)),
                ('country', models.CharField(default='India', max_length=100)),
                ('latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('trust_badge', models.CharField(choices=[('none', 'None'), ('bronze', 'Bronze'), ('silver', 'Silver'), ('gold', 'Gold'), ('platinum', 'Platinum')], default='none', max_length=10)),
                ('trust_score', models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('response_rate', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(1)])),
                ('completed_donations', models.PositiveIntegerField(default=0)),
                ('is_verified', models.BooleanField(default=False)),
                ('verification_date', models.DateTimeField(blank=True, null=True)),
                ('admin_notes', models.TextField(blank=True, default='')),
                ('availability', models.JSONField(blank=True, default=dict, help_text='Weekday -> {available, start_time, end_time}')),
                ('preferred_areas', models.JSONField(blank=True, default=list)),
                ('has_vehicle', models.BooleanField(default=False)),
                ('vehicle_type', models.CharField(blank=True, default='', max_length=50)),
                ('max_distance', models.FloatField(blank=True, help_text='Maximum travel distance in km', null=True)),
                ('email_notifications', models.BooleanField(default=True)),
                ('sms_notifications', models.BooleanField(default=False)),
                ('language', models.CharField(default='en', max_length=10)),
                ('webpush_subscription', models.TextField(blank=True, help_text='Web push subscription data (JSON)', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_users', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['role', 'is_active'], name='user_role_active_idx'),
                    models.Index(fields=['latitude', 'longitude'], name='user_location_idx'),
                ],
            },
            managers=[
                ('objects', foodlink.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='FoodDonation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('food_type', models.CharField(choices=[('cooked_meals', 'Cooked Meals'), ('raw_vegetables', 'Raw Vegetables'), ('fruits', 'Fruits'), ('dairy', 'Dairy'), ('bakery', 'Bakery'), ('packaged', 'Packaged'), ('beverages', 'Beverages'), ('other', 'Other')], max_length=20)),
                ('description', models.CharField(max_length=500)),
                ('quantity', models.FloatField(validators=[django.core.validators.MinValueValidator(0.1, message='Quantity must be greater than 0')])),
                ('unit', models.CharField(choices=[('kg', 'kg'), ('liters', 'Liters'), ('pieces', 'Pieces'), ('servings', 'Servings'), ('boxes', 'Boxes'), ('packets', 'Packets')], max_length=10)),
                ('expiry_date', models.DateTimeField()),
                ('preparation_date', models.DateTimeField(blank=True, null=True)),
                ('storage_condition', models.CharField(choices=[('room_temperature', 'Room Temperature'), ('refrigerated', 'Refrigerated'), ('frozen', 'Frozen')], max_length=20)),
                ('allergens', models.JSONField(blank=True, default=list)),
                ('dietary_info', models.JSONField(blank=True, default=list)),
                ('pickup_address', models.TextField()),
                ('pickup_latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('pickup_longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('pickup_instructions', models.TextField(blank=True, default='')),
                ('available_from', models.DateTimeField()),
                ('available_until', models.DateTimeField()),
                ('urgency_level', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')], default='medium', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending Verification'), ('verified', 'Verified'), ('available', 'Available'), ('claimed', 'Claimed'), ('assigned', 'Volunteer Assigned'), ('in_transit', 'In Transit'), ('delivered', 'Delivered'), ('completed', 'Completed'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('images', models.JSONField(blank=True, default=list)),
                ('proper_storage', models.BooleanField(default=False)),
                ('temperature_controlled', models.BooleanField(default=False)),
                ('hygiene_standards', models.BooleanField(default=False)),
                ('no_contamination', models.BooleanField(default=False)),
                ('proper_packaging', models.BooleanField(default=False)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('verification_notes', models.TextField(blank=True, default='')),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('feedback_rating', models.PositiveSmallIntegerField(blank=True, help_text='Recipient rating from 1 to 5', null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('feedback_comment', models.TextField(blank=True, default='')),
                ('received_in_good_condition', models.BooleanField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='donations', to=settings.AUTH_USER_MODEL)),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_donations', to=settings.AUTH_USER_MODEL)),
                ('claimed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claimed_donations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'expiry_date'], name='donation_status_expiry_idx'),
                    models.Index(fields=['donor', 'status'], name='donation_donor_status_idx'),
                    models.Index(fields=['claimed_by', 'status'], name='donation_claimer_status_idx'),
                    models.Index(fields=['pickup_latitude', 'pickup_longitude'], name='donation_pickup_point_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PickupAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('assigned', 'Assigned'), ('accepted', 'Accepted'), ('in_transit', 'On the Way'), ('picked_up', 'Picked Up'), ('delivering', 'Delivering'), ('delivered', 'Delivered'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='assigned', max_length=20)),
                ('scheduled_pickup_time', models.DateTimeField()),
                ('scheduled_delivery_time', models.DateTimeField(blank=True, null=True)),
                ('actual_pickup_time', models.DateTimeField(blank=True, null=True)),
                ('actual_delivery_time', models.DateTimeField(blank=True, null=True)),
                ('pickup_latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('pickup_longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('delivery_latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('delivery_longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('current_latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('current_longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('location_updated_at', models.DateTimeField(blank=True, help_text='Timestamp of last geolocation update', null=True)),
                ('estimated_distance', models.FloatField(blank=True, help_text='Kilometres', null=True)),
                ('estimated_duration', models.FloatField(blank=True, help_text='Minutes', null=True)),
                ('pickup_instructions', models.TextField(blank=True, default='')),
                ('delivery_instructions', models.TextField(blank=True, default='')),
                ('notes', models.TextField(blank=True, default='')),
                ('rating_by_donor', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('rating_by_recipient', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('rating_comments', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('donation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pickups', to='foodlink.fooddonation')),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='donor_pickups', to=settings.AUTH_USER_MODEL)),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='received_pickups', to=settings.AUTH_USER_MODEL)),
                ('volunteer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pickup_assignments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-scheduled_pickup_time'],
                'indexes': [
                    models.Index(fields=['volunteer', 'status'], name='pickup_volunteer_status_idx'),
                    models.Index(fields=['pickup_latitude', 'pickup_longitude'], name='pickup_route_start_idx'),
                    models.Index(fields=['delivery_latitude', 'delivery_longitude'], name='pickup_delivery_point_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RouteWaypoint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveIntegerField(default=0)),
                ('latitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('longitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('reached_at', models.DateTimeField(blank=True, null=True)),
                ('pickup', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waypoints', to='foodlink.pickupassignment')),
            ],
            options={
                'ordering': ['position', 'id'],
            },
        ),
        migrations.CreateModel(
            name='HandoverVerification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stage', models.CharField(choices=[('pickup', 'Pickup'), ('delivery', 'Delivery')], max_length=10)),
                ('verified_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('photo_url', models.URLField(blank=True, default='', max_length=500)),
                ('signature', models.TextField(blank=True, default='')),
                ('received_by', models.CharField(blank=True, default='', max_length=255)),
                ('condition', models.CharField(choices=[('good', 'Good'), ('acceptable', 'Acceptable'), ('poor', 'Poor')], max_length=12)),
                ('notes', models.TextField(blank=True, default='')),
                ('pickup', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='verifications', to='foodlink.pickupassignment')),
            ],
            options={
                'constraints': [
                    models.UniqueConstraint(fields=('pickup', 'stage'), name='unique_verification_per_stage'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('donation_created', 'Donation Created'), ('donation_claimed', 'Donation Claimed'), ('donation_verified', 'Donation Verified'), ('donation_expired', 'Donation Expired'), ('pickup_assigned', 'Pickup Assigned'), ('pickup_update', 'Pickup Update'), ('pickup_completed', 'Pickup Completed'), ('assignment_cancelled', 'Assignment Cancelled'), ('verification_approved', 'Verification Approved'), ('verification_rejected', 'Verification Rejected'), ('badge_earned', 'Badge Earned'), ('system_alert', 'System Alert'), ('reminder', 'Reminder')], max_length=30)),
                ('title', models.CharField(max_length=100)),
                ('message', models.CharField(max_length=500)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('action_url', models.CharField(blank=True, default='', max_length=255)),
                ('metadata', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
                ('related_donation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='foodlink.fooddonation')),
                ('related_pickup', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='foodlink.pickupassignment')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'is_read', '-created_at'], name='notification_inbox_idx'),
                    models.Index(fields=['expires_at'], name='notification_expiry_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('USER_REGISTERED', 'User Registered'), ('USER_LOGIN', 'User Login'), ('USER_LOGOUT', 'User Logout'), ('USER_VERIFIED', 'User Verified'), ('USER_REJECTED', 'User Rejected'), ('USER_UPDATED', 'User Updated'), ('USER_DEACTIVATED', 'User Deactivated'), ('VERIFICATION_REVOKED', 'Verification Revoked'), ('DONATION_CREATED', 'Donation Created'), ('DONATION_UPDATED', 'Donation Updated'), ('DONATION_VERIFIED', 'Donation Verified'), ('DONATION_CLAIMED', 'Donation Claimed'), ('DONATION_CANCELLED', 'Donation Cancelled'), ('DONATION_COMPLETED', 'Donation Completed'), ('PICKUP_ASSIGNED', 'Pickup Assigned'), ('PICKUP_UPDATED', 'Pickup Updated'), ('PICKUP_COMPLETED', 'Pickup Completed'), ('PICKUP_CANCELLED', 'Pickup Cancelled'), ('ADMIN_ACTION', 'Admin Action'), ('SYSTEM_EVENT', 'System Event')], db_index=True, max_length=30)),
                ('details', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.CharField(blank=True, default='', max_length=512)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='performed_actions', to=settings.AUTH_USER_MODEL)),
                ('target_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_entries', to=settings.AUTH_USER_MODEL)),
                ('target_donation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_entries', to='foodlink.fooddonation')),
                ('target_pickup', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_entries', to='foodlink.pickupassignment')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['-created_at'], name='audit_created_idx'),
                    models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
                    models.Index(fields=['performed_by', '-created_at'], name='audit_actor_created_idx'),
                ],
            },
        ),
    ]
