# foodlink/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('health', views.health, name='health'),

    # --- Auth ---
    path('auth/register', views.register, name='register'),
    path('auth/login', views.login, name='login'),
    path('auth/logout', views.logout, name='logout'),
    path('auth/me', views.me, name='me'),
    path('auth/profile', views.update_profile, name='update_profile'),
    path('auth/password', views.change_password, name='change_password'),

    # --- Users (admin) ---
    path('users', views.user_list, name='user_list'),
    path('users/verifications/pending', views.pending_verifications, name='pending_verifications'),
    path('users/<int:pk>', views.user_detail, name='user_detail'),
    path('users/<int:pk>/verify', views.verify_user, name='verify_user'),

    # --- Donations ---
    path('donations', views.donation_list, name='donation_list'),
    path('donations/my-donations', views.my_donations, name='my_donations'),
    path('donations/match/<int:pk>', views.donation_match, name='donation_match'),
    path('donations/<int:pk>', views.donation_detail, name='donation_detail'),
    path('donations/<int:pk>/claim', views.claim_donation, name='claim_donation'),
    path('donations/<int:pk>/verify', views.verify_donation, name='verify_donation'),
    path('donations/<int:pk>/status', views.donation_status, name='donation_status'),
    path('donations/<int:pk>/feedback', views.donation_feedback, name='donation_feedback'),

    # --- Pickups ---
    path('pickups', views.pickup_list, name='pickup_list'),
    path('pickups/available', views.available_pickups, name='available_pickups'),
    path('pickups/volunteers/available', views.volunteers_available, name='volunteers_available'),
    path('pickups/<int:pk>', views.pickup_detail, name='pickup_detail'),
    path('pickups/<int:pk>/accept', views.accept_pickup, name='accept_pickup'),
    path('pickups/<int:pk>/status', views.pickup_status, name='pickup_status'),
    path('pickups/<int:pk>/location', views.pickup_location, name='pickup_location'),
    path('pickups/<int:pk>/complete', views.complete_pickup, name='complete_pickup'),
    path('pickups/<int:pk>/verification', views.pickup_verification, name='pickup_verification'),
    path('pickups/<int:pk>/rate', views.rate_pickup, name='rate_pickup'),

    # --- Notifications ---
    path('notifications', views.notification_list, name='notification_list'),
    path('notifications/read', views.mark_notifications_read, name='mark_notifications_read'),
    path('notifications/read-all', views.mark_all_notifications_read, name='mark_all_notifications_read'),
    path('notifications/subscription', views.save_subscription, name='save_subscription'),
    path('notifications/<int:pk>', views.notification_delete, name='notification_delete'),
    path('notifications/<int:pk>/read', views.mark_notification_read, name='mark_notification_read'),

    # --- Analytics & impact ---
    path('analytics', views.analytics, name='analytics'),
    path('analytics/audit', views.audit_logs, name='audit_logs'),
    path('analytics/dashboard', views.dashboard, name='dashboard'),
    path('impact', views.impact_summary, name='impact'),
    path('impact/leaderboard', views.impact_leaderboard, name='impact_leaderboard'),
]
