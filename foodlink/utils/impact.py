# foodlink/utils/impact.py
"""
Impact metrics and achievement badges.

Per unit of quantity rescued: 2 meals, 2.5 kg CO2, 1000 l water and 1 kg kept
out of landfill. Each completed volunteer pickup counts as 5 km and 45 minutes.
"""

from django.db.models import Count, Sum

from ..models import FoodDonation, PickupAssignment, User

MEALS_PER_UNIT = 2
CO2_PER_UNIT = 2.5
WATER_PER_UNIT = 1000
KM_PER_PICKUP = 5
HOURS_PER_PICKUP = 0.75

DELIVERED_STATUSES = [FoodDonation.Status.DELIVERED, FoodDonation.Status.COMPLETED]

LEADERBOARD_SIZE = 20

DONOR_COUNT_BADGES = [
    (1, 'First Donation'),
    (5, 'Regular Donor'),
    (10, 'Dedicated Donor'),
    (25, 'Champion Donor'),
    (50, 'Hero Donor'),
    (100, 'Legend'),
]
DONOR_QUANTITY_BADGES = [
    (100, '100kg Saved'),
    (500, '500kg Saved'),
    (1000, '1 Ton Saved'),
]
NGO_BADGES = [
    (1, 'First Claim'),
    (10, 'Active Recipient'),
    (50, 'Community Partner'),
    (100, 'Impact Leader'),
]
VOLUNTEER_BADGES = [
    (1, 'First Delivery'),
    (5, 'Helping Hand'),
    (15, 'Road Warrior'),
    (30, 'Delivery Hero'),
    (50, 'Community Champion'),
    (100, 'Volunteer Legend'),
]


def _earned(ladder, value):
    return [name for threshold, name in ladder if value >= threshold]


def donor_badges(donation_count, quantity):
    return _earned(DONOR_COUNT_BADGES, donation_count) + _earned(DONOR_QUANTITY_BADGES, quantity)


def ngo_badges(claims_count):
    return _earned(NGO_BADGES, claims_count)


def volunteer_badges(pickups):
    return _earned(VOLUNTEER_BADGES, pickups)


def environmental_impact(quantity):
    return {
        'meals_provided': round(quantity * MEALS_PER_UNIT),
        'co2_saved': round(quantity * CO2_PER_UNIT),
        'water_saved': round(quantity * WATER_PER_UNIT),
        'landfill_diverted': round(quantity),
    }


def _delivered_totals(queryset):
    totals = queryset.filter(status__in=DELIVERED_STATUSES).aggregate(count=Count('id'), quantity=Sum('quantity'))
    return totals['count'], totals['quantity'] or 0


def personal_impact(user):
    """Role-specific impact summary for ``user``; admins get None."""
    if user.role == User.Role.DONOR:
        count, quantity = _delivered_totals(FoodDonation.objects.filter(donor=user))
        impact = environmental_impact(quantity)
        return {
            'total_donations': count,
            'total_quantity': quantity,
            'meals_provided': impact['meals_provided'],
            'co2_saved': impact['co2_saved'],
            'water_saved': impact['water_saved'],
            'trust_badge': user.trust_badge,
            'badges': donor_badges(count, quantity),
        }
    if user.role == User.Role.NGO:
        count, quantity = _delivered_totals(FoodDonation.objects.filter(claimed_by=user))
        return {
            'food_received': count,
            'total_quantity': quantity,
            'people_served': round(quantity * MEALS_PER_UNIT),
            'trust_badge': user.trust_badge,
            'badges': ngo_badges(count),
        }
    if user.role == User.Role.VOLUNTEER:
        pickups = user.completed_donations
        return {
            'completed_pickups': pickups,
            'distance_traveled': pickups * KM_PER_PICKUP,
            'hours_volunteered': pickups * HOURS_PER_PICKUP,
            'trust_badge': user.trust_badge,
            'badges': volunteer_badges(pickups),
        }
    return None


def leaderboard(category):
    """Top donors, NGOs or volunteers. Returns None for an unknown category."""
    delivered = FoodDonation.objects.filter(status__in=DELIVERED_STATUSES)

    if category == 'donors':
        rows = (
            delivered.values('donor', 'donor__name', 'donor__organization', 'donor__trust_badge')
            .annotate(donation_count=Count('id'), total_quantity=Sum('quantity'))
            .order_by('-total_quantity')[:LEADERBOARD_SIZE]
        )
        return [
            {
                'id': row['donor'],
                'name': row['donor__name'],
                'organization': row['donor__organization'],
                'trust_badge': row['donor__trust_badge'],
                'donation_count': row['donation_count'],
                'total_quantity': row['total_quantity'],
                'impact_score': row['donation_count'] + row['total_quantity'] * 0.1,
            }
            for row in rows
        ]

    if category == 'ngos':
        rows = (
            delivered.filter(claimed_by__isnull=False)
            .values('claimed_by', 'claimed_by__name', 'claimed_by__organization', 'claimed_by__trust_badge')
            .annotate(claims_count=Count('id'), total_received=Sum('quantity'))
            .order_by('-total_received')[:LEADERBOARD_SIZE]
        )
        return [
            {
                'id': row['claimed_by'],
                'name': row['claimed_by__organization'] or row['claimed_by__name'],
                'trust_badge': row['claimed_by__trust_badge'],
                'claims_count': row['claims_count'],
                'total_received': row['total_received'],
                'people_served': row['total_received'] * MEALS_PER_UNIT,
            }
            for row in rows
        ]

    if category == 'volunteers':
        volunteers = (
            User.objects.filter(role=User.Role.VOLUNTEER, completed_donations__gt=0)
            .order_by('-completed_donations')[:LEADERBOARD_SIZE]
        )
        return [
            {
                'id': v.pk,
                'name': v.name,
                'completed_donations': v.completed_donations,
                'trust_badge': v.trust_badge,
            }
            for v in volunteers
        ]

    return None


def platform_impact():
    count, quantity = _delivered_totals(FoodDonation.objects.all())
    active = User.objects.filter(is_active=True)
    return {
        'total_donations': count,
        'total_quantity': quantity,
        **environmental_impact(quantity),
        'active_donors': active.filter(role=User.Role.DONOR).count(),
        'active_ngos': active.filter(role=User.Role.NGO).count(),
        'active_volunteers': active.filter(role=User.Role.VOLUNTEER).count(),
        'completed_pickups': PickupAssignment.objects.filter(status=PickupAssignment.Status.COMPLETED).count(),
    }
