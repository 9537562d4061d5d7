# foodlink/utils/matching.py
"""
Scoring tables used by admins when pairing donations with NGOs and pickups
with volunteers.
"""

from ..models import User

BADGE_SCORES = {
    User.TrustBadge.PLATINUM: 25,
    User.TrustBadge.GOLD: 20,
    User.TrustBadge.SILVER: 15,
    User.TrustBadge.BRONZE: 10,
    User.TrustBadge.NONE: 0,
}

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

MAX_NGO_MATCHES = 10


def weekday_name(day):
    return WEEKDAYS[day.weekday()]


def score_ngo(ngo):
    """Return (score, reasons) for an NGO as a recipient candidate."""
    score = BADGE_SCORES.get(ngo.trust_badge, 0)
    reasons = []
    if ngo.trust_badge != User.TrustBadge.NONE:
        reasons.append(f"{ngo.trust_badge} trust badge")

    if ngo.response_rate and ngo.response_rate > 0.8:
        score += 20
        reasons.append('High response rate')

    if ngo.completed_donations > 10:
        score += 15
        reasons.append('Experienced recipient')

    return score, reasons


def score_volunteer(volunteer):
    """Return (score, reasons) for a volunteer as a pickup candidate."""
    score = BADGE_SCORES.get(volunteer.trust_badge, 0)
    reasons = []

    if volunteer.completed_donations > 20:
        score += 20
        reasons.append('Highly experienced')
    elif volunteer.completed_donations > 10:
        score += 15
        reasons.append('Experienced')

    if volunteer.has_vehicle:
        score += 15
        reasons.append('Has vehicle')

    return score, reasons


def match_ngos(donation):
    """Verified, active NGOs ranked by score, best first."""
    ngos = User.objects.filter(role=User.Role.NGO, is_active=True, is_verified=True)
    matches = []
    for ngo in ngos:
        score, reasons = score_ngo(ngo)
        matches.append({
            'id': ngo.pk,
            'name': ngo.name,
            'organization': ngo.organization,
            'trust_badge': ngo.trust_badge,
            'completed_donations': ngo.completed_donations,
            'match_score': score,
            'match_reasons': reasons,
        })
    matches.sort(key=lambda m: m['match_score'], reverse=True)
    return matches[:MAX_NGO_MATCHES]


def available_volunteers(day):
    """Verified, active volunteers free on ``day``'s weekday, ranked by score."""
    target_day = weekday_name(day)
    volunteers = User.objects.filter(role=User.Role.VOLUNTEER, is_active=True, is_verified=True)
    ranked = []
    for volunteer in volunteers:
        if not volunteer.is_available_on(target_day):
            continue
        score, reasons = score_volunteer(volunteer)
        ranked.append({
            'id': volunteer.pk,
            'name': volunteer.name,
            'phone': volunteer.phone,
            'has_vehicle': volunteer.has_vehicle,
            'preferred_areas': volunteer.preferred_areas,
            'trust_badge': volunteer.trust_badge,
            'completed_pickups': volunteer.completed_donations,
            'match_score': score,
            'match_reasons': reasons,
        })
    ranked.sort(key=lambda v: v['match_score'], reverse=True)
    return target_day, ranked
