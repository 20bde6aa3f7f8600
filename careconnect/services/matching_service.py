"""
Guardian recommendations for a vital.

With FEATURE_AI_MATCHING off the list is simply ordered by rating. With it on,
every guardian gets an explainable score out of 100:

    rating           40  (recency-weighted rating)
    proximity        25  (or 20 flat for the same city)
    specialization   20
    experience       10
    reliability       5
"""
from collections import defaultdict
from typing import Dict, List, Optional

from beanie.operators import In
from pydantic import BaseModel, Field

from careconnect.config import get_settings
from careconnect.models import Booking, GuardianProfile, Review, VitalProfile
from careconnect.schemas import GuardianMatchOut, MatchScoreOut, RatingStatsOut
from careconnect.services.rating_service import summarize_ratings, completion_reliability
from careconnect.utils.geo import haversine_km
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import guardian_summary_out

settings = get_settings()
logger = get_logger("matching")

DEFAULT_RADIUS_KM = 50


class MatchingInput(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    city: Optional[str] = None
    health_needs: Optional[str] = None
    health_tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_vital(cls, vital: VitalProfile) -> "MatchingInput":
        coords = vital.location.coordinates if vital.location else None
        return cls(
            lat=coords.lat if coords else None,
            lng=coords.lng if coords else None,
            city=vital.location.city if vital.location else None,
            health_needs=vital.health_needs,
            health_tags=list(vital.health_tags or []),
        )


def _tag_matches(tag: str, specialization: List[str]) -> bool:
    t = tag.lower()
    return any(t in s.lower() or s.lower() in t for s in specialization)


def score_guardian(
    guardian: GuardianProfile,
    stats: RatingStatsOut,
    reliability: float,
    match_input: MatchingInput,
) -> MatchScoreOut:
    score = 0.0
    reasons: List[str] = []

    if stats.total_reviews > 0:
        score += (stats.recent_rating / 5) * 40
        if stats.recent_rating >= 4.5:
            reasons.append("Highly rated for quality care")
        elif stats.recent_rating >= 4.0:
            reasons.append("Well-rated by patients")
        if stats.total_reviews >= 50:
            reasons.append(f"Trusted by {stats.total_reviews}+ patients")
    else:
        reasons.append("New Guardian - building reputation")

    location = guardian.location
    if match_input.lat is not None and match_input.lng is not None and location and location.coordinates:
        distance = haversine_km(match_input.lat, match_input.lng, location.coordinates.lat, location.coordinates.lng)
        radius = guardian.service_radius or DEFAULT_RADIUS_KM
        if distance <= radius:
            score += (1 - distance / radius) * 25
            if distance < 5:
                reasons.append("Available near your location")
            elif distance < 15:
                reasons.append("Within your service area")
    elif match_input.city and location and location.city:
        if match_input.city.lower() == location.city.lower():
            score += 20
            reasons.append("Same city")

    if match_input.health_tags and guardian.specialization:
        matching = [t for t in match_input.health_tags if _tag_matches(t, guardian.specialization)]
        if matching:
            denominator = max(len(match_input.health_tags), len(guardian.specialization))
            score += (len(matching) / denominator) * 20
            reasons.append(f"Matches your health needs: {matching[0]}")

    score += min(guardian.experience / 10, 1) * 10
    if guardian.experience >= 5:
        reasons.append(f"{guardian.experience} years of experience")

    score += (reliability / 100) * 5
    if reliability >= 90:
        reasons.append("High completion rate")

    top = reasons[:3]
    explanation = "Recommended based on " + (", ".join(top) if top else "availability and experience")

    return MatchScoreOut(
        guardian_id=str(guardian.id),
        score=round(score, 2),
        explanation=explanation,
        reasons=reasons,
    )


def rating_sort_score(guardian: GuardianProfile, stats: RatingStatsOut) -> MatchScoreOut:
    if stats.total_reviews > 0:
        reasons = [f"{stats.average_rating}⭐ ({stats.total_reviews} reviews)"]
    else:
        reasons = ["New Guardian"]
    return MatchScoreOut(
        guardian_id=str(guardian.id),
        score=stats.average_rating,
        explanation="Sorted by rating",
        reasons=reasons,
    )


async def _load_activity(guardians: List[GuardianProfile]):
    ids = [g.id for g in guardians]
    reviews = await Review.find(In(Review.guardian_id, ids)).to_list()
    bookings = await Booking.find(In(Booking.guardian_id, ids)).to_list()

    reviews_by: Dict = defaultdict(list)
    for r in reviews:
        reviews_by[r.guardian_id].append(r)
    bookings_by: Dict = defaultdict(list)
    for b in bookings:
        bookings_by[b.guardian_id].append(b)
    return reviews_by, bookings_by


async def match_guardians(match_input: MatchingInput, ai_matching: Optional[bool] = None) -> List[GuardianMatchOut]:
    """Rank every guardian for the given vital context."""
    if ai_matching is None:
        ai_matching = settings.FEATURE_AI_MATCHING

    guardians = await GuardianProfile.find_all().to_list()
    if not guardians:
        return []
    reviews_by, bookings_by = await _load_activity(guardians)

    ranked = []
    for guardian in guardians:
        g_reviews = reviews_by.get(guardian.id, [])
        stats = summarize_ratings(g_reviews)
        if ai_matching:
            match = score_guardian(guardian, stats, completion_reliability(bookings_by.get(guardian.id, [])), match_input)
        else:
            match = rating_sort_score(guardian, stats)
        average = (sum(r.rating for r in g_reviews) / len(g_reviews)) if g_reviews else None
        ranked.append(GuardianMatchOut(
            guardian=guardian_summary_out(guardian, average, len(g_reviews)),
            match_score=match,
        ))

    if ai_matching:
        ranked.sort(key=lambda m: m.match_score.score, reverse=True)
    else:
        # verified first among equal ratings
        ranked.sort(key=lambda m: (m.match_score.score, m.guardian.is_verified), reverse=True)

    logger.info(f"Matched {len(ranked)} guardian(s) (ai_matching={ai_matching})")
    return ranked
