import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from newsroom.errors import store_call
from newsroom.models import InteractionEvent, InteractionType, as_utc
from newsroom.schemas import EngagementRates, RecommendationAnalytics
from newsroom.users import require_user

logger = logging.getLogger(__name__)

ANALYTICS_WINDOW_DAYS = 30


class _Tally:
    """Running flag counts for one partition of events."""

    def __init__(self):
        self.total = 0
        self.viewed = 0
        self.bookmarked = 0
        self.dismissed = 0

    def add(self, event: InteractionEvent) -> None:
        self.total += 1
        if event.type == InteractionType.VIEW:
            self.viewed += 1
        elif event.type == InteractionType.BOOKMARK:
            # An un-bookmark event counts toward the total but not the rate
            if event.value:
                self.bookmarked += 1
        elif event.type == InteractionType.NOT_INTERESTED:
            self.dismissed += 1

    def _rate(self, count: int) -> float:
        # Empty partition → 0, never NaN
        return count / self.total if self.total else 0.0

    def rates(self) -> EngagementRates:
        return EngagementRates(
            total=self.total,
            view_rate=self._rate(self.viewed),
            bookmark_rate=self._rate(self.bookmarked),
            not_interested_rate=self._rate(self.dismissed),
        )


def aggregate(events: Iterable[InteractionEvent]) -> RecommendationAnalytics:
    """Compute overall, per-category and per-source engagement rates."""
    overall = _Tally()
    by_category: Dict[str, _Tally] = defaultdict(_Tally)
    by_source: Dict[str, _Tally] = defaultdict(_Tally)

    for event in events:
        overall.add(event)
        by_category[event.category].add(event)
        by_source[event.source].add(event)

    summary = overall.rates()
    return RecommendationAnalytics(
        total_recommendations=summary.total,
        view_rate=summary.view_rate,
        bookmark_rate=summary.bookmark_rate,
        not_interested_rate=summary.not_interested_rate,
        by_category={name: tally.rates() for name, tally in by_category.items()},
        by_source={name: tally.rates() for name, tally in by_source.items()},
    )


class AnalyticsAggregator:
    def __init__(self, db: Session):
        self.db = db

    def _window_events(self, user_id: str, since: datetime) -> List[InteractionEvent]:
        return (
            self.db.query(InteractionEvent)
            .filter(
                InteractionEvent.user_id == user_id,
                InteractionEvent.created_at >= since,
            )
            .order_by(InteractionEvent.id)
            .all()
        )

    def get_analytics(self, user_id: str, now: Optional[datetime] = None) -> RecommendationAnalytics:
        """
        Engagement rates over the user's events from the trailing window.

        Args:
            user_id: the user whose events are aggregated
            now: end of the window, defaults to the current UTC time

        Returns:
            RecommendationAnalytics with every rate in [0, 1]
        """
        now = as_utc(now) if now else datetime.now(timezone.utc)
        since = now - timedelta(days=ANALYTICS_WINDOW_DAYS)

        with store_call(self.db, "load analytics events"):
            require_user(self.db, user_id)
            events = self._window_events(user_id, since)

        analytics = aggregate(events)
        logger.info(
            f"[analytics] user={user_id} events={analytics.total_recommendations} "
            f"view_rate={analytics.view_rate:.3f} bookmark_rate={analytics.bookmark_rate:.3f}"
        )
        return analytics
