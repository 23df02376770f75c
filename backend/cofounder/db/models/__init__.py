"""Re-export all models so Base.metadata sees them."""

from cofounder.db.models.chat_message import ChatMessage
from cofounder.db.models.decision import Decision
from cofounder.db.models.idea import Idea
from cofounder.db.models.metric import Metric
from cofounder.db.models.payment_order import PaymentOrder
from cofounder.db.models.profile import Profile
from cofounder.db.models.roadmap import Roadmap, RoadmapStep
from cofounder.db.models.weekly_review import WeeklyReview

__all__ = [
    "ChatMessage",
    "Decision",
    "Idea",
    "Metric",
    "PaymentOrder",
    "Profile",
    "Roadmap",
    "RoadmapStep",
    "WeeklyReview",
]
