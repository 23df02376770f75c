"""Profile model: founder profile plus subscription fields."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from cofounder.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), unique=True, nullable=False, index=True)

    # Founder profile (wizard fields)
    full_name = Column(String(255), nullable=True)
    country = Column(String(100), nullable=True)
    industry = Column(String(255), nullable=True)
    primary_role = Column(String(100), nullable=True)
    experience_level = Column(String(100), nullable=True)
    goals = Column(Text, nullable=True)
    constraints = Column(Text, nullable=True)
    profile_completed = Column(Boolean, nullable=False, default=False)

    # Entitlement inputs (has_access is derived, never stored)
    is_legacy_user = Column(Boolean, nullable=False, default=False)
    subscription_status = Column(String(50), nullable=True)  # "active" once a payment is verified
    subscription_plan = Column(String(50), nullable=True)  # "monthly" | "yearly"
    subscription_id = Column(String(255), nullable=True)
    subscription_start_date = Column(DateTime(timezone=True), nullable=True)
    subscription_end_date = Column(DateTime(timezone=True), nullable=True)
    razorpay_subscription_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_context(self) -> dict:
        """Profile fields exposed to the LLM (no billing identifiers)."""
        return {
            "full_name": self.full_name,
            "country": self.country,
            "industry": self.industry,
            "primary_role": self.primary_role,
            "experience_level": self.experience_level,
            "goals": self.goals,
            "constraints": self.constraints,
        }
