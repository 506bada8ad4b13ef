from sqlalchemy import Column, String, Integer, DateTime, Boolean, Numeric, Text, JSON
from sqlalchemy.sql import func
from .database import Base

RELEVANCE_BANDS = ("low", "medium", "high", "excellent")

class ContractRecord(Base):
    """
    One Contracts Finder notice. Feed fields are overwritten on every
    sighting; ai_* columns are written by the rating engine only.
    """
    __tablename__ = "contract"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Text, unique=True, nullable=False, index=True)  # Contracts Finder item.id

    parent_id = Column(Text)
    notice_identifier = Column(Text)
    title = Column(Text)
    description = Column(Text)
    cpv_description = Column(Text)
    cpv_description_expanded = Column(Text)

    published_date = Column(DateTime(timezone=True))
    deadline_date = Column(DateTime(timezone=True))
    awarded_date = Column(DateTime(timezone=True))
    approach_market_date = Column(DateTime(timezone=True))
    last_notifable_update = Column(DateTime(timezone=True))
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))

    awarded_value = Column(Numeric(18, 2))
    awarded_supplier = Column(Text)
    value_low = Column(Numeric(18, 2))
    value_high = Column(Numeric(18, 2))

    postcode = Column(String(20))
    coordinates = Column(Text)
    region = Column(Text)
    region_text = Column(Text)

    is_sub_notice = Column(Boolean)
    notice_type = Column(String(50))
    notice_status = Column(String(50))
    is_suitable_for_sme = Column(Boolean)
    is_suitable_for_vco = Column(Boolean)

    organisation_name = Column(Text)
    sector = Column(Text)
    cpv_codes = Column(Text)  # space separated, as published
    cpv_codes_extended = Column(Text)

    raw_json = Column(JSON)

    # AI rating
    ai_score = Column(Numeric(4, 2), index=True)  # 0 - 10
    ai_relevance = Column(String(20))  # see RELEVANCE_BANDS
    ai_explanation = Column(Text)
    ai_opportunity_description = Column(Text)
    ai_match_reasons = Column(JSON)
    ai_rated_at = Column(DateTime(timezone=True))
    ai_rated_by = Column(String(50))

    # Human reviewer rating (written by the review UI)
    reviewer_score = Column(Numeric(4, 2))
    reviewer_relevance = Column(String(20))
    reviewer_comments = Column(Text)
    reviewer_rated_at = Column(DateTime(timezone=True))
    reviewer_rated_by = Column(Text)
    reviewer_name = Column(Text)

    # HubSpot deal tracking (written by the CRM sync)
    hubspot_deal_id = Column(String(50), index=True)
    hubspot_deal_url = Column(Text)
    hubspot_deal_name = Column(Text)
    hubspot_deal_amount = Column(Numeric(18, 2))
    hubspot_deal_stage = Column(String(100))
    hubspot_created_at = Column(DateTime(timezone=True))
    hubspot_created_by = Column(Text)
    hubspot_last_synced = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def ai_rating(self):
        if self.ai_score is None:
            return None
        return {
            "score": float(self.ai_score),
            "relevance": self.ai_relevance,
            "explanation": self.ai_explanation,
            "opportunityDescription": self.ai_opportunity_description,
            "matchReasons": list(self.ai_match_reasons or []),
            "ratedAt": self.ai_rated_at,
            "ratedBy": self.ai_rated_by,
        }

    @property
    def reviewer_rating(self):
        if self.reviewer_score is None:
            return None
        return {
            "score": float(self.reviewer_score),
            "relevance": self.reviewer_relevance,
            "comments": self.reviewer_comments,
            "ratedAt": self.reviewer_rated_at,
            "ratedBy": self.reviewer_rated_by,
            "reviewerName": self.reviewer_name,
        }

class OrganisationProfile(Base):
    """
    The consuming organisation. Maintained by the profile screens; the
    pipeline only reads the first row.
    """
    __tablename__ = "organisation_profile"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, unique=True, nullable=False)
    description = Column(Text, nullable=False)
    industry = Column(Text, nullable=False)
    size = Column(String(20), nullable=False)  # 'startup', 'small', 'medium', 'large'

    capabilities = Column(JSON)
    interests = Column(JSON)
    exclusions = Column(JSON)
    search_keywords = Column(JSON)

    location = Column(Text)
    website = Column(String(255))
    contact_email = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
