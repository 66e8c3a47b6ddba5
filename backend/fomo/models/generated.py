from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Businesses(Base):
    __tablename__ = 'businesses'

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    accepts_direct_reservations = Column(Boolean, server_default=text('false'))
    reservations_globally_paused = Column(Boolean, server_default=text('false'))
    reservation_requires_approval = Column(Boolean, server_default=text('true'))
    reservation_time_slots = Column(JSON)
    reservation_seating_options = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))

    closures = relationship('ReservationSlotClosures', back_populates='business')
    reservations = relationship('Reservations', back_populates='business')


class ReservationSlotClosures(Base):
    __tablename__ = 'reservation_slot_closures'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    closure_date = Column(Date, nullable=False)
    slot_time = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='closures')


class Reservations(Base):
    __tablename__ = 'reservations'

    id = Column(Text, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'))
    event_id = Column(Text)
    user_id = Column(Text, nullable=False)
    reservation_name = Column(Text, nullable=False)
    party_size = Column(Integer, nullable=False)
    phone_number = Column(Text)
    preferred_time = Column(DateTime(timezone=True))
    seating_preference = Column(Text)
    special_requests = Column(Text)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    prepaid_charge_status = Column(Text)
    checked_in_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='reservations')


class BusinessSubscriptions(Base):
    __tablename__ = 'business_subscriptions'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    plan_id = Column(Text)
    status = Column(Text)
    current_period_start = Column(DateTime(timezone=True), nullable=False)
    current_period_end = Column(DateTime(timezone=True), nullable=False)
    canceled_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class BusinessSubscriptionPlanHistory(Base):
    __tablename__ = 'business_subscription_plan_history'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    plan_slug = Column(Text, nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_to = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class ProfileBoosts(Base):
    __tablename__ = 'profile_boosts'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    status = Column(Text)
    duration_mode = Column(Text)
    duration_hours = Column(Integer)
    start_date = Column(Text)
    end_date = Column(Text)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))


class OfferBoosts(Base):
    __tablename__ = 'offer_boosts'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    discount_id = Column(Text, nullable=False)
    status = Column(Text)
    active = Column(Boolean)
    duration_mode = Column(Text)
    duration_hours = Column(Integer)
    start_date = Column(Text)
    end_date = Column(Text)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))


class EventBoosts(Base):
    __tablename__ = 'event_boosts'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    event_id = Column(Text, nullable=False)
    status = Column(Text)
    duration_mode = Column(Text)
    duration_hours = Column(Integer)
    start_date = Column(Text)
    end_date = Column(Text)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))


class Discounts(Base):
    __tablename__ = 'discounts'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    title = Column(Text)


class Events(Base):
    __tablename__ = 'events'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    title = Column(Text)


class EngagementEvents(Base):
    __tablename__ = 'engagement_events'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    event_type = Column(Text, nullable=False)
    entity_id = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)


class BusinessFollowers(Base):
    __tablename__ = 'business_followers'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False)
    unfollowed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False)


class DiscountViews(Base):
    __tablename__ = 'discount_views'

    id = Column(Text, primary_key=True)
    discount_id = Column(Text, nullable=False)
    viewed_at = Column(DateTime(timezone=True), nullable=False)


class OfferPurchases(Base):
    __tablename__ = 'offer_purchases'

    id = Column(Text, primary_key=True)
    discount_id = Column(Text, nullable=False)
    business_id = Column(Text)
    reservation_id = Column(Text)
    redeemed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class StudentDiscountRedemptions(Base):
    __tablename__ = 'student_discount_redemptions'

    id = Column(Text, primary_key=True)
    business_id = Column(Text, nullable=False)
    student_verification_id = Column(Text, nullable=False)
    item_description = Column(Text)
    original_price_cents = Column(Integer, nullable=False)
    discounted_price_cents = Column(Integer, nullable=False)
    discount_amount_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class EventViews(Base):
    __tablename__ = 'event_views'

    id = Column(Text, primary_key=True)
    event_id = Column(Text, nullable=False)
    viewed_at = Column(DateTime(timezone=True), nullable=False)


class Rsvps(Base):
    __tablename__ = 'rsvps'

    id = Column(Text, primary_key=True)
    event_id = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False)
    status = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Tickets(Base):
    __tablename__ = 'tickets'

    id = Column(Text, primary_key=True)
    event_id = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False)
    status = Column(Text)
    checked_in_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False)
