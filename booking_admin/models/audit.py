from sqlalchemy import Column, String, Text, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship
from booking_admin.models.base import AppendOnlyModel
from booking_admin.core.enums import PricingChangeType


class PricingChangeLog(AppendOnlyModel):
    __tablename__ = "pricing_change_logs"

    changed_by = Column(ForeignKey("users.id"), nullable=False)
    user = relationship("User", backref="pricing_changes")

    change_type = Column(Enum(PricingChangeType), nullable=False)
    record_id = Column(String(36), nullable=True, index=True)
    previous_value = Column(JSON, nullable=False)
    new_value = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)


class BookingActivityLog(AppendOnlyModel):
    __tablename__ = "booking_activity_logs"

    booking_id = Column(String(36), nullable=False, index=True)
    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(120), nullable=False)
    details = Column(JSON, nullable=False, default=dict)


class DriverActivityLog(AppendOnlyModel):
    __tablename__ = "driver_activity_logs"

    driver_id = Column(String(36), nullable=False, index=True)
    admin_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(120), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
