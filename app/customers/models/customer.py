"""
SQLAlchemy model for customer persistence.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.customers.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CustomerModel(Base):
    """客戶資料"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_code = Column(String, nullable=False, unique=True, index=True)  # 客戶代碼
    recipient = Column(String, nullable=False)  # 收貨人
    address = Column(String, nullable=False)  # 地址
    tax_id = Column(String, nullable=False, default="")  # 統編
    notes = Column(Text, nullable=False, default="")  # 備註 (phone numbers end up here too)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
