from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Output(Base):
    """
    Costed finished-goods batch.

    quantity_produced and final_average_price are derived from the process
    cost snapshot (total_cost, total_process_output) and the scrape,
    reduction and process charge entered by the user.
    """
    __tablename__ = "outputs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    product_name = Column(String(255), nullable=False, index=True)
    process_id = Column(Integer, ForeignKey("processes.id", ondelete="SET NULL"), nullable=True)
    process_used = Column(String(255), nullable=False)
    total_process_output = Column(Numeric(14, 3), nullable=False)
    total_cost = Column(Numeric(18, 4), nullable=False, default=0)
    scrape = Column(Numeric(14, 3), nullable=False, default=0)
    scrape_unit = Column(String(8), nullable=False, default="kg")
    reduction = Column(Numeric(14, 3), nullable=False, default=0)
    reduction_unit = Column(String(8), nullable=False, default="kg")
    process_charge = Column(Numeric(14, 4), nullable=False, default=0)
    quantity_produced = Column(Numeric(14, 3), nullable=False)
    quantity_type = Column(String(32), nullable=False, default="KG")
    final_average_price = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="outputs")
    process = relationship("Process")
    scrape_vouchers = relationship("Voucher", cascade="all")
