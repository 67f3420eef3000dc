from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Voucher(Base):
    """
    Raw-material stock movement.

    quantity is signed: positive for purchases (IN), negative for
    consumption (OUT). Rows with process_id are the consumption lines of a
    production process; rows with output_id are scrape receipts of an output.
    Both kinds are owned by their parent and follow its lifecycle.
    """
    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(64), nullable=False)
    quantity = Column(Numeric(14, 3), nullable=False)
    quantity_type = Column(String(32), nullable=False)
    price_per_unit = Column(Numeric(14, 4), nullable=False, default=0)
    total_price = Column(Numeric(18, 4), nullable=False, default=0)
    remarks = Column(String(512), nullable=True)
    process_id = Column(Integer, ForeignKey("processes.id", ondelete="CASCADE"), nullable=True, index=True)
    output_id = Column(Integer, ForeignKey("outputs.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="vouchers")

    @property
    def direction(self) -> str:
        return "IN" if self.quantity > 0 else "OUT"
