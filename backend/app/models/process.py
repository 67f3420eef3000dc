from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Process(Base):
    __tablename__ = "processes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    process_name = Column(String(255), nullable=False, index=True)
    output_product = Column(String(255), nullable=True)
    total_process_output = Column(Numeric(14, 3), nullable=False)
    output_unit = Column(String(32), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="processes")
    materials = relationship(
        "ProcessMaterial",
        back_populates="process",
        cascade="all, delete-orphan",
        order_by="ProcessMaterial.line_no",
    )
    # Negative vouchers that take the materials out of stock. No delete-orphan:
    # Voucher has two owning parents, so replaced rows are deleted explicitly.
    consumption_vouchers = relationship("Voucher", cascade="all")


class ProcessMaterial(Base):
    __tablename__ = "process_materials"

    id = Column(Integer, primary_key=True, index=True)
    process_id = Column(Integer, ForeignKey("processes.id", ondelete="CASCADE"), nullable=False)
    line_no = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)
    code = Column(String(64), nullable=False)
    quantity_type = Column(String(32), nullable=False)
    quantity = Column(Numeric(14, 3), nullable=False)
    ratio = Column(Numeric(7, 3), nullable=True)  # % of total process output
    rate = Column(Numeric(14, 4), nullable=False, default=0)  # cost per unit when consumed

    process = relationship("Process", back_populates="materials")
