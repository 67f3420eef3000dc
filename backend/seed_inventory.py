"""Seed a small production history for an account.

Usage: python seed_inventory.py [username]

Everything goes through the normal services, so stock and prices come out
exactly as if the entries had been made through the API.
"""
import logging
import sys
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.context import SessionContext
from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.models.user import User
from app.schemas.output import OutputCreate
from app.schemas.process import ProcessCreate, RawMaterialLine
from app.schemas.sale import SaleCreate
from app.schemas.voucher import VoucherCreate
from app.services import output_service, process_service, sale_service, voucher_service
from app.services.reconciler import run_mutation

logger = logging.getLogger("seed")

PURCHASES = [
    {"name": "PVC Resin", "code": "RM-PVC", "quantity": Decimal("60"), "price": Decimal("12")},
    {"name": "Calcium Filler", "code": "RM-CAL", "quantity": Decimal("40"), "price": Decimal("7")},
]


def seed_inventory(db: Session, user: User, day: date = date(2024, 1, 15)) -> list:
    """Purchase, process, output and sale for one product. Returns the MutationResults."""
    session = SessionContext(user_id=user.id, username=user.username, token="seed")
    results = []

    for p in PURCHASES:
        data = VoucherCreate(
            date=day,
            name=p["name"],
            code=p["code"],
            quantity=p["quantity"],
            quantity_type="KG",
            price_per_unit=p["price"],
            remarks="Opening purchase",
        )
        results.append(run_mutation(
            db, session, "create", "voucher",
            lambda data=data: voucher_service.create_voucher(db, user.id, data),
        ))

    process = ProcessCreate(
        date=day,
        process_name="Compound Batch 1",
        output_product="PVC Compound",
        total_process_output=Decimal("100"),
        output_unit="KG",
        raw_materials=[
            RawMaterialLine(name=p["name"], code=p["code"], quantity_type="KG", quantity=p["quantity"])
            for p in PURCHASES
        ],
    )
    created = run_mutation(db, session, "create", "process", lambda: process_service.create_process(db, user.id, process))
    results.append(created)
    if not created.success:
        return results

    output = OutputCreate(
        date=day,
        product_name="PVC Compound",
        process_id=created.id,
        scrape=Decimal("5"),
        scrape_unit="kg",
        reduction=Decimal("10"),
        reduction_unit="%",
        process_charge=Decimal("2"),
    )
    results.append(run_mutation(db, session, "create", "output", lambda: output_service.create_output(db, user.id, output)))

    sale = SaleCreate(
        date=day,
        product_name="PVC Compound",
        client_code="CL-001",
        sale_qty=Decimal("25"),
        sale_price=Decimal("18"),
    )
    results.append(run_mutation(db, session, "create", "sale", lambda: sale_service.record_sale(db, user.id, sale)))
    return results


def main(username: str = "admin"):
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if not user:
            logger.error(f"No user named {username}. Register it first.")
            return 1
        for result in seed_inventory(db, user):
            logger.info(f"{'OK' if result.success else 'FAILED'}: {result.message}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
