from app.models.user import User
from app.models.user_session import UserSession
from app.models.voucher import Voucher
from app.models.process import Process, ProcessMaterial
from app.models.output import Output
from app.models.sale import Sale

__all__ = ["User", "UserSession", "Voucher", "Process", "ProcessMaterial", "Output", "Sale"]
