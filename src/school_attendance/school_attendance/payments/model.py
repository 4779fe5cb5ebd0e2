from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import PaymentProofStatus


@dataclass(frozen=True)
class NewPaymentProof:
    school_id: str
    student_id: str
    student_name: str
    amount: float
    payer_name: str
    transaction_id: str
    submitted_at: datetime


@dataclass(frozen=True)
class PaymentProof:
    proof_id: str
    school_id: str
    student_id: str
    student_name: str
    amount: float
    payer_name: str
    transaction_id: str
    submitted_at: datetime
    status: PaymentProofStatus
    decided_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "proof_id": self.proof_id,
            "school_id": self.school_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "amount": self.amount,
            "payer_name": self.payer_name,
            "transaction_id": self.transaction_id,
            "timestamp": to_iso(self.submitted_at),
            "status": self.status.value,
            "decided_by": self.decided_by,
        }
