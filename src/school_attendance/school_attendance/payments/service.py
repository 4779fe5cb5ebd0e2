from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.validators import require_non_empty, require_positive_amount
from ..core.enums import PaymentProofStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..directory.service import DirectoryService
from .model import NewPaymentProof, PaymentProof
from .repository import PaymentProofRepository

logger = logging.getLogger(__name__)

REVIEWER_ROLES = frozenset({Role.SCHOOL, Role.ACADEMIC_WORK})


class PaymentProofService:
    """Students submit fee payment proofs; school staff approve or reject them."""

    def __init__(self, proofs: PaymentProofRepository, directory: DirectoryService):
        self._proofs = proofs
        self._directory = directory

    def submit(
        self,
        *,
        current_role: Role,
        student_id: str,
        amount,
        payer_name: str,
        transaction_id: str,
        now: Optional[datetime] = None,
    ) -> PaymentProof:
        if current_role != Role.STUDENT:
            raise AuthorizationError("Only students can submit payment proofs.")

        amount = require_positive_amount(amount, "Amount")
        payer_name = require_non_empty(payer_name, "Payer name")
        transaction_id = require_non_empty(transaction_id, "Transaction ID")
        student = self._directory.get_student(student_id)

        proof = self._proofs.create(
            NewPaymentProof(
                school_id=student.school_id,
                student_id=student.student_id,
                student_name=student.name,
                amount=amount,
                payer_name=payer_name,
                transaction_id=transaction_id,
                submitted_at=now or utc_now(),
            )
        )
        logger.info("Payment proof %s submitted by student %s", proof.proof_id, student_id)
        return proof

    def list_for_school(self, *, current_role: Role, school_id: str) -> Sequence[PaymentProof]:
        self._require_reviewer(current_role)
        return self._proofs.list_for_school(school_id)

    def approve(self, *, current_role: Role, school_id: str, reviewer_id: str, proof_id: str) -> PaymentProof:
        proof = self._pending_proof(current_role, school_id, proof_id)
        # A proof for a removed student stays pending.
        self._directory.get_student(proof.student_id)
        self._decide(proof, PaymentProofStatus.APPROVED, reviewer_id)
        if not self._directory.add_fees_paid(proof.student_id, proof.amount):
            logger.warning("Approved proof %s but student %s no longer exists", proof_id, proof.student_id)
        return replace(proof, status=PaymentProofStatus.APPROVED, decided_by=reviewer_id)

    def reject(self, *, current_role: Role, school_id: str, reviewer_id: str, proof_id: str) -> PaymentProof:
        proof = self._pending_proof(current_role, school_id, proof_id)
        self._decide(proof, PaymentProofStatus.REJECTED, reviewer_id)
        return replace(proof, status=PaymentProofStatus.REJECTED, decided_by=reviewer_id)

    @staticmethod
    def _require_reviewer(current_role: Role) -> None:
        if current_role not in REVIEWER_ROLES:
            raise AuthorizationError("Access denied. You do not have the required permissions.")

    def _pending_proof(self, current_role: Role, school_id: str, proof_id: str) -> PaymentProof:
        self._require_reviewer(current_role)
        proof = self._proofs.get(proof_id)
        if not proof or proof.school_id != school_id:
            raise NotFoundError("Payment proof not found.")
        if proof.status != PaymentProofStatus.PENDING:
            raise ValidationError("This proof has already been processed.")
        return proof

    def _decide(self, proof: PaymentProof, status: PaymentProofStatus, reviewer_id: str) -> None:
        # Conditional update: a concurrent decision on the same proof loses here.
        if not self._proofs.decide(proof_id=proof.proof_id, status=status, decided_by=reviewer_id):
            raise ValidationError("This proof has already been processed.")
        logger.info("Payment proof %s %s by %s", proof.proof_id, status.value.lower(), reviewer_id)
