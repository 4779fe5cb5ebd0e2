from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PaymentProofStatus
from .model import NewPaymentProof, PaymentProof


class PaymentProofRepository(Protocol):
    def create(self, proof: NewPaymentProof) -> PaymentProof:
        raise NotImplementedError

    def get(self, proof_id: str) -> Optional[PaymentProof]:
        raise NotImplementedError

    def list_for_school(self, school_id: str, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PaymentProof]:
        """Most recent first."""

        raise NotImplementedError

    def decide(self, *, proof_id: str, status: PaymentProofStatus, decided_by: str) -> bool:
        """Move a PENDING proof to ``status``. False if it was not PENDING anymore."""

        raise NotImplementedError
