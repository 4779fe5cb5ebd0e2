from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import as_utc
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PaymentProofStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewPaymentProof, PaymentProof
from .repository import PaymentProofRepository

_COLUMNS = (
    "proof_id, school_id, student_id, student_name, amount, payer_name, "
    "transaction_id, submitted_at, status, decided_by"
)


def _row_to_proof(r: dict) -> PaymentProof:
    return PaymentProof(
        proof_id=r["proof_id"],
        school_id=r["school_id"],
        student_id=r["student_id"],
        student_name=r["student_name"],
        amount=float(r["amount"]),
        payer_name=r["payer_name"],
        transaction_id=r["transaction_id"],
        submitted_at=as_utc(r["submitted_at"]),
        status=PaymentProofStatus(r["status"]),
        decided_by=r.get("decided_by"),
    )


class MySQLPaymentProofRepository(PaymentProofRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, proof: NewPaymentProof) -> PaymentProof:
        proof_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payment_proofs(
                    proof_id, school_id, student_id, student_name, amount,
                    payer_name, transaction_id, submitted_at, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    proof_id,
                    proof.school_id,
                    proof.student_id,
                    proof.student_name,
                    proof.amount,
                    proof.payer_name,
                    proof.transaction_id,
                    as_utc(proof.submitted_at).replace(tzinfo=None),
                    PaymentProofStatus.PENDING.value,
                ),
            )
        return PaymentProof(
            proof_id=proof_id,
            school_id=proof.school_id,
            student_id=proof.student_id,
            student_name=proof.student_name,
            amount=proof.amount,
            payer_name=proof.payer_name,
            transaction_id=proof.transaction_id,
            submitted_at=as_utc(proof.submitted_at),
            status=PaymentProofStatus.PENDING,
        )

    def get(self, proof_id: str) -> Optional[PaymentProof]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payment_proofs WHERE proof_id=%s", (proof_id,))
            r = fetchone(cur)
            return _row_to_proof(r) if r else None

    def list_for_school(self, school_id: str, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PaymentProof]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payment_proofs
                WHERE school_id=%s
                ORDER BY submitted_at DESC
                LIMIT %s
                """,
                (school_id, int(limit)),
            )
            return [_row_to_proof(r) for r in fetchall(cur)]

    def decide(self, *, proof_id: str, status: PaymentProofStatus, decided_by: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payment_proofs
                SET status=%s, decided_by=%s, decided_at=UTC_TIMESTAMP()
                WHERE proof_id=%s AND status=%s
                """,
                (status.value, decided_by, proof_id, PaymentProofStatus.PENDING.value),
            )
            return cur.rowcount > 0
