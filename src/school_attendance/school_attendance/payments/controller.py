from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_caller, json_body, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    reviewers_only = roles_required(Role.SCHOOL, Role.ACADEMIC_WORK)

    @app.route("/api/payments", methods=["POST"], endpoint="api_submit_payment")
    @roles_required(Role.STUDENT)
    def api_submit_payment():
        caller = current_caller()
        data = json_body()
        proof = container.payment_service.submit(
            current_role=caller.role,
            student_id=caller.user_id,
            amount=data.get("amount"),
            payer_name=data.get("payer_name"),
            transaction_id=data.get("transaction_id"),
        )
        return jsonify({"success": True, "proof": proof.to_dict()}), 201

    @app.route("/api/payments", methods=["GET"], endpoint="api_list_payments")
    @reviewers_only
    def api_list_payments():
        caller = current_caller()
        proofs = container.payment_service.list_for_school(current_role=caller.role, school_id=caller.school_id)
        return jsonify({"success": True, "proofs": [p.to_dict() for p in proofs]}), 200

    @app.route("/api/payments/<proof_id>/approve", methods=["POST"], endpoint="api_approve_payment")
    @reviewers_only
    def api_approve_payment(proof_id: str):
        caller = current_caller()
        proof = container.payment_service.approve(
            current_role=caller.role,
            school_id=caller.school_id,
            reviewer_id=caller.user_id,
            proof_id=proof_id,
        )
        return jsonify({"success": True, "proof": proof.to_dict()}), 200

    @app.route("/api/payments/<proof_id>/reject", methods=["POST"], endpoint="api_reject_payment")
    @reviewers_only
    def api_reject_payment(proof_id: str):
        caller = current_caller()
        proof = container.payment_service.reject(
            current_role=caller.role,
            school_id=caller.school_id,
            reviewer_id=caller.user_id,
            proof_id=proof_id,
        )
        return jsonify({"success": True, "proof": proof.to_dict()}), 200
