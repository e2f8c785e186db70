"""AdmissionReview request/response handling for the StaticPod hooks.

Works on already-decoded ``admission.k8s.io/v1`` AdmissionReview mappings;
serving them over HTTPS is left to whatever hosts the handler.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import ValidationError

from staticpod_validator.core.exceptions import AdmissionError, BadRequestError
from staticpod_validator.core.handler import StaticPodHandler
from staticpod_validator.models.resources import decode_object


logger = logging.getLogger(__name__)

ADMISSION_API_VERSION = "admission.k8s.io/v1"


def _decode(raw: Any) -> Any:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise BadRequestError(f"expected an object but got a {type(raw).__name__}")
    try:
        return decode_object(dict(raw))
    except ValidationError as e:
        raise BadRequestError(f"cannot decode StaticPod: {e}") from e


def admit(request: Mapping[str, Any], handler: StaticPodHandler) -> None:
    """Dispatch one admission request to the matching hook.

    Raises :class:`AdmissionError` when the request is rejected.
    """
    op = request.get("operation")
    if op == "CREATE":
        handler.validate_create(_decode(request.get("object")))
    elif op == "UPDATE":
        handler.validate_update(_decode(request.get("oldObject")), _decode(request.get("object")))
    elif op == "DELETE":
        handler.validate_delete(_decode(request.get("oldObject")))
    elif op == "CONNECT":
        return None
    else:
        raise BadRequestError(f"unsupported admission operation: {op!r}")


def review(admission_review: Mapping[str, Any], handler: Optional[StaticPodHandler] = None) -> Dict[str, Any]:
    """Build the AdmissionReview response for an AdmissionReview request."""
    handler = handler or StaticPodHandler()
    request = admission_review.get("request")
    uid = request.get("uid", "") if isinstance(request, Mapping) else ""

    response: Dict[str, Any] = {"uid": uid, "allowed": True}
    try:
        if not isinstance(request, Mapping):
            raise BadRequestError("admission review carries no request")
        admit(request, handler)
    except AdmissionError as e:
        logger.info("Denied admission request %s: %s", uid or "<no uid>", e)
        response["allowed"] = False
        response["status"] = e.to_status()

    return {
        "apiVersion": admission_review.get("apiVersion") or ADMISSION_API_VERSION,
        "kind": "AdmissionReview",
        "response": response,
    }
