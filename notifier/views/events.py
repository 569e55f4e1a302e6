import logging

from django.http import JsonResponse, HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from ..http import json_body
from ..triggers import TRIGGERS, dispatch
from ..utils import as_str, run_async

logger = logging.getLogger("notifier")


@csrf_exempt
def event(request, collection):
    """
    Deliver a document-created event pushed by an external runtime.

    Body: {"id": "<documentId>", "data": {...document fields...}}
    A failed send answers 500 so the caller can apply its retry policy.
    """
    logger.info(f"[EVENT] {request.method} {collection} from {request.META.get('REMOTE_ADDR')}")

    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])

    if collection not in TRIGGERS:
        return JsonResponse({"error": "unknown_collection", "valid": sorted(TRIGGERS.keys())}, status=404)

    data, error = json_body(request)
    if error:
        return error

    document_id = as_str(data.get("id"))
    if not document_id:
        return JsonResponse({"error": "missing_id"}, status=400)

    document = data.get("data")
    if document is None:
        document = {}
    if not isinstance(document, dict):
        return JsonResponse({"error": "invalid_data"}, status=400)

    try:
        result = run_async(dispatch(collection, document_id, document))
    except Exception as e:
        logger.exception(f"[EVENT] Trigger failed for {collection}/{document_id}")
        return JsonResponse({"error": "delivery_failed", "message": str(e)}, status=500)

    return JsonResponse({
        "success": True,
        "collection": collection,
        "documentId": document_id,
        "pushSent": bool(result and result.success),
    })
