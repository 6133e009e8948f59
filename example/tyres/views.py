from __future__ import annotations

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from tyre_inventory import InventoryRepository, StoreError, TyreInventoryError
from tyre_inventory.conf import get_settings
from tyre_inventory.models import FIELDS

_repository: InventoryRepository | None = None


def get_repository() -> InventoryRepository:
    """
    Process-wide inventory session, loaded from the store on first use.
    """
    global _repository
    if _repository is None:
        _repository = InventoryRepository()
    return _repository


def _json(ok: bool, *, status: int = 200, **payload) -> JsonResponse:
    """
    Small helper to keep responses consistent across endpoints.
    """
    return JsonResponse({"ok": ok, **payload}, status=status)


def _error(exc: TyreInventoryError) -> JsonResponse:
    # Store failures are the upstream's fault; everything else is bad input.
    status = 502 if isinstance(exc, StoreError) else 400
    payload = {"code": exc.code, "detail": str(exc)}
    field = getattr(exc, "field", None)
    if field:
        payload["field"] = field
    return _json(False, status=status, **payload)


@require_GET
def inventory(request: HttpRequest) -> HttpResponse:
    """
    The inventory list, filtered by ?width=&ratio=&rim=&section= substrings
    and sorted by width (?order=asc|desc).
    """
    terms = {field: request.GET.get(field, "") for field in FIELDS}
    order = request.GET.get("order") or get_settings().default_order
    if order not in ("asc", "desc"):
        return _json(False, status=400, code="invalid_order", detail="order must be asc or desc")

    repo = get_repository()
    try:
        records = repo.display(terms, order)
    except TyreInventoryError as exc:
        return _error(exc)

    return _json(
        True,
        order=order,
        tyres=[
            {**r.to_dict(), "removal_quantity": repo.removal_quantity(r.id)}
            for r in records
        ],
    )


@csrf_exempt  # demo-only: curl-friendly
@require_POST
def add_tyre(request: HttpRequest) -> HttpResponse:
    """
    Register stock: merges into an existing SKU or creates a new row.
    """
    data = request.POST
    try:
        record = get_repository().add(
            data.get("width", ""),
            data.get("ratio", ""),
            data.get("rim", ""),
            section=data.get("section") or None,
            quantity=data.get("quantity", "1"),
        )
    except TyreInventoryError as exc:
        return _error(exc)

    return _json(True, tyre=record.to_dict())


@csrf_exempt  # demo-only: curl-friendly
@require_POST
def remove_tyre(request: HttpRequest, record_id: int) -> HttpResponse:
    """
    Withdraw stock from one row. Without a quantity, the row's pending
    removal quantity (default 1) is used.
    """
    try:
        record = get_repository().remove(record_id, request.POST.get("quantity"))
    except TyreInventoryError as exc:
        return _error(exc)

    if record is None:
        return _json(True, id=record_id, removed=True)
    return _json(True, id=record_id, removed=False, tyre=record.to_dict())


@csrf_exempt  # demo-only: curl-friendly
@require_POST
def set_removal_quantity(request: HttpRequest, record_id: int) -> HttpResponse:
    try:
        count = get_repository().set_removal_quantity(
            record_id, request.POST.get("quantity")
        )
    except TyreInventoryError as exc:
        return _error(exc)

    return _json(True, id=record_id, removal_quantity=count)
