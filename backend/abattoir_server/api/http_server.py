"""
HTTP adapter for the abattoir ledger.

This module is a thin translation layer: it parses JSON requests into
payloads, calls the operations and analytics functions, and turns their
results and typed errors into JSON responses.

Invariants:
    - No business rule lives here; validation belongs to the payloads
    - InvalidPayloadError / RecordTooLargeError -> 400, NotFoundError -> 404,
      any other error -> 500
    - Error bodies always carry "error", "error_code" and "details"

How to change safely:
    - Add routes, don't change the shape of existing responses
    - Keep route handlers free of store access; go through operations
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from aiohttp import web

from ..analytics import (
    financial_metrics,
    inventory_analytics,
    maintenance_analytics,
    quality_metrics,
    total_expenses,
    total_revenue,
)
from ..config import HttpConfig
from ..context import Ledger
from ..errors import InvalidPayloadError, LedgerError, NotFoundError, RecordTooLargeError
from ..models.payloads import (
    CreateMeatProductPayload,
    CreateSlaughterhousePayload,
    EmployeePayload,
    MaintenancePayload,
    QualityInspectionPayload,
    RecordExpensePayload,
    RegisterAnimalPayload,
    ShipmentPayload,
    SupplierPayload,
    WastePayload,
    finite_float,
)
from ..operations import (
    complete_maintenance,
    create_meat_product,
    create_shipment,
    create_slaughterhouse,
    get_record,
    log_shipment_temperature,
    perform_quality_inspection,
    record_expense,
    record_waste,
    register_animal,
    register_employee,
    register_supplier,
    schedule_maintenance,
    update_animal_status,
    update_employee_status,
    update_maintenance_status,
    update_product_status,
    update_shipment_status,
)

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

# path -> (payload type, create operation)
CREATE_ROUTES: dict[str, tuple[Any, Callable[..., Awaitable[Any]]]] = {
    "/v1/slaughterhouses": (CreateSlaughterhousePayload, create_slaughterhouse),
    "/v1/animals": (RegisterAnimalPayload, register_animal),
    "/v1/meat-products": (CreateMeatProductPayload, create_meat_product),
    "/v1/expenses": (RecordExpensePayload, record_expense),
    "/v1/quality-inspections": (QualityInspectionPayload, perform_quality_inspection),
    "/v1/employees": (EmployeePayload, register_employee),
    "/v1/maintenance": (MaintenancePayload, schedule_maintenance),
    "/v1/suppliers": (SupplierPayload, register_supplier),
    "/v1/shipments": (ShipmentPayload, create_shipment),
    "/v1/waste": (WastePayload, record_waste),
}

# path prefix -> status transition operation
STATUS_ROUTES: dict[str, Callable[..., Awaitable[Any]]] = {
    "/v1/animals": update_animal_status,
    "/v1/meat-products": update_product_status,
    "/v1/employees": update_employee_status,
    "/v1/maintenance": update_maintenance_status,
    "/v1/shipments": update_shipment_status,
}


def error_status(error: LedgerError) -> int:
    """HTTP status code for a ledger error."""
    if isinstance(error, (InvalidPayloadError, RecordTooLargeError)):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    return 500


def create_http_app(ledger: Ledger, config: HttpConfig | None = None) -> web.Application:
    """Create the HTTP application.

    Args:
        ledger: Open ledger context
        config: HTTP adapter configuration

    Returns:
        aiohttp Application instance
    """
    config = config or HttpConfig()

    @web.middleware
    async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except LedgerError as e:
            status = error_status(e)
            if status == 500:
                logger.error(f"Ledger failure: {e.message}", exc_info=True)
            return web.json_response(
                {"error": e.message, "error_code": e.code, "details": e.details},
                status=status,
            )
        except Exception as e:
            logger.error(f"HTTP handler error: {e}", exc_info=True)
            return web.json_response(
                {"error": str(e), "error_code": "INTERNAL", "details": {}},
                status=500,
            )

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if request.method == "OPTIONS":
            response: web.StreamResponse = web.Response()
        else:
            try:
                response = await handler(request)
            except web.HTTPException as e:
                response = e

        origin = request.headers.get("Origin", "*")
        if "*" in config.cors_origins or origin in config.cors_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    app = web.Application(middlewares=[error_middleware, cors_middleware])

    for path, (payload_type, operation) in CREATE_ROUTES.items():
        app.router.add_post(path, _create_handler(ledger, payload_type, operation))
    for prefix, operation in STATUS_ROUTES.items():
        app.router.add_put(f"{prefix}/{{record_id}}/status", _status_handler(ledger, operation))

    app.router.add_post(
        "/v1/maintenance/{record_id}/complete", partial(handle_complete_maintenance, ledger=ledger)
    )
    app.router.add_post(
        "/v1/shipments/{record_id}/temperature", partial(handle_log_temperature, ledger=ledger)
    )
    app.router.add_get("/v1/records/{kind}/{record_id}", partial(handle_get_record, ledger=ledger))

    analytics = "/v1/slaughterhouses/{slaughterhouse_id}"
    app.router.add_get(f"{analytics}/revenue", partial(handle_revenue, ledger=ledger))
    app.router.add_get(f"{analytics}/expenses", partial(handle_expenses, ledger=ledger))
    app.router.add_get(f"{analytics}/financials", partial(handle_financials, ledger=ledger))
    app.router.add_get(f"{analytics}/quality", partial(handle_quality, ledger=ledger))
    app.router.add_get(f"{analytics}/maintenance", partial(handle_maintenance, ledger=ledger))
    app.router.add_get(f"{analytics}/inventory", partial(handle_inventory, ledger=ledger))
    app.router.add_get("/v1/health", partial(handle_health, ledger=ledger))

    return app


def _int_value(raw: str | None, name: str) -> int:
    if raw is None:
        raise InvalidPayloadError(f"Parameter '{name}' is required", field_name=name)
    try:
        return int(raw)
    except ValueError:
        raise InvalidPayloadError(f"Parameter '{name}' must be an integer", field_name=name)


async def _json_body(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise InvalidPayloadError("Invalid JSON body")
    if not isinstance(body, dict):
        raise InvalidPayloadError("JSON body must be an object")
    return body


def _create_handler(ledger: Ledger, payload_type: Any, operation: Callable) -> Handler:
    async def handle(request: web.Request) -> web.Response:
        payload = payload_type.from_dict(await _json_body(request))
        record = await operation(ledger, payload)
        return web.json_response(record.to_dict(), status=201)

    return handle


def _status_handler(ledger: Ledger, operation: Callable) -> Handler:
    async def handle(request: web.Request) -> web.Response:
        record_id = _int_value(request.match_info["record_id"], "record_id")
        body = await _json_body(request)
        status = body.get("status")
        if not isinstance(status, str):
            raise InvalidPayloadError("Field 'status' is required", field_name="status")
        record = await operation(ledger, record_id, status)
        return web.json_response(record.to_dict())

    return handle


async def handle_complete_maintenance(request: web.Request, ledger: Ledger) -> web.Response:
    """Handle POST /v1/maintenance/{record_id}/complete."""
    record_id = _int_value(request.match_info["record_id"], "record_id")
    body = await _json_body(request)
    actual_cost = body.get("actual_cost")
    if actual_cost is not None:
        if not isinstance(actual_cost, (int, float)) or isinstance(actual_cost, bool):
            raise InvalidPayloadError(
                "Field 'actual_cost' must be a number", field_name="actual_cost"
            )
        actual_cost = finite_float(actual_cost, "actual_cost")

    record = await complete_maintenance(
        ledger,
        record_id,
        performed_by=str(body.get("performed_by", "")),
        actual_cost=actual_cost,
    )
    return web.json_response(record.to_dict())


async def handle_log_temperature(request: web.Request, ledger: Ledger) -> web.Response:
    """Handle POST /v1/shipments/{record_id}/temperature."""
    record_id = _int_value(request.match_info["record_id"], "record_id")
    body = await _json_body(request)
    temperature = body.get("temperature")
    if not isinstance(temperature, (int, float)) or isinstance(temperature, bool):
        raise InvalidPayloadError("Field 'temperature' must be a number", field_name="temperature")

    shipment = await log_shipment_temperature(
        ledger, record_id, finite_float(temperature, "temperature")
    )
    return web.json_response(shipment.to_dict())


async def handle_get_record(request: web.Request, ledger: Ledger) -> web.Response:
    """Handle GET /v1/records/{kind}/{record_id} - point lookup."""
    record_id = _int_value(request.match_info["record_id"], "record_id")
    record = await get_record(ledger, request.match_info["kind"], record_id)
    return web.json_response(record.to_dict())


def _slaughterhouse_id(request: web.Request) -> int:
    return _int_value(request.match_info["slaughterhouse_id"], "slaughterhouse_id")


def _date_range(request: web.Request) -> tuple[int, int]:
    start = _int_value(request.query.get("start", "0"), "start")
    end = _int_value(request.query.get("end", str(2**63 - 1)), "end")
    return start, end


async def handle_revenue(request: web.Request, ledger: Ledger) -> web.Response:
    sh = _slaughterhouse_id(request)
    return web.json_response(
        {"slaughterhouse_id": sh, "total_revenue": await total_revenue(ledger, sh)}
    )


async def handle_expenses(request: web.Request, ledger: Ledger) -> web.Response:
    sh = _slaughterhouse_id(request)
    return web.json_response(
        {"slaughterhouse_id": sh, "total_expenses": await total_expenses(ledger, sh)}
    )


async def handle_financials(request: web.Request, ledger: Ledger) -> web.Response:
    metrics = await financial_metrics(ledger, _slaughterhouse_id(request))
    return web.json_response(metrics.to_dict())


async def handle_quality(request: web.Request, ledger: Ledger) -> web.Response:
    start, end = _date_range(request)
    metrics = await quality_metrics(ledger, _slaughterhouse_id(request), start, end)
    return web.json_response(metrics.to_dict())


async def handle_maintenance(request: web.Request, ledger: Ledger) -> web.Response:
    start, end = _date_range(request)
    analytics = await maintenance_analytics(ledger, _slaughterhouse_id(request), start, end)
    return web.json_response(analytics.to_dict())


async def handle_inventory(request: web.Request, ledger: Ledger) -> web.Response:
    analytics = await inventory_analytics(ledger, _slaughterhouse_id(request))
    return web.json_response(analytics.to_dict())


async def handle_health(request: web.Request, ledger: Ledger) -> web.Response:
    """Handle GET /v1/health - row counts per store."""
    try:
        stats = await ledger.stats()
    except LedgerError as e:
        logger.warning(f"Health check failed: {e.message}")
        return web.json_response({"healthy": False, "error": e.message}, status=503)
    return web.json_response({"healthy": True, "stats": stats})


async def run_http_server(ledger: Ledger, config: HttpConfig | None = None) -> web.AppRunner:
    """Start serving the HTTP adapter.

    Args:
        ledger: Open ledger context
        config: HTTP adapter configuration

    Returns:
        The started runner; call ``cleanup()`` on it to stop serving
    """
    config = config or HttpConfig()
    app = create_http_app(ledger, config)

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, config.host, config.port)
    await site.start()

    logger.info(f"HTTP server running on http://{config.host}:{config.port}")
    return runner
