import logging
from typing import Awaitable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from resource_explorer.errors import to_envelope
from resource_explorer.models.schemas import OperationKind, ResourceRequest, ResourceResponse
from resource_explorer.services.dispatcher import ACTION_TARGETS, Dispatcher
from resource_explorer.services.validator import validate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["resources"])


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


async def _respond(call: Awaitable[ResourceResponse], label: str) -> JSONResponse:
    try:
        result = await call
    except Exception as e:
        logger.error(f"Error processing {label} request: {e!r}")
        envelope, code = to_envelope(e)
        return JSONResponse(status_code=code, content=envelope.to_body())
    return JSONResponse(status_code=200, content=result.to_body())


async def _list(payload: ResourceRequest, dispatcher: Dispatcher) -> ResourceResponse:
    validate(payload, OperationKind.LIST)
    logger.info(
        f"Fetching resources for provider: {payload.provider}, service: {payload.service}, region: {payload.region}"
    )
    return await dispatcher.dispatch_list(payload)


async def _act(payload: ResourceRequest, dispatcher: Dispatcher, route: str) -> ResourceResponse:
    validate(payload, OperationKind.ACTION)
    target = ACTION_TARGETS[route]
    logger.info(f"Performing {target.value} action '{payload.action}' for region: {payload.region}")
    return await dispatcher.dispatch_action(payload, target)


@router.get("/health")
async def health():
    logger.info("Health check endpoint called")
    return {"status": "ok"}


@router.post("/resources", response_model=ResourceResponse, response_model_exclude_none=True)
async def list_resources(payload: ResourceRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """List instances for a provider/service in a region"""
    return await _respond(_list(payload, dispatcher), "resources")


@router.post("/ec2-action", response_model=ResourceResponse, response_model_exclude_none=True)
async def ec2_action(payload: ResourceRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """Start, stop or reboot an EC2 instance"""
    return await _respond(_act(payload, dispatcher, "ec2-action"), "EC2 action")


@router.post("/rds-action", response_model=ResourceResponse, response_model_exclude_none=True)
async def rds_action(payload: ResourceRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """Start, stop or reboot an RDS instance"""
    return await _respond(_act(payload, dispatcher, "rds-action"), "RDS action")


@router.post("/gcp-action", response_model=ResourceResponse, response_model_exclude_none=True)
async def gcp_action(payload: ResourceRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """Start, stop or reboot a GCP Compute Engine instance"""
    return await _respond(_act(payload, dispatcher, "gcp-action"), "GCP action")
