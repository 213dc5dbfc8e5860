"""
Cloud connectors adapter pattern. One connector per provider/service pair.
AWS EC2: boto3 (describe/start/stop/reboot) - boto3 is sync, so calls run in a worker thread.
AWS RDS: internal HTTP API (httpx).
Azure VM: placeholder until the upstream API exists.
GCP Compute Engine: internal HTTP API (httpx), bearer token auth.

Connectors return raw upstream payloads; normalization happens in resource_explorer.services.normalizer.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, NamedTuple, Optional

import boto3
import httpx
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from resource_explorer.config import AwsConfig, EndpointConfig
from resource_explorer.errors import ConfigurationMissingError, NotFoundError, UpstreamError
from resource_explorer.models.schemas import ActionKind, ResourceRequest

logger = logging.getLogger(__name__)

DEFAULT_ACTION_MESSAGE = "Action completed successfully"


class Placeholder(NamedTuple):
    """Returned by connectors whose upstream integration does not exist yet."""

    error: str
    message: str


class CloudConnector:
    label = "cloud"

    async def act(self, request: ResourceRequest) -> Any:
        raise NotFoundError(f"No handler configured for {self.label} actions")

    def describe_action(self, request: ResourceRequest, raw: Any) -> str:
        if isinstance(raw, dict) and raw.get("message"):
            return str(raw["message"])
        return DEFAULT_ACTION_MESSAGE


# ---- AWS EC2 (SDK) ----

class Ec2Connector(CloudConnector):
    label = "AWS EC2"

    ACTIONS = {
        ActionKind.START: "start_instances",
        ActionKind.STOP: "stop_instances",
        ActionKind.REBOOT: "reboot_instances",
    }

    def __init__(self, aws: AwsConfig, client_factory: Optional[Callable[[str], Any]] = None):
        self._aws = aws
        self._timeout = aws.ec2.timeout_seconds
        self._client_factory = client_factory or self._make_client

    def _make_client(self, region: str):
        if not (self._aws.access_key_id and self._aws.secret_access_key):
            logger.info("AWS access key not configured, using the default credential chain")
        session = boto3.Session(
            aws_access_key_id=self._aws.access_key_id or None,
            aws_secret_access_key=self._aws.secret_access_key or None,
            region_name=region,
        )
        boto_config = BotoConfig(
            connect_timeout=self._timeout,
            read_timeout=self._timeout,
            retries={"total_max_attempts": 1},
        )
        return session.client("ec2", config=boto_config)

    def _region(self, request: ResourceRequest) -> str:
        return request.region or self._aws.region

    async def _call(self, fn: Callable, *args) -> Any:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"{self.label} API timed out after {self._aws.ec2.timeout}ms") from e
        except ClientError as e:
            code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise UpstreamError(f"{self.label} API returned an error: {e}", code, str(e.response.get("Error"))) from e
        except BotoCoreError as e:
            raise UpstreamError(f"{self.label} API request failed: {e}") from e

    def _describe_all(self, region: str) -> Dict[str, Any]:
        ec2 = self._client_factory(region)
        reservations = []
        for page in ec2.get_paginator("describe_instances").paginate():
            reservations.extend(page.get("Reservations", []))
        return {"Reservations": reservations}

    def _run_action(self, region: str, action: ActionKind, instance_id: str) -> Dict[str, Any]:
        ec2 = self._client_factory(region)
        return getattr(ec2, self.ACTIONS[action])(InstanceIds=[instance_id])

    async def list(self, request: ResourceRequest) -> Dict[str, Any]:
        region = self._region(request)
        logger.info(f"Listing EC2 instances using AWS SDK in region: {region}")
        return await self._call(self._describe_all, region)

    async def act(self, request: ResourceRequest) -> Dict[str, Any]:
        action = ActionKind(request.action)
        region = self._region(request)
        logger.info(f"Performing EC2 action '{action.value}' on instance '{request.instance_id}' in region '{region}'")
        result = await self._call(self._run_action, region, action, request.instance_id)
        logger.info(f"EC2 action result: {result}")
        return result

    def describe_action(self, request: ResourceRequest, raw: Any) -> str:
        return f"EC2 action '{request.action}' executed successfully"


# ---- HTTP-backed connectors ----

class HttpConnector(CloudConnector):
    def __init__(self, endpoint: EndpointConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._endpoint = endpoint
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._endpoint.token:
            headers["Authorization"] = f"Bearer {self._endpoint.token}"
        return headers

    @staticmethod
    def _require(url: str, message: str) -> str:
        if not url:
            raise ConfigurationMissingError(message)
        return url

    async def _post(self, url: str, payload: Dict[str, Any], label: str) -> Any:
        logger.info(f"Calling {label}: {url}")
        logger.info(f"{label} payload: {payload}")
        timeout = self._endpoint.timeout_seconds
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                response = await asyncio.wait_for(
                    client.post(url, json=payload, headers=self._headers()), timeout=timeout
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamError(f"{label} timed out after {self._endpoint.timeout}ms") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"{label} request failed: {e}") from e

        logger.info(f"{label} response status: {response.status_code}")
        if not response.is_success:
            logger.error(f"{label} error response: {response.text}")
            raise UpstreamError(
                f"{label} returned {response.status_code}: {response.reason_phrase} - {response.text}",
                response.status_code,
                response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{label} returned an invalid JSON body", response.status_code, response.text) from e


class RdsConnector(HttpConnector):
    """
    RDS lives behind an internal HTTP API rather than the SDK.

    The bearer token, when configured, is sent on both list and action calls.
    The older portal backend only sent it on actions.
    """

    label = "AWS RDS"

    async def list(self, request: ResourceRequest) -> Any:
        url = self._require(self._endpoint.url, "AWS RDS API endpoint not configured")
        payload = {"region": request.region, "userId": request.user_id}
        return await self._post(url, payload, "AWS RDS API")

    async def act(self, request: ResourceRequest) -> Any:
        url = self._require(self._endpoint.action_url, "AWS RDS Action API endpoint not configured")
        payload = {
            "region": request.region,
            "instance_id": request.instance_id,
            "action": request.action,
            "userId": request.user_id,
        }
        return await self._post(url, payload, "AWS RDS Action API")


class GcpComputeConnector(HttpConnector):
    label = "GCP Compute Engine"

    ACTION_SUFFIX = "/instance-action"

    def action_target(self, action: str) -> str:
        """e.g. http://host/compute/instance-action + stop -> http://host/compute/stop"""
        base = self._endpoint.action_url
        if base.endswith(self.ACTION_SUFFIX):
            base = base[: -len(self.ACTION_SUFFIX)]
        return f"{base.rstrip('/')}/{action}"

    async def list(self, request: ResourceRequest) -> Any:
        url = self._require(self._endpoint.url, "GCP Compute Engine API endpoint not configured")
        payload = {"project_id": request.project, "location": request.region}
        return await self._post(url, payload, "GCP Compute Engine API")

    async def act(self, request: ResourceRequest) -> Any:
        self._require(self._endpoint.action_url, "GCP Compute Engine Action API endpoint not configured")
        payload = {
            # region carries the instance zone here, e.g. us-east4-a
            "project_id": request.project,
            "zone": request.region,
            "instance_id": request.instance_id,
        }
        return await self._post(self.action_target(request.action), payload, "GCP Compute Engine Action API")


# ---- Azure ----

class AzureVmConnector(CloudConnector):
    label = "Azure VM"

    async def list(self, request: ResourceRequest) -> Placeholder:
        logger.warning("Azure VM API integration not yet implemented")
        return Placeholder(
            error="Azure VM integration coming soon",
            message="This feature is under development",
        )
