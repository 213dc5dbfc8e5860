"""
Routes validated requests to the connector for their provider/service pair and
normalizes what comes back.

Routing is a fixed table; there is no runtime registration. Settings are passed in
at construction and never read from module state.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from resource_explorer.config import Settings
from resource_explorer.errors import NotFoundError
from resource_explorer.models.schemas import (
    SERVICE_ALIASES,
    TARGETS,
    Provider,
    ResourceRequest,
    ResourceResponse,
    ResourceTarget,
)
from resource_explorer.services import normalizer
from resource_explorer.services.connectors import (
    AzureVmConnector,
    CloudConnector,
    Ec2Connector,
    GcpComputeConnector,
    Placeholder,
    RdsConnector,
)

logger = logging.getLogger(__name__)

# action route name -> target
ACTION_TARGETS = {
    "ec2-action": ResourceTarget.AWS_EC2,
    "rds-action": ResourceTarget.AWS_RDS,
    "gcp-action": ResourceTarget.GCP_COMPUTE,
}

NORMALIZERS: Dict[ResourceTarget, Callable] = {
    ResourceTarget.AWS_EC2: normalizer.normalize_ec2,
    ResourceTarget.AWS_RDS: normalizer.normalize_rds,
    ResourceTarget.GCP_COMPUTE: normalizer.normalize_gcp,
}

SkipHook = Callable[[ResourceTarget, Any, str], None]


def resolve_target(provider: Optional[str], service: Optional[str]) -> ResourceTarget:
    try:
        key = (Provider(provider), service)
    except ValueError:
        raise NotFoundError(f"No handler configured for {provider} {service}")
    target = TARGETS.get(key) or SERVICE_ALIASES.get(key)
    if target is None:
        raise NotFoundError(f"No handler configured for {provider} {service}")
    return target


class Dispatcher:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ec2_client_factory: Optional[Callable[[str], Any]] = None,
        on_skip: Optional[SkipHook] = None,
    ):
        self._on_skip = on_skip
        self._connectors: Dict[ResourceTarget, CloudConnector] = {
            ResourceTarget.AWS_EC2: Ec2Connector(settings.AWS, client_factory=ec2_client_factory),
            ResourceTarget.AWS_RDS: RdsConnector(settings.AWS.rds, transport=transport),
            ResourceTarget.AZURE_VM: AzureVmConnector(),
            ResourceTarget.GCP_COMPUTE: GcpComputeConnector(settings.GCP.compute, transport=transport),
        }

    async def dispatch_list(self, request: ResourceRequest) -> ResourceResponse:
        target = resolve_target(request.provider, request.service)
        raw = await self._connectors[target].list(request)
        if isinstance(raw, Placeholder):
            return ResourceResponse(success=False, error=raw.error, message=raw.message)

        skipped = []

        def record_skip(record, reason):
            skipped.append(reason)
            if self._on_skip is not None:
                self._on_skip(target, record, reason)

        instances = NORMALIZERS[target](raw, on_skip=record_skip)
        if skipped:
            logger.warning(f"Skipped {len(skipped)} malformed {target.value} record(s): {sorted(set(skipped))}")
        logger.info(f"Successfully fetched {len(instances)} {target.value} instances")
        return ResourceResponse(success=True, data=instances)

    async def dispatch_action(self, request: ResourceRequest, target: ResourceTarget) -> ResourceResponse:
        connector = self._connectors[target]
        raw = await connector.act(request)
        return ResourceResponse(success=True, message=connector.describe_action(request, raw))
