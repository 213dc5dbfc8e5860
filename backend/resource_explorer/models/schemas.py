from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    AWS = "AWS"
    AZURE = "Azure"
    GCP = "GCP"


class ActionKind(str, Enum):
    START = "start"
    STOP = "stop"
    REBOOT = "reboot"


class OperationKind(str, Enum):
    LIST = "list"
    ACTION = "action"


class ResourceTarget(str, Enum):
    AWS_EC2 = "AWS EC2"
    AWS_RDS = "AWS RDS"
    AZURE_VM = "Azure VM"
    GCP_COMPUTE = "GCP Compute"


# (provider, service) -> target. Order within a provider is the advertised order.
TARGETS = {
    (Provider.AWS, "EC2"): ResourceTarget.AWS_EC2,
    (Provider.AWS, "RDS"): ResourceTarget.AWS_RDS,
    (Provider.AZURE, "VM"): ResourceTarget.AZURE_VM,
    (Provider.GCP, "Compute"): ResourceTarget.GCP_COMPUTE,
}

# Display labels the portal has sent historically
SERVICE_ALIASES = {
    (Provider.GCP, "Compute Engine (VM)"): ResourceTarget.GCP_COMPUTE,
}


def supported_services(provider: Provider) -> List[str]:
    return [service for (p, service) in TARGETS if p == provider]


class ResourceRequest(BaseModel):
    """Inbound request from the portal. Fields are loose strings; the validator decides."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    provider: Optional[str] = None
    service: Optional[str] = None
    region: Optional[str] = None
    project: Optional[str] = None
    instance_id: Optional[str] = None
    action: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")


class NormalizedInstance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instance_name: str = Field(..., alias="instanceName")
    status: str
    ip: Optional[str] = None
    hostname: Optional[str] = None
    endpoint: Optional[str] = None
    engine: Optional[str] = None
    zone: Optional[str] = None


class ResourceResponse(BaseModel):
    success: bool
    data: Optional[List[NormalizedInstance]] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_body(self) -> dict:
        """JSON body with unset fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
