"""
Request validation as a rule table keyed by operation kind.

Each rule is a pure predicate over the request plus the message raised when it
fails. Rules run in order and the first failure wins, so messages are
deterministic for a given request.
"""
from typing import Callable, Dict, List, NamedTuple, Optional

from resource_explorer.errors import InputError
from resource_explorer.models.schemas import (
    SERVICE_ALIASES,
    TARGETS,
    ActionKind,
    OperationKind,
    Provider,
    ResourceRequest,
    supported_services,
)


class Rule(NamedTuple):
    check: Callable[[ResourceRequest], bool]
    message: Callable[[ResourceRequest], str]


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _provider(request: ResourceRequest) -> Optional[Provider]:
    try:
        return Provider(request.provider)
    except ValueError:
        return None


def _service_allowed(request: ResourceRequest) -> bool:
    key = (_provider(request), request.service)
    return key in TARGETS or key in SERVICE_ALIASES


def _invalid_service_message(request: ResourceRequest) -> str:
    provider = _provider(request)
    return f"Invalid {provider.value} service. Currently supported: {', '.join(supported_services(provider))}"


def _static(message: str) -> Callable[[ResourceRequest], str]:
    return lambda _request: message


_REGION_RULE = Rule(lambda r: _present(r.region), _static("Region/Location is required"))

RULES: Dict[OperationKind, List[Rule]] = {
    OperationKind.LIST: [
        Rule(lambda r: _present(r.provider), _static("Provider is required")),
        Rule(lambda r: _present(r.service), _static("Service is required")),
        Rule(lambda r: _provider(r) is not None, _static("Invalid provider. Must be AWS, Azure, or GCP")),
        Rule(_service_allowed, _invalid_service_message),
        _REGION_RULE,
        Rule(
            lambda r: _provider(r) is not Provider.GCP or _present(r.project),
            _static("Project ID is required for GCP"),
        ),
    ],
    OperationKind.ACTION: [
        Rule(lambda r: _present(r.instance_id), _static("Instance id is required")),
        Rule(lambda r: _present(r.action), _static("Action is required")),
        Rule(
            lambda r: r.action in {a.value for a in ActionKind},
            _static("Invalid action. Must be start, stop, or reboot"),
        ),
        _REGION_RULE,
    ],
}


def validate(request: ResourceRequest, kind: OperationKind) -> None:
    """Raise InputError for the first rule of ``kind`` the request breaks."""
    for rule in RULES[OperationKind(kind)]:
        if not rule.check(request):
            raise InputError(rule.message(request))
