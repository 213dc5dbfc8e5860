"""
Take provider-specific responses and normalize into the common instance schema.
Example output (one record):
    {"instanceName": "i-0123", "status": "running", "ip": "10.0.0.4", "hostname": "ip-10-0-0-4.ec2.internal"}

Normalizers never raise. Records that cannot be mapped are skipped and handed to
the optional ``on_skip(record, reason)`` callback so callers can count them.
"""
from typing import Any, Callable, List, Optional

from resource_explorer.models.schemas import NormalizedInstance

SkipHook = Callable[[Any, str], None]

UNKNOWN_STATUS = "unknown"


def _skip(on_skip: Optional[SkipHook], record: Any, reason: str) -> None:
    if on_skip is not None:
        on_skip(record, reason)


def _first(*values):
    for v in values:
        if v:
            return v
    return None


def _build(on_skip: Optional[SkipHook], record: Any, name: Any, status: Any, **fields) -> Optional[NormalizedInstance]:
    if not name:
        _skip(on_skip, record, "missing instance identifier")
        return None
    return NormalizedInstance(
        instanceName=str(name),
        status=str(status) if status else UNKNOWN_STATUS,
        **{k: str(v) for k, v in fields.items() if v},
    )


def normalize_ec2(payload: Any, on_skip: Optional[SkipHook] = None) -> List[NormalizedInstance]:
    out = []
    if not isinstance(payload, dict):
        return out
    reservations = payload.get("Reservations")
    if not isinstance(reservations, list):
        return out
    for res in reservations:
        if not isinstance(res, dict):
            _skip(on_skip, res, "reservation is not an object")
            continue
        instances = res.get("Instances")
        if instances is None:
            continue
        if not isinstance(instances, list):
            _skip(on_skip, res, "instances is not a list")
            continue
        for i in instances:
            if not isinstance(i, dict):
                _skip(on_skip, i, "instance is not an object")
                continue
            state = i.get("State") if isinstance(i.get("State"), dict) else {}
            record = _build(
                on_skip, i, i.get("InstanceId"), state.get("Name"),
                ip=_first(i.get("PublicIpAddress"), i.get("PrivateIpAddress")),
                hostname=_first(i.get("PublicDnsName"), i.get("PrivateDnsName")),
            )
            if record:
                out.append(record)
    return out


def normalize_rds(payload: Any, on_skip: Optional[SkipHook] = None) -> List[NormalizedInstance]:
    out = []
    if not isinstance(payload, dict) or payload.get("isSuccess") is not True:
        return out
    rows = payload.get("rds_data")
    if not isinstance(rows, list):
        return out
    for i in rows:
        if not isinstance(i, dict):
            _skip(on_skip, i, "rds record is not an object")
            continue
        record = _build(
            on_skip, i, i.get("instance_name"), i.get("status"),
            endpoint=i.get("endpoint"), engine=i.get("engine"),
        )
        if record:
            out.append(record)
    return out


def normalize_gcp(payload: Any, on_skip: Optional[SkipHook] = None) -> List[NormalizedInstance]:
    out = []
    if not isinstance(payload, dict) or not isinstance(payload.get("list_output"), list):
        return out
    for i in payload["list_output"]:
        if not isinstance(i, dict):
            _skip(on_skip, i, "gcp record is not an object")
            continue
        record = _build(
            on_skip, i, i.get("instance_id"), i.get("status"),
            zone=i.get("zone"), ip=i.get("ip"),
        )
        if record:
            out.append(record)
    return out
