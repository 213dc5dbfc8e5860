from resource_explorer.models.schemas import NormalizedInstance, ResourceResponse
from resource_explorer.services.normalizer import normalize_ec2, normalize_gcp, normalize_rds


def test_normalize_ec2_prefers_public_addresses():
    payload = {"Reservations": [{"Instances": [{
        "InstanceId": "i-1",
        "PublicIpAddress": "54.0.0.1",
        "PrivateIpAddress": "10.0.0.1",
        "PublicDnsName": "ec2-54-0-0-1.compute-1.amazonaws.com",
        "PrivateDnsName": "ip-10-0-0-1.ec2.internal",
        "State": {"Name": "running"},
    }]}]}
    out = normalize_ec2(payload)
    assert len(out) == 1
    assert out[0].instance_name == "i-1"
    assert out[0].ip == "54.0.0.1"
    assert out[0].hostname == "ec2-54-0-0-1.compute-1.amazonaws.com"
    assert out[0].status == "running"


def test_normalize_ec2_falls_back_to_private_addresses():
    payload = {"Reservations": [{"Instances": [{
        "InstanceId": "i-2",
        "PrivateIpAddress": "10.0.0.2",
        "PublicDnsName": "",
        "PrivateDnsName": "ip-10-0-0-2.ec2.internal",
        "State": {"Name": "stopped"},
    }]}]}
    out = normalize_ec2(payload)
    assert out[0].ip == "10.0.0.2"
    assert out[0].hostname == "ip-10-0-0-2.ec2.internal"


def test_normalize_ec2_skips_records_without_id():
    skipped = []
    payload = {"Reservations": [
        {"Instances": [{"State": {"Name": "running"}}, {"InstanceId": "i-3"}, "junk"]},
        None,
    ]}
    out = normalize_ec2(payload, on_skip=lambda record, reason: skipped.append(reason))
    assert [i.instance_name for i in out] == ["i-3"]
    assert out[0].status == "unknown"
    assert len(skipped) == 3


def test_normalize_ec2_empty_and_malformed_payloads():
    assert normalize_ec2({}) == []
    assert normalize_ec2(None) == []
    assert normalize_ec2({"Reservations": None}) == []


def test_normalize_rds():
    payload = {"isSuccess": True, "rds_data": [
        {"instance_name": "orders-db", "endpoint": "orders-db.abc.rds.amazonaws.com", "engine": "postgres",
         "status": "available"},
    ]}
    out = normalize_rds(payload)
    assert out == [NormalizedInstance(
        instanceName="orders-db", endpoint="orders-db.abc.rds.amazonaws.com", engine="postgres", status="available",
    )]
    assert out[0].ip is None


def test_normalize_rds_unsuccessful_payload_is_empty():
    payload = {"isSuccess": False, "rds_data": [{"instance_name": "x", "status": "available"}]}
    assert normalize_rds(payload) == []
    assert normalize_rds({"isSuccess": True}) == []
    assert normalize_rds({"isSuccess": True, "rds_data": "oops"}) == []


def test_normalize_gcp():
    payload = {"list_output": [
        {"instance_id": "web-1", "zone": "us-east4-a", "ip": "10.1.0.2", "status": "RUNNING"},
        {"zone": "us-east4-b"},
    ]}
    skipped = []
    out = normalize_gcp(payload, on_skip=lambda record, reason: skipped.append(record))
    assert len(out) == 1
    assert out[0].zone == "us-east4-a"
    assert out[0].status == "RUNNING"
    assert skipped == [{"zone": "us-east4-b"}]


def test_normalize_gcp_missing_list():
    assert normalize_gcp({"items": []}) == []


def test_minimal_instance_serializes_as_response_data():
    instance = NormalizedInstance(instanceName="i-9", status="pending")
    body = ResourceResponse(success=True, data=[instance]).to_body()
    assert body == {"success": True, "data": [{"instanceName": "i-9", "status": "pending"}]}
    parsed = ResourceResponse.model_validate(body)
    assert parsed.data[0] == instance


def test_normalize_ec2_non_list_containers():
    skipped = []
    assert normalize_ec2({"Reservations": 5}) == []
    assert normalize_ec2({"Reservations": {"Instances": []}}) == []
    payload = {"Reservations": [
        {"Instances": 7},
        {"Instances": [{"InstanceId": "i-4", "State": {"Name": "running"}}]},
        {"Groups": []},
    ]}
    out = normalize_ec2(payload, on_skip=lambda record, reason: skipped.append(reason))
    assert [i.instance_name for i in out] == ["i-4"]
    assert skipped == ["instances is not a list"]
