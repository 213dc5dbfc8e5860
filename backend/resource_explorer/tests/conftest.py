"""Pytest configuration and shared fixtures."""
import json
from typing import Any, Dict, List
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from resource_explorer.config import AwsConfig, EndpointConfig, GcpConfig, Settings
from resource_explorer.main import create_app
from resource_explorer.services.dispatcher import Dispatcher

RDS_URL = "http://rds.internal/rds/list"
RDS_ACTION_URL = "http://rds.internal/rds/action"
GCP_URL = "http://host/compute/list"
GCP_ACTION_URL = "http://host/compute/instance-action"


class FakeUpstream:
    """Records upstream calls and replies from a per-URL table."""

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.replies: Dict[str, httpx.Response] = {}

    def reply(self, url: str, status_code: int = 200, json_body: Any = None, text: str = None):
        if text is not None:
            self.replies[url] = httpx.Response(status_code, text=text)
        else:
            self.replies[url] = httpx.Response(status_code, json=json_body if json_body is not None else {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.replies.get(str(request.url), httpx.Response(404, text="no route"))

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.calls[-1].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ENV="test",
        AWS=AwsConfig(
            region="us-east-1",
            rds=EndpointConfig(url=RDS_URL, action_url=RDS_ACTION_URL, timeout=5000),
        ),
        GCP=GcpConfig(
            compute=EndpointConfig(url=GCP_URL, action_url=GCP_ACTION_URL, token="gcp-token", timeout=5000),
        ),
        _env_file=None,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def ec2_client() -> MagicMock:
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {
            "Reservations": [
                {
                    "Instances": [
                        {
                            "InstanceId": "i-0abc",
                            "PublicIpAddress": "54.1.2.3",
                            "PrivateIpAddress": "10.0.0.4",
                            "PublicDnsName": "ec2-54-1-2-3.compute-1.amazonaws.com",
                            "PrivateDnsName": "ip-10-0-0-4.ec2.internal",
                            "State": {"Name": "running"},
                        }
                    ]
                }
            ]
        },
        {
            "Reservations": [
                {
                    "Instances": [
                        {
                            "InstanceId": "i-0def",
                            "PrivateIpAddress": "10.0.0.5",
                            "PublicDnsName": "",
                            "PrivateDnsName": "ip-10-0-0-5.ec2.internal",
                            "State": {"Name": "stopped"},
                        }
                    ]
                }
            ]
        },
    ]
    client.start_instances.return_value = {"StartingInstances": [{"InstanceId": "i-0abc"}]}
    client.stop_instances.return_value = {"StoppingInstances": [{"InstanceId": "i-0abc"}]}
    client.reboot_instances.return_value = {}
    return client


@pytest.fixture
def dispatcher(settings: Settings, upstream: FakeUpstream, ec2_client: MagicMock) -> Dispatcher:
    return Dispatcher(
        settings,
        transport=httpx.MockTransport(upstream.handler),
        ec2_client_factory=lambda region: ec2_client,
    )


@pytest.fixture
def api_client(settings: Settings, dispatcher: Dispatcher) -> TestClient:
    return TestClient(create_app(settings, dispatcher=dispatcher))
