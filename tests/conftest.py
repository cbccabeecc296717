from __future__ import annotations

from typing import Callable

import httpx
import pytest

from nlb.adapters.service_gateway import ServiceGateway

BASE_URL = "http://lb.test/api"
TOKEN = "s3cret"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(requests_seen: list[httpx.Request]) -> Callable[[Handler], httpx.Client]:
    def factory(handler: Handler) -> httpx.Client:
        def recording(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return handler(request)

        return httpx.Client(transport=httpx.MockTransport(recording))

    return factory


@pytest.fixture
def make_gateway(make_client: Callable[[Handler], httpx.Client]) -> Callable[[Handler], ServiceGateway]:
    def factory(handler: Handler) -> ServiceGateway:
        return ServiceGateway(BASE_URL, TOKEN, client=make_client(handler))

    return factory
