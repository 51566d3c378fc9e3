"""Fixtures shared by the backend tests

`upstream` records every request sent through the httpx client and answers
with whatever the test registered for the request's path.
"""

import httpx
import pytest


class FakeUpstream:
    """Path -> response table served through httpx.MockTransport."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def respond(self, path, json=None, status_code=200):
        self.routes[path] = (status_code, json)

    def fail(self, path, error=httpx.ConnectError('Connection refused')):
        self.routes[path] = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={'message': 'Not Found'})
        if isinstance(route, Exception):
            raise route
        status_code, body = route
        return httpx.Response(status_code, json=body)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    with httpx.Client(transport=httpx.MockTransport(upstream)) as client:
        yield client
