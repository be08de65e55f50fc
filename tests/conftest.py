import asyncio

import pytest
from aiohttp.test_utils import TestServer

from shareconnect.models.profile import Profile, ServiceKind


@pytest.fixture
def make_profile():
    """Factory for profiles pointing at a local test server."""

    def _make(port: int = 8081, **overrides) -> Profile:
        data = {
            "name": "Test Service",
            "base_url": "http://127.0.0.1",
            "port": port,
            "service_kind": ServiceKind.METUBE,
        }
        data.update(overrides)
        return Profile(**data)

    return _make


@pytest.fixture
def serve():
    """
    Runs `scenario(server)` against an aiohttp application served on a
    random local port and returns its result.
    """

    def _serve(web_app, scenario):
        async def _run():
            async with TestServer(web_app) as server:
                return await scenario(server)

        return asyncio.run(_run())

    return _serve
