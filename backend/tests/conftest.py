from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from earnings_insight.services.upstream_client import FetchStatus, UpstreamResult


class FakeUpstreamClient:
    """Stands in for UpstreamClient: path -> result (or callable(params) -> result)"""

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes = dict(routes or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> UpstreamResult:
        params = dict(params or {})
        self.calls.append((path, params))
        route = self.routes.get(path)
        if route is None:
            return UpstreamResult(FetchStatus.NOT_FOUND, status_code=404, error=f"Not found: {path}")
        if callable(route):
            return route(params)
        return route

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [params for called, params in self.calls if called == path]


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def ok(data: Any) -> UpstreamResult:
    return UpstreamResult(FetchStatus.OK, data=data, status_code=200)


def failed(status: FetchStatus = FetchStatus.PROVIDER_ERROR, status_code: Optional[int] = 500) -> UpstreamResult:
    return UpstreamResult(status, status_code=status_code, error=f"upstream {status.value}")


@pytest.fixture
def make_client() -> Callable[..., FakeUpstreamClient]:
    return FakeUpstreamClient


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def ok_result() -> Callable[[Any], UpstreamResult]:
    return ok


@pytest.fixture
def failed_result() -> Callable[..., UpstreamResult]:
    return failed
