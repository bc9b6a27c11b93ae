import os
import typing as tp

import pytest

from ajaxreplay import AjaxReplay, InMemoryStore, MockNetwork, ReplayOptions


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def use_temp_dir(tmpdir):
    cur_dir = os.getcwd()
    os.chdir(tmpdir)
    yield
    os.chdir(cur_dir)


@pytest.fixture()
def network() -> MockNetwork:
    return MockNetwork()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def make_replay(network: MockNetwork, store: InMemoryStore) -> tp.Callable[..., AjaxReplay]:
    def factory(**options: bool) -> AjaxReplay:
        return AjaxReplay(transport_factory=network, store=store, options=ReplayOptions(**options))

    return factory
