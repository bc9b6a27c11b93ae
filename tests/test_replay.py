from ajaxreplay import (
    AjaxReplay,
    HTTPXTransport,
    InMemoryStore,
    MockNetwork,
    MockResponse,
    ReplayOptions,
    RequestProxy,
    SQLiteStore,
)


class ClosingStore(InMemoryStore):
    closed = False

    def close(self) -> None:
        self.closed = True


def test_defaults(use_temp_dir):
    with AjaxReplay() as replay:
        assert replay.original_transport is HTTPXTransport
        assert isinstance(replay.cache.store, SQLiteStore)
        assert not replay.no_cache
        assert replay.refresh


def test_request_creates_proxies():
    network = MockNetwork()
    replay = AjaxReplay(transport_factory=network, store=InMemoryStore())

    first = replay.request()
    second = replay()

    assert isinstance(first, RequestProxy)
    assert isinstance(second, RequestProxy)
    assert first is not second
    assert first.cache is second.cache is replay.cache
    assert replay.original_transport is network


def test_options_are_shared():
    options = ReplayOptions()
    replay = AjaxReplay(transport_factory=MockNetwork(), store=InMemoryStore(), options=options)

    replay.no_cache = True
    replay.refresh = False

    assert options == ReplayOptions(no_cache=True, refresh=False)
    assert not replay.cache.enabled
    assert replay.request().options is options

    replay.reset()

    assert options == ReplayOptions()
    assert replay.cache.enabled


def test_toggle_between_requests():
    network = MockNetwork()
    network.add_responses([MockResponse(200, "first"), MockResponse(200, "second")])
    replay = AjaxReplay(transport_factory=network, store=InMemoryStore(), options=ReplayOptions(refresh=False))

    proxy = replay.request()
    proxy.setup("GET", "/toggle", False)
    proxy.dispatch()

    replay.no_cache = True
    proxy = replay.request()
    proxy.setup("GET", "/toggle", False)
    proxy.dispatch()
    assert proxy.response_text == "second"

    replay.no_cache = False
    proxy = replay.request()
    proxy.setup("GET", "/toggle", False)
    proxy.dispatch()
    assert proxy.response_text == "first"
    assert proxy.from_cache
    assert network.call_count == 2


def test_clear_cache():
    store = InMemoryStore()
    store.set("unrelated", "keep")
    network = MockNetwork()
    network.add_responses([MockResponse(200, "ok")])
    replay = AjaxReplay(transport_factory=network, store=store)

    proxy = replay.request()
    proxy.setup("GET", "/users", False)
    proxy.dispatch()
    assert store.keys() == ["unrelated", "ajaxreplayGET/users"]

    replay.clear_cache()

    assert store.keys() == ["unrelated"]


def test_close_closes_the_store():
    store = ClosingStore()

    with AjaxReplay(transport_factory=MockNetwork(), store=store):
        pass

    assert store.closed
