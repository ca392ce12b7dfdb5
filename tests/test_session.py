from starlette.requests import Request
from starlette.responses import Response

from sessiongate.auth.session import InMemorySessionStore, SessionManager


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _request(cookie_name: str = "", token: str = "") -> Request:
    headers = []
    if cookie_name:
        headers.append((b"cookie", f"{cookie_name}={token}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _cookie_value(resp: Response) -> str:
    raw = resp.headers["set-cookie"]
    return raw.split(";", 1)[0].split("=", 1)[1]


def test_store_create_get_delete():
    store = InMemorySessionStore()
    s = store.create(7, max_age=60)
    assert store.get(s.session_id).user_id == 7
    store.delete(s.session_id)
    assert store.get(s.session_id) is None
    store.delete(s.session_id)


def test_store_ids_are_unique():
    store = InMemorySessionStore()
    ids = {store.create(1, max_age=60).session_id for _ in range(50)}
    assert len(ids) == 50


def test_store_expires_entries():
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    s = store.create(1, max_age=10)
    clock.now += 9
    assert store.get(s.session_id) is not None
    clock.now += 1
    assert store.get(s.session_id) is None
    assert len(store) == 0


def test_store_drops_abandoned_sessions_on_create():
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    for _ in range(1000):
        store.create(1, max_age=10)
    assert len(store) == 1000

    clock.now += 1000
    fresh = store.create(2, max_age=10)
    assert len(store) == 1
    assert store.get(fresh.session_id).user_id == 2


def test_store_keeps_live_sessions_when_purging():
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    old = store.create(1, max_age=10)
    live = store.create(2, max_age=100)
    clock.now += 50
    store.create(3, max_age=10)
    assert store.get(old.session_id) is None
    assert store.get(live.session_id) is not None
    assert len(store) == 2


def test_manager_bind_resolve_destroy():
    store = InMemorySessionStore()
    mgr = SessionManager(store, secret_key="k", cookie_name="sid")

    assert mgr.resolve(_request()) is None

    resp = Response()
    mgr.bind(_request(), resp, 42)
    token = _cookie_value(resp)
    sess = mgr.resolve(_request("sid", token))
    assert sess is not None and sess.user_id == 42

    out = Response()
    mgr.destroy(_request("sid", token), out)
    assert mgr.resolve(_request("sid", token)) is None
    assert len(store) == 0


def test_manager_rejects_foreign_signature():
    store = InMemorySessionStore()
    ours = SessionManager(store, secret_key="ours", cookie_name="sid")
    theirs = SessionManager(store, secret_key="theirs", cookie_name="sid")

    resp = Response()
    theirs.bind(_request(), resp, 1)
    assert ours.resolve(_request("sid", _cookie_value(resp))) is None


def test_manager_rebind_drops_previous_session():
    store = InMemorySessionStore()
    mgr = SessionManager(store, secret_key="k", cookie_name="sid")

    first = Response()
    mgr.bind(_request(), first, 1)
    old = _cookie_value(first)

    second = Response()
    mgr.bind(_request("sid", old), second, 1)
    assert mgr.resolve(_request("sid", old)) is None
    assert mgr.resolve(_request("sid", _cookie_value(second))) is not None
    assert len(store) == 1
