"""
Client-side session tracking keeps its state on the tracker object.
"""
import asyncio

from reclaim.client import ReclaimAPIError, ReclaimClient, SessionTracker


class RecordingClient(ReclaimClient):
    def __init__(self, responses=None):
        super().__init__("http://reclaim.test/", http=None, token="t")
        self.calls = []
        self.responses = responses or {}

    async def post(self, path, payload=None):
        self.calls.append((path, payload))
        response = self.responses.get(path, {"success": True})
        if isinstance(response, Exception):
            raise response
        return response


def test_login_sets_and_logout_clears_session_id():
    client = RecordingClient({"/session/login": {"success": True, "sessionId": 7}})
    tracker = client.tracker()

    asyncio.run(tracker.login())
    assert tracker.active
    assert tracker.session_id == 7

    asyncio.run(tracker.logout())
    assert not tracker.active
    assert client.calls[-1] == ("/session/logout", {"sessionId": 7})


def test_context_manager_scopes_session():
    client = RecordingClient({"/session/login": {"success": True, "sessionId": 3}})

    async def scenario():
        async with client.tracker() as tracker:
            assert tracker.session_id == 3
        return tracker

    tracker = asyncio.run(scenario())
    assert tracker.session_id is None
    assert [path for path, _ in client.calls] == ["/session/login", "/session/logout"]


def test_trackers_do_not_share_state():
    first = SessionTracker(RecordingClient({"/session/login": {"sessionId": 1}}))
    second = SessionTracker(RecordingClient({"/session/login": {"sessionId": 2}}))

    asyncio.run(first.login())
    asyncio.run(second.login())

    assert (first.session_id, second.session_id) == (1, 2)


def test_failed_login_tracking_leaves_tracker_inactive():
    client = RecordingClient({"/session/login": ReclaimAPIError(401, "Unauthorized")})
    tracker = client.tracker()

    assert asyncio.run(tracker.login()) is None
    assert not tracker.active


def test_logout_clears_even_when_request_fails():
    client = RecordingClient({
        "/session/login": {"sessionId": 5},
        "/session/logout": ReclaimAPIError(500, "Failed to track logout"),
    })
    tracker = client.tracker()
    asyncio.run(tracker.login())

    asyncio.run(tracker.logout())
    assert tracker.session_id is None


def test_logout_without_session_sends_empty_body():
    client = RecordingClient()
    asyncio.run(client.tracker().logout())

    assert client.calls == [("/session/logout", {})]


def test_client_builds_auth_header():
    client = ReclaimClient("http://reclaim.test/", http=None, token="abc")

    assert client.base_url == "http://reclaim.test"
    assert client._headers()["Authorization"] == "Bearer abc"
