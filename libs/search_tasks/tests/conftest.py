"""
Shared fakes for the search task tests: a virtual clock, an in-memory
submit/fetch pair with scripted task statuses, and a fake search
service mounted on httpx.MockTransport.
"""

import asyncio
import json
import re

# Make the package importable without installing it: add libs/ to sys.path
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

sys.path.append(str(Path(__file__).resolve().parents[2]))

from search_tasks import SearchClient  # noqa: E402

BASE_URL = "http://search.test"


class VirtualClock:
    """Clock and sleep pair where sleeping only advances virtual time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def not_found(task_uid):
    request = httpx.Request("GET", f"{BASE_URL}/tasks/{task_uid}")
    response = httpx.Response(
        404,
        request=request,
        json={"message": f"Task `{task_uid}` not found.", "code": "task_not_found"},
    )
    return httpx.HTTPStatusError(
        "Task not found", request=request, response=response
    )


class ScriptedTasks:
    """
    Fake submit/fetch pair. Every submission plays the next script:
    a list of statuses returned by successive fetches (the last one
    repeats forever) and an optional error payload for failures.
    With `id_only`, submissions answer with nothing but the task uid.
    """

    def __init__(self, *scripts, id_only=False):
        self.scripts = list(scripts)
        self.id_only = id_only
        self.submissions = []
        self.fetches = []
        self._tasks = {}

    def add(self, statuses, error=None, uid=None):
        if uid is None:
            uid = len(self._tasks)
        self._tasks[uid] = {"statuses": list(statuses), "error": error}
        return uid

    async def submit(self, method, path, payload=None, params=None):
        self.submissions.append((method, path, payload))
        position = len(self.submissions) - 1
        if position < len(self.scripts):
            statuses, error = self.scripts[position]
        else:
            statuses, error = ["succeeded"], None
        uid = self.add(statuses, error)
        if self.id_only:
            return {"taskUid": uid}
        return {"taskUid": uid, "status": "enqueued", "type": path}

    async def fetch_task(self, task_uid):
        self.fetches.append(task_uid)
        if task_uid not in self._tasks:
            raise not_found(task_uid)
        task = self._tasks[task_uid]
        statuses = task["statuses"]
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        body = {"uid": task_uid, "status": status}
        if status == "failed":
            body["error"] = task["error"]
        return body

    def fetches_of(self, task_uid):
        return [uid for uid in self.fetches if uid == task_uid]


class FakeSearchService:
    """
    Minimal search service behind httpx.MockTransport. Mutations enqueue
    tasks that report `processing` for `polls_before_done` fetches, then
    succeed (applying their effect) or fail when their type was marked
    with `fail()`.
    """

    def __init__(self, polls_before_done=1):
        self.polls_before_done = polls_before_done
        self.requests = []
        self.tasks = {}
        self.indexes = {}
        self.documents = {}
        self.settings = {}
        self.experimental = {}
        self.failures = {}

    def fail(self, task_type, error):
        self.failures[task_type] = error

    def mutations(self):
        return [
            (r.method, r.url.path)
            for r in self.requests
            if not (r.method == "GET" or r.url.path == "/experimental-features")
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path
        body = json.loads(request.content) if request.content else None

        if method == "GET" and path.startswith("/tasks/"):
            return self._get_task(int(path.rsplit("/", 1)[1]))
        if method == "GET" and path == "/indexes":
            results = list(self.indexes.values())
            return httpx.Response(
                200,
                json={"results": results, "offset": 0, "limit": 20, "total": len(results)},
            )
        if method == "PATCH" and path == "/experimental-features":
            self.experimental.update(body)
            return httpx.Response(200, json=self.experimental)
        if method == "POST" and path == "/indexes":
            uid = body["uid"]
            return self._enqueue(
                "indexCreation",
                uid,
                lambda: self.indexes.setdefault(
                    uid, {"uid": uid, "primaryKey": body.get("primaryKey")}
                ),
            )

        match = re.fullmatch(r"/indexes/([^/]+)(/.*)?", path)
        if not match:
            return httpx.Response(404, json={"code": "not_found"})
        uid, rest = match.group(1), match.group(2) or ""

        if method == "DELETE" and rest == "":
            return self._enqueue(
                "indexDeletion", uid, lambda: self.indexes.pop(uid, None)
            )
        if method in ("POST", "PUT") and rest == "/documents":
            primary_key = request.url.params.get("primaryKey")

            def add():
                self.indexes.setdefault(uid, {"uid": uid, "primaryKey": primary_key})
                self.documents.setdefault(uid, []).extend(body)

            return self._enqueue("documentAdditionOrUpdate", uid, add)
        if rest.startswith("/settings"):
            def update():
                if rest == "/settings/filterable-attributes":
                    self.settings.setdefault(uid, {})["filterableAttributes"] = body
                elif body:
                    self.settings.setdefault(uid, {}).update(body)
                else:
                    self.settings.pop(uid, None)

            return self._enqueue("settingsUpdate", uid, update)
        if rest.startswith("/documents"):
            return self._enqueue(
                "documentDeletion", uid, lambda: self.documents.pop(uid, None)
            )
        return httpx.Response(404, json={"code": "not_found"})

    def _enqueue(self, task_type, index_uid, effect):
        uid = len(self.tasks)
        self.tasks[uid] = {
            "snapshot": {
                "uid": uid,
                "indexUid": index_uid,
                "status": "enqueued",
                "type": task_type,
                "enqueuedAt": "2024-01-01T00:00:00Z",
            },
            "remaining": self.polls_before_done,
            "effect": effect,
        }
        return httpx.Response(
            202,
            json={
                "taskUid": uid,
                "indexUid": index_uid,
                "status": "enqueued",
                "type": task_type,
                "enqueuedAt": "2024-01-01T00:00:00Z",
            },
        )

    def _get_task(self, uid):
        task = self.tasks.get(uid)
        if task is None:
            return httpx.Response(
                404,
                json={"message": f"Task `{uid}` not found.", "code": "task_not_found"},
            )
        snapshot = task["snapshot"]
        if snapshot["status"] in ("enqueued", "processing"):
            if task["remaining"] > 0:
                task["remaining"] -= 1
                snapshot["status"] = "processing"
            elif snapshot["type"] in self.failures:
                snapshot["status"] = "failed"
                snapshot["error"] = self.failures[snapshot["type"]]
            else:
                task["effect"]()
                snapshot["status"] = "succeeded"
        return httpx.Response(200, json=dict(snapshot))


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def service():
    return FakeSearchService()


@pytest_asyncio.fixture
async def client(service):
    search = SearchClient(
        base_url=BASE_URL,
        api_key="masterKey",
        transport=httpx.MockTransport(service.handler),
    )
    yield search
    await search.aclose()


@pytest.fixture
def scripted():
    """Factory for ScriptedTasks: scripted(([statuses], error), ...)."""
    return ScriptedTasks
