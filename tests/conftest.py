import json

import httpx
import pytest

PROVIDER_ENV_VARS = (
    "GEMINI_API_KEY",
    "VITE_GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "REPLICATE_API_TOKEN",
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # Key files are resolved relative to the working directory.
    monkeypatch.chdir(tmp_path)
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeClock:
    """Monotonic clock advanced only by the fake sleep.

    `overshoot` is added to every sleep, like a loaded event loop waking late.
    """

    def __init__(self, overshoot=0.0):
        self.now = 0.0
        self.overshoot = overshoot
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds + self.overshoot


@pytest.fixture
def clock():
    return FakeClock()


class FakeReplicate:
    """Scripted Replicate predictions API behind `httpx.MockTransport`.

    `statuses` maps a job id to the snapshots returned by successive status
    polls; the last snapshot repeats once the script is exhausted.
    """

    def __init__(self, clock=None):
        self.clock = clock
        self.created = {}
        self.statuses = {}
        self.assets = {}
        self.create_errors = {}
        self.requests = []
        self.poll_times = []

    def on_create(self, model, job):
        self.created[model] = job

    def on_create_error(self, model, status_code, text):
        self.create_errors[model] = (status_code, text)

    def script(self, job_id, *snapshots):
        self.statuses[job_id] = list(snapshots)

    def asset(self, url, body=PNG_BYTES, status_code=200, content_type="image/png"):
        self.assets[url] = (status_code, body, content_type)

    def polls(self, job_id):
        return [r for r in self.requests if r.method == "GET" and r.url.path.endswith(f"/predictions/{job_id}")]

    def created_payloads(self, model):
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST" and r.url.path == f"/v1/models/{model}/predictions"
        ]

    def handler(self, request):
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path.startswith("/v1/models/"):
            model = path[len("/v1/models/"):-len("/predictions")]
            if model in self.create_errors:
                status_code, text = self.create_errors[model]
                return httpx.Response(status_code, text=text)
            return httpx.Response(201, json=self.created[model])

        if request.method == "GET" and path.startswith("/v1/predictions/"):
            job_id = path.rsplit("/", 1)[-1]
            if self.clock is not None:
                self.poll_times.append(self.clock.now)
            script = self.statuses[job_id]
            snapshot = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(snapshot, httpx.Response):
                return snapshot
            return httpx.Response(200, json={"id": job_id, **snapshot})

        url = str(request.url)
        if url in self.assets:
            status_code, body, content_type = self.assets[url]
            return httpx.Response(status_code, content=body, headers={"content-type": content_type})

        return httpx.Response(404, text="not found")

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def replicate(clock):
    return FakeReplicate(clock)
