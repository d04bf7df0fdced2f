import json
import subprocess

import pytest

from rolling_restart.exceptions import PlatformQueryError
from rolling_restart.orchestrator import RestartOrchestrator
from rolling_restart.platform import ApplicationSummary
from rolling_restart.platform.cf import CfCliSession, process_section
from rolling_restart.settings import PlatformSettings, RestartConfig

GUID = "6d4b2d8a-37a3-4a4c-b7e8-1c0f3b8e2a10"


def stats(*states):
    return {"resources": [{"type": "web", "index": i, "state": s} for i, s in enumerate(states)]}


class FakeCf:
    """Stands in for subprocess.run, answering cf invocations from a table keyed by argument tuple."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, cmd, **kwargs):
        args = tuple(cmd[1:])
        self.calls.append(args)
        response = self.responses[args]
        if isinstance(response, Exception):
            raise response
        if not isinstance(response, str):
            response = json.dumps(response)
        return subprocess.CompletedProcess(cmd, 0, stdout=response, stderr="")


@pytest.fixture
def session():
    return CfCliSession(settings=PlatformSettings(cf_path="cf"))


def install(monkeypatch, responses):
    fake = FakeCf(responses)
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def app_responses(state="STARTED", process_stats=None):
    return {
        ("app", "myapp", "--guid"): f"{GUID}\n",
        ("curl", f"/v3/apps/{GUID}"): {"guid": GUID, "name": "myapp", "state": state},
        ("curl", f"/v3/apps/{GUID}/processes/web/stats"): process_stats or stats("RUNNING", "RUNNING", "STARTING"),
    }


def test_get_application(monkeypatch, session):
    install(monkeypatch, app_responses())
    assert session.get_application("myapp") == ApplicationSummary(
        name="myapp", state="started", instance_count=3, running_instances=2)


def test_get_application_stopped(monkeypatch, session):
    install(monkeypatch, app_responses(state="STOPPED", process_stats=stats("DOWN")))
    summary = session.get_application("myapp")
    assert summary.state == "stopped"
    assert summary.running_instances == 0


def test_guid_is_cached(monkeypatch, session):
    fake = install(monkeypatch, app_responses())
    session.get_application("myapp")
    session.get_application("myapp")
    assert fake.calls.count(("app", "myapp", "--guid")) == 1
    assert len(fake.calls) == 5


def test_process_type_setting(monkeypatch):
    responses = app_responses()
    responses[("curl", f"/v3/apps/{GUID}/processes/worker/stats")] = stats("RUNNING")
    fake = install(monkeypatch, responses)
    session = CfCliSession(settings=PlatformSettings(process_type="worker"))
    assert session.get_application("myapp").instance_count == 1
    assert ("curl", f"/v3/apps/{GUID}/processes/worker/stats") in fake.calls


def test_api_error_payload(monkeypatch, session):
    responses = app_responses()
    responses[("curl", f"/v3/apps/{GUID}")] = {"errors": [{"code": 10010, "title": "CF-ResourceNotFound",
                                                           "detail": "App not found"}]}
    install(monkeypatch, responses)
    with pytest.raises(PlatformQueryError, match="App not found"):
        session.get_application("myapp")


def test_non_json_response(monkeypatch, session):
    responses = app_responses()
    responses[("curl", f"/v3/apps/{GUID}")] = "<html>502 Bad Gateway</html>"
    install(monkeypatch, responses)
    with pytest.raises(PlatformQueryError, match="Unexpected response"):
        session.get_application("myapp")


def test_command_failure(monkeypatch, session):
    error = subprocess.CalledProcessError(1, ["cf", "app", "gone", "--guid"], output="FAILED\n",
                                          stderr="App 'gone' not found.\n")
    install(monkeypatch, {("app", "gone", "--guid"): error})
    with pytest.raises(PlatformQueryError, match="App 'gone' not found.") as excinfo:
        session.get_application("gone")
    assert excinfo.value.__cause__ is error


def test_command_timeout(monkeypatch, session):
    install(monkeypatch, {("app", "myapp"): subprocess.TimeoutExpired(["cf", "app", "myapp"], 60)})
    with pytest.raises(PlatformQueryError, match="did not return within 60 seconds"):
        session.run_command("app", "myapp")


def test_missing_cf(monkeypatch, session):
    install(monkeypatch, {("app", "myapp"): FileNotFoundError(2, "No such file or directory")})
    with pytest.raises(PlatformQueryError, match="Unable to run"):
        session.run_command("app", "myapp")


def test_run_command_lines(monkeypatch, session):
    install(monkeypatch, {("restart-app-instance", "myapp", "3"): "Restarting instance 3 of process web...\nOK\n"})
    assert session.run_command("restart-app-instance", "myapp", 3) == ["Restarting instance 3 of process web...", "OK"]


APP_LISTING = """Showing health and status for app myapp in org o / space s as admin...

name:              myapp
requested state:   started

type:           web
instances:      2/2
     state     since                  cpu    memory      disk      details
#0   running   2024-01-01T00:00:00Z   0.3%   100M of 1G   80M of 1G
#1   running   2024-01-01T00:00:00Z   0.2%   100M of 1G   80M of 1G

type:           worker
instances:      1/2
     state      since                  cpu    memory      disk      details
#0   starting   2024-01-01T00:05:00Z   0.0%   0 of 1G     0 of 1G
#1   running    2024-01-01T00:00:00Z   0.1%   90M of 1G   70M of 1G
"""


def test_restart_instance_web(monkeypatch, session):
    fake = install(monkeypatch, {("restart-app-instance", "myapp", "1"): "OK\n"})
    session.restart_instance("myapp", 1)
    assert fake.calls == [("restart-app-instance", "myapp", "1")]


def test_restart_instance_process_type(monkeypatch):
    fake = install(monkeypatch, {("restart-app-instance", "myapp", "0", "--process", "worker"): "OK\n"})
    session = CfCliSession(settings=PlatformSettings(process_type="worker"))
    session.restart_instance("myapp", 0)
    assert fake.calls == [("restart-app-instance", "myapp", "0", "--process", "worker")]


def test_instance_listing_process_type(monkeypatch):
    install(monkeypatch, {("app", "myapp"): APP_LISTING})
    session = CfCliSession(settings=PlatformSettings(process_type="worker"))
    rows = [line for line in session.instance_listing("myapp") if line.startswith("#")]
    assert rows == [
        "#0   starting   2024-01-01T00:05:00Z   0.0%   0 of 1G     0 of 1G",
        "#1   running    2024-01-01T00:00:00Z   0.1%   90M of 1G   70M of 1G",
    ]


def test_instance_listing_web(monkeypatch, session):
    install(monkeypatch, {("app", "myapp"): APP_LISTING})
    rows = [line for line in session.instance_listing("myapp") if line.startswith("#")]
    assert len(rows) == 2
    assert all("running" in row for row in rows)


def test_process_section_without_headers():
    lines = ["     state     since", "#0   running   2016-01-01"]
    assert process_section(lines, "web") == lines


def test_process_section_missing_type():
    assert process_section(APP_LISTING.splitlines(), "clock") == []


def test_batch_restart_uses_process_type(monkeypatch):
    responses = {("restart-app-instance", "myapp", str(i), "--process", "worker"): "OK\n" for i in range(2)}
    fake = install(monkeypatch, responses)
    session = CfCliSession(settings=PlatformSettings(process_type="worker"))
    RestartOrchestrator(session, RestartConfig(batch_size=2)).restart_batch("myapp", (0, 1))
    assert fake.calls == list(responses)
