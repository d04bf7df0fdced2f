""" Cloud Foundry platform session backed by the ``cf`` command line client
"""
import json
import logging
import re
import subprocess

from rolling_restart.exceptions import PlatformQueryError
from rolling_restart.platform import ApplicationSummary, PlatformSession
from rolling_restart.settings import PlatformSettings
from rolling_restart.util import which

log = logging.getLogger(__name__)

RUNNING_STATE = "RUNNING"
DEFAULT_PROCESS_TYPE = "web"
PROCESS_HEADER_RE = re.compile(r"type:\s+(\S+)")


class CfCliSession(PlatformSession):
    """Talks to Cloud Foundry through an already logged in and targeted ``cf`` CLI.

    Authentication, API endpoint and targeted space are whatever ``cf`` currently uses.
    """

    def __init__(self, settings=None):
        self.settings = settings or PlatformSettings()
        self.cf_exe = which(self.settings.cf_path) or self.settings.cf_path
        self.__guids = {}

    def run_command(self, *args):
        args = [str(a) for a in args]
        log.debug("Calling cf with args: %s", args)
        try:
            proc = subprocess.run(
                [self.cf_exe] + args,
                capture_output=True,
                check=True,
                text=True,
                timeout=self.settings.command_timeout,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise PlatformQueryError(f"`cf {' '.join(args)}` failed with exit code {exc.returncode}: {detail}") from exc
        except subprocess.TimeoutExpired as exc:
            raise PlatformQueryError(
                f"`cf {' '.join(args)}` did not return within {self.settings.command_timeout} seconds") from exc
        except OSError as exc:
            raise PlatformQueryError(f"Unable to run `{self.cf_exe}`: {exc}") from exc
        return proc.stdout.splitlines()

    def __curl(self, path):
        output = "\n".join(self.run_command("curl", path))
        try:
            payload = json.loads(output)
        except ValueError as exc:
            raise PlatformQueryError(f"Unexpected response from {path}: {output[:200]}") from exc
        if not isinstance(payload, dict):
            raise PlatformQueryError(f"Unexpected response from {path}: {output[:200]}")
        errors = payload.get("errors")
        if errors:
            details = "; ".join(str(e.get("detail", e)) if isinstance(e, dict) else str(e) for e in errors)
            raise PlatformQueryError(f"Cloud Controller returned an error for {path}: {details}")
        return payload

    def _app_guid(self, name):
        if name not in self.__guids:
            lines = [line.strip() for line in self.run_command("app", name, "--guid") if line.strip()]
            if not lines:
                raise PlatformQueryError(f"Unable to determine GUID of application {name}")
            self.__guids[name] = lines[-1]
        return self.__guids[name]

    def get_application(self, name):
        guid = self._app_guid(name)
        app = self.__curl(f"/v3/apps/{guid}")
        # desired and running counts must come from the same response
        stats = self.__curl(f"/v3/apps/{guid}/processes/{self.settings.process_type}/stats")
        try:
            state = app["state"].lower()
        except (KeyError, AttributeError) as exc:
            raise PlatformQueryError(f"Application {name} has no state in the platform response") from exc
        resources = stats.get("resources") or []
        return ApplicationSummary(
            name=name,
            state=state,
            instance_count=len(resources),
            running_instances=sum(1 for r in resources if r.get("state") == RUNNING_STATE),
        )

    def restart_instance(self, name, index):
        args = ["restart-app-instance", name, str(index)]
        # older cf releases know only the web process and have no --process option
        if self.settings.process_type != DEFAULT_PROCESS_TYPE:
            args += ["--process", self.settings.process_type]
        self.run_command(*args)

    def instance_listing(self, name):
        return process_section(self.run_command("app", name), self.settings.process_type)


def process_section(lines, process_type):
    """Keep the rows of a ``cf app`` listing that belong to the ``type: <process_type>`` section.

    Listings without any ``type:`` header only describe the web process and are returned unchanged.
    """
    current = None
    seen_header = False
    section = []
    for line in lines:
        match = PROCESS_HEADER_RE.match(line)
        if match:
            seen_header = True
            current = match.group(1)
            continue
        if current == process_type:
            section.append(line)
    if not seen_header:
        return list(lines)
    return section
