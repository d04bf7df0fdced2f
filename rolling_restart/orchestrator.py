""" Rolling restart of an application's instances, one batch at a time.
"""
import enum
import time

import rolling_restart.io
from rolling_restart.exceptions import (
    PreconditionError,
    TimeoutExhausted,
)
from rolling_restart.state import (
    parse_instance_lines,
    partition_instances,
    StatusProbe,
)
from rolling_restart.util import poll_until


class RestartPhase(str, enum.Enum):
    VALIDATING = "validating"
    BATCHING = "batching"
    RESTARTING = "restarting"
    AWAITING_INITIATE = "awaiting_initiate"
    AWAITING_FINISH = "awaiting_finish"
    DONE = "done"
    ABORTED = "aborted"


class RestartOrchestrator:
    """Restarts every instance of an application in batches, waiting for each batch to come back before the next.

    For each batch, restart commands are issued for all of its instances, then the platform is polled until it
    reports that the restart has begun (the running count drops below the desired count) and then until it has
    finished (counts agree again and every instance of the batch is listed as running). Each wait has its own attempt
    budget, and running out of attempts aborts the whole run.
    """

    def __init__(self, session, config, sleep=None):
        self.session = session
        self.config = config
        self.probe = StatusProbe(session)
        self.phase = None
        self._sleep = sleep or time.sleep

    def run(self, app_name, dry_run=False):
        try:
            return self._run(app_name, dry_run)
        except Exception:
            self.phase = RestartPhase.ABORTED
            raise

    def _run(self, app_name, dry_run):
        rolling_restart.io.info("Rolling restart started...")
        self.phase = RestartPhase.VALIDATING
        status = self.check_preconditions(app_name)

        self.phase = RestartPhase.BATCHING
        batches = partition_instances(status.desired_instances, self.config.batch_size)
        if dry_run:
            for batch in batches:
                rolling_restart.io.info(f"Would restart instances {list(batch)}")
            self.phase = RestartPhase.DONE
            return batches

        for batch in batches:
            self.restart_batch(app_name, batch)
            self.wait_for_restart_initiate(app_name)
            self.wait_for_restart_finish(app_name, batch)

        self.phase = RestartPhase.DONE
        rolling_restart.io.info(
            f"Rolling restart of {app_name} finished: {status.desired_instances} instance(s) restarted in "
            f"{len(batches)} batch(es)")
        return batches

    def check_preconditions(self, app_name):
        status = self.probe.fetch(app_name)
        rolling_restart.io.info(status.describe())
        if not status.stable:
            raise PreconditionError("Application is not stable right now. Please try again later")
        if self.config.batch_size > status.desired_instances:
            raise PreconditionError(
                f"Parameter rollingInstanceCount({self.config.batch_size}) cannot be greater than total application "
                f"instances({status.desired_instances})")
        return status

    def restart_batch(self, app_name, batch):
        self.phase = RestartPhase.RESTARTING
        rolling_restart.io.info(f"\nRestarting instances {list(batch)}")
        rolling_restart.io.info("----------------------", bright=False)
        for instance_id in batch:
            rolling_restart.io.debug(f"Restarting {app_name} instance {instance_id}")
            self.session.restart_instance(app_name, instance_id)

    def wait_for_restart_initiate(self, app_name):
        self.phase = RestartPhase.AWAITING_INITIATE

        def restart_initiated():
            status = self.probe.fetch(app_name)
            return status.started and status.running_instances != status.desired_instances

        if not poll_until(restart_initiated, self.config.initiate_attempts, self.config.poll_interval,
                          sleep=self._sleep):
            raise TimeoutExhausted("Instance restart could not be initiated in given time. Cannot continue. Exiting.")

    def wait_for_restart_finish(self, app_name, batch):
        self.phase = RestartPhase.AWAITING_FINISH

        def restart_finished():
            listing = self.session.instance_listing(app_name)
            progress, running_count = parse_instance_lines(listing, batch)
            rolling_restart.io.echo(progress)
            status = self.probe.fetch(app_name)
            # a matching global count alone could hide a batch instance still down while another one failed
            return status.stable and running_count == len(batch)

        if not poll_until(restart_finished, self.config.finish_attempts, self.config.poll_interval,
                          sleep=self._sleep):
            raise TimeoutExhausted("Instance restart could not be finished in given time. Cannot continue. Exiting.")
