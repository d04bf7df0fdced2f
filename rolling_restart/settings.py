import re
from typing import Any, Dict, Iterable

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    ValidationError,
)
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)

from rolling_restart.exceptions import UsageError

# the platform reports instance state often enough that one probe every 5 seconds is sufficient
POLL_INTERVAL = 5
ATTEMPTS_PER_MINUTE = 12
RESTART_INITIATE_TIMEOUT = 2

INTEGER_RE = re.compile(r"\+?[0-9]+")


def positive_integer_string(cls, value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    if isinstance(value, str):
        if not INTEGER_RE.fullmatch(value):
            raise ValueError("must be a decimal integer")
        value = int(value)
    return value


class RestartConfig(BaseModel):
    """
    Options controlling one rolling restart run. Parsed once and never modified during the run.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    batch_size: int = Field(1, ge=1, alias="rollingInstanceCount", description="""
Number of instances to restart at a time. Restarting more than one instance at a time makes the rolling restart of an
application with many instances finish sooner.
""")
    finish_timeout_minutes: int = Field(3, ge=1, alias="restartTimeoutMinutes", description="""
Time in minutes to wait for the instances of a batch to finish restarting and report as running.
""")
    initiate_timeout_minutes: int = Field(RESTART_INITIATE_TIMEOUT, ge=1, description="""
Time in minutes to wait for the platform to begin restarting the instances of a batch.
""")
    poll_interval: float = Field(POLL_INTERVAL, ge=0, description="Seconds between two status probes.")

    _validate_batch_size = field_validator("batch_size", mode="before")(positive_integer_string)
    _validate_finish_timeout = field_validator("finish_timeout_minutes", mode="before")(positive_integer_string)

    @property
    def initiate_attempts(self) -> int:
        return ATTEMPTS_PER_MINUTE * self.initiate_timeout_minutes

    @property
    def finish_attempts(self) -> int:
        return ATTEMPTS_PER_MINUTE * self.finish_timeout_minutes


# keys accepted on the command line, in the form key=value
RECOGNIZED_KEYS = ("rollingInstanceCount", "restartTimeoutMinutes")


def parse_restart_args(args: Iterable[str]) -> RestartConfig:
    """Build a :class:`RestartConfig` from trailing ``key=value`` arguments.

    Unrecognized keys are ignored. A recognized key whose value is not a positive integer raises
    :class:`~rolling_restart.exceptions.UsageError`.
    """
    values: Dict[str, str] = {}
    for arg in args:
        key, _, value = arg.partition("=")
        if key not in RECOGNIZED_KEYS:
            continue
        # every occurrence is checked, not only the one that ends up being used
        try:
            RestartConfig.model_validate({key: value})
        except ValidationError:
            raise UsageError(f"Parameter {key} should be a valid positive/non-zero integer")
        values[key] = value
    return RestartConfig.model_validate(values)


class PlatformSettings(BaseSettings):
    """
    Settings of the Cloud Foundry CLI session used to talk to the platform.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_prefix="rolling_restart_",
        extra="ignore",
    )

    cf_path: str = Field("cf", description="Name or path of the cf CLI executable.")
    process_type: str = Field("web", description="Process type whose instances are counted and restarted.")
    command_timeout: int = Field(60, ge=1, description="Seconds to wait for a single cf invocation to return.")
