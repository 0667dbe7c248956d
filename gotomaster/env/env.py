from __future__ import annotations
from pydantic import BaseModel, StrictInt, StrictStr
from typing import Callable, Dict, Literal, Union

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    GO_TO_MASTER_NODES: StrictStr = ""
    GO_TO_MASTER_PORTS: StrictStr = ""
    GO_TO_MASTER_AUTH: StrictStr | None = None
    GO_TO_MASTER_LISTEN_HOST: StrictStr | None = None

    # Election settings
    GO_TO_MASTER_PROBE_TIMEOUT: StrictStr = "1s"
    GO_TO_MASTER_ELECTION_ATTEMPTS: StrictInt = 3
    GO_TO_MASTER_POLL_INTERVAL: StrictStr = "1s"
    GO_TO_MASTER_PROBE_BUFFER_SIZE: StrictInt = 4096

    # Forwarding settings
    GO_TO_MASTER_DIAL_TIMEOUT: StrictStr = "3s"
    GO_TO_MASTER_KEEPALIVE_PERIOD: StrictStr = "5s"
    GO_TO_MASTER_PIPE_BUFFER_SIZE: StrictInt = 65536
    GO_TO_MASTER_STATUS_INTERVAL: StrictStr = "5s"

    # Logging settings
    GO_TO_MASTER_LOG_LEVEL: Literal[
        "trace", "debug", "info", "warn", "error", "critical", "fatal"
    ] = "info"
    GO_TO_MASTER_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    GO_TO_MASTER_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "GO_TO_MASTER_NODES": str,
            "GO_TO_MASTER_PORTS": str,
            "GO_TO_MASTER_AUTH": str,
            "GO_TO_MASTER_LISTEN_HOST": str,
            "GO_TO_MASTER_PROBE_TIMEOUT": str,
            "GO_TO_MASTER_ELECTION_ATTEMPTS": int,
            "GO_TO_MASTER_POLL_INTERVAL": str,
            "GO_TO_MASTER_PROBE_BUFFER_SIZE": int,
            "GO_TO_MASTER_DIAL_TIMEOUT": str,
            "GO_TO_MASTER_KEEPALIVE_PERIOD": str,
            "GO_TO_MASTER_PIPE_BUFFER_SIZE": int,
            "GO_TO_MASTER_STATUS_INTERVAL": str,
            "GO_TO_MASTER_LOG_LEVEL": str,
            "GO_TO_MASTER_LOG_OUTPUT": str,
            "GO_TO_MASTER_LOGS_DIRECTORY": str,
        }

    def get_logging_config(self) -> dict:
        """Get LoggingConfig.update() keyword arguments from environment settings."""
        return {
            "log_level": self.GO_TO_MASTER_LOG_LEVEL,
            "log_output": self.GO_TO_MASTER_LOG_OUTPUT,
            "log_directory": self.GO_TO_MASTER_LOGS_DIRECTORY,
        }
