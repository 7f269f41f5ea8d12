"""Subproject resolution from the execution context.

The subproject is the first label of the request host (``admin`` for
``admin.example.com``), ``cli`` for command-line execution, or a default
when the host gives no usable answer.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_SUBPROJECT = "front"
CLI_SUBPROJECT = "cli"

_LABEL_PATTERN = re.compile(r"[a-z0-9_-]+")


class ExecutionContext(Protocol):
    """What the resolver needs to know about the running process."""

    def is_command_line(self) -> bool: ...

    def request_host(self) -> Optional[str]: ...


class CommandLineContext:
    """Context of a command-line invocation."""

    def is_command_line(self) -> bool:
        return True

    def request_host(self) -> Optional[str]:
        return None


class RequestContext:
    """Context of a request served over HTTP."""

    def __init__(self, host: Optional[str] = None):
        self.host = host

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "RequestContext":
        """Build a context from a WSGI environ (``HTTP_HOST``, then ``SERVER_NAME``)."""
        return cls(environ.get("HTTP_HOST") or environ.get("SERVER_NAME"))

    def is_command_line(self) -> bool:
        return False

    def request_host(self) -> Optional[str]:
        return self.host


class SubprojectResolver:
    """Resolves and caches the active subproject."""

    def __init__(
        self,
        context: ExecutionContext,
        default: str = DEFAULT_CONFIG_SUBPROJECT,
        cli_name: str = CLI_SUBPROJECT,
    ):
        self.context = context
        self.default = default
        self.cli_name = cli_name
        self._subproject: Optional[str] = None

    def resolve(self) -> str:
        """Return the subproject, resolving it on first call only."""
        if self._subproject is None:
            self._subproject = self._resolve()
            logger.debug(f"Resolved subproject '{self._subproject}'")
        return self._subproject

    def _resolve(self) -> str:
        if self.context.is_command_line():
            return self.cli_name

        host = self.context.request_host()
        if not isinstance(host, str):
            return self.default

        label = host.strip().split(".")[0]
        # "localhost:8000" has no dot, the port stays on the only label
        label = label.split(":")[0].strip().lower()
        if not label:
            logger.debug(f"Host '{host}' has no subdomain label, using default")
            return self.default
        # The label becomes a directory name under the config root
        if not _LABEL_PATTERN.fullmatch(label):
            logger.warning(
                f"Host '{host}' has an invalid subdomain label, using default"
            )
            return self.default
        return label
