"""Per-invocation context handed over by the build orchestrator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from string import Template
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from s3deploy.core.exceptions import InterpolationError
from s3deploy.utils.logging import get_logger


class RuntimeContext(Protocol):
    """
    What a target may ask of the orchestrator during build/deploy/remove.

    ``outs`` are the target's declared outputs and ``dep_outs`` the outputs of
    its dependencies, both relative to ``cwd``.
    """

    cwd: str
    dry_run: bool
    env: Mapping[str, str]
    outs: Sequence[str]
    dep_outs: Sequence[str]

    def interpolate(self, template: str) -> str:
        ...

    def status(self, msg: str, *args: Any) -> None:
        ...

    def debug(self, msg: str, *args: Any) -> None:
        ...


@dataclass
class RunContext:
    """Standalone RuntimeContext used by the CLI and tests."""

    target_name: str
    cwd: str = "."
    dry_run: bool = False
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    variables: Dict[str, str] = field(default_factory=dict)
    outs: List[str] = field(default_factory=list)
    dep_outs: List[str] = field(default_factory=list)
    environment: Optional[str] = None

    def __post_init__(self) -> None:
        self._logger = get_logger("s3deploy.target", target=self.target_name)

    def interpolate(self, template: str) -> str:
        """
        Substitute ``${NAME}`` / ``$NAME`` from variables, then env.

        Raises:
            InterpolationError: If a referenced name is not defined.
        """
        scope = {**self.env, **self.variables}
        try:
            return Template(template).substitute(scope)
        except KeyError as exc:
            raise InterpolationError(
                f"unresolved variable {exc.args[0]!r} in {template!r}"
            ) from exc
        except ValueError as exc:
            raise InterpolationError(f"invalid template {template!r}: {exc}") from exc

    def status(self, msg: str, *args: Any) -> None:
        self._logger.info(msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)


__all__ = ["RuntimeContext", "RunContext"]
