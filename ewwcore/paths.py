"""Locations of the configuration, the IPC socket and the log file."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("ewwcore")

_SOCKET_PATH_WARN_LENGTH = 100


def _daemon_id(config_dir: Path) -> str:
    # A short hash of the config dir keeps the socket path under the unix socket length limit.
    digest = hashlib.blake2b(str(config_dir).encode(), digest_size=8).digest()
    return format(int.from_bytes(digest, "big"), "x")


def _env_dir(name: str, fallback: str) -> Path:
    value = os.environ.get(name)
    if value is not None:
        return Path(value)
    return Path.home() / fallback


@dataclass(frozen=True)
class EwwPaths:
    log_file: Path
    ipc_socket_file: Path
    config_dir: Path

    @classmethod
    def from_config_dir(cls, config_dir: str | os.PathLike[str]) -> EwwPaths:
        """Derive all paths from a configuration directory, which must exist."""
        config_dir = Path(config_dir)
        if config_dir.is_file():
            raise ValueError("Please provide the path to the config directory, not a file within it")
        if not config_dir.exists():
            raise FileNotFoundError(f"Configuration directory {config_dir} does not exist")
        config_dir = config_dir.resolve(strict=True)

        daemon_id = _daemon_id(config_dir)
        runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
        socket_dir = Path(runtime_dir) if runtime_dir is not None else Path("/tmp")
        ipc_socket_file = socket_dir / f"eww-server_{daemon_id}"
        if len(str(ipc_socket_file)) > _SOCKET_PATH_WARN_LENGTH:
            logger.warning("The IPC socket file's absolute path exceeds 100 bytes, the socket may fail to create.")

        log_file = _env_dir("XDG_CACHE_HOME", ".cache") / f"eww_{daemon_id}.log"
        return cls(log_file=log_file, ipc_socket_file=ipc_socket_file, config_dir=config_dir)

    @classmethod
    def default(cls) -> EwwPaths:
        """Paths for the configuration under the user's config home."""
        return cls.from_config_dir(_env_dir("XDG_CONFIG_HOME", ".config") / "eww")

    def yuck_path(self) -> Path:
        return self.config_dir / "eww.yuck"

    def scss_path(self) -> Path:
        return self.config_dir / "eww.scss"

    def __str__(self) -> str:
        return f"config-dir: {self.config_dir}, ipc-socket: {self.ipc_socket_file}, log-file: {self.log_file}"