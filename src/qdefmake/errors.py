from __future__ import annotations


class QdefmakeError(Exception):
    """Fatal error for a run; ``main`` maps it to a non-zero exit status."""

    exit_code = 1
    action = "Error with"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{self.action} {path}: {reason}")
        self.path = path
        self.reason = reason


class ManifestOpenError(QdefmakeError):
    action = "Unable to open manifest"


class SourceOpenError(QdefmakeError):
    action = "Error opening source file"


class OutputOpenError(QdefmakeError):
    action = "Unable to write output"


class ConfigError(QdefmakeError):
    action = "Invalid config"
