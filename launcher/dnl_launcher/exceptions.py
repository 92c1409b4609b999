class LauncherError(Exception):
    """Base exception for dnl_launcher."""


class StartError(LauncherError):
    """Raised when a server start attempt is aborted."""


class DependencyMissing(StartError):
    """Raised when a required companion file is absent and cannot be staged."""


class SpawnFailure(StartError):
    """Raised when the OS rejects creation of the server process."""


class StopError(LauncherError):
    """Raised when a stop request cannot be completed."""


class TerminationFailure(StopError):
    """Raised when the server process does not exit after being killed."""


class ProvisionError(LauncherError):
    """Base for config provisioning failures (absorbed by the provisioner)."""


class ProvisionNetworkFailure(ProvisionError):
    """Raised when the config template download does not complete."""


class SubstitutionSkipped(ProvisionError):
    """Raised when there is no config file to substitute placeholders into."""
