class ModUpdaterError(RuntimeError):
    """Base class for every failure a sync run can report."""


class ScanError(ModUpdaterError):
    pass


class VersionParseError(ModUpdaterError):
    def __init__(self, value: str, subject: str) -> None:
        super().__init__(f"Invalid version {value!r} for {subject}")
        self.value = value
        self.subject = subject


class ModNotFoundError(ModUpdaterError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Mod {name!r} not found in registry")
        self.name = name


class NoReleasesError(ModUpdaterError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Mod {name!r} has no releases")
        self.name = name


class RegistryError(ModUpdaterError):
    pass


class IntegrityError(ModUpdaterError):
    def __init__(self, file_name: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Checksum mismatch for {file_name}: expected {expected}, got {actual}"
        )
        self.file_name = file_name
        self.expected = expected
        self.actual = actual


class InstallError(ModUpdaterError):
    pass


class ComposeError(ModUpdaterError):
    def __init__(self, command: list[str], returncode: int | None, output: str = "") -> None:
        if returncode is None:
            message = f"{' '.join(command)} could not be started"
        else:
            message = f"{' '.join(command)} exited with code {returncode}"
        if output:
            message = f"{message}: {output}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.output = output


class NotificationError(ModUpdaterError):
    pass


class SyncError(ModUpdaterError):
    def __init__(self, failures: dict[str, BaseException]) -> None:
        details = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"{len(failures)} mod(s) failed to update: {details}")
        self.failures = failures
