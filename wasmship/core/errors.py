"""Exit codes for the release pipeline.

Each pipeline failure maps to one of these codes so that the invoking
automation can tell a bad tag from a broken toolchain or a flaky network
without parsing output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable; CI scripts depend on them.

    - 0: Success
    - 1: User error (malformed tag, bad arguments)
    - 2: Environment error (invalid config, git history unavailable)
    - 3: Build error (compile/optimize failed, duplicate contract)
    - 4: Network error (release hosting unreachable or rejected the request)
    - 5: I/O error (dist directory or changelog could not be written)
    - 6: Release already exists for the tag (informational)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    RELEASE_EXISTS = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
