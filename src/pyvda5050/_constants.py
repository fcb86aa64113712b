"""Internal constants shared across the library."""

PROTOCOL_VERSION = "2.0.0"
INTERFACE_NAME = "uagv"
MAJOR_VERSION = "v2"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1
UINT32_MAX = 2**32 - 1


def major_version_of(version: str) -> str:
    """Return the topic major version (``"v2"``) for a protocol version string.

    Raises :class:`ValueError` when *version* does not start with a number.
    """
    head = version.strip().lstrip("vV").split(".", 1)[0]
    if not head.isdigit():
        raise ValueError(f"protocol version must look like MAJOR.MINOR.PATCH, got {version!r}")
    return f"v{int(head)}"
