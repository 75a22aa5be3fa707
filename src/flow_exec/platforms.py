"""Host OS/architecture → platform tag for packaging decisions."""

import os
import platform

PLATFORM_SOLARIS_X86 = "solaris-x86"
PLATFORM_SOLARIS_SPARC = "solaris-sparc"
PLATFORM_SOLARIS64 = "solaris64"
PLATFORM_LINUX = "linux"
PLATFORM_LINUX64 = "linux64"
PLATFORM_WIN = "win"
PLATFORM_WIN32 = "win32"
PLATFORM_WIN64 = "win64"
PLATFORM_MAC = "mac"
PLATFORM_UNSUPPORTED = "unsupported"


def _host_os_name() -> str:
    """Host OS name as platform.system() gives it, except Darwin → "Mac OS X"."""
    system = platform.system()
    if system == "Darwin":
        return "Mac OS X"
    return system


def _host_arch() -> str:
    machine = platform.machine().lower()
    # Solaris reports sun4u / sun4v for SPARC hardware
    if machine.startswith("sun4"):
        return "sparc"
    return machine


def is_64bit(os_name: str, arch: str | None = None, environ=None) -> bool:
    """Windows: 64-bit iff ProgramFiles(x86) is set. Elsewhere: "64" in the arch."""
    if "windows" in os_name.lower():
        env = os.environ if environ is None else environ
        return env.get("ProgramFiles(x86)") is not None
    if arch is None:
        arch = _host_arch()
    return "64" in arch


def determine_platform(
    os_name: str | None = None, arch: str | None = None, environ=None
) -> str:
    """Return the platform tag, or "unsupported" for an unknown OS.

    Values left as None are read from the running host.
    """
    name = (os_name if os_name is not None else _host_os_name()).lower()
    arch = (arch if arch is not None else _host_arch()).lower()
    wide = is_64bit(name, arch, environ)

    if name.startswith("windows"):
        return PLATFORM_WIN64 if wide else PLATFORM_WIN32
    if name.startswith("linux"):
        return PLATFORM_LINUX64 if wide else PLATFORM_LINUX
    if name.startswith("solaris") or name.startswith("sunos"):
        if arch.startswith("sparc"):
            return PLATFORM_SOLARIS_SPARC
        return PLATFORM_SOLARIS64 if wide else PLATFORM_SOLARIS_X86
    if name.startswith("mac os x"):
        return PLATFORM_MAC
    return PLATFORM_UNSUPPORTED


def is_platform_unix(tag: str) -> bool:
    return not tag.startswith(PLATFORM_WIN)
