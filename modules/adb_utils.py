"""
adb_utils.py — Low-level Android Debug Bridge helpers.

Provides wrappers around `subprocess.run` for executing ADB commands,
checking device connectivity, fetching device info, and force-stopping apps.
"""

import logging
import os
import platform
import shutil
import subprocess
from typing import Dict, List

from config import ADB_TIMEOUT_SECONDS
from modules.errors import AdbError, PermissionDenied, TerminationFailure, is_permission_denial

logger = logging.getLogger(__name__)

# On Windows, suppress the CMD flash window that appears with each subprocess call.
_CREATION_FLAGS = (
    subprocess.CREATE_NO_WINDOW
    if platform.system() == "Windows"
    else 0
)


def _find_adb() -> str:
    """Locate the adb executable.

    Checks (in order):
      1. Already on PATH (shutil.which)
      2. Common Windows install locations
    Returns the full path to adb, or just "adb" as fallback.
    """
    found = shutil.which("adb")
    if found:
        return found

    if platform.system() == "Windows":
        local = os.environ.get("LOCALAPPDATA", "")
        candidates = [
            os.path.join(local, "Android", "platform-tools", "adb.exe"),
            os.path.join(local, "Android", "Sdk", "platform-tools", "adb.exe"),
            os.path.join(os.environ.get("PROGRAMFILES", ""), "Android", "platform-tools", "adb.exe"),
        ]
        for path in candidates:
            if path and os.path.isfile(path):
                return path

    return "adb"


# Resolve once at import time
_ADB = _find_adb()


# ── Core runners ─────────────────────────────────────────────────────

def _run(args: List[str]) -> subprocess.CompletedProcess:
    """Run ``adb <args>`` and return the completed process.

    Raises AdbError if adb is missing or the call times out.
    """
    logger.debug("adb %s", " ".join(args))
    try:
        return subprocess.run(
            [_ADB] + args,
            capture_output=True,
            text=True,
            timeout=ADB_TIMEOUT_SECONDS,
            creationflags=_CREATION_FLAGS,
        )
    except FileNotFoundError as exc:
        raise AdbError(
            "ADB not found. Install Android Platform Tools and add to PATH."
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise AdbError(f"ADB command timed out: adb {' '.join(args)}") from exc


def run_adb_host(args: List[str]) -> str:
    """Run an ADB command that does NOT go through the device shell.

    Examples:
        run_adb_host(["devices"])
        run_adb_host(["start-server"])
    """
    result = _run(args)
    if result.returncode != 0 and result.stderr.strip():
        raise AdbError(f"ADB error: {result.stderr.strip()}")
    return result.stdout


def run_adb(command: str) -> str:
    """Run an ADB *shell* command and return its stdout.

    The *command* string is split on whitespace and passed as:
        adb shell <token1> <token2> …
    """
    result = _run(["shell"] + command.split())
    if result.returncode != 0 and result.stderr.strip():
        raise AdbError(f"ADB shell error: {result.stderr.strip()}")
    return result.stdout


# ── Device connectivity ──────────────────────────────────────────────

def is_device_connected() -> bool:
    """Return True if at least one device is attached and authorised."""
    try:
        output = run_adb_host(["devices"])
    except AdbError:
        return False
    # Each connected device line looks like:  <serial>\tdevice
    lines = output.strip().splitlines()[1:]  # skip header
    return any("\tdevice" in line for line in lines)


def get_device_info() -> Dict[str, str]:
    """Return model, manufacturer and Android version from the device."""
    props = {
        "model": "ro.product.model",
        "manufacturer": "ro.product.manufacturer",
        "android_version": "ro.build.version.release",
    }
    info: Dict[str, str] = {}
    for key, prop in props.items():
        try:
            info[key] = run_adb(f"getprop {prop}").strip() or "Unknown"
        except AdbError:
            info[key] = "Unknown"
    return info


# ── App control ──────────────────────────────────────────────────────

def force_stop_app(package: str) -> None:
    """Force-stop a single package.

    Raises PermissionDenied when the device refuses, TerminationFailure on
    any other error.
    """
    try:
        result = _run(["shell", "am", "force-stop", package])
    except AdbError as exc:
        raise TerminationFailure(package, str(exc)) from exc

    output = f"{result.stdout}\n{result.stderr}".strip()
    if is_permission_denial(output):
        raise PermissionDenied(package, output.splitlines()[0])
    if result.returncode != 0:
        raise TerminationFailure(
            package, result.stderr.strip() or f"am force-stop exited with {result.returncode}"
        )


class AdbTerminator:
    """Terminator that closes packages on the attached device via ADB."""

    def terminate(self, identifier: str) -> None:
        # "com.foo:remote" is a process of package "com.foo"
        force_stop_app(identifier.split(":", 1)[0])
