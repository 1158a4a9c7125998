"""Check the latest published release against the running version."""

from __future__ import annotations

import json
import re
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable

try:
    import ssl  # noqa: F401

    _HAS_SSL = True
except ImportError:
    _HAS_SSL = False

_VERSION_PREFIX = re.compile(r"\d+(?:\.\d+)*")


@dataclass(frozen=True)
class VersionCheck:
    """Outcome of a version check: whether a newer release exists and a message."""

    is_new: bool
    message: str


def parse_version(text: str) -> tuple[int, ...]:
    """Leading dotted numeric segments of ``text``, without trailing zero segments."""
    match = _VERSION_PREFIX.match(text)
    if match is None:
        return ()
    segments = [int(part) for part in match.group().split(".")]
    while segments and segments[-1] == 0:
        segments.pop()
    return tuple(segments)


def _version_text(version: tuple[int, ...]) -> str:
    return ".".join(str(part) for part in version)


def evaluate_release(payload: Any, app_version: str, only_positive: bool) -> VersionCheck | None:
    """Compare the ``tag_name`` of a release description with ``app_version``.

    With ``only_positive`` nothing is returned unless a newer release exists.
    """
    tag = payload.get("tag_name", "") if isinstance(payload, dict) else ""
    if not isinstance(tag, str):
        tag = ""
    tag = tag.replace("v", "").replace("V", "")

    latest = parse_version(tag)
    current = parse_version(app_version)
    latest_text = _version_text(latest)
    current_text = _version_text(current)

    if latest > current:
        return VersionCheck(True, f"New version available: {latest_text}\n Current version: {current_text}")
    if only_positive:
        return None
    if latest == current:
        return VersionCheck(False, f"You have the latest version ({current_text}).")
    return VersionCheck(
        False, f"Your version ({current_text}) is higher than latest official release ({latest_text})."
    )


def _fetch_url(url: str, timeout: float) -> bytes:
    request = urllib.request.Request(url, headers={"Accept": "application/json"})
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return response.read()


class UpdateChecker:
    """Fetches a release description from ``api_url`` and compares versions."""

    def __init__(
        self,
        app_version: str,
        api_url: str,
        timeout: float = 10.0,
        fetch: Callable[[str, float], bytes] | None = None,
    ) -> None:
        self.app_version = app_version
        self.api_url = api_url
        self.timeout = timeout
        self._fetch = fetch or _fetch_url
        self.can_check_for_updates = _HAS_SSL

    def check_for_updates(self, only_positive: bool) -> VersionCheck | None:
        """Check for a newer release; failures give a message unless ``only_positive``."""
        if not self.can_check_for_updates:
            return None
        try:
            response = self._fetch(self.api_url, self.timeout)
        except OSError:
            return None if only_positive else VersionCheck(False, "Version check failed.")
        try:
            payload = json.loads(response)
        except (ValueError, TypeError):
            payload = {}
        return evaluate_release(payload, self.app_version, only_positive)