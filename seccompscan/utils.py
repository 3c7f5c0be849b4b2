import logging
from typing import Any, Dict

import orjson

from ._types import Profile

logger = logging.getLogger("seccompscan")


class ProfileSerializer:
    @staticmethod
    def dumps(profile: Profile, *, indent: bool = True) -> bytes:
        """
        Serialize a profile to seccomp JSON bytes.
        Set indent=False for a compact single line.
        """
        options = 0
        if indent:
            options |= orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE
        return orjson.dumps(profile.to_dict(), option=options)

    @staticmethod
    def dump(profile: Profile, path: str, *, indent: bool = True) -> None:
        """
        Write a profile to a seccomp JSON file (UTF-8).
        Pretty-prints by default.
        """
        b = ProfileSerializer.dumps(profile, indent=indent)
        with open(path, "wb") as f:
            f.write(b)
        logger.info("Profile written to %s", path)

    @staticmethod
    def loads(data: bytes) -> Profile:
        return Profile.from_dict(orjson.loads(data))

    @staticmethod
    def load(path: str) -> Profile:
        with open(path, "rb") as f:
            return Profile.from_dict(orjson.loads(f.read()))


def save_report(report: Dict[str, Any], path: str) -> None:
    try:
        with open(path, "wb") as f:
            f.write(orjson.dumps(report, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE))
        logger.info("Report saved to %s", path)
    except OSError as e:
        logger.error("Failed to save report: %r", e, exc_info=logger.isEnabledFor(logging.DEBUG))
