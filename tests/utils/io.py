import os
import stat
from pathlib import Path


def write_fake_go(directory: Path, listing: str, exit_code: int = 0) -> Path:
    """
    Write an executable standing in for the go command: it prints ``listing``
    for ``go tool objdump <binary>`` and exits with ``exit_code``.
    """
    listing_file = directory / "objdump.txt"
    listing_file.write_text(listing, encoding="utf-8")

    script = directory / "fakego"
    script.write_text(
        "#!/bin/sh\n"
        f"cat '{listing_file}'\n"
        + (f"echo 'objdump: boom' >&2\nexit {exit_code}\n" if exit_code else ""),
        encoding="utf-8",
    )
    os.chmod(script, os.stat(script).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script
