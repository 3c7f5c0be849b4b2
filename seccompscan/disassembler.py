from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import IO, Iterator, List, Optional

from ._types import DisassemblyError

logger = logging.getLogger("disassembler")


class Disassembly:
    """
    Line source over ``go tool objdump`` output.

    The listing is written to ``output_file`` (kept) or to a temporary file
    (removed on exit). With ``reuse=True`` an existing ``output_file`` is
    read as is and the tool is not run.
    """

    def __init__(
            self,
            binary_path: str | Path,
            output_file: Optional[str | Path] = None,
            go_command: str = "go",
            reuse: bool = False,
    ):
        self.binary_path = str(binary_path)
        self.output_file = str(output_file) if output_file else None
        self.go_command = go_command
        self.reuse = reuse
        self._path: Optional[str] = None
        self._is_temp = False
        self._fh: Optional[IO[str]] = None

    @property
    def command(self) -> List[str]:
        return [self.go_command, "tool", "objdump", self.binary_path]

    def __enter__(self) -> Disassembly:
        if self.reuse and self.output_file and os.path.exists(self.output_file):
            logger.info("Using existing disassembly file: %s", self.output_file)
            self._path = self.output_file
        else:
            if self.output_file:
                self._path = self.output_file
            else:
                with tempfile.NamedTemporaryFile(suffix=".asm", delete=False) as tmp_file:
                    self._path = tmp_file.name
                self._is_temp = True
            try:
                self._run()
            except Exception:
                self._cleanup()
                raise

        self._fh = open(self._path, "r", encoding="utf-8", errors="replace")
        return self

    def __exit__(self, exec_type, exec_value, traceback) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        self._cleanup()

    def __iter__(self) -> Iterator[str]:
        if self._fh is None:
            raise RuntimeError("Disassembly must be entered before iterating")
        for line in self._fh:
            yield line.rstrip("\r\n")

    def _run(self) -> None:
        logger.info("Disassembling %s...", self.binary_path)
        logger.debug("Running: %s", " ".join(self.command))
        try:
            with open(self._path, "wb") as out:
                proc = subprocess.run(self.command, stdout=out, stderr=subprocess.PIPE, check=False)
        except FileNotFoundError as e:
            raise DisassemblyError(f"Failed to run {self.go_command!r}: {e}") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace").strip()
            raise DisassemblyError(
                f"{' '.join(self.command)} exited with status {proc.returncode}: {stderr}"
            )

    def _cleanup(self) -> None:
        if self._is_temp and self._path:
            try:
                os.unlink(self._path)
            except FileNotFoundError:
                pass
            self._is_temp = False
