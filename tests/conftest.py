# tests/conftest.py
import logging

import pytest

from seccompscan._types import Arch
from tests.utils.elf import EM_386, EM_ARM, EM_X86_64, build_elf
from tests.utils.io import write_fake_go
from tests.utils.listings import ARM_LISTING, X86_64_LISTING, X86_LISTING

LISTINGS = {
    Arch.X86_64: X86_64_LISTING,
    Arch.X86: X86_LISTING,
    Arch.ARM: ARM_LISTING,
}

MACHINES = {
    Arch.X86_64: EM_X86_64,
    Arch.X86: EM_386,
    Arch.ARM: EM_ARM,
}


@pytest.fixture
def go_binary(tmp_path):
    """Factory: write a Go-looking ELF for the given architecture."""

    def _make(arch=Arch.X86_64, sections=(".note.go.buildid",), name="hello"):
        path = tmp_path / name
        elfclass = 64 if arch == Arch.X86_64 else 32
        path.write_bytes(build_elf(MACHINES[arch], sections, elfclass=elfclass))
        return path

    return _make


@pytest.fixture
def fake_go(tmp_path):
    """Factory: a go command whose objdump prints the listing for ``arch``."""

    def _make(arch=Arch.X86_64, exit_code=0):
        tools = tmp_path / "bin"
        tools.mkdir(exist_ok=True)
        return write_fake_go(tools, LISTINGS[arch], exit_code=exit_code)

    return _make


@pytest.fixture
def warnings_log(caplog):
    caplog.set_level(logging.WARNING)
    return caplog
