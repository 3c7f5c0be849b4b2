import pytest

from seccompscan._types import Arch, UnsupportedArchitectureError, UnsupportedBinaryError
from seccompscan.binary import inspect_binary, require_go_binary
from tests.utils.elf import EM_AARCH64, build_elf


@pytest.mark.parametrize("arch", list(Arch))
def test_detects_architecture(go_binary, arch):
    info = inspect_binary(go_binary(arch))
    assert info.arch is arch
    assert info.is_go is True


@pytest.mark.parametrize("section", [".note.go.buildid", ".go.buildinfo", ".gosymtab"])
def test_go_markers(go_binary, section):
    assert inspect_binary(go_binary(sections=(".text", section))).is_go


def test_non_go_binary(go_binary):
    path = go_binary(sections=(".text", ".data"))
    assert inspect_binary(path).is_go is False
    with pytest.raises(UnsupportedBinaryError, match="doesn't seem to be a Go binary"):
        require_go_binary(path)


def test_unsupported_machine(tmp_path):
    path = tmp_path / "hello-arm64"
    path.write_bytes(build_elf(EM_AARCH64))

    info = inspect_binary(path)
    assert info.arch is None
    assert info.machine == "EM_AARCH64"
    with pytest.raises(UnsupportedArchitectureError):
        require_go_binary(path)


def test_not_an_elf(tmp_path):
    path = tmp_path / "script.sh"
    path.write_text("#!/bin/sh\necho hi\n")
    with pytest.raises(UnsupportedBinaryError):
        inspect_binary(path)


def test_missing_file(tmp_path):
    with pytest.raises(UnsupportedBinaryError):
        inspect_binary(tmp_path / "nope")
