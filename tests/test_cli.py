import orjson
import pytest

from seccompscan import cli
from seccompscan._types import Arch
from tests.utils.listings import ARM_LISTING


def test_missing_arguments_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["only-one-arg"])
    assert exc_info.value.code == 2
    assert "usage: seccompscan" in capsys.readouterr().err


def test_generates_profile(tmp_path, go_binary, capsys):
    listing = tmp_path / "hello.asm"
    listing.write_text(ARM_LISTING)
    profile_path = tmp_path / "profile.json"

    rc = cli.main([str(go_binary(Arch.ARM)), str(profile_path), "--disassembly-file", str(listing)])

    assert rc == 0
    doc = orjson.loads(profile_path.read_bytes())
    assert doc["architectures"] == ["SCMP_ARCH_ARM"]
    assert {"futex", "getpid", "write"} <= set(doc["syscalls"][0]["names"])
    assert "Syscalls detected (total: " in capsys.readouterr().out


def test_no_print(tmp_path, go_binary, capsys):
    listing = tmp_path / "hello.asm"
    listing.write_text(ARM_LISTING)

    rc = cli.main([str(go_binary(Arch.ARM)), str(tmp_path / "p.json"), "--disassembly-file", str(listing),
                   "--no-print"])
    assert rc == 0
    assert "Syscalls detected" not in capsys.readouterr().out


def test_non_go_binary_fails(tmp_path, go_binary):
    binary = go_binary(sections=(".text",))
    profile_path = tmp_path / "profile.json"
    assert cli.main([str(binary), str(profile_path)]) == 1
    assert not profile_path.exists()


def test_not_an_elf_fails(tmp_path):
    binary = tmp_path / "notes.txt"
    binary.write_text("hello")
    assert cli.main([str(binary), str(tmp_path / "profile.json")]) == 1


def test_disassembler_failure(tmp_path, go_binary, fake_go):
    config = tmp_path / "config.yaml"
    config.write_text(f"profile:\n  go_command: {fake_go(Arch.X86_64, exit_code=1)}\n")
    rc = cli.main([str(go_binary(Arch.X86_64)), str(tmp_path / "profile.json"), "--config", str(config)])
    assert rc == 1


def test_missing_config_file(tmp_path, go_binary):
    rc = cli.main([str(go_binary(Arch.X86_64)), str(tmp_path / "profile.json"),
                   "--config", str(tmp_path / "missing.yaml")])
    assert rc == 1


@pytest.mark.parametrize("content", [
    "profile: [unclosed\n",
    "profile:\n  extra_syscalls: [1]\n",
])
def test_bad_config_fails(tmp_path, go_binary, content):
    config = tmp_path / "config.yaml"
    config.write_text(content)
    profile_path = tmp_path / "profile.json"
    rc = cli.main([str(go_binary(Arch.X86_64)), str(profile_path), "--config", str(config)])
    assert rc == 1
    assert not profile_path.exists()
