import os

import orjson
import pytest
import yaml

from seccompscan import scanner
from seccompscan._types import Arch, DisassemblyError, UnsupportedArchitectureError
from seccompscan.disassembler import Disassembly
from seccompscan.syscall_table import DEFAULT_SYSCALLS, SYSCALL_NAMES
from tests.utils.listings import X86_64_EXPECTED_NAMES, X86_64_LISTING, lines


def _write_config(tmp_path, **profile):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"profile": profile}))
    return str(path)


def test_scan_disassembly_includes_baseline_and_detected():
    profile, report = scanner.scan_disassembly(lines(X86_64_LISTING), Arch.X86_64)

    baseline = {SYSCALL_NAMES[Arch.X86_64][nr] for nr in DEFAULT_SYSCALLS[Arch.X86_64]}
    assert set(profile.syscalls) == baseline | X86_64_EXPECTED_NAMES
    assert list(profile.syscalls) == sorted(profile.syscalls)
    assert report["syscalls"] == list(profile.syscalls)
    assert report["unknown_ids"] == []


def test_scan_disassembly_unsupported_arch():
    with pytest.raises(UnsupportedArchitectureError):
        scanner.scan_disassembly([], "SCMP_ARCH_MIPS")


def test_scan_disassembly_drops_unknown_ids():
    listing = [
        "TEXT main.main(SB) /home/user/hello/main.go",
        "  main.go:10\t0x4869af\t48c70424d0070000\tMOVQ $0x7d0, 0(SP)",
        "  main.go:10\t0x4869b7\te8c9b8ffff\tCALL syscall.Syscall(SB)",
    ]
    profile, report = scanner.scan_disassembly(listing, Arch.X86_64)
    assert report["unknown_ids"] == [2000]
    assert 2000 in report["syscall_ids"]
    assert "" not in profile.syscalls


def test_scan_disassembly_prints_summary(capsys):
    profile, _ = scanner.scan_disassembly(lines(X86_64_LISTING), Arch.X86_64, print_res=True)
    out = capsys.readouterr().out
    assert out.startswith(f"Syscalls detected (total: {len(profile.syscalls)}): [")


def test_scan_end_to_end(tmp_path, go_binary, fake_go):
    binary = go_binary(Arch.X86_64)
    profile_path = tmp_path / "profile.json"
    report_path = tmp_path / "report.json"
    config = _write_config(tmp_path, go_command=str(fake_go(Arch.X86_64)), extra_syscalls=["prctl"])

    profile, report = scanner.scan(
        binary,
        profile_path=str(profile_path),
        report_file=str(report_path),
        config_path=config,
        print_res=False,
    )

    doc = orjson.loads(profile_path.read_bytes())
    assert doc["architectures"] == ["SCMP_ARCH_X86_64"]
    assert doc["defaultAction"] == "SCMP_ACT_ERRNO"
    names = doc["syscalls"][0]["names"]
    assert X86_64_EXPECTED_NAMES <= set(names)
    assert "prctl" in names
    assert names == sorted(names)

    saved = orjson.loads(report_path.read_bytes())
    assert saved["metadata"]["sites_resolved"] == 5


def test_scan_reuses_existing_disassembly(tmp_path, go_binary, monkeypatch):
    listing_file = tmp_path / "hello.asm"
    listing_file.write_text(X86_64_LISTING)

    # go is never looked up when the listing is reused
    monkeypatch.setattr(scanner.shutil, "which", lambda _: None)

    profile, _ = scanner.scan(go_binary(Arch.X86_64), disassembly_file=str(listing_file), print_res=False)
    assert X86_64_EXPECTED_NAMES <= set(profile.syscalls)
    assert listing_file.exists()


def test_scan_without_go_exits(go_binary, monkeypatch):
    monkeypatch.setattr(scanner.shutil, "which", lambda _: None)
    with pytest.raises(SystemExit) as exc_info:
        scanner.scan(go_binary(Arch.X86_64), print_res=False)
    assert exc_info.value.code == 1


# ------------------ Disassembly ---------------------


def test_disassembly_temp_file_removed(go_binary, fake_go):
    with Disassembly(go_binary(Arch.X86_64), go_command=str(fake_go(Arch.X86_64))) as listing:
        path = listing._path
        assert list(listing) == lines(X86_64_LISTING)
    assert path and not os.path.exists(path)


def test_disassembly_keeps_requested_output(tmp_path, go_binary, fake_go):
    out = tmp_path / "kept.asm"
    with Disassembly(go_binary(Arch.X86_64), output_file=out, go_command=str(fake_go(Arch.X86_64))) as listing:
        assert next(iter(listing)).startswith("TEXT main.main(SB)")
    assert out.read_text() == X86_64_LISTING


def test_disassembly_failure(go_binary, fake_go):
    with pytest.raises(DisassemblyError, match="objdump: boom"):
        with Disassembly(go_binary(Arch.X86_64), go_command=str(fake_go(Arch.X86_64, exit_code=2))):
            pass


def test_disassembly_missing_tool(go_binary, tmp_path):
    with pytest.raises(DisassemblyError):
        with Disassembly(go_binary(Arch.X86_64), go_command=str(tmp_path / "no-such-go")):
            pass
