import pytest

from seccompscan.config import FALLBACK_DEFAULTS, load_config


def test_defaults_without_file():
    config = load_config(None)
    assert config == FALLBACK_DEFAULTS
    config["extra_syscalls"].append("prctl")
    assert FALLBACK_DEFAULTS["extra_syscalls"] == []


def test_profile_section_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "profile:\n"
        "  default_action: SCMP_ACT_KILL\n"
        "  extra_syscalls: [prctl, getrandom]\n"
    )
    config = load_config(path)
    assert config["default_action"] == "SCMP_ACT_KILL"
    assert config["extra_syscalls"] == ["prctl", "getrandom"]
    assert config["allow_action"] == "SCMP_ACT_ALLOW"
    assert config["go_command"] == "go"


def test_missing_section_uses_defaults(tmp_path, warnings_log):
    path = tmp_path / "config.yaml"
    path.write_text("other: {}\n")
    assert load_config(path) == FALLBACK_DEFAULTS
    assert "no 'profile' section" in warnings_log.text


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_extra_syscalls_must_be_a_list(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("profile:\n  extra_syscalls: prctl\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_malformed_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("profile: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config"):
        load_config(path)


@pytest.mark.parametrize("content", [
    "profile:\n  extra_syscalls: [1]\n",
    "profile:\n  extra_syscalls: [prctl, null]\n",
    "profile: [prctl]\n",
])
def test_rejects_bad_profile_section(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_config(path)
