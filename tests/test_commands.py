# tests/test_commands.py
"""
Filesystem and builtin command handlers.
Filesystem tests run inside tmp_path; paths are relative to it.
"""
from __future__ import annotations

import os
import platform
from pathlib import Path

import pytest

from shelld import fs_commands
from shelld.builtins import install_builtins
from shelld.fs_commands import install_fs_commands
from shelld.registry import CommandRegistry, ControlCode

BLUE = "\x1b[34m"
RESET = "\x1b[0m"


class FakeOutput:
    def __init__(self):
        self.writes: list[bytes] = []

    def read(self, size: int = 1) -> bytes:
        return b""

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    def close(self) -> None:
        pass

    @property
    def text(self) -> str:
        return b"".join(self.writes).decode("iso-8859-1")


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def run(handler, *args: str) -> tuple[ControlCode, str]:
    out = FakeOutput()
    code = handler(out, list(args), len(args))
    return code, out.text


# ----------------------------------------------------------------
# ls
# ----------------------------------------------------------------


@pytest.fixture
def listing(workdir: Path) -> Path:
    (workdir / "a.txt").write_bytes(b"12345")
    (workdir / "sub").mkdir()
    (workdir / "sub" / "inner").write_bytes(b"")
    return workdir


def test_ls_short_listing_pads_names(listing: Path):
    code, text = run(fs_commands.ls_cmd)
    assert code == ControlCode.CONTINUE
    assert text == (
        "a.txt" + " " * 11 + BLUE + "sub" + RESET + " " * 13
    )


def test_ls_long_listing_shows_sizes(listing: Path):
    _, text = run(fs_commands.ls_cmd, "-l")
    assert text == (
        "a.txt" + " " * 35 + "5b\r\n"
        + BLUE + "sub" + RESET + " " * 37 + "-\r\n"
    )


def test_ls_relative_path(listing: Path):
    _, text = run(fs_commands.ls_cmd, "sub")
    assert text == "inner" + " " * 11

    _, text = run(fs_commands.ls_cmd, "-l", "sub")
    assert text == "inner" + " " * 35 + "0b\r\n"


def test_ls_missing_directory(workdir: Path):
    _, text = run(fs_commands.ls_cmd, "nope")
    assert text == "nope is not a directory"


# ----------------------------------------------------------------
# cd / mkdir
# ----------------------------------------------------------------


def test_cd_changes_directory_and_reports_dir_changed(workdir: Path):
    (workdir / "sub").mkdir()
    code, text = run(fs_commands.cd_cmd, "sub")
    assert code == ControlCode.DIR_CHANGED
    assert text == ""
    assert Path(os.getcwd()) == (workdir / "sub").resolve()


def test_cd_without_argument_goes_to_root(workdir: Path):
    code, _ = run(fs_commands.cd_cmd)
    assert code == ControlCode.DIR_CHANGED
    assert os.getcwd() == os.path.abspath("/")


def test_cd_to_missing_directory_reports_it(workdir: Path):
    code, text = run(fs_commands.cd_cmd, "nope")
    assert code == ControlCode.DIR_CHANGED
    assert text == "nope is not a directory"
    assert Path(os.getcwd()) == workdir.resolve()


def test_mkdir_creates_directory(workdir: Path):
    code, text = run(fs_commands.mkdir_cmd, "newdir")
    assert code == ControlCode.CONTINUE
    assert text == ""
    assert (workdir / "newdir").is_dir()


def test_mkdir_reports_failures(workdir: Path):
    _, text = run(fs_commands.mkdir_cmd)
    assert text == "argument not specified"

    (workdir / "taken").mkdir()
    _, text = run(fs_commands.mkdir_cmd, "taken")
    assert text.startswith("taken: ")


# ----------------------------------------------------------------
# rm / echo / cat
# ----------------------------------------------------------------


def test_rm_removes_every_named_file(workdir: Path):
    for name in ("x", "y"):
        (workdir / name).write_bytes(b"")
    code, text = run(fs_commands.rm_cmd, "x", "y", "missing")
    assert code == ControlCode.CONTINUE
    assert text == ""
    assert not (workdir / "x").exists()
    assert not (workdir / "y").exists()


def test_rm_without_arguments(workdir: Path):
    _, text = run(fs_commands.rm_cmd)
    assert text == "argument not specified"


def test_echo_writes_then_appends_on_new_line(workdir: Path):
    code, _ = run(fs_commands.echo_cmd, "hi", ">", "f.txt")
    assert code == ControlCode.CONTINUE
    assert (workdir / "f.txt").read_bytes() == b"hi"

    run(fs_commands.echo_cmd, '"key": "value"', ">>", "f.txt")
    assert (workdir / "f.txt").read_bytes() == b'hi\n"key": "value"'

    run(fs_commands.echo_cmd, "new", ">", "f.txt")
    assert (workdir / "f.txt").read_bytes() == b"new"


@pytest.mark.parametrize(
    "args",
    [(), ("hi",), ("hi", ">"), ("hi", "|", "f.txt")],
)
def test_echo_without_redirection_prints_usage(workdir: Path, args):
    code, _ = run(fs_commands.echo_cmd, *args)
    assert code == ControlCode.PRINT_USAGE
    assert not (workdir / "f.txt").exists()


def test_echo_to_unwritable_destination(workdir: Path):
    _, text = run(fs_commands.echo_cmd, "hi", ">", "no/such/dir/f.txt")
    assert text == "couldnt open destination file"


def test_cat_streams_file_content(workdir: Path):
    data = bytes(range(256)) * 3
    (workdir / "blob").write_bytes(data)
    out = FakeOutput()
    fs_commands.cat_cmd(out, ["blob"], 1)
    assert b"".join(out.writes) == data


def test_cat_failures(workdir: Path):
    assert run(fs_commands.cat_cmd)[1] == "argument not specified"
    assert run(fs_commands.cat_cmd, "missing")[1] == "couldnt open source file"


# ----------------------------------------------------------------
# mv / cp
# ----------------------------------------------------------------


def test_mv_renames(workdir: Path):
    (workdir / "old").write_bytes(b"data")
    code, text = run(fs_commands.mv_cmd, "old", "new")
    assert code == ControlCode.CONTINUE
    assert text == ""
    assert (workdir / "new").read_bytes() == b"data"
    assert not (workdir / "old").exists()


def test_mv_failures(workdir: Path):
    assert run(fs_commands.mv_cmd, "old")[1] == "argument not specified"
    assert run(fs_commands.mv_cmd, "old", "new")[1] == "error moving file"


def test_cp_copies_to_second_argument(workdir: Path):
    (workdir / "src").write_bytes(b"x" * 200)
    code, text = run(fs_commands.cp_cmd, "src", "dst")
    assert code == ControlCode.CONTINUE
    assert text == ""
    assert (workdir / "dst").read_bytes() == b"x" * 200
    assert (workdir / "src").read_bytes() == b"x" * 200


def test_cp_failures(workdir: Path):
    assert run(fs_commands.cp_cmd, "src")[1] == "argument not specified"
    assert run(fs_commands.cp_cmd, "src", "dst")[1] == "couldnt open source file"

    (workdir / "src").write_bytes(b"x")
    _, text = run(fs_commands.cp_cmd, "src", "no/such/dst")
    assert text == "couldnt open destination file"


def test_install_fs_commands_registers_all():
    reg = CommandRegistry()
    install_fs_commands(reg)
    assert reg.names() == ["cp", "mv", "cat", "echo", "mkdir", "rm", "cd", "ls"]
    assert b"\techo `\"key\": \"value\"` > file.txt" in (
        reg.find("echo").usage_bytes()
    )


# ----------------------------------------------------------------
# Builtins
# ----------------------------------------------------------------


def _builtins(restart=None) -> CommandRegistry:
    reg = CommandRegistry()
    install_builtins(reg, restart=restart)
    return reg


def test_install_builtins_registers_all():
    assert _builtins().names() == ["reboot", "uname", "date", "exit", "help"]


def test_help_without_argument_lists_commands():
    reg = _builtins()
    code, text = run(reg.find("help").handler)
    assert code == ControlCode.PRINT_COMMAND_LIST
    assert text == ""


def test_help_with_command_prints_its_usage():
    reg = _builtins()
    install_fs_commands(reg)
    code, text = run(reg.find("help").handler, "mv")
    assert code == ControlCode.CONTINUE
    assert text == "moves/renames a file\r\nmv oldname newname"


def test_help_with_unknown_command_lists_commands():
    code, _ = run(_builtins().find("help").handler, "nope")
    assert code == ControlCode.PRINT_COMMAND_LIST


def test_exit_returns_exit():
    assert run(_builtins().find("exit").handler)[0] == ControlCode.EXIT


def test_date_prints_something():
    code, text = run(_builtins().find("date").handler)
    assert code == ControlCode.CONTINUE
    assert text.strip()


def test_uname():
    handler = _builtins().find("uname").handler
    assert run(handler)[1] == platform.uname().system
    assert platform.uname().machine in run(handler, "-a")[1]


def test_reboot_requests_restart_when_served():
    calls = []
    code, text = run(_builtins(lambda: calls.append(1)).find("reboot").handler)
    assert code == ControlCode.EXIT
    assert calls == [1]
    assert text == "rebooting..."


def test_reboot_without_server_just_exits():
    code, text = run(_builtins().find("reboot").handler)
    assert code == ControlCode.EXIT
    assert text == ""


# ----------------------------------------------------------------
# Non-ASCII names
# ----------------------------------------------------------------

RAW_NAME = b"caf\xc3\xa9"
# How the tokenizer hands these bytes to a handler
TOKEN = RAW_NAME.decode("iso-8859-1")


def test_cat_reaches_non_ascii_file(workdir: Path):
    (workdir / os.fsdecode(RAW_NAME)).write_bytes(b"hello")
    out = FakeOutput()
    fs_commands.cat_cmd(out, [TOKEN], 1)
    assert b"".join(out.writes) == b"hello"


def test_ls_writes_raw_name_bytes(workdir: Path):
    (workdir / os.fsdecode(RAW_NAME)).write_bytes(b"")
    out = FakeOutput()
    fs_commands.ls_cmd(out, [], 0)
    assert b"".join(out.writes) == RAW_NAME + b" " * (16 - len(RAW_NAME))


def test_cd_cp_rm_with_non_ascii_names(workdir: Path):
    (workdir / os.fsdecode(RAW_NAME)).mkdir()
    code, text = run(fs_commands.cd_cmd, TOKEN)
    assert code == ControlCode.DIR_CHANGED
    assert text == ""
    assert os.fsencode(os.getcwd()).endswith(RAW_NAME)

    Path("src").write_bytes(b"x")
    run(fs_commands.cp_cmd, "src", TOKEN + "2")
    assert Path(os.fsdecode(RAW_NAME + b"2")).read_bytes() == b"x"

    run(fs_commands.rm_cmd, TOKEN + "2")
    assert not Path(os.fsdecode(RAW_NAME + b"2")).exists()


def test_echo_creates_non_ascii_file(workdir: Path):
    run(fs_commands.echo_cmd, "hi", ">", TOKEN)
    assert (workdir / os.fsdecode(RAW_NAME)).read_bytes() == b"hi"
