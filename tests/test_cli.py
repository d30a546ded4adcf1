import importlib
import json
import sys

import pytest

# Import run.py as a module and exercise parse_args + main with a patched
# start_server so no networking happens.


@pytest.fixture()
def run_module():
    # Clean import each time (run.py reads VERSION once)
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


def test_version_flag_outputs_version(run_module, capsys):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert run_module.__version__ in out
    assert "dungeongen" in out


def test_version_file_is_read(run_module):
    assert run_module.__version__ == "0.1.0"


def test_default_command_is_generate(run_module):
    assert run_module.parse_args([]).command == "generate"
    args = run_module.parse_args(["--env-file", "missing.env"])
    assert args.command == "generate" and args.seed is None


def test_generate_prints_plain_map(run_module, capsys):
    assert run_module.main(["generate", "--seed", "42", "--width", "30", "--height", "20", "--no-color"]) == 0
    out = capsys.readouterr().out
    lines = out.split("\n")
    assert all(len(line) == 30 for line in lines[:20])
    assert "\x1b[" not in out
    assert "Seed:" in out and "42" in out


def test_generate_json(run_module, capsys):
    assert run_module.main(["generate", "--seed", "9", "--json", "--overlay", "--strict-exit"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["seed"] == 9
    assert data["obstacle_overlay"] is True
    assert data["width"] == 40


def test_generate_invalid_config_exits_nonzero(run_module, capsys):
    assert run_module.main(["generate", "--width", "0"]) == 2
    assert "ERROR" in capsys.readouterr().err


def test_colorize_wraps_known_tiles(run_module):
    colored = run_module.colorize("#.S ")
    assert colored.count(run_module.Style.RESET_ALL) == 3
    assert colored.endswith(" ")


def test_server_main_invokes_start_server(monkeypatch, run_module):
    calls = {}

    def fake_start_server(host, port, debug):
        calls.update(host=host, port=port, debug=debug)

    monkeypatch.setenv("PORT", "5555")
    monkeypatch.setenv("HOST", "127.0.0.1")
    import dungeongen.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    assert run_module.main(["server"]) == 0
    assert calls == {"host": "127.0.0.1", "port": 5555, "debug": False}


def test_server_flags_beat_env(monkeypatch, run_module):
    calls = {}

    def fake_start_server(host, port, debug):
        calls.update(host=host, port=port, debug=debug)

    monkeypatch.setenv("PORT", "5555")
    import dungeongen.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    run_module.main(["server", "--port", "7001", "--host", "0.0.0.0", "--debug"])
    assert calls == {"host": "0.0.0.0", "port": 7001, "debug": True}


def test_env_file_argument(monkeypatch, tmp_path, run_module, capsys):
    env_file = tmp_path / ".env"
    env_file.write_text("DUNGEON_OBSTACLE_OVERLAY=1\n")
    # recorded so the value load_dotenv sets is removed afterwards
    monkeypatch.setenv("DUNGEON_OBSTACLE_OVERLAY", "0")
    monkeypatch.delenv("DUNGEON_OBSTACLE_OVERLAY")
    assert run_module.main(["--env-file", str(env_file), "generate", "--seed", "3", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["obstacle_overlay"] is True
