import json

import pytest

from cli import main as cli_main


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


def test_cli_runs_preset(tmp_path, capsys):
    run_dir = tmp_path / "cli-run"
    cli_main.main(["--preset", "blobs-min", "--run-dir", str(run_dir), "--max-epochs", "4"])
    payload = _last_json_line(capsys.readouterr().out)

    assert set(payload) == {
        "epochs",
        "manifest",
        "metrics",
        "summary",
        "test_loss",
        "test_misclassification",
    }
    assert 1 <= payload["epochs"] <= 4
    assert payload["metrics"] == str(run_dir / "metrics_train.jsonl")
    assert (run_dir / "manifest.json").exists()


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["--list-presets"])
    assert excinfo.value.code == 0
    assert "iris-plain" in capsys.readouterr().out.split()


def test_cli_yaml_override_and_dump(tmp_path, capsys):
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  max_epochs: 5\n  early_stopping: null\n")
    dumped = tmp_path / "resolved.json"

    cli_main.main(
        [
            "--preset",
            "blobs-min",
            "--config",
            str(override),
            "--run-dir",
            str(tmp_path / "yaml-run"),
            "--dump-config",
            str(dumped),
        ]
    )
    payload = _last_json_line(capsys.readouterr().out)
    assert payload["epochs"] == 5

    resolved = json.loads(dumped.read_text())
    assert resolved["train"]["max_epochs"] == 5
    assert resolved["model"]["hidden"] == [8]


def test_resolve_config_applies_flags():
    args = cli_main.parse_args(["--preset", "iris-plain", "--seed", "9", "--lr", "0.2"])
    config = cli_main.resolve_config(args)
    assert config["data"]["options"]["seed"] == 9
    assert config["model"]["seed"] == 9
    assert config["train"]["lr"] == 0.2
