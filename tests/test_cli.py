import pytest

from mdset import cli, interactive
from mdset.dataset import ONE_MB


def test_generate_then_update(tmp_path, console):
    master = tmp_path / "m"
    cli.main(["generate", str(master), "1", "a,2,b,1"], console=console)
    assert sorted(p.name for p in (master / "a").iterdir()) == ["file0.txt", "file1.txt"]
    assert sorted(p.name for p in (master / "b").iterdir()) == ["file0.txt"]

    cli.main(["UPDATE", str(master), "a,0"], console=console)
    out = console.file.getvalue()
    assert "Creating data set" in out
    assert "Total execution time in millis" in out


def test_bad_number_exits_with_usage(tmp_path, console, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["generate", str(tmp_path / "m"), "ten", "a,1"], console=console)
    assert exc.value.code != 0
    assert "Usage" in capsys.readouterr().err
    # до любых операций с диском
    assert not (tmp_path / "m").exists()


def test_failed_data_set_exits_non_zero(tmp_path, console):
    (tmp_path / "m" / "a").mkdir(parents=True)
    (tmp_path / "m" / "a" / "file0.txt").write_bytes(b"x" * ONE_MB)
    with pytest.raises(SystemExit) as exc:
        cli.main(["update", str(tmp_path / "m"), "a,1"], console=console)
    assert "a" in str(exc.value.code)


def test_missing_input_folder_exits(tmp_path, console):
    with pytest.raises(SystemExit):
        cli.main(["backup", str(tmp_path / "nope"), str(tmp_path / "b")], console=console)


def test_run_with_config(tmp_path, console):
    cfg = tmp_path / "master.yaml"
    cfg.write_text(
        f"mode: generate\ninput_folder: {tmp_path / 'm'}\nfile_size_mb: 1\ndata_sets: a,1\n",
        encoding="utf-8",
    )
    cli.main(["run", "--config", str(cfg)], console=console)
    assert (tmp_path / "m" / "a" / "file0.txt").exists()

    cli.main(["run", "--config", str(cfg), "--mode", "BACKUP", "--backup-folder", str(tmp_path / "b")], console=console)
    assert "Copying" in console.file.getvalue()


def test_run_with_unreadable_config(tmp_path, console):
    with pytest.raises(SystemExit, match="конфиг"):
        cli.main(["run", "--config", str(tmp_path / "missing.yaml")], console=console)


def test_clean(tmp_path, console):
    (tmp_path / "m" / "a").mkdir(parents=True)
    (tmp_path / "m" / "a" / "file0.txt").write_text("x", encoding="ascii")
    cli.main(["clean", str(tmp_path / "m")], console=console)
    assert not (tmp_path / "m").exists()


class _Answer:
    def __init__(self, value):
        self.value = value

    def ask(self):
        return self.value


def test_interactive_generate(tmp_path, console, monkeypatch):
    answers = {
        "select": ["📦 Сгенерировать (generate)", "⬅️ Выход"],
        "path": [str(tmp_path / "m")],
        "text": ["1", "a,1"],
        "confirm": [True],
    }

    def fake(kind):
        return lambda *args, **kwargs: _Answer(answers[kind].pop(0))

    for kind in answers:
        monkeypatch.setattr(interactive.questionary, kind, fake(kind))

    cli.main(["--interactive"], console=console)
    assert (tmp_path / "m" / "a" / "file0.txt").exists()
    assert "Готово" in console.file.getvalue()


@pytest.mark.parametrize("mode", ["Generate", "gEnErAtE", "GENERATE"])
def test_mode_name_is_case_insensitive(tmp_path, console, mode):
    master = tmp_path / "m"
    cli.main(["-v", mode, str(master), "1", "a,1"], console=console)
    assert (master / "a" / "file0.txt").exists()
    cli.main(["Update", str(master), "a,0"], console=console)
    cli.main(["Backup", str(master), str(tmp_path / "b")], console=console)
    assert "Copying" in console.file.getvalue()
