import pytest

from reworkit.worker import cli
from reworkit.worker.builder import BuildWorker


def test_missing_options_exit_with_usage_error(monkeypatch, capsys):
    for key in ("REWORKIT_CIEL_WORKSPACE", "REWORKIT_ARCH", "REWORKIT_URL", "REWORKIT_SECRET_TOKEN"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(cli, "env_value", lambda key, default=None: default)

    with pytest.raises(SystemExit) as ei:
        cli.main(["-a", "amd64"])

    assert ei.value.code == 2
    err = capsys.readouterr().err
    assert "--workspace" in err and "--token" in err


def test_options_fall_back_to_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("REWORKIT_CIEL_WORKSPACE", str(tmp_path))
    monkeypatch.setenv("REWORKIT_ARCH", "loongarch64")
    monkeypatch.setenv("REWORKIT_URL", "http://srv:3000")
    monkeypatch.setenv("REWORKIT_SECRET_TOKEN", "tok")
    monkeypatch.setattr(cli, "configure_logging", lambda: None)

    started = {}

    def fake_run_forever(self, interval, once=False):
        started.update(
            workspace=self.workspace,
            arch=self.arch,
            instance=self.instance,
            url=self.client.url,
            token=self.client.token,
            interval=interval,
            once=once,
        )

    monkeypatch.setattr(BuildWorker, "run_forever", fake_run_forever)

    cli.main(["-n", "stable", "--once", "--interval", "3"])

    assert started == {
        "workspace": tmp_path,
        "arch": "loongarch64",
        "instance": "stable",
        "url": "http://srv:3000",
        "token": "tok",
        "interval": 3.0,
        "once": True,
    }
