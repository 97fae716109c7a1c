"""
Tests for the notifierctl command line.
"""

import pytest

from catalog_notifier import __version__
from catalog_notifier.cli.notifierctl import create_parser, main

NOTIFIER_CONFIG = """
version: 1.0.0
eventcatalog_url: https://catalog.example.com
owners:
  dboyne:
    events:
      - subscribed-schema-changed
    channels:
      - type: slack
        webhook: https://hooks.example.com/dboyne
"""


@pytest.fixture
def configured_catalog(git_catalog):
    (git_catalog / "eventcatalog.notifier.yml").write_text(NOTIFIER_CONFIG, encoding="utf-8")
    return git_catalog


class TestParser:

    def test_detect_defaults(self):
        args = create_parser().parse_args(["detect"])

        assert args.catalog == "./"
        assert args.commit_range == "HEAD~1..HEAD"
        assert args.lifecycle == "active"
        assert args.config is None
        assert not args.dry_run

    def test_lifecycle_choices(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["detect", "--lifecycle", "retired"])


class TestDetectCommand:

    def test_dry_run(self, configured_catalog, capsys):
        code = main(["detect", "--catalog", str(configured_catalog), "--dry-run"])
        out = capsys.readouterr().out

        assert code == 0
        assert "DRY RUN MODE" in out
        assert out.count("[DRY RUN] Would send notification to https://hooks.example.com/dboyne") == 2
        assert "⚠️ Schema Change Detected: List inventory list" in out
        assert "Successfully previewed 2 message(s) for 2 notification(s)" in out

    def test_draft_dry_run_with_action_url(self, configured_catalog, capsys):
        code = main([
            "detect",
            "--catalog", str(configured_catalog),
            "--dry-run",
            "--lifecycle", "draft",
            "--action-url", "https://github.com/org/repo/pull/7",
        ])
        out = capsys.readouterr().out

        assert code == 0
        assert "🔄 Proposed Schema Change: List inventory list" in out
        assert "https://github.com/org/repo/pull/7|View Schema Changes" in out

    def test_nothing_matches(self, git_catalog, capsys):
        (git_catalog / "custom.yml").write_text("owners: {}\n", encoding="utf-8")

        code = main(["detect", "--catalog", str(git_catalog), "--config", "custom.yml", "--dry-run"])

        assert code == 0
        assert "No notifications match your configuration" in capsys.readouterr().out

    def test_missing_catalog(self, tmp_path, capsys):
        code = main(["detect", "--catalog", str(tmp_path / "missing")])

        assert code == 1
        assert "EventCatalog directory does not exist" in capsys.readouterr().err

    def test_missing_config(self, git_catalog, capsys):
        code = main(["detect", "--catalog", str(git_catalog)])

        assert code == 1
        assert "Notifier configuration not found" in capsys.readouterr().err

    def test_unknown_commit_range(self, configured_catalog, capsys):
        code = main([
            "detect",
            "--catalog", str(configured_catalog),
            "--commit-range", "nope..HEAD",
        ])
        err = capsys.readouterr().err

        assert code == 1
        assert "Git commit range not found" in err
        assert "git log --oneline" in err

    def test_invalid_settings_are_reported(self, configured_catalog, monkeypatch, capsys):
        monkeypatch.setenv("NOTIFIER_LOG_LEVEL", "LOUD")
        monkeypatch.setattr("catalog_notifier.core.config._settings", None)

        code = main(["detect", "--catalog", str(configured_catalog), "--dry-run"])
        err = capsys.readouterr().err

        assert code == 1
        assert "Invalid notifier settings" in err
        assert "Traceback" not in err


class TestOtherCommands:

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "notifierctl" in capsys.readouterr().out
