# SPDX-License-Identifier: MIT
"""
Tests for the command line interface.
"""
import io
import json

import pytest

from cipher_sentinel.cli import main

from secrets_fixtures import AWS_KEY, GITHUB_TOKEN, PASSWORD_LINE


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run each test from an empty directory so no stray config is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestVersion:
    def test_version_command(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip()

    def test_version_flag(self, capsys):
        assert main(["--version"]) == 0


class TestScanCommand:
    """cipher-sentinel scan"""

    def test_text_output_masks_by_default(self, workdir, capsys):
        (workdir / "creds.txt").write_text(f"Here is an aws key: {AWS_KEY}\n")
        assert main(["scan", "creds.txt"]) == 0
        out = capsys.readouterr().out
        assert "Total findings: 1" in out
        assert "Risk score: 30/100 (Critical)" in out
        assert "AWS_ACCESS_KEY" in out
        assert "AKIA_F****_KEY" in out
        assert AWS_KEY not in out

    def test_no_mask(self, workdir, capsys):
        (workdir / "creds.txt").write_text(f"{AWS_KEY}\n")
        main(["scan", "creds.txt", "--no-mask"])
        assert AWS_KEY in capsys.readouterr().out

    def test_mask_disabled_in_config(self, workdir, capsys):
        (workdir / ".cipher-sentinel.yml").write_text("security:\n  mask_secrets: false\n")
        (workdir / "creds.txt").write_text(f"{AWS_KEY}\n")
        main(["scan", "creds.txt"])
        assert AWS_KEY in capsys.readouterr().out

    def test_json_output(self, workdir, capsys):
        (workdir / "a.py").write_text(f"token = '{GITHUB_TOKEN}'\n\n{PASSWORD_LINE}\n")
        assert main(["scan", "a.py", "--format", "json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["total"] == 2
        assert report["risk_score"] == 45
        assert report["severity"] == "Critical"
        findings = report["files"][0]["findings"]
        assert [(f["rule_name"], f["line_number"]) for f in findings] == [
            ("GITHUB_TOKEN", 1),
            ("GENERIC_PASSWORD", 3),
        ]

    def test_directory_walk_skips_vcs(self, workdir, capsys):
        (workdir / "src").mkdir()
        (workdir / "src" / "settings.py").write_text(f"KEY = '{AWS_KEY}'\n")
        (workdir / ".git").mkdir()
        (workdir / ".git" / "config").write_text(f"{GITHUB_TOKEN}\n")
        main(["scan", ".", "--format", "json"])
        report = json.loads(capsys.readouterr().out)
        paths = [f["path"] for f in report["files"]]
        assert len(paths) == 1
        assert paths[0].endswith("settings.py")

    def test_binary_file_skipped(self, workdir, capsys):
        (workdir / "blob.bin").write_bytes(b"\xff\xfe\x00\x81")
        (workdir / "ok.txt").write_text("nothing\n")
        assert main(["scan", ".", "--format", "json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert [f["path"] for f in report["files"]] == ["ok.txt"]

    def test_stdin(self, workdir, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(f"{AWS_KEY}\n".encode("utf-8"))))
        main(["scan", "-", "--format", "json"])
        report = json.loads(capsys.readouterr().out)
        assert report["files"][0]["path"] == "<stdin>"
        assert report["total"] == 1

    def test_stdin_not_utf8_is_skipped(self, workdir, capsys, caplog, monkeypatch):
        """Undecodable stdin is skipped with a warning, like an undecodable file."""
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"\xff\xfe bad")))
        assert main(["scan", "-", "--format", "json"]) == 0
        captured = capsys.readouterr()
        report = json.loads(captured.out)
        assert report["files"] == []
        assert "not UTF-8 text" in caplog.text

    def test_stdin_over_size_limit_is_skipped(self, workdir, capsys, caplog, monkeypatch):
        (workdir / ".cipher-sentinel.yml").write_text("scanner:\n  file_size_limit_mb: 0.0001\n")
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(f"{AWS_KEY}\n".encode("utf-8") * 20)))
        assert main(["scan", "-", "--format", "json"]) == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out)["files"] == []
        assert "size limit" in caplog.text

    def test_fail_on(self, workdir):
        (workdir / "pw.txt").write_text(f"{PASSWORD_LINE}\n")
        assert main(["scan", "pw.txt", "--fail-on", "critical"]) == 0
        assert main(["scan", "pw.txt", "--fail-on", "medium"]) == 1
        assert main(["scan", "pw.txt", "--fail-on", "low"]) == 1

    def test_sarif_output(self, workdir, capsys):
        (workdir / "creds.txt").write_text(f"\n{AWS_KEY}\n")
        assert main(["scan", "creds.txt", "--format", "sarif"]) == 0
        out = capsys.readouterr().out
        sarif = json.loads(out)
        run = sarif["runs"][0]
        assert sarif["version"] == "2.1.0"
        assert run["tool"]["driver"]["rules"][0]["id"] == "AWS_ACCESS_KEY"
        result = run["results"][0]
        assert result["level"] == "error"
        location = result["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "creds.txt"
        assert location["region"]["startLine"] == 2
        assert AWS_KEY not in out

    def test_output_files(self, workdir, capsys):
        (workdir / "creds.txt").write_text(f"{AWS_KEY}\n")
        main(["scan", "creds.txt", "--json-out", "out.json", "--sarif-out", "out.sarif"])
        out = capsys.readouterr().out
        assert "JSON output written to out.json" in out
        assert "SARIF output written to out.sarif" in out
        assert json.loads((workdir / "out.json").read_text())["total"] == 1
        assert json.loads((workdir / "out.sarif").read_text())["runs"][0]["results"]

    def test_missing_config(self, workdir, capsys):
        assert main(["scan", ".", "--config", "missing.yml"]) == 1
        assert "CONFIG ERROR" in capsys.readouterr().err

    def test_bad_rule_in_config(self, workdir, capsys):
        (workdir / "bad.yml").write_text(
            "rules:\n  - name: EMPTY\n    pattern: 'x*'\n    severity: Low\n    category: tokens\n"
        )
        assert main(["scan", ".", "--config", "bad.yml"]) == 1
        assert "matches the empty string" in capsys.readouterr().err


class TestRulesCommand:
    def test_lists_rules(self, workdir, capsys):
        assert main(["rules"]) == 0
        out = capsys.readouterr().out
        assert "Sensitivity: Medium" in out
        assert "AWS_ACCESS_KEY" in out
        assert "GENERIC_BEARER" in out

    def test_respects_disabled_categories(self, workdir, capsys):
        (workdir / ".cipher-sentinel.yml").write_text("scanner:\n  detect_tokens: false\n")
        main(["rules"])
        out = capsys.readouterr().out
        assert "GITHUB_TOKEN" not in out
        assert "AWS_ACCESS_KEY" in out


class TestInitConfig:
    def test_writes_template(self, workdir, capsys):
        assert main(["init-config"]) == 0
        assert (workdir / ".cipher-sentinel.yml").exists()
        assert main(["init-config"]) == 1
        assert main(["init-config", "--force"]) == 0
        # The written template is a loadable config
        assert main(["rules"]) == 0
