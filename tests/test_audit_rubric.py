from __future__ import annotations

from pathlib import Path

import coach_core.audit_rubric as audit_rubric
from coach_core import config


def test_default_rubric_audit_is_clean(score_config, tmp_path):
    summary = audit_rubric.audit_config(score_config)
    assert summary["warnings"] == []
    assert summary["inert_flags"] == ["incomplete-answer"]
    assert all(v == 40 for v in summary["probes"]["short"].values())
    assert all(v > 40 for v in summary["probes"]["strong"].values())
    assert summary["ceiling_rules"][0] == "insufficient_length"

    outfile = tmp_path / "rubric_audit.json"
    text = audit_rubric.write_summary(summary, path=outfile)
    assert outfile.read_text(encoding="utf-8").strip() == text


def test_main_clean_exit(capsys):
    assert audit_rubric.main([]) == 0
    captured = capsys.readouterr()
    assert "Rubric Audit" in captured.out
    assert Path("/tmp/rubric_audit.json").exists()


def test_main_reports_invalid_rubric(monkeypatch, capsys):
    monkeypatch.setattr(config, "MAX_PENALTIES", 5, raising=False)
    assert audit_rubric.main([]) == 2
    assert "max_penalties must be <= 0" in capsys.readouterr().out
