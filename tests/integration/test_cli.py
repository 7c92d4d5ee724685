"""Tests for the promptspans-label command."""
import json

from click.testing import CliRunner

from promptspans.cli import main

PROMPT = "Low angle tracking shot at golden hour, 24fps"


def test_json_output():
    result = CliRunner().invoke(main, [PROMPT, "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert ("golden hour", "lighting.timeOfDay") in {(s["text"], s["role"]) for s in data["spans"]}
    assert data["meta"]["preset"] == "default"


def test_table_output():
    result = CliRunner().invoke(main, [PROMPT])
    assert result.exit_code == 0
    assert "tracking shot" in result.stdout
    assert "closed-vocabulary" in result.stdout


def test_no_spans():
    result = CliRunner().invoke(main, ["nothing to see"])
    assert result.exit_code == 0
    assert "No spans found." in result.stdout


def test_file_and_candidates(tmp_path):
    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text("A weathered fisherman on a pier", encoding="utf-8")
    candidates = tmp_path / "candidates.json"
    candidates.write_text(json.dumps({"spans": [
        {"text": "fisherman", "role": "subject.identity", "confidence": 0.9},
        {"text": "ghost", "role": "subject", "confidence": 0.9},
    ]}), encoding="utf-8")
    result = CliRunner().invoke(main, ["--file", str(prompt_file), "--candidates", str(candidates), "--notes"])
    assert result.exit_code == 0, result.output
    assert "fisherman" in result.stdout
    assert "Notes:" in result.stdout
    assert "not found in source text" in result.stdout


def test_tagger_output(tmp_path):
    detections = tmp_path / "detections.json"
    detections.write_text(json.dumps([
        {"text": "fisherman", "label": "person", "score": 0.65, "start": 12, "end": 21},
    ]), encoding="utf-8")
    result = CliRunner().invoke(main, ["A weathered fisherman", "--tagger-output", str(detections), "--json"])
    assert result.exit_code == 0, result.output
    span = json.loads(result.stdout)["spans"][0]
    assert (span["text"], span["role"], span["confidence"]) == ("fisherman", "subject.identity", 0.75)


def test_preset_from_environment():
    result = CliRunner().invoke(main, [PROMPT, "--json"], env={"PROMPTSPANS_PRESET": "strict"})
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["meta"]["preset"] == "strict"
    assert data["validation"] is not None


def test_validate_flag_prints_status():
    result = CliRunner().invoke(main, [PROMPT, "--validate"])
    assert result.exit_code == 0
    assert "Taxonomy: valid" in result.stdout
    assert "[warning]" in result.stdout


def test_missing_text():
    result = CliRunner().invoke(main, [])
    assert result.exit_code == 2
    assert "Provide TEXT or --file" in result.output


def test_missing_candidates_file(tmp_path):
    result = CliRunner().invoke(main, [PROMPT, "--candidates", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "Could not read input" in result.output


def test_invalid_json(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    result = CliRunner().invoke(main, [PROMPT, "--candidates", str(bad)])
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_invalid_option():
    result = CliRunner().invoke(main, [PROMPT, "--max-spans", "-1"])
    assert result.exit_code == 1
    assert "Invalid option" in result.output


def test_log_files(tmp_path):
    log_file = tmp_path / "run.log"
    trace_file = tmp_path / "run.trace"
    result = CliRunner().invoke(main, [PROMPT, "--log-file", str(log_file), "--trace-file", str(trace_file)])
    assert result.exit_code == 0
    assert "RUN SUMMARY" in log_file.read_text(encoding="utf-8")
    assert "timer:labeling.normalize" in trace_file.read_text(encoding="utf-8")
