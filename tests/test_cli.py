"""End-to-end tests for the typer CLI: scan, baseline init and ci."""

import json

import pytest
from typer.testing import CliRunner

from vibecheck import main
from vibecheck.main import app, run_scan
from vibecheck.rules.registry import all_rules

runner = CliRunner()

UNGUARDED_ROUTE = "export async function GET() {\n  return Response.json(await db.users());\n}\n"
LEAKY_COMPONENT = '"use client";\nconst key = process.env.SUPABASE_SERVICE_ROLE_KEY;\n'


def _write(root, rel, text):
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text)
    return p


@pytest.fixture
def next_project(tmp_path):
    _write(tmp_path, "app/api/users/route.ts", UNGUARDED_ROUTE)
    _write(tmp_path, "app/page.tsx", "export default function Page() { return null; }\n")
    return tmp_path


def test_run_scan_detects_stack_and_findings(next_project):
    run = run_scan(next_project)
    assert run.stack == "nextjs"
    assert [f.rule_id for f in run.findings] == ["next-api-auth-guard"]


def test_scan_non_strict_exits_zero(next_project):
    result = runner.invoke(app, ["scan", str(next_project)])
    assert result.exit_code == 0
    assert "high=1" in result.stdout


def test_scan_strict_high_exits_one(next_project):
    result = runner.invoke(app, ["scan", str(next_project), "--strict"])
    assert result.exit_code == 1


def test_scan_strict_blocker_exits_two(next_project):
    _write(next_project, "components/Admin.tsx", LEAKY_COMPONENT)
    result = runner.invoke(app, ["scan", str(next_project), "--strict"])
    assert result.exit_code == 2


def test_scan_strict_clean_exits_zero(tmp_path):
    _write(tmp_path, "src/util.ts", "export const add = (a, b) => a + b;\n")
    result = runner.invoke(app, ["scan", str(tmp_path), "--strict"])
    assert result.exit_code == 0


def test_json_report(next_project):
    out = next_project / "report.json"
    result = runner.invoke(app, ["scan", str(next_project), "--format", "json", "--out", str(out)])
    assert result.exit_code == 0
    payload = json.loads(out.read_text())
    assert payload["repo"]["stack"] == "nextjs"
    assert payload["summary"]["high"] == 1
    assert payload["findings"][0]["ruleId"] == "next-api-auth-guard"
    assert payload["findings"][0]["file"].endswith("route.ts")


def test_sarif_report(next_project):
    out = next_project / "report.sarif"
    result = runner.invoke(app, ["scan", str(next_project), "--format", "sarif", "--out", str(out)])
    assert result.exit_code == 0
    sarif = json.loads(out.read_text())
    assert sarif["version"] == "2.1.0"
    results = sarif["runs"][0]["results"]
    assert results[0]["level"] == "error"
    uri = results[0]["locations"][0]["physicalLocation"]["artifactLocation"]["uri"]
    assert uri == "app/api/users/route.ts"


def test_baseline_init_then_scan_is_clean(next_project):
    baseline = next_project / "baseline.json"
    result = runner.invoke(app, ["baseline", "init", str(next_project), "--out", str(baseline)])
    assert result.exit_code == 0
    assert "1 findings recorded" in result.stdout
    assert json.loads(baseline.read_text())["version"] == 1

    result = runner.invoke(
        app, ["scan", str(next_project), "--strict", "--baseline", str(baseline)]
    )
    assert result.exit_code == 0
    assert "high=0" in result.stdout


def test_new_finding_survives_baseline(next_project):
    baseline = next_project / "baseline.json"
    runner.invoke(app, ["baseline", "init", str(next_project), "--out", str(baseline)])
    _write(next_project, "app/api/orders/route.ts", UNGUARDED_ROUTE)
    result = runner.invoke(
        app, ["scan", str(next_project), "--strict", "--baseline", str(baseline)]
    )
    assert result.exit_code == 1


def test_missing_baseline_file_is_not_fatal(next_project):
    result = runner.invoke(
        app, ["scan", str(next_project), "--baseline", str(next_project / "missing.json")]
    )
    assert result.exit_code == 0


def test_ci_uses_default_baseline_in_directory(next_project):
    assert runner.invoke(app, ["ci", str(next_project)]).exit_code == 1
    assert runner.invoke(app, ["baseline", "init", str(next_project)]).exit_code == 0
    assert (next_project / ".vibecheck-baseline.json").is_file()
    assert runner.invoke(app, ["ci", str(next_project)]).exit_code == 0


def test_config_file_stack_respected(next_project):
    _write(next_project, "vibecheck.json", '{"stack": "vite"}')
    run = run_scan(next_project)
    assert run.stack == "vite"
    assert run.findings == []


def test_missing_directory_exits_one(tmp_path):
    result = runner.invoke(app, ["scan", str(tmp_path / "nope")])
    assert result.exit_code == 1


def test_unknown_stack_is_usage_error(next_project):
    result = runner.invoke(app, ["scan", str(next_project), "--stack", "rails"])
    assert result.exit_code == 2


def test_stack_alias_accepted(next_project):
    result = runner.invoke(app, ["scan", str(next_project), "--stack", "nest"])
    assert result.exit_code == 0


def test_sarif_lists_every_registered_rule(next_project):
    out = next_project / "report.sarif"
    runner.invoke(app, ["scan", str(next_project), "--stack", "vite", "--format", "sarif", "--out", str(out)])
    driver = json.loads(out.read_text())["runs"][0]["tool"]["driver"]
    assert driver["name"] == "vibecheck"
    assert len(driver["rules"]) == len(all_rules())


def test_json_on_stdout_is_not_mixed_with_status(next_project, monkeypatch):
    statuses = []
    original_status = main.Console.status

    def recording_status(self, *args, **kwargs):
        statuses.append(self.stderr)
        return original_status(self, *args, **kwargs)

    monkeypatch.setattr(main.Console, "status", recording_status)
    result = runner.invoke(app, ["scan", str(next_project), "--format", "json"])
    assert result.exit_code == 0
    assert statuses == [True]
    assert json.loads(result.stdout)["summary"]["high"] == 1
