from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("typer")
pd = pytest.importorskip("pandas")

from typer.testing import CliRunner

from cli import run as cli_run

runner = CliRunner()


def _tiny_layout(total: int | None = 1000) -> str:
    header = f"total = {total}\n\n" if total is not None else ""
    return header + """
[groups]
spaceBefore = { min = 10, max = 100, priority = 2, share = 1 }
content = [
    { min = 50, max = 100, priority = 2, share = 2 },
    { min = 100, max = 500, priority = 1 },
]
spaceAfter = {}
""".strip()


@pytest.fixture
def layout_path(tmp_path: Path) -> Path:
    path = tmp_path / "layout.toml"
    path.write_text(_tiny_layout(), encoding="utf-8")
    return path


def test_distribute_prints_group_sizes(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["distribute", str(layout_path)])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].split() == ["spaceBefore", "100"]
    assert lines[1].split()[:2] == ["content", "600"]
    assert "(100, 500)" in lines[1]
    assert lines[2].split() == ["spaceAfter", "300"]


def test_total_option_overrides_layout(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["distribute", str(layout_path), "--total", "500"])

    assert result.exit_code == 0, result.output
    assert "spaceBefore  100" in result.output
    assert "content      400" in result.output


def test_exact_strategy_and_detail_table(layout_path: Path) -> None:
    result = runner.invoke(
        cli_run.app, ["distribute", str(layout_path), "--strategy", "exact", "--detail"]
    )

    assert result.exit_code == 0, result.output
    assert "allocated" in result.output
    assert "spaceAfter" in result.output


def test_out_writes_allocation_csv(layout_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    out_path = tmp_path / "results" / "allocation.csv"

    def _fail(*args, **kwargs):
        raise AssertionError("the table must reuse the computed allocation")

    monkeypatch.setattr("flexlayout.frames.distribute_detailed", _fail)

    result = runner.invoke(cli_run.app, ["distribute", str(layout_path), "--out", str(out_path)])

    assert result.exit_code == 0, result.output
    frame = pd.read_csv(out_path)
    assert frame["allocated"].sum() == pytest.approx(1000.0)
    assert frame["group"].tolist() == ["spaceBefore", "content", "content", "spaceAfter"]


def test_infeasible_layout_exits_with_code_three(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["distribute", str(layout_path), "--total", "100"])

    assert result.exit_code == cli_run.EXIT_INFEASIBLE
    assert "Infeasible layout" in result.output


def test_missing_total_exits_with_code_two(tmp_path: Path) -> None:
    path = tmp_path / "layout.toml"
    path.write_text(_tiny_layout(total=None), encoding="utf-8")

    result = runner.invoke(cli_run.app, ["distribute", str(path)])

    assert result.exit_code == cli_run.EXIT_INVALID_SPEC
    assert "No total size given" in result.output


def test_invalid_region_exits_with_code_two(tmp_path: Path) -> None:
    path = tmp_path / "layout.json"
    path.write_text('{"total": 10, "a": {"min": 5, "max": 1}}', encoding="utf-8")

    result = runner.invoke(cli_run.app, ["distribute", str(path)])

    assert result.exit_code == cli_run.EXIT_INVALID_SPEC
    assert "exceeds max" in result.output


def test_unknown_strategy_exits_with_code_two(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["distribute", str(layout_path), "--strategy", "greedy"])

    assert result.exit_code == cli_run.EXIT_INVALID_SPEC


def test_unreadable_layout_exits_with_code_one(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text("a: {}", encoding="utf-8")

    result = runner.invoke(cli_run.app, ["distribute", str(path)])

    assert result.exit_code == cli_run.EXIT_LAYOUT_ERROR


@pytest.mark.parametrize(
    ("command", "filename", "payload"),
    [
        ("distribute", "layout.json", b'{"total": 10, "a": "\xff"}'),
        ("check", "layout.toml", b"# \xff\ntotal = 10\n"),
    ],
)
def test_non_utf8_layout_exits_with_code_one(tmp_path: Path, command: str, filename: str, payload: bytes) -> None:
    path = tmp_path / filename
    path.write_bytes(payload)

    result = runner.invoke(cli_run.app, [command, str(path)])

    assert result.exit_code == cli_run.EXIT_LAYOUT_ERROR
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Unable to read layout" in result.output


def test_check_reports_bounds(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["check", str(layout_path)])

    assert result.exit_code == 0, result.output
    assert "total=1000 min=160 max=inf" in result.output
    assert "Layout is feasible." in result.output


def test_check_flags_infeasible_total(layout_path: Path) -> None:
    result = runner.invoke(cli_run.app, ["check", str(layout_path), "--total", "150"])

    assert result.exit_code == cli_run.EXIT_INFEASIBLE
    assert "minimum sizes sum to 160" in result.output
