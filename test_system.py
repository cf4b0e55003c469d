"""
Complete system test walking through a health log session.

This script tests:
1. Configuration loading and validation
2. Recording entries and zone classification
3. Charts and the latest entries table
4. Markdown/JSON export and import
5. Notes analysis and error handling

Everything is written to a temporary directory; your real log is untouched.

Run with: uv run python test_system.py
"""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from healthlog.adapters.storage import FileStorage
from healthlog.config import AnalysisConfig, DisplayConfig, get_config, print_config_summary
from healthlog.errors import FormatError, ValidationError
from healthlog.services.charts import TerminalChartRenderer
from healthlog.services.form_controller import FormController
from healthlog.services.notes_analysis import NotesAnalyzer
from healthlog.services.repository import EntryRepository

console = Console()

SCENARIOS = [
    # (days ago, systolic, diastolic, pulse, triggers)
    (6, 132, 84, 70, []),
    (5, 146, 88, 78, ["stress"]),
    (3, 158, 96, 90, ["sleep_deprivation", "neck_spasm"]),
    (1, 174, 104, 98, ["head_tilt", "weather"]),
    (0, 136, 86, 72, []),
]


def build_session(directory: Path) -> FormController:
    repository = EntryRepository(FileStorage(directory / "data"))
    repository.load()
    return FormController(
        repository,
        console,
        display=DisplayConfig(table_limit=10, chart_days=7, export_dir=directory / "exports"),
        chart_renderer=TerminalChartRenderer(console, repository.profile),
        analyzer=NotesAnalyzer(AnalysisConfig()),
    )


def test_configuration() -> bool:
    """Test configuration loading."""

    console.print(Panel("⚙️ Testing Configuration", style="blue"))

    try:
        config = get_config()
        console.print("✅ Configuration loaded successfully", style="green")
        print_config_summary(config)
        return True

    except Exception as e:
        console.print(f"❌ Configuration test failed: {e}", style="red")
        return False


def test_entry_lifecycle(directory: Path) -> bool:
    """Record a week of readings and check zones and persistence."""

    console.print(Panel("🩺 Testing Entry Lifecycle", style="blue"))

    try:
        controller = build_session(directory)
        now = datetime.now()

        zones = []
        for days_ago, systolic, diastolic, pulse, triggers in SCENARIOS:
            entry = controller.submit(
                {
                    "entry_date": (now - timedelta(days=days_ago)).isoformat(timespec="minutes"),
                    "systolic": systolic,
                    "diastolic": diastolic,
                    "pulse": pulse,
                    "sleep_start": "23:30",
                    "sleep_end": "06:45",
                    "sleep_quality": 3,
                    "trigger": triggers,
                    "stress_level": 3,
                    "sleep_hours": 5,
                    "neck_spasm": 4,
                    "head_tilt_duration": 120,
                }
            )
            zones.append(entry.zone.value)

        table = Table(title="Recorded Zones")
        table.add_column("Reading", style="cyan")
        table.add_column("Zone", style="magenta")
        for (_, systolic, diastolic, pulse, _), zone in zip(SCENARIOS, zones, strict=True):
            table.add_row(f"{systolic}/{diastolic}, {pulse} bpm", zone)
        console.print(table)

        reopened = build_session(directory)
        if len(reopened.repository) != len(SCENARIOS):
            raise AssertionError("persisted log does not match what was recorded")

        console.print(f"✅ {len(SCENARIOS)} entries recorded and reloaded", style="green")
        return True

    except Exception as e:
        console.print(f"❌ Entry lifecycle test failed: {e}", style="red")
        return False


def test_export_import(directory: Path) -> bool:
    """Export the log, add an entry, then restore the export."""

    console.print(Panel("📦 Testing Export and Import", style="blue"))

    try:
        controller = build_session(directory)
        markdown = controller.export_markdown()
        backup = controller.export_json()
        console.print(f"📤 Markdown: {markdown}")
        console.print(f"📤 JSON: {backup}")

        controller.submit({"systolic": 120, "diastolic": 80, "pulse": 65})
        before = len(controller.repository)

        controller.import_file(backup, lambda prompt: True)
        console.print(
            f"✅ Import restored {len(controller.repository)} entries (was {before})",
            style="green",
        )
        return True

    except Exception as e:
        console.print(f"❌ Export/import test failed: {e}", style="red")
        return False


def test_notes_analysis() -> bool:
    """Analyze sample notes with the keyword rules."""

    console.print(Panel("📝 Testing Notes Analysis", style="blue"))

    try:
        analyzer = NotesAnalyzer(AnalysisConfig())
        samples = [
            "Slept four hours, pressure went up in the afternoon",
            "Neck spasm after working at the laptop",
            "Walked in the park, felt fine",
        ]
        for text in samples:
            analysis = analyzer.analyze(text)
            console.print(f"🔍 {text}", style="yellow")
            for finding in analysis.findings:
                console.print(f"  - {finding} ({analysis.source})")
        return True

    except Exception as e:
        console.print(f"❌ Notes analysis test failed: {e}", style="red")
        return False


def test_error_handling(directory: Path) -> bool:
    """Invalid input and corrupt imports must leave the log unchanged."""

    console.print(Panel("🛡️ Testing Error Handling", style="blue"))

    try:
        controller = build_session(directory)
        before = controller.repository.list()

        try:
            controller.submit({"systolic": 140})
            raise AssertionError("form without diastolic/pulse was accepted")
        except ValidationError as e:
            console.print(f"✅ Rejected incomplete form: {e}", style="green")

        corrupt = directory / "corrupt.json"
        corrupt.write_text('{"entries": [{"id": "x"}]}', encoding="utf-8")
        try:
            controller.import_file(corrupt, lambda prompt: True)
            raise AssertionError("corrupt import was accepted")
        except FormatError as e:
            console.print(f"✅ Rejected corrupt import: {e}", style="green")

        if controller.repository.list() != before:
            raise AssertionError("log changed after rejected actions")
        return True

    except Exception as e:
        console.print(f"❌ Error handling test failed: {e}", style="red")
        return False


def run_all_tests() -> None:
    """Run all system tests."""

    console.print(Panel("🧪 Health Log - System Tests", style="bold blue"))

    with tempfile.TemporaryDirectory(prefix="healthlog-") as tmp:
        directory = Path(tmp)
        tests = [
            ("Configuration", test_configuration),
            ("Entry Lifecycle", lambda: test_entry_lifecycle(directory)),
            ("Export and Import", lambda: test_export_import(directory)),
            ("Notes Analysis", test_notes_analysis),
            ("Error Handling", lambda: test_error_handling(directory)),
        ]

        results = []
        for test_name, test_func in tests:
            console.print(f"\n{'=' * 60}")
            try:
                results.append((test_name, test_func()))
            except KeyboardInterrupt:
                console.print("\n⏹️  Tests interrupted by user", style="yellow")
                break
            except Exception as e:
                console.print(f"❌ {test_name} failed with exception: {e}", style="red")
                results.append((test_name, False))

    console.print(f"\n{'=' * 60}")
    console.print(Panel("📋 Test Results Summary", style="bold"))

    summary_table = Table()
    summary_table.add_column("Test", style="cyan")
    summary_table.add_column("Result", style="white")

    passed = 0
    for test_name, result in results:
        if result:
            summary_table.add_row(test_name, "✅ PASSED")
            passed += 1
        else:
            summary_table.add_row(test_name, "❌ FAILED")

    console.print(summary_table)
    console.print(f"\n🎯 Results: {passed}/{len(results)} tests passed")

    if passed == len(results):
        console.print("🎉 All tests passed! Your health log is ready.", style="green")
    else:
        console.print("⚠️  Some tests failed. Check the output above.", style="yellow")


if __name__ == "__main__":
    try:
        run_all_tests()
    except KeyboardInterrupt:
        console.print("\n👋 Tests stopped by user", style="yellow")
    except Exception as e:
        console.print(f"\n💥 Test suite failed: {e}", style="red")
