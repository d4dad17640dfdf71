"""Unit tests for utility functions (create_js_library.utils).

Tests cover:
- run_command (success, failure, cwd, capture=False, timeout, missing binary)
- load_json / dump_manifest / write_manifest
- format_duration
- Rich output helpers
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from create_js_library.utils import (
    dump_manifest,
    format_duration,
    load_json,
    print_error,
    print_phase_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
    write_manifest,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command(self):
        returncode, stdout, _ = await run_command([sys.executable, "-c", "print('hello')"])
        assert returncode == 0
        assert stdout == "hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, _, _ = await run_command([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cwd_does_not_change_parent(self, tmp_path: Path):
        before = Path.cwd()
        returncode, stdout, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()
        assert Path.cwd() == before

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        returncode, _, stderr = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_binary_raises(self):
        with pytest.raises(FileNotFoundError):
            await run_command(["nonexistent-binary-12345-xyz"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capture_false_inherits_streams(self, mock_subprocess):
        proc = mock_subprocess(returncode=0)
        proc.communicate.return_value = (None, None)
        with patch("asyncio.create_subprocess_exec", return_value=proc) as mock_exec:
            returncode, stdout, stderr = await run_command(["npm", "--version"], capture=False)
        assert (returncode, stdout, stderr) == (0, "", "")
        kwargs = mock_exec.call_args.kwargs
        assert kwargs["stdout"] is None
        assert kwargs["stderr"] is None


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


class TestLoadJson:
    @pytest.mark.unit
    def test_loads_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        assert load_json(path) == {"a": 1}

    @pytest.mark.unit
    def test_rejects_non_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="Expected a JSON object"):
            load_json(path)

    @pytest.mark.unit
    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")


class TestManifestSerialisation:
    @pytest.mark.unit
    def test_two_space_indent_and_trailing_linesep(self):
        text = dump_manifest({"name": "x", "scripts": {"build": "rollup"}})
        assert text == '{\n  "name": "x",\n  "scripts": {\n    "build": "rollup"\n  }\n}' + os.linesep

    @pytest.mark.unit
    def test_non_ascii_not_escaped(self):
        assert "Zoë" in dump_manifest({"author": "Zoë"})

    @pytest.mark.unit
    def test_write_manifest_bytes(self, tmp_path: Path):
        path = tmp_path / "package.json"
        write_manifest({"name": "x"}, path)
        assert path.read_bytes() == ('{\n  "name": "x"\n}' + os.linesep).encode("utf-8")


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds, expected",
        [(3.7, "3.7s"), (65.2, "1m 5s"), (3661.0, "1h 1m 1s"), (-1, "0.0s")],
    )
    def test_format(self, seconds: float, expected: str):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_helpers_print(self):
        with patch("create_js_library.utils.console") as mock_console:
            print_success("ok")
            print_error("bad")
            print_warning("careful")
            print_phase_header("Installing dependencies")
            print_summary_table({"Library": "my-lib"})
        assert mock_console.print.call_count >= 5
        printed = " ".join(str(c.args[0]) for c in mock_console.print.call_args_list if c.args)
        assert "ok" in printed
        assert "bad" in printed
        assert "careful" in printed
