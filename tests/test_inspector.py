"""
Tests for the file source, inspector, reporters and the gguf-info command.
"""

import hashlib
import json

import pytest

from gguf_header import DecodeLimits, ValueType
from gguf_header.analysis.inspector import HeaderInspector
from gguf_header.cli import main
from gguf_header.io.file_reader import LocalFileSource, MappedFile
from gguf_header.model_formats.gguf.gguf import MAX_DEPTH_CEILING, Value
from gguf_header.model_formats.gguf.gguf_values import ByteCursor
from gguf_header.observability import Timer, to_dict
from gguf_header.reporting.console import format_value
from gguf_header.reporting.json_reporter import to_json_dict, write_json

from gguf_bytes import array, gguf_str, header, kv, scalar

TENSOR_INFO_BYTES = b"\x00" * 40


@pytest.fixture
def model_bytes():
    return header(
        [
            kv("general.architecture", ValueType.STRING, gguf_str("llama")),
            kv("llama.context_length", ValueType.UINT32, scalar(ValueType.UINT32, 4096)),
            kv(
                "tokenizer.ggml.tokens",
                ValueType.ARRAY,
                array(ValueType.STRING, [gguf_str(t) for t in ("<unk>", "<s>", "</s>", "[x]")]),
            ),
        ],
        version=3,
        tensor_count=2,
    )


@pytest.fixture
def model_file(tmp_path, model_bytes):
    p = tmp_path / "model.gguf"
    p.write_bytes(model_bytes + TENSOR_INFO_BYTES)
    return p


@pytest.fixture
def bad_file(tmp_path):
    p = tmp_path / "bad.gguf"
    p.write_bytes(b"GGML" + b"\x00" * 32)
    return p


# ============================================================================
# File source
# ============================================================================

def test_mapped_file_view(model_file):
    with LocalFileSource(str(model_file)).open() as mf:
        assert mf.size == model_file.stat().st_size
        assert bytes(mf.view[:4]) == b"GGUF"


def test_mapped_file_empty(tmp_path):
    p = tmp_path / "empty.gguf"
    p.write_bytes(b"")
    with MappedFile(str(p)) as mf:
        assert mf.size == 0
        assert len(mf.view) == 0


def test_mapped_file_not_entered(model_file):
    with pytest.raises(RuntimeError):
        MappedFile(str(model_file)).view


def test_mapped_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        with MappedFile(str(tmp_path / "nope.gguf")):
            pass


def test_mapped_file_keeps_original_error_while_views_alive(model_file):
    with pytest.raises(KeyError, match="boom"):
        with LocalFileSource(str(model_file)).open() as mf:
            cur = ByteCursor(mf.view)
            cur.take(4)
            raise KeyError("boom")


# ============================================================================
# Inspector
# ============================================================================

def test_inspector_all_stages(model_file, model_bytes):
    rep = HeaderInspector(str(model_file)).run()
    assert rep.ok
    assert rep.stages_run == ["sha256", "header"]
    assert rep.sha256_hex == hashlib.sha256(model_file.read_bytes()).hexdigest()
    assert rep.header.version == 3
    assert rep.header.tensor_count == 2
    assert rep.header.architecture == "llama"
    assert rep.header_size == len(model_bytes)
    assert set(rep.timings_ms) == {"sha256", "header"}


def test_inspector_sha256_only(model_file):
    rep = HeaderInspector(str(model_file)).run(["sha256"])
    assert rep.header is None
    assert rep.stages_run == ["sha256"]


def test_inspector_header_only(model_file):
    rep = HeaderInspector(str(model_file)).run(["header"])
    assert rep.sha256_hex == "not_run"
    assert rep.header.metadata_count == 3


def test_inspector_records_decode_error(bad_file):
    rep = HeaderInspector(str(bad_file)).run()
    assert not rep.ok
    assert rep.header is None
    assert rep.error_kind == "BadMagicError"
    assert "GGML" in rep.error


def test_inspector_empty_file(tmp_path):
    p = tmp_path / "empty.gguf"
    p.write_bytes(b"")
    rep = HeaderInspector(str(p)).run()
    assert rep.error_kind == "BadMagicError"


def test_inspector_applies_limits(tmp_path):
    nested = array(ValueType.ARRAY, [array(ValueType.UINT8, [])])
    p = tmp_path / "nested.gguf"
    p.write_bytes(header([kv("nested", ValueType.ARRAY, nested)]))
    rep = HeaderInspector(str(p), limits=DecodeLimits(max_depth=1)).run(["header"])
    assert rep.error_kind == "NestingTooDeepError"


def test_inspector_unknown_stage(model_file):
    with pytest.raises(ValueError):
        HeaderInspector(str(model_file)).run(["structure"])


# ============================================================================
# Reporting helpers
# ============================================================================

def test_timer_measures():
    with Timer("t") as t:
        pass
    assert t.duration_ms >= 0.0


def test_to_dict_collapses_values():
    v = Value(ValueType.ARRAY, (Value(ValueType.UINT8, 1),), element_type=ValueType.UINT8)
    assert to_dict(v) == [1]
    assert to_dict(ValueType.FLOAT32) == "FLOAT32"


def test_json_dict(model_file):
    d = to_json_dict(HeaderInspector(str(model_file)).run())
    assert d["ok"] is True
    assert d["header"]["version"] == 3
    first = d["header"]["metadata"][0]
    assert first == {"key": "general.architecture", "type": "STRING", "value": "llama"}
    assert d["header"]["metadata"][2]["value"] == ["<unk>", "<s>", "</s>", "[x]"]
    json.dumps(d)


def test_format_value_truncates():
    long = Value(ValueType.STRING, "x" * 200)
    assert len(format_value(long)) == 70
    assert format_value(long, full=True) == repr("x" * 200)


def test_format_value_array_preview():
    items = tuple(Value(ValueType.UINT8, i) for i in range(5))
    v = Value(ValueType.ARRAY, items, element_type=ValueType.UINT8)
    assert format_value(v) == "[0, 1, 2, ...] (n=5)"
    assert format_value(v, full=True) == "[0, 1, 2, 3, 4] (n=5)"


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_write_json_non_finite_floats(tmp_path):
    p = tmp_path / "floats.gguf"
    p.write_bytes(
        header(
            [
                kv("f32.nan", ValueType.FLOAT32, scalar(ValueType.FLOAT32, float("nan"))),
                kv("f64.ninf", ValueType.FLOAT64, scalar(ValueType.FLOAT64, float("-inf"))),
                kv(
                    "scores",
                    ValueType.ARRAY,
                    array(
                        ValueType.FLOAT32,
                        [scalar(ValueType.FLOAT32, x) for x in (1.0, float("inf"))],
                    ),
                ),
            ]
        )
    )
    out_path = tmp_path / "floats.json"
    write_json(HeaderInspector(str(p)).run(["header"]), str(out_path))
    data = json.loads(out_path.read_text(encoding="utf-8"), parse_constant=_reject_constant)
    values = [e["value"] for e in data["header"]["metadata"]]
    assert values == ["nan", "-inf", [1.0, "inf"]]


# ============================================================================
# CLI
# ============================================================================

def test_cli_show(model_file, capsys):
    assert main(["show", str(model_file)]) == 0
    out = capsys.readouterr().out
    assert "general.architecture" in out
    assert "llama.context_length" in out
    assert "4096" in out


def test_cli_show_json_out(model_file, tmp_path):
    out_path = tmp_path / "report.json"
    assert main(["show", str(model_file), "--json-out", str(out_path), "--stage", "header"]) == 0
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data["sha256_hex"] == "not_run"
    assert data["header"]["tensor_count"] == 2


def test_cli_show_decode_failure(bad_file, capsys):
    assert main(["show", str(bad_file)]) == 1
    out = capsys.readouterr().out
    assert "BadMagicError" in out


def test_cli_missing_file(tmp_path, capsys):
    assert main(["show", str(tmp_path / "nope.gguf")]) == 2
    assert "File not found" in capsys.readouterr().out


def test_cli_max_depth_bounds(model_file):
    with pytest.raises(SystemExit):
        main(["show", str(model_file), "--max-depth", "0"])


def _deep_file(tmp_path, depth):
    body = array(ValueType.UINT8, [])
    for _ in range(depth - 1):
        body = array(ValueType.ARRAY, [body])
    p = tmp_path / f"deep{depth}.gguf"
    p.write_bytes(header([kv("deep", ValueType.ARRAY, body)]))
    return p


def test_cli_deepest_allowed_nesting(tmp_path):
    p = _deep_file(tmp_path, MAX_DEPTH_CEILING)
    assert main(["show", str(p), "--max-depth", str(MAX_DEPTH_CEILING)]) == 0


def test_cli_nesting_past_ceiling_reports_failure(tmp_path, capsys):
    p = _deep_file(tmp_path, MAX_DEPTH_CEILING + 1)
    assert main(["show", str(p), "--max-depth", str(MAX_DEPTH_CEILING)]) == 1
    assert "NestingTooDeepError" in capsys.readouterr().out


def test_cli_rejects_max_depth_above_ceiling(model_file):
    with pytest.raises(SystemExit):
        main(["show", str(model_file), "--max-depth", str(MAX_DEPTH_CEILING + 1)])


def test_cli_version(capsys):
    assert main(["version"]) == 0
    assert "gguf-header" in capsys.readouterr().out


def test_cli_no_command(capsys):
    assert main([]) == 2
