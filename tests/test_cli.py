import json
from pathlib import Path

from bfast.cli import main


def _manifest(tmp_path: Path) -> Path:
    m = tmp_path / "m.json"
    m.write_text(
        json.dumps(
            {
                "buffers": [
                    {"name": "xs", "data_hex": "01000000" "02000000" "03000000"},
                    {"name": "title", "data": "hello"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return m


def _packed(tmp_path: Path) -> Path:
    out = tmp_path / "out.bfast"
    assert main(["-r", "silent", "pack", str(_manifest(tmp_path)), str(out)]) == 0
    return out


def test_cli_pack_and_unpack(tmp_path: Path):
    out = _packed(tmp_path)
    assert out.stat().st_size % 32 == 0
    dest = tmp_path / "extracted"
    assert main(["-r", "silent", "unpack", str(out), str(dest)]) == 0
    assert (dest / "xs").read_bytes() == bytes.fromhex("010000000200000003000000")
    assert (dest / "title").read_bytes() == b"hello"


def test_cli_inspect_json(tmp_path: Path, capsys):
    out = _packed(tmp_path)
    capsys.readouterr()
    assert main(["-r", "silent", "inspect", "--json", str(out)]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["buffers"] == 2
    assert info["issues"] == []
    assert [r["name"] for r in info["ranges"]] == ["<names>", "xs", "title"]


def test_cli_list(tmp_path: Path, capsys):
    out = _packed(tmp_path)
    capsys.readouterr()
    assert main(["-r", "silent", "list", str(out)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split() for line in lines] == [["12", "xs"], ["5", "title"]]


def test_cli_validate(tmp_path: Path, capsys):
    out = _packed(tmp_path)
    assert main(["-r", "silent", "validate", str(out)]) == 0
    data = bytearray(out.read_bytes())
    data[0] = 0
    out.write_bytes(bytes(data))
    assert main(["-r", "plain", "validate", str(out)]) == 1
    assert "E_MAGIC" in capsys.readouterr().err


def test_cli_reports_codec_errors(tmp_path: Path, capsys):
    bad = tmp_path / "bad.bfast"
    bad.write_bytes(b"\x00" * 10)
    assert main(["-r", "plain", "unpack", str(bad), str(tmp_path / "o")]) == 1
    assert "E_TRUNCATED" in capsys.readouterr().err


def test_cli_missing_manifest(tmp_path: Path):
    rc = main(["-r", "silent", "pack", str(tmp_path / "none.json"), str(tmp_path / "o")])
    assert rc == 1


def test_cli_reporter_from_environment(tmp_path: Path, capsys, monkeypatch):
    manifest = _manifest(tmp_path)
    monkeypatch.setenv("BFAST_REPORTER", "json")
    assert main(["pack", str(manifest), str(tmp_path / "o.bfast")]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    summaries = [e for e in events if e["event"] == "summary"]
    assert len(summaries) == 1
    assert summaries[0]["kind"] == "pack"
    assert summaries[0]["buffers"] == 2
    assert summaries[0]["bytes"] == (tmp_path / "o.bfast").stat().st_size
    buffers = [e["name"] for e in events if e["event"] == "buffer"]
    assert buffers == ["xs", "title"]
    ends = [e for e in events if e["event"] == "phase_end"]
    assert ends and ends[0]["outcome"] == "ok"
    assert ends[0]["buffers"] == 2


def test_cli_validate_summary_event(tmp_path: Path, capsys):
    out = _packed(tmp_path)
    capsys.readouterr()
    assert main(["-r", "json", "validate", str(out)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert {"event": "summary", "kind": "validate", "file": out.name, "issues": 0} in events


def test_cli_unpack_reports_phase(tmp_path: Path, capsys):
    out = _packed(tmp_path)
    capsys.readouterr()
    assert main(["-r", "plain", "unpack", str(out), str(tmp_path / "x")]) == 0
    err = capsys.readouterr().err
    assert "✔ Extract buffers: 2/2 buffers, 17 bytes" in err
    assert "Unpack summary: file=out.bfast buffers=2" in err


def test_cli_malformed_yaml_manifest(tmp_path: Path, capsys):
    m = tmp_path / "m.yaml"
    m.write_text("buffers: [\n  - name: a\n", encoding="utf-8")
    rc = main(["-r", "plain", "pack", str(m), str(tmp_path / "o.bfast")])
    assert rc == 1
    err = capsys.readouterr().err
    assert "ERROR: Cannot parse manifest m.yaml" in err
    assert "Traceback" not in err


def test_cli_malformed_json_manifest(tmp_path: Path):
    m = tmp_path / "m.json"
    m.write_text("{not json", encoding="utf-8")
    assert main(["-r", "silent", "pack", str(m), str(tmp_path / "o.bfast")]) == 1
