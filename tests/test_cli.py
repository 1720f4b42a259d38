import json

import pytest

from proposta.cli.__main__ import main

def _write(tmp_path, data):
    p = tmp_path / "proposta.json"
    p.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return p

def _as_json(valid_input):
    data = dict(valid_input)
    data["dataProposta"] = valid_input["dataProposta"].isoformat()
    return data

def test_validate_pass(tmp_path, valid_input, capsys):
    main(["validate", str(_write(tmp_path, _as_json(valid_input)))])
    out = capsys.readouterr().out
    assert "[PASS]" in out
    assert "R$ 1.000,00" in out
    assert "31/01/2025" in out

def test_validate_fail_exit_code(tmp_path, valid_input, capsys):
    data = _as_json(valid_input)
    data["itensPrecos"] = []
    with pytest.raises(SystemExit) as exc:
        main(["validate", str(_write(tmp_path, data))])
    assert exc.value.code == 1
    assert "itensPrecos" in capsys.readouterr().err

def test_render_to_file(tmp_path, valid_input):
    out = tmp_path / "proposta.html"
    main(["render", str(_write(tmp_path, _as_json(valid_input))), f"--out={out}"])
    html = out.read_text(encoding="utf-8")
    assert "Proposta_2023-PT-1-01_ACME" in html
    assert "R$ 750,00" in html

def test_unreadable_json(tmp_path):
    bad = tmp_path / "ruim.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["validate", str(bad)])
    assert exc.value.code == 2
