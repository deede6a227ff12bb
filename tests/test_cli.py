# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import io
import json

import pytest

from matrix_engine.cli import main


def _run(capsys, argv):
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


def test_determinant(capsys):
    code, out = _run(capsys, ["determinant", "--matrix", "[[1, 2], [3, 4]]"])
    assert code == 0
    assert out["result"] == pytest.approx(-2.0)


def test_solve_with_two_matrices(capsys):
    code, out = _run(capsys, ["solve", "-m", "[[2, 0], [0, 2]]", "-m", "[[4], [6]]"])
    assert code == 0
    assert out["result"]["data"] == [[2.0], [3.0]]


def test_power_flag(capsys):
    code, out = _run(capsys, ["power", "-m", "[[1, 1], [1, 0]]", "--power", "10"])
    assert code == 0
    assert out["result"]["data"] == [[89.0, 55.0], [55.0, 34.0]]


def test_lu_pivot_flag(capsys):
    code, out = _run(capsys, ["lu", "-m", "[[0, 1], [1, 0]]", "--pivot"])
    assert code == 0
    assert set(out["result"]) == {"L", "U", "P"}


def test_error_exit_code(capsys):
    code, out = _run(capsys, ["inverse", "-m", "[[1, 2], [2, 4]]"])
    assert code == 1
    assert out["error"]["kind"] == "singular_matrix"


def test_request_file(tmp_path, capsys):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"operation": "trace", "matrices": [{"data": [[1, 0], [0, 5]]}]}))
    code, out = _run(capsys, ["--input", str(path)])
    assert code == 0
    assert out["result"] == 6.0


def test_request_from_stdin(monkeypatch, capsys):
    message = {"operation": "rank", "matrices": [{"data": [[1, 2], [2, 4]]}]}
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(message)))
    code, out = _run(capsys, ["-i", "-"])
    assert code == 0
    assert out["result"] == 1


def test_bad_matrix_json_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as info:
        main(["transpose", "-m", "[[1, 2"])
    assert info.value.code == 2


def test_missing_operation_is_a_usage_error(capsys):
    with pytest.raises(SystemExit):
        main([])


def test_unknown_operation_is_rejected_by_argparse(capsys):
    with pytest.raises(SystemExit):
        main(["cholesky", "-m", "[[1]]"])
