import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import main


def write_csv(tmp_path, lines, name="input.csv"):
    csv_file = tmp_path / name
    csv_file.write_text('\n'.join(["type, client, tx, amount"] + lines))
    return str(csv_file)


class TestMain:
    def test_writes_stdout(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, [
            "deposit, 1, 1, 50.0",
            "deposit, 1, 2, 30.0",
            "withdrawal, 1, 3, 20.0",
        ])

        assert main([csv_file]) == 0

        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,60.0000,0.0000,60.0000,false",
        ]

    def test_writes_output_file(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, ["deposit, 3, 1, 1"])
        output = tmp_path / "out.csv"

        assert main([csv_file, "-o", str(output)]) == 0

        assert capsys.readouterr().out == ""
        assert output.read_text() == "client,available,held,total,locked\n3,1.0000,0.0000,1.0000,false\n"

    def test_missing_input_exits_non_zero(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.csv")]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "payments-ledger:" in captured.err

    def test_existing_output_kept_when_input_missing(self, tmp_path, capsys):
        output = tmp_path / "out.csv"
        output.write_text("client,available,held,total,locked\n1,5.0000,0.0000,5.0000,false\n")

        assert main([str(tmp_path / "missing.csv"), "-o", str(output)]) == 1

        assert output.read_text() == "client,available,held,total,locked\n1,5.0000,0.0000,5.0000,false\n"

    def test_oversized_amounts_skipped_without_aborting(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, [
            "deposit, 1, 1, 900000000000000000000000",
            "deposit, 1, 2, 900000000000000000000000",
            "deposit, 1, 3, 999999999999999.9999",
            "deposit, 1, 4, 999999999999999.9999",
        ])

        assert main([csv_file]) == 0

        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,1999999999999999.9998,0.0000,1999999999999999.9998,false",
        ]

    def test_unwritable_output_exits_non_zero(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, ["deposit, 1, 1, 1"])
        assert main([csv_file, "-o", str(tmp_path / "no-such-dir" / "out.csv")]) == 1

    def test_no_arguments_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2
