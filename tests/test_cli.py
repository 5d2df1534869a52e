import csv
import io

from contract_amortization.cli import main


def test_generate_prints_schedule(capsys):
    code = main(["generate", "--amount", "100", "--start", "2024-01-01", "--end", "2024-03-31", "--as-of", "2024-02-10"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Amortization Schedule" in out
    assert "Scenario: IN_PROGRESS" in out
    assert out.count("33.33") == 2
    assert "33.34" in out
    assert "100.00" in out


def test_generate_writes_csv(tmp_path, capsys):
    target = tmp_path / "schedule.csv"

    code = main(["generate", "--amount", "6000", "--start", "2024-01-01", "--end", "2024-06-30", "--csv", str(target)])

    assert code == 0
    rows = list(csv.DictReader(io.StringIO(target.read_text(encoding="utf-8"))))
    assert [row["amortization_period"] for row in rows] == ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"]
    assert {row["amount"] for row in rows} == {"1000.00"}


def test_generate_rejects_inverted_range(capsys):
    code = main(["generate", "--amount", "100", "--start", "2024-06-01", "--end", "2024-01-01"])

    assert code == 1
    assert capsys.readouterr().err.startswith("error: Contract end date 2024-01-01 precedes start date 2024-06-01")


def test_generate_rejects_non_positive_amount(capsys):
    assert main(["generate", "--amount", "0", "--start", "2024-01-01", "--end", "2024-01-31"]) == 1
    assert "must be positive" in capsys.readouterr().err


def test_contracts_lists_mock_data(capsys):
    code = main(["contracts", "--page", "0", "--size", "2"])

    out = capsys.readouterr().out
    assert code == 0
    assert "2 of 3" in out
    assert "#3 Vendor C" in out
    assert "#1 Vendor A" not in out


def test_schedule_for_unknown_contract_fails(capsys):
    assert main(["schedule", "99"]) == 1
    assert "contract 99 not found" in capsys.readouterr().err
