"""Tests for CLI commands."""

from cashpulse.cli.main import cli


def invoke(cli_runner, temp_store, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_store.database_path, *args], **kwargs)


def add(cli_runner, temp_store, txn_type, category, amount, *extra):
    return invoke(
        cli_runner,
        temp_store,
        "add",
        "--type",
        txn_type,
        "--category",
        category,
        "--amount",
        amount,
        *extra,
    )


def created_id(output: str) -> str:
    for line in output.split("\n"):
        if line.startswith("Created transaction"):
            return line.split()[-1]
    raise AssertionError(f"No transaction id in output: {output}")


def test_add_expense(cli_runner, temp_store):
    """Test adding an expense with a note."""
    result = add(cli_runner, temp_store, "expense", "food", "12.50", "--note", "Lunch")

    assert result.exit_code == 0
    assert "Created transaction" in result.output
    assert "Category: Food" in result.output
    assert "Note: Lunch" in result.output
    assert "Pulse: #FF4757" in result.output
    assert "Balance: -$12.50" in result.output


def test_add_large_income_reports_alert(cli_runner, temp_store):
    result = add(cli_runner, temp_store, "income", "Salary", "1500")

    assert result.exit_code == 0
    assert "Alert: Large Transaction Alert" in result.output
    assert "Balance: $1,500.00" in result.output


def test_add_with_wrong_category_scope(cli_runner, temp_store):
    result = add(cli_runner, temp_store, "income", "Food", "10")

    assert result.exit_code == 1
    assert "cannot be used for income" in result.output


def test_add_with_negative_amount(cli_runner, temp_store):
    result = add(cli_runner, temp_store, "expense", "Food", "-10")

    assert result.exit_code == 1
    assert "Invalid amount format" in result.output


def test_add_with_invalid_date(cli_runner, temp_store):
    result = add(cli_runner, temp_store, "expense", "Food", "10", "--date", "someday maybe")

    assert result.exit_code == 1
    assert "Invalid date format" in result.output


def test_summary(cli_runner, temp_store):
    add(cli_runner, temp_store, "income", "Freelance", "800")
    add(cli_runner, temp_store, "expense", "Bills", "300")

    result = invoke(cli_runner, temp_store, "summary")

    assert result.exit_code == 0
    assert "Balance: $500.00" in result.output
    assert "Today" in result.output
    assert "$800.00" in result.output


def test_day_lists_transactions(cli_runner, temp_store):
    add(cli_runner, temp_store, "expense", "Transport", "4.20", "--note", "Bus")

    result = invoke(cli_runner, temp_store, "day")

    assert result.exit_code == 0
    assert "1 transaction(s)" in result.output
    assert "Transport" in result.output
    assert "Bus" in result.output


def test_day_without_transactions(cli_runner, temp_store):
    result = invoke(cli_runner, temp_store, "day", "2020-01-01")

    assert result.exit_code == 0
    assert "No transactions on 2020-01-01." in result.output


def test_days(cli_runner, temp_store):
    add(cli_runner, temp_store, "expense", "Food", "10")
    add(cli_runner, temp_store, "expense", "Food", "15", "--date", "yesterday")

    result = invoke(cli_runner, temp_store, "days")

    assert result.exit_code == 0
    assert "-$10.00" in result.output
    assert "-$15.00" in result.output


def test_delete(cli_runner, temp_store):
    result = add(cli_runner, temp_store, "expense", "Food", "25")
    txn_id = created_id(result.output)

    result = invoke(cli_runner, temp_store, "delete", txn_id)

    assert result.exit_code == 0
    assert f"Deleted transaction {txn_id}" in result.output
    assert "Balance: $0.00" in result.output


def test_delete_unknown(cli_runner, temp_store):
    result = invoke(cli_runner, temp_store, "delete", "ffffffff")

    assert result.exit_code == 0
    assert "No transaction matching 'ffffffff'." in result.output


def test_patterns(cli_runner, temp_store):
    result = invoke(cli_runner, temp_store, "patterns")
    assert "No patterns yet" in result.output

    add(cli_runner, temp_store, "expense", "Shopping", "60")
    result = invoke(cli_runner, temp_store, "patterns")

    assert result.exit_code == 0
    assert "Shopping" in result.output
    assert "Monthly" in result.output


def test_alerts_list_and_toggle(cli_runner, temp_store):
    result = invoke(cli_runner, temp_store, "alerts", "list")
    assert result.exit_code == 0
    assert "4 of 4 enabled" in result.output

    rule_line = next(line for line in result.output.split("\n") if "Large Transaction Alert" in line)
    rule_id = rule_line.split()[0]

    result = invoke(cli_runner, temp_store, "alerts", "toggle", rule_id)
    assert result.exit_code == 0
    assert "Large Transaction Alert disabled" in result.output

    result = invoke(cli_runner, temp_store, "alerts", "list")
    assert "3 of 4 enabled" in result.output

    result = add(cli_runner, temp_store, "income", "Salary", "5000")
    assert "Alert: Large Transaction Alert" not in result.output


def test_alerts_toggle_unknown(cli_runner, temp_store):
    result = invoke(cli_runner, temp_store, "alerts", "toggle", "nope")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_achievements(cli_runner, temp_store):
    add(cli_runner, temp_store, "expense", "Health", "35")

    result = invoke(cli_runner, temp_store, "achievements")

    assert result.exit_code == 0
    assert "[x] First Steps" in result.output
    assert "[ ] Getting Started" in result.output

    result = invoke(cli_runner, temp_store, "achievements", "--unlocked")
    assert "Getting Started" not in result.output


def test_clear_requires_confirmation(cli_runner, temp_store):
    add(cli_runner, temp_store, "expense", "Food", "10")

    result = invoke(cli_runner, temp_store, "clear", input="n\n")
    assert result.exit_code == 1

    result = invoke(cli_runner, temp_store, "summary")
    assert "Balance: -$10.00" in result.output


def test_clear(cli_runner, temp_store):
    add(cli_runner, temp_store, "income", "Gift", "2000")

    result = invoke(cli_runner, temp_store, "clear", "--yes")
    assert result.exit_code == 0
    assert "All data cleared." in result.output

    result = invoke(cli_runner, temp_store, "summary")
    assert "Balance: $0.00" in result.output
    result = invoke(cli_runner, temp_store, "achievements")
    assert "0/12 unlocked" in result.output


def test_help_does_not_open_store(cli_runner, tmp_path):
    db_path = tmp_path / "unused.db"
    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])

    assert result.exit_code == 0
    assert "Personal cash flow tracker" in result.output
    assert not db_path.exists()
