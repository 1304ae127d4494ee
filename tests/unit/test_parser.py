"""
Unit tests for the brokerage CSV row parser.

Tests cover:
- Number cleaning
- Header and column detection
- Cash row detection
- Skipped rows and warnings
- Field derivation when a column is absent
"""

from decimal import Decimal

import pytest

from holdings.csv import clean_number, detect_columns, parse_csv_text


# =============================================================================
# NUMBER CLEANING TESTS
# =============================================================================


class TestCleanNumber:
    """Tests for clean_number."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("$1,234.56", Decimal("1234.56")),
            ("  42 ", Decimal("42")),
            ("(1,234.50)", Decimal("-1234.50")),
            ("-7.25", Decimal("-7.25")),
            ("+3.10%", Decimal("3.10")),
            ("0.0001", Decimal("0.0001")),
        ],
    )
    def test_parses_brokerage_formats(self, raw: str, expected: Decimal):
        """
        GIVEN a number formatted the way brokerages export it
        WHEN I clean it
        THEN the Decimal value is returned
        """
        assert clean_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "--", "n/a", "N/A", "none", "abc", "$", "nan"])
    def test_missing_or_garbage_is_none(self, raw):
        """
        GIVEN a blank, placeholder or non-numeric cell
        WHEN I clean it
        THEN None is returned instead of raising
        """
        assert clean_number(raw) is None


# =============================================================================
# COLUMN DETECTION TESTS
# =============================================================================


class TestDetectColumns:
    """Tests for detect_columns."""

    def test_fidelity_header(self):
        """
        GIVEN a Fidelity positions header
        WHEN I detect columns
        THEN every field maps to its own column
        """
        columns = detect_columns([
            "Account Number", "Account Name", "Symbol", "Description",
            "Quantity", "Last Price", "Current Value", "Cost Basis Total",
        ])

        assert columns.symbol == 2
        assert columns.account == 1
        assert columns.company == 3
        assert columns.shares == 4
        assert columns.price == 5
        assert columns.value == 6
        assert columns.cost_basis == 7

    def test_account_name_is_not_reused_as_company(self):
        """
        GIVEN a header whose only 'name' column is 'Account Name'
        WHEN I detect columns
        THEN company is not mapped onto the account column
        """
        columns = detect_columns(["Symbol", "Account Name", "Quantity", "Current Value"])

        assert columns.account == 1
        assert columns.company is None
        assert columns.value == 3
        assert columns.price is None

    def test_current_value_is_not_reused_as_price(self):
        """
        GIVEN a header with 'Current Value' but no price column
        WHEN I detect columns
        THEN the value column is not also the price column
        """
        columns = detect_columns(["Ticker", "Company", "Shares", "Current Value"])

        assert columns.symbol == 0
        assert columns.company == 1
        assert columns.shares == 2
        assert columns.value == 3
        assert columns.price != 3

    def test_positional_defaults_without_keywords(self):
        """
        GIVEN header cells that match no keyword
        WHEN I detect columns
        THEN symbol, company and price fall back to the first three columns
        """
        columns = detect_columns(["A", "B", "C"])

        assert columns.symbol == 0
        assert columns.company == 1
        assert columns.price == 2
        assert columns.shares is None
        assert columns.value is None


# =============================================================================
# PARSE TESTS
# =============================================================================


class TestParseCsvText:
    """Tests for parse_csv_text."""

    def test_parses_holdings_and_cash(self, roth_csv: str):
        """
        GIVEN a Fidelity export with two stocks and a money market row
        WHEN I parse it
        THEN stocks become holdings and the money market row becomes cash
        """
        parsed = parse_csv_text(roth_csv, file_name="roth.csv")

        stocks = [r for r in parsed.rows if not r.is_cash]
        cash = [r for r in parsed.rows if r.is_cash]

        assert [r.symbol for r in stocks] == ["AAPL", "MSFT"]
        aapl = stocks[0]
        assert aapl.company_name == "APPLE INC"
        assert aapl.account == "Roth IRA"
        assert aapl.shares == Decimal("10")
        assert aapl.price == Decimal("150.00")
        assert aapl.value == Decimal("1500.00")
        assert aapl.cost_basis == Decimal("1200.00")

        assert len(cash) == 1
        assert cash[0].symbol == "SPAXX"
        assert cash[0].value == Decimal("500.00")
        assert cash[0].account == "Roth IRA"
        assert parsed.errors == ()

    def test_footer_and_disclaimer_rows_are_skipped_silently(self, taxable_csv: str):
        """
        GIVEN an export ending in a Total row
        WHEN I parse it
        THEN the footer produces neither a holding nor a warning
        """
        parsed = parse_csv_text(taxable_csv, file_name="taxable.csv")

        symbols = [r.symbol for r in parsed.rows]
        assert "TOTAL" not in symbols
        assert symbols == ["AAPL", "VTI", "FCASH"]
        assert parsed.errors == ()

    def test_byte_order_mark_is_ignored(self):
        """
        GIVEN text that starts with a UTF-8 byte order mark
        WHEN I parse it
        THEN the header is still detected
        """
        text = "\ufeffSymbol,Quantity,Price\nAAPL,2,100\n"

        parsed = parse_csv_text(text, file_name="bom.csv")

        assert [r.symbol for r in parsed.rows] == ["AAPL"]
        assert parsed.rows[0].value == Decimal("200")

    def test_header_found_after_preamble(self):
        """
        GIVEN an export with title lines before the header
        WHEN I parse it
        THEN data rows are read under the real header
        """
        text = (
            "Positions for account X123 as of 01/02/2025\n"
            "\n"
            "Symbol,Description,Quantity,Price,Market Value\n"
            "GOOG,ALPHABET INC,3,$170.00,$510.00\n"
        )

        parsed = parse_csv_text(text, file_name="schwab.csv")

        assert len(parsed.rows) == 1
        assert parsed.rows[0].symbol == "GOOG"
        assert parsed.rows[0].value == Decimal("510.00")
        assert parsed.errors == ()

    def test_account_falls_back_to_file_name(self):
        """
        GIVEN a file without an account column
        WHEN I parse it
        THEN each holding is attributed to the file name
        """
        parsed = parse_csv_text("Symbol,Shares,Price\nAAPL,1,10\n", file_name="ira.csv")

        assert parsed.rows[0].account == "ira.csv"

    def test_account_falls_back_to_default_without_file_name(self):
        """
        GIVEN no account column and no file name
        WHEN I parse the text
        THEN holdings are attributed to 'Default'
        """
        parsed = parse_csv_text("Symbol,Shares,Price\nAAPL,1,10\n")

        assert parsed.rows[0].account == "Default"

    def test_row_with_blank_price_is_skipped_with_warning(self):
        """
        GIVEN a row whose price cell is blank
        WHEN I parse the file
        THEN the row is skipped and a warning names the line and field
        """
        text = "Symbol,Shares,Price,Value\nAAPL,1,10,10\nMSFT,2,,800\n"

        parsed = parse_csv_text(text, file_name="f.csv")

        assert [r.symbol for r in parsed.rows] == ["AAPL"]
        assert parsed.errors == ("f.csv line 3: skipped MSFT, missing price",)

    def test_value_derived_when_file_has_no_value_column(self):
        """
        GIVEN a file with shares and price but no value column
        WHEN I parse it
        THEN value is shares times price
        """
        parsed = parse_csv_text("Symbol,Shares,Price\nAAPL,3,$10.50\n", file_name="f.csv")

        assert parsed.rows[0].value == Decimal("31.50")

    def test_shares_derived_when_file_has_no_shares_column(self):
        """
        GIVEN a file with price and value but no shares column
        WHEN I parse it
        THEN shares is value divided by price
        """
        parsed = parse_csv_text("Symbol,Price,Current Value\nAAPL,$25.00,$100.00\n", file_name="f.csv")

        assert parsed.rows[0].shares == Decimal("4")

    def test_cost_basis_defaults_to_zero(self):
        """
        GIVEN a cost basis cell showing '--'
        WHEN I parse the row
        THEN cost basis is zero
        """
        text = "Symbol,Quantity,Price,Value,Cost Basis\nAAPL,1,10,10,--\n"

        parsed = parse_csv_text(text, file_name="f.csv")

        assert parsed.rows[0].cost_basis == Decimal("0")

    def test_non_ticker_text_is_skipped(self):
        """
        GIVEN a footnote sitting in the symbol column
        WHEN I parse the file
        THEN it is skipped without a warning
        """
        text = "Symbol,Quantity,Price\nAAPL,1,10\nBrokerage services provided by X,see,note\n"

        parsed = parse_csv_text(text, file_name="f.csv")

        assert [r.symbol for r in parsed.rows] == ["AAPL"]
        assert parsed.errors == ()

    def test_option_row_is_kept(self):
        """
        GIVEN a Fidelity export with an option row whose symbol starts with '-'
        WHEN I parse the file
        THEN the option is a holding with its value and no warning
        """
        text = (
            "Account Name,Symbol,Description,Quantity,Last Price,Current Value\n"
            "Taxable,AAPL,APPLE INC,10,$150.00,\"$1,500.00\"\n"
            "Taxable, -AAPL250117C200,AAPL JAN 17 2025 $200 CALL,1,$5.00,$500.00\n"
        )

        parsed = parse_csv_text(text, file_name="f.csv")

        assert [r.symbol for r in parsed.rows] == ["AAPL", "AAPL250117C200"]
        assert parsed.rows[1].value == Decimal("500.00")
        assert parsed.errors == ()

    def test_unrecognised_symbol_with_numbers_warns(self):
        """
        GIVEN a row whose symbol is not a ticker but carries shares and value
        WHEN I parse the file
        THEN the row is skipped with a warning naming its line
        """
        text = "Symbol,Quantity,Price,Value\nAAPL,1,10,10\nACME FUND (CLOSED),3,5,15\n"

        parsed = parse_csv_text(text, file_name="f.csv")

        assert [r.symbol for r in parsed.rows] == ["AAPL"]
        assert parsed.errors == ("f.csv line 3: skipped ACME FUND (CLOSED), unrecognised symbol",)

    @pytest.mark.parametrize(
        "symbol, description",
        [
            ("FDRXX", "FIDELITY GOVERNMENT CASH RESERVES"),
            ("CORE**", "HELD IN FCASH"),
            ("CASH", "Cash"),
            ("XYZ", "Schwab Money Market Fund"),
        ],
    )
    def test_cash_detection_heuristics(self, symbol: str, description: str):
        """
        GIVEN a cash-like row by symbol or description
        WHEN I parse it
        THEN it is flagged as cash and '**' is stripped from the symbol
        """
        text = f"Symbol,Description,Quantity,Price,Value\n{symbol},{description},,,$75.00\n"

        parsed = parse_csv_text(text, file_name="f.csv")

        assert len(parsed.rows) == 1
        row = parsed.rows[0]
        assert row.is_cash
        assert row.value == Decimal("75.00")
        assert "*" not in row.symbol

    def test_custom_cash_symbols(self):
        """
        GIVEN a configured cash symbol not in the defaults
        WHEN I parse a row with that symbol
        THEN it is treated as cash
        """
        text = "Symbol,Quantity,Price,Value\nMMDA1,100,1,100\n"

        parsed = parse_csv_text(text, file_name="f.csv", cash_symbols=["MMDA1"])

        assert parsed.rows[0].is_cash

    def test_no_quantity_or_value_column(self):
        """
        GIVEN a header without any quantity or value column
        WHEN I parse the file
        THEN nothing is imported and a file-level warning is returned
        """
        parsed = parse_csv_text("Symbol,Description\nAAPL,Apple\n", file_name="f.csv")

        assert parsed.rows == ()
        assert parsed.errors == ("f.csv: no quantity or value column found; nothing imported",)

    def test_empty_file(self):
        """
        GIVEN an empty file
        WHEN I parse it
        THEN a single warning is returned
        """
        parsed = parse_csv_text("", file_name="empty.csv")

        assert parsed.rows == ()
        assert parsed.errors == ("empty.csv: file is empty",)

    def test_scenario_partial_parse_failure(self, ten_row_csv_with_one_bad: str):
        """
        GIVEN eleven holdings, one of which has a blank price
        WHEN I parse the file
        THEN ten holdings and exactly one warning are returned
        """
        parsed = parse_csv_text(ten_row_csv_with_one_bad, file_name="positions.csv")

        assert len(parsed.rows) == 10
        assert len(parsed.errors) == 1
        assert "BAD" in parsed.errors[0]
