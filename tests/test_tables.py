"""Tests for HTML table row extraction."""

from __future__ import annotations

from ecowatch.tables import extract_table_rows


class TestExtractTableRows:
    def test_rows_and_cells_in_document_order(self):
        html = (
            "<table><tr><th>Name</th><th>Value</th></tr>"
            "<tr><td>a</td><td>1</td></tr>"
            "<tr><td>b</td><td>2</td></tr></table>"
        )
        assert extract_table_rows(html) == [
            ["Name", "Value"],
            ["a", "1"],
            ["b", "2"],
        ]

    def test_empty_rows_omitted(self):
        html = "<table><tr></tr><tr><td>x</td></tr><tr>  </tr></table>"
        assert extract_table_rows(html) == [["x"]]

    def test_no_tables_returns_empty(self):
        assert extract_table_rows("<p>No data</p>") == []
        assert extract_table_rows("") == []
        assert extract_table_rows(None) == []

    def test_cells_are_normalized(self):
        html = "<tr><td>  <b>Heavy</b>&nbsp;Rain\n</td><td>A &amp; B</td></tr>"
        assert extract_table_rows(html) == [["Heavy Rain", "A & B"]]

    def test_tolerates_unclosed_markup(self):
        html = "<table><tr><td>one</td><td>two<tr><td>three</td>"
        rows = extract_table_rows(html)
        assert rows[0][:1] == ["one"]
        assert ["three"] in rows

    def test_nested_table_cells_belong_to_inner_row(self):
        html = (
            "<table><tr><td>outer</td><td>"
            "<table><tr><td>inner</td></tr></table>"
            "</td></tr></table>"
        )
        rows = extract_table_rows(html)
        assert rows == [["outer", ""], ["inner"]]

    def test_script_content_ignored(self, bulletin_html):
        rows = extract_table_rows(bulletin_html)
        assert all("bogus" not in cell for row in rows for cell in row)

    def test_bulletin_fixture(self, bulletin_html):
        rows = extract_table_rows(bulletin_html)
        assert rows[0] == ["Sub-Division", "Day 1", "Day 2", "Day 3", "Day 4"]
        assert rows[3] == [
            "UTTARAKHAND",
            "Heavy Rain at isolated places",
            "Thunderstorm & Lightning",
            "N/A",
            "No Warning",
        ]
        assert len(rows) == 5
