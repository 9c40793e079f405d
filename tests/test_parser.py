"""Tests for question bank ingestion."""

import numpy as np
import pandas as pd
import pytest

from quizbank.data.parser import load_bank, parse_options, parse_rows, question_type, read_workbook
from quizbank.data.schemas import JUDGE, MULTIPLE, SINGLE, Option
from quizbank.errors import MalformedSourceError

from conftest import HEADER, make_row


class TestParseRows:
    def test_sample_bank(self, sample_questions):
        assert [q.id for q in sample_questions] == [1, 2, 3]
        single, multiple, judge = sample_questions

        assert single.type == SINGLE
        assert single.question == "What is 2 + 2?"
        assert single.options == [Option("A", "3"), Option("B", "4"), Option("C", "5")]
        assert single.answer == "B"
        assert single.score == 2
        assert single.category == "arithmetic"
        assert single.source == "workbook p.1"

        assert multiple.type == MULTIPLE
        assert multiple.answer == ["A", "C"]
        assert multiple.score == 1

        assert judge.type == JUDGE
        assert judge.answer == "A"
        assert judge.explanation == "Rayleigh scattering"
        assert judge.options[1] == Option("B", "错误")

    def test_answer_keys_always_among_options(self, sample_questions):
        for q in sample_questions:
            assert set(q.answer_keys()) <= set(q.option_keys)

    def test_header_row_is_skipped(self):
        rows = [make_row(1, prompt="header looks like data"), make_row(2, prompt="real")]
        questions = parse_rows(rows)
        assert [q.question for q in questions] == ["real"]

    def test_short_rows_dropped(self):
        rows = [HEADER, [1, "", "", "", "单选题", "Q?", "A-x"], make_row(2)]
        assert [q.id for q in parse_rows(rows)] == [2]

    def test_trailing_empty_cells_do_not_count_as_columns(self):
        short = [1, "", "", "", "单选题", "Q?", "A-x|B-y", None, None, None]
        assert parse_rows([HEADER, short]) == []

    @pytest.mark.parametrize("field", ["prompt", "options", "answer"])
    def test_rows_missing_required_fields_dropped(self, field):
        row = make_row(1, **{field: ""})
        assert parse_rows([HEADER, row, make_row(2)])[0].id == 2

    def test_whitespace_only_prompt_dropped(self):
        assert parse_rows([HEADER, make_row(1, prompt="   ")]) == []

    def test_none_rows_tolerated(self):
        assert [q.id for q in parse_rows([HEADER, None, [], make_row(5)])] == [5]

    def test_default_id_is_position_among_accepted_rows(self):
        rows = [HEADER, make_row(None), make_row(None, prompt=""), make_row(None, prompt="third")]
        assert [q.id for q in parse_rows(rows)] == [1, 2]

    def test_default_id_never_displaces_explicit_id(self):
        rows = [HEADER, make_row(None, prompt="no id"), make_row(1, prompt="explicit id 1"),
                make_row(None, prompt="also no id")]
        questions = parse_rows(rows)
        assert [(q.id, q.question) for q in questions] == [
            (2, "no id"), (1, "explicit id 1"), (3, "also no id"),
        ]

    def test_duplicate_ids_keep_first(self):
        rows = [HEADER, make_row(1, prompt="first"), make_row(1, prompt="second")]
        questions = parse_rows(rows)
        assert len(questions) == 1
        assert questions[0].question == "first"

    def test_answer_not_among_options_dropped(self):
        rows = [HEADER, make_row(1, options="A-x|B-y", answer="C"),
                make_row(2, "多选题", options="A-x|B-y", answer="AD")]
        assert parse_rows(rows) == []

    def test_multiple_answer_sorted_and_deduplicated(self):
        row = make_row(1, "多选题", options="A-a|B-b|C-c|D-d", answer=" DB A D ")
        assert parse_rows([HEADER, row])[0].answer == ["A", "B", "D"]

    def test_string_ids_are_trimmed(self):
        assert parse_rows([HEADER, make_row("  Q-17 ")])[0].id == "Q-17"

    def test_numeric_cells_normalized(self):
        row = make_row(np.int64(7), options="1-yes|2-no", answer=1.0, score=np.float64("nan"))
        q = parse_rows([HEADER, row])[0]
        assert q.id == 7 and type(q.id) is int
        assert q.answer == "1"
        assert q.score == 1

    @pytest.mark.parametrize("raw,expected", [(3, 3), ("2.5", 2.5), (0, 1), (-4, 1), ("abc", 1), (None, 1)])
    def test_score(self, raw, expected):
        assert parse_rows([HEADER, make_row(1, score=raw)])[0].score == expected


class TestParseOptions:
    def test_dash_separator_preferred(self):
        assert parse_options("A-B.C") == [Option("A", "B.C")]

    def test_dot_fallback_and_bare_key(self):
        assert parse_options("A.foo| B - bar |C") == [
            Option("A", "foo"), Option("B", "bar"), Option("C", ""),
        ]

    def test_value_keeps_later_dashes(self):
        assert parse_options("A-well-known") == [Option("A", "well-known")]

    def test_empty_tokens_and_keys_skipped(self):
        assert parse_options("A-x||-orphan| ") == [Option("A", "x")]

    def test_judge_keys_without_values(self):
        assert parse_options("对|错") == [Option("对", ""), Option("错", "")]


@pytest.mark.parametrize("label,expected", [
    ("单选题", SINGLE), ("多选题", MULTIPLE), ("判断题", JUDGE), ("", SINGLE), ("填空", SINGLE),
])
def test_question_type(label, expected):
    assert question_type(label) == expected


class TestReadWorkbook:
    def test_load_xlsx(self, sample_xlsx):
        questions = load_bank(sample_xlsx)
        assert [q.id for q in questions] == [1, 2, 3]
        assert questions[1].answer == ["A", "C"]
        assert questions[0].score == 2

    def test_load_xlsx_from_bytes(self, sample_xlsx):
        assert len(load_bank(sample_xlsx.read_bytes())) == 3

    def test_trailing_empty_cells_trimmed(self, sample_xlsx):
        rows = read_workbook(sample_xlsx)
        assert len(rows) == 4
        assert rows[1][-1] == 2  # score is the last non-empty cell of row 1
        assert rows[3][-1] == "Rayleigh scattering"

    def test_load_csv(self, tmp_path, sample_rows):
        path = tmp_path / "bank.csv"
        pd.DataFrame(sample_rows).to_csv(path, header=False, index=False)
        questions = load_bank(path)
        assert [q.id for q in questions] == [1, 2, 3]
        assert questions[0].answer == "B"
        assert questions[0].score == 2

    @pytest.mark.parametrize("suffix", ["xlsx", "csv"])
    def test_na_like_text_is_kept(self, tmp_path, suffix):
        rows = [HEADER, make_row(1, prompt="None", options="NA|N/A", answer="NA", category="null",
                                 explanation="nan")]
        path = tmp_path / f"bank.{suffix}"
        df = pd.DataFrame(rows)
        if suffix == "csv":
            df.to_csv(path, header=False, index=False)
        else:
            df.to_excel(path, header=False, index=False)

        questions = load_bank(path)
        assert len(questions) == 1
        q = questions[0]
        assert q.question == "None"
        assert q.options == [Option("NA"), Option("N/A")]
        assert q.answer == "NA"
        assert q.category == "null"
        assert q.explanation == "nan"

    @pytest.mark.parametrize("suffix", ["xlsx", "csv"])
    def test_text_ids_kept_verbatim(self, tmp_path, suffix):
        rows = [HEADER, make_row("007"), make_row("008"), make_row(9)]
        path = tmp_path / f"bank.{suffix}"
        df = pd.DataFrame(rows)
        if suffix == "csv":
            df.to_csv(path, header=False, index=False)
        else:
            df.to_excel(path, header=False, index=False)
        assert [q.id for q in load_bank(path)] == ["007", "008", 9]

    def test_undecodable_file_raises(self, tmp_path):
        path = tmp_path / "bank.xlsx"
        path.write_bytes(b"this is not a spreadsheet")
        with pytest.raises(MalformedSourceError):
            load_bank(path)

    def test_undecodable_bytes_raise(self):
        with pytest.raises(MalformedSourceError):
            read_workbook(b"\x00\x01\x02garbage")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_workbook(tmp_path / "missing.xlsx")
