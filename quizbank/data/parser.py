"""Question bank ingestion.

Banks are spreadsheets whose first sheet has a header row followed by one
question per row. Columns are positional:

    0  id                5  prompt           10-12  unused
    1  outline level 1   6  options string   13     judge explanation
    2  outline level 2   7  answer string
    3  category          8  source
    4  type label        9  score

Malformed rows are dropped without raising; only a source that cannot be
decoded at all is an error.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import MalformedSourceError
from .schemas import JUDGE, MULTIPLE, SINGLE, Option, Question, QuestionId

logger = logging.getLogger(__name__)

COL_ID = 0
COL_CATEGORY = 3
COL_TYPE = 4
COL_PROMPT = 5
COL_OPTIONS = 6
COL_ANSWER = 7
COL_SOURCE = 8
COL_SCORE = 9
COL_EXPLANATION = 13
MIN_COLUMNS = 8

MULTIPLE_MARKER = "多选"
JUDGE_MARKER = "判断"
OPTION_SEPARATOR = "|"
KEY_SEPARATORS = ("-", ".")

_CANONICAL_INT = re.compile(r"^(0|-?[1-9][0-9]*)$")

BankSource = Union[str, Path, bytes, bytearray, BinaryIO]


def _clean_cell(value: Any) -> Any:
    """Normalize a raw spreadsheet cell: NaN -> None, 3.0 -> 3, numpy -> python."""
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if np.isscalar(value) and pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _text(value: Any) -> str:
    value = _clean_cell(value)
    if value is None:
        return ""
    return str(value).strip()


def _csv_value(value: Any) -> Any:
    """Turn canonical integer text ("12", not "012") into an int, as an Excel number cell reads."""
    if isinstance(value, str) and _CANONICAL_INT.match(value):
        return int(value)
    return value


def _cell(row: Sequence[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else None


def _trim_row(row: Sequence[Any]) -> List[Any]:
    cells = [_clean_cell(v) for v in row]
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return cells


def parse_options(raw: str) -> List[Option]:
    """Split ``"A-foo|B-bar"`` into options.

    Each token is split at the first ``-``, else at the first ``.``; a token
    with neither separator is a bare key with an empty value.
    """
    options: List[Option] = []
    for token in raw.split(OPTION_SEPARATOR):
        if not token.strip():
            continue
        key, value = token, ""
        for sep in KEY_SEPARATORS:
            if sep in token:
                key, _, value = token.partition(sep)
                break
        key = key.strip()
        if not key:
            continue
        options.append(Option(key=key, value=value.strip()))
    return options


def question_type(label: str) -> str:
    if MULTIPLE_MARKER in label:
        return MULTIPLE
    if JUDGE_MARKER in label:
        return JUDGE
    return SINGLE


def _score(value: Any) -> Union[int, float]:
    value = _clean_cell(value)
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 1
    if not score > 0 or math.isinf(score):
        return 1
    return int(score) if score.is_integer() else score


def parse_row(row: Sequence[Any], default_id: Optional[QuestionId] = None) -> Optional[Question]:
    """Parse one data row, returning None when the row is unusable.

    A row without an id gets ``default_id``, which may itself be None.
    """
    if row is None or len(row) < MIN_COLUMNS:
        return None

    prompt = _text(_cell(row, COL_PROMPT))
    options_raw = _text(_cell(row, COL_OPTIONS))
    answer_raw = _text(_cell(row, COL_ANSWER))
    if not prompt or not options_raw or not answer_raw:
        return None

    options = parse_options(options_raw)
    if not options:
        return None

    qtype = question_type(_text(_cell(row, COL_TYPE)))
    if qtype == MULTIPLE:
        # Multi-choice answers are written as "ACD": one character per key
        answer: Union[str, List[str]] = sorted({ch for ch in answer_raw if not ch.isspace()})
        answer_keys = answer
    else:
        answer = answer_raw
        answer_keys = [answer_raw]

    option_keys = {opt.key for opt in options}
    if not answer_keys or any(k not in option_keys for k in answer_keys):
        return None

    qid = _clean_cell(_cell(row, COL_ID))
    if isinstance(qid, str):
        qid = qid.strip()
    if qid is None or qid == "":
        qid = default_id

    return Question(
        id=qid,
        type=qtype,
        question=prompt,
        options=options,
        answer=answer,
        explanation=_text(_cell(row, COL_EXPLANATION)),
        score=_score(_cell(row, COL_SCORE)),
        category=_text(_cell(row, COL_CATEGORY)),
        source=_text(_cell(row, COL_SOURCE)),
    )


def parse_rows(rows: Sequence[Sequence[Any]]) -> List[Question]:
    """Turn a decoded sheet (header row first) into Question records.

    Rows with too few columns, a missing prompt/options/answer, an answer
    key that is not among the options, or an id already seen are skipped.
    A row without an id gets its 1-based position among accepted rows,
    moved past any id that another row names explicitly.
    """
    parsed: List[Tuple[int, Question]] = []
    skipped = 0
    for line_no, raw in enumerate(list(rows)[1:], start=2):
        row = _trim_row(raw) if raw is not None else []
        question = parse_row(row)
        if question is None:
            skipped += 1
            logger.debug("Skipping malformed row %d", line_no)
            continue
        parsed.append((line_no, question))

    explicit_ids = {q.id for _, q in parsed if q.id is not None}
    questions: List[Question] = []
    seen_ids = set()
    for line_no, question in parsed:
        if question.id is None:
            qid = len(questions) + 1
            while qid in explicit_ids or qid in seen_ids:
                qid += 1
            question = replace(question, id=qid)
        if question.id in seen_ids:
            skipped += 1
            logger.debug("Skipping row %d: duplicate id %r", line_no, question.id)
            continue
        seen_ids.add(question.id)
        questions.append(question)

    logger.info("Parsed %d questions (%d rows skipped)", len(questions), skipped)
    return questions


def read_workbook(source: BankSource, sheet: Union[int, str] = 0) -> List[List[Any]]:
    """Decode a spreadsheet into a 2-D list of raw cell values.

    Args:
        source: Path, raw bytes or binary file object. ``.csv`` paths are read
            as CSV, everything else as an Excel workbook.
        sheet: Sheet index or name (Excel only)

    Returns:
        Rows of cell values, trailing empty cells removed

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        MalformedSourceError: If the content cannot be decoded
    """
    label = str(getattr(source, "name", source if isinstance(source, (str, Path)) else "<bytes>"))
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Question bank not found: {path}")
        source = path
    elif isinstance(source, (bytes, bytearray)):
        source = BytesIO(bytes(source))

    # Only empty cells are missing; text such as "NA" or "None" is kept
    na_opts = {"keep_default_na": False, "na_values": [""]}
    try:
        if label.lower().endswith(".csv"):
            df = pd.read_csv(source, header=None, dtype=object, index_col=False, **na_opts)
            rows = [[_csv_value(v) for v in row] for row in df.values.tolist()]
        else:
            df = pd.read_excel(source, sheet_name=sheet, header=None, dtype=object, **na_opts)
            rows = df.values.tolist()
    except Exception as e:
        logger.error("Failed to decode question bank %s: %s", label, e)
        raise MalformedSourceError(f"Could not decode question bank {label}: {e}", source=label) from e

    return [_trim_row(row) for row in rows]


def load_bank(source: BankSource, sheet: Union[int, str] = 0) -> List[Question]:
    """Read and parse a question bank in one step."""
    return parse_rows(read_workbook(source, sheet=sheet))
