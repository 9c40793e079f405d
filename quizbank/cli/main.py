from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from quizbank.app import QuizApp
from quizbank.config import AppConfig, default_app_config
from quizbank.data.schemas import MODE_RANDOM, MULTIPLE, QUIZ_MODES, Answer, Question
from quizbank.errors import (
    EmptyBankError,
    EmptyLedgerError,
    MalformedSourceError,
    NoQuestionsAvailableError,
)
from quizbank.utils.determinism import set_determinism
from quizbank.utils.logging import setup_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PRECONDITION = 2
EXIT_MALFORMED = 3

QUIT_COMMAND = ":q"

TYPE_LABELS = {
    "single": "Single choice",
    "multiple": "Multiple choice",
    "judge": "True/False",
}

_ANSWER_SPLIT = re.compile(r"[\s,，、;]+")

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def format_answer(answer: Answer) -> str:
    if isinstance(answer, list):
        return ", ".join(answer)
    return str(answer)


def parse_answer_input(raw: str, question: Question) -> Optional[Answer]:
    """Map typed input onto option keys (case-insensitive).

    Multiple-choice input may be ``AC``, ``A,C`` or ``a c``. Returns None when
    the input is empty or names a key the question does not have.
    """
    raw = raw.strip()
    if not raw:
        return None
    keys = {k.upper(): k for k in question.option_keys}

    if question.type == MULTIPLE:
        tokens = [t for t in _ANSWER_SPLIT.split(raw) if t]
        if len(tokens) == 1 and tokens[0].upper() not in keys:
            tokens = list(tokens[0])
        picked = [keys.get(t.upper()) for t in tokens]
        if not picked or any(p is None for p in picked):
            return None
        return sorted(set(picked))

    return keys.get(raw.upper())


def render_question(app: QuizApp, question: Question, out: OutputFn) -> None:
    prog = app.get_question_progress()
    out("")
    out(f"[{prog.current}/{prog.total}] {TYPE_LABELS.get(question.type, question.type)} ({question.score} pt)")
    out(question.question)
    for opt in question.options:
        out(f"  {opt.key}. {opt.value}" if opt.value else f"  {opt.key}")


def run_quiz(
    app: QuizApp,
    mode: str = MODE_RANDOM,
    restart: bool = False,
    input_fn: Optional[InputFn] = None,
    out: OutputFn = print,
) -> int:
    """Drive an interactive session in the terminal.

    Resumes a stored session unless ``restart`` is set. Typing ``:q`` leaves
    the session resumable for the next run.
    """
    input_fn = input_fn or input
    if restart:
        app.clear_quiz_progress()
    if app.get_current_question() is None:
        if app.progress is not None:
            # Every question was answered before the last run stopped
            app.finish_quiz()
        app.start_quiz(mode)
    else:
        out(f"Resuming {app.progress.current_mode} session")
        if app.progress.current_mode != mode:
            out(f"Use --restart to discard it and start a {mode} session instead.")

    while True:
        question = app.get_current_question()
        if question is None:
            break
        render_question(app, question, out)

        hint = "keys, e.g. AC" if question.type == MULTIPLE else "key"
        answer: Optional[Answer] = None
        while answer is None:
            raw = input_fn(f"Your answer ({hint}, {QUIT_COMMAND} to pause): ")
            if raw.strip() == QUIT_COMMAND:
                out("Session paused; run the quiz again to resume.")
                return EXIT_OK
            answer = parse_answer_input(raw, question)
            if answer is None:
                out("Please choose one of the listed options.")

        if app.submit_answer(answer):
            out("Correct!")
        else:
            out(f"Wrong. Correct answer: {format_answer(question.answer)}; yours: {format_answer(answer)}")
        if question.explanation:
            out(f"Explanation: {question.explanation}")

        if not app.next_question():
            break

    summary = app.finish_quiz()
    out("")
    out(f"Quiz complete! Correct: {summary.correct}/{summary.total}")
    out(f"Accuracy: {summary.accuracy}%  Time: {summary.minutes} min")
    return EXIT_OK


def show_wrong(app: QuizApp, out: OutputFn = print) -> int:
    details = app.wrong_question_details()
    if not details:
        out("No wrong questions recorded.")
        return EXIT_OK
    for d in details:
        out("")
        out(f"#{d.question.id} [{TYPE_LABELS.get(d.question.type, d.question.type)}] {d.question.question}")
        out(f"  Your answer:    {format_answer(d.entry.user_answer)}")
        out(f"  Correct answer: {format_answer(d.entry.correct_answer)}")
        out(f"  Misses:         {d.entry.attempts}")
    return EXIT_OK


def show_stats(app: QuizApp, out: OutputFn = print) -> int:
    stats = app.stats
    out(f"Questions in bank: {app.question_count}")
    out(f"Total answered:    {stats.total_answered}")
    out(f"Correct rate:      {stats.correct_rate}%")
    out(f"Wrong questions:   {app.wrong_question_count}")
    out(f"Study time:        {stats.study_time} min")
    return EXIT_OK


def _load_config(path: Optional[str]) -> AppConfig:
    if path is None:
        return default_app_config()
    return AppConfig.from_file(path)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizbank",
        description="quizbank - practice quizzes from spreadsheet question banks",
        epilog="""Examples:
  # Import a question bank (first sheet, header row first)
  quizbank import banks/safety.xlsx

  # Practice the whole bank in random order (resumes an interrupted session)
  quizbank quiz

  # Replay only the questions you got wrong
  quizbank quiz --mode wrong

  # Show lifetime statistics
  quizbank stats
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", default=None, help="Path to config JSON/YAML (optional)")
    parser.add_argument("--data-dir", default=None, help="Override the storage directory")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    import_parser = subparsers.add_parser("import", help="Import a question bank spreadsheet")
    import_parser.add_argument("path", help="Path to .xlsx/.xls/.csv file")

    quiz_parser = subparsers.add_parser("quiz", help="Run a practice session")
    quiz_parser.add_argument("--mode", "-m", choices=list(QUIZ_MODES), default=MODE_RANDOM, help="Question selection (default: random)")
    quiz_parser.add_argument("--restart", action="store_true", help="Discard any interrupted session and start fresh")

    subparsers.add_parser("wrong", help="List the wrong-question ledger")
    subparsers.add_parser("stats", help="Show lifetime statistics")

    clear_parser = subparsers.add_parser("clear-wrong", help="Empty the wrong-question ledger")
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        cfg = _load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Config file '{args.config}' not found")
        return EXIT_ERROR
    except (json.JSONDecodeError, yaml.YAMLError, ValueError, TypeError) as e:
        print(f"Error: Invalid config in '{args.config}': {e}")
        return EXIT_ERROR

    logger = setup_logging(cfg.logging.log_dir, cfg.logging.filename, cfg.logging.level)
    rng = set_determinism(cfg.session.seed)
    data_dir = Path(args.data_dir or cfg.storage.data_dir)

    try:
        app = QuizApp.from_data_dir(data_dir, rng=rng)

        if args.command == "import":
            try:
                count = app.import_bank(args.path)
            except FileNotFoundError:
                print(f"Error: Input file '{args.path}' not found")
                logger.error("FileNotFoundError: Input file '%s' not found", args.path)
                return EXIT_ERROR
            except MalformedSourceError:
                print("Error: Could not read the file; make sure it is a valid spreadsheet")
                return EXIT_MALFORMED
            print(f"Loaded {count} questions")
            return EXIT_OK

        elif args.command == "quiz":
            try:
                return run_quiz(app, mode=args.mode, restart=args.restart)
            except EmptyBankError:
                print("Error: No question bank loaded; run 'quizbank import FILE' first")
                return EXIT_PRECONDITION
            except EmptyLedgerError:
                print("Error: The wrong-question ledger is empty; practise in random mode first")
                return EXIT_PRECONDITION
            except NoQuestionsAvailableError:
                print("Error: None of the recorded wrong questions are in the current bank")
                return EXIT_PRECONDITION

        elif args.command == "wrong":
            return show_wrong(app)

        elif args.command == "stats":
            return show_stats(app)

        elif args.command == "clear-wrong":
            if not args.yes:
                reply = input("Clear the wrong-question ledger? [y/N] ")
                if reply.strip().lower() not in {"y", "yes"}:
                    print("Cancelled")
                    return EXIT_OK
            app.clear_wrong_questions()
            print("Wrong-question ledger cleared")
            return EXIT_OK

    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted; progress so far has been saved")
        logger.info("Interrupted by user")
        return EXIT_ERROR
    except Exception as e:
        print(f"Error: Unexpected error occurred - {e}")
        logger.error("Unexpected error: %s", str(e), exc_info=True)
        return EXIT_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
