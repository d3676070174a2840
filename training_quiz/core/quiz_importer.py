"""Utilities for importing quiz question banks from a plain-text file.

File format (repeat blocks separated by blank lines or '---'):

    Q: Question text (supports markdown). Additional lines until the next
       marker are treated as part of the question.
    A: First option text
    B: Second option text
    ...            (at least two options, consecutive letters from A)
    CORRECT: B

Example:

    Q: What does the 'A' in the AIDA framework stand for?
    A: Action
    B: Attention
    C: Acknowledgement
    D: Analysis
    CORRECT: B
"""

from __future__ import annotations

from pathlib import Path
from string import ascii_uppercase

from training_quiz.core.models import QuizContent, QuizQuestion


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


def load_quiz_from_file(file_path: Path) -> QuizContent:
    text = file_path.read_text(encoding="utf-8")
    quiz = parse_quiz_text(text)
    if not quiz.questions:
        raise QuizImportError(f"Quiz file {file_path} did not contain any questions.")
    return quiz


def parse_quiz_text(text: str) -> QuizContent:
    """Parse the block format into quiz content; an empty text yields an empty quiz."""
    return QuizContent(tuple(_parse_block(block) for block in _split_blocks(text)))


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---" or not stripped:
            if current_block:
                blocks.append("\n".join(current_block))
                current_block = []
            continue
        current_block.append(raw_line)
    if current_block:
        blocks.append("\n".join(current_block))
    return blocks


def _parse_block(block: str) -> QuizQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
        elif upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
        elif len(line) > 2 and line[0].upper() in ascii_uppercase and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
        elif current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] += f"\n{line}"
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")

    prompt = "\n".join(question_lines).strip()
    if not prompt:
        raise QuizImportError("Question text missing (Q: ...)")

    letters = ascii_uppercase[: len(options)]
    if len(options) < 2 or set(options) != set(letters):
        raise QuizImportError(
            f"Options must use consecutive letters starting at A (got {''.join(sorted(options))})."
        )
    if correct_letter is None:
        raise QuizImportError(f"CORRECT is missing for question '{prompt}'.")
    if correct_letter not in letters:
        raise QuizImportError(f"CORRECT must be one of {', '.join(letters)}.")

    try:
        return QuizQuestion(
            prompt=prompt,
            options=tuple(options[letter].strip() for letter in letters),
            correct_option_index=letters.index(correct_letter),
        )
    except ValueError as exc:
        raise QuizImportError(str(exc)) from exc
