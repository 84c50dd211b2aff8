"""
Grammar Loader

Loads grammar files by extension: .json files hold dictionary grammars,
anything else is BNF/EBNF text.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .dict_grammar import START_SYMBOL, load_dict_grammar
from .errors import GrammarSyntaxError
from .grammar_parser import parse_grammar
from .rules import Grammar


logger = logging.getLogger("treefuzz.grammar.loader")


def load_grammar(path: Union[str, Path], start: Optional[str] = None) -> Grammar:
    """
    Load and validate a grammar file.

    JSON files contain either the rules mapping itself (start symbol
    "<start>") or an object {"start": "<name>", "rules": {...}}.

    Args:
        path: Grammar file
        start: Start symbol overriding the one in the file

    Returns:
        Grammar

    Raises:
        OSError: if the file cannot be read
        GrammarValidationError: if the grammar is malformed or invalid
    """
    path = Path(path).expanduser()
    text = path.read_text(encoding="utf-8")
    logger.info(f"Loading grammar from {path}")

    if path.suffix.lower() != ".json":
        return parse_grammar(text, start)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GrammarSyntaxError(f"Invalid JSON grammar in {path}: {e}")

    if not isinstance(data, dict):
        raise GrammarSyntaxError(f"JSON grammar in {path} must be an object")

    if isinstance(data.get("rules"), dict):
        return load_dict_grammar(data["rules"], start or data.get("start", START_SYMBOL))
    return load_dict_grammar(data, start or START_SYMBOL)
