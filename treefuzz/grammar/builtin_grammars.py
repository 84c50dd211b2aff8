"""
Built-in Grammars

Pre-defined grammars for common text formats.
"""

from typing import Any, Callable, Dict, List

from .dict_grammar import load_dict_grammar
from .grammar_parser import parse_grammar
from .rules import Grammar


_LOWER = ' | '.join(f'"{c}"' for c in "abcdefghijklmnopqrstuvwxyz")
_DIGITS = ' | '.join(f'"{d}"' for d in "0123456789")


class BuiltinGrammars:
    """Collection of built-in grammar specifications."""

    @staticmethod
    def get_json_grammar() -> str:
        """Get JSON grammar (simplified)."""
        return f"""
        <json> ::= <ws> <value> <ws>
        <value> ::= <object> | <array> | <string> | <number> | "true" | "false" | "null"
        <object> ::= "{{" <ws> "}}" | "{{" <members> "}}"
        <members> ::= <member> {{"," <member>}}
        <member> ::= <ws> <string> <ws> ":" <ws> <value> <ws>
        <array> ::= "[" <ws> "]" | "[" <elements> "]"
        <elements> ::= <ws> <value> <ws> {{"," <ws> <value> <ws>}}
        <string> ::= '"' {{<char>}} '"'
        <number> ::= ["-"] <int> ["." <digit>+] [("e" | "E") ["+" | "-"] <digit>+]
        <int> ::= "0" | <onenine> {{<digit>}}
        <onenine> ::= "1" | "2" | "3" | "4" | "5" | "6" | "7" | "8" | "9"
        <digit> ::= {_DIGITS}
        <char> ::= <letter> | <digit> | " " | "_" | "\\\\n"
        <letter> ::= {_LOWER}
        <ws> ::= "" | " "
        """

    @staticmethod
    def get_xml_grammar() -> str:
        """Get XML grammar (simplified, tags are not matched)."""
        return f"""
        <document> ::= <element>
        <element> ::= "<" <name> {{<attribute>}} ">" {{<content>}} "</" <name> ">"
                    | "<" <name> {{<attribute>}} "/>"
        <attribute> ::= " " <name> "=" '"' {{<char>}} '"'
        <content> ::= <text> | <element>
        <text> ::= <char>+
        <name> ::= <letter> {{<letter> | <digit>}}
        <char> ::= <letter> | <digit> | " "
        <letter> ::= {_LOWER}
        <digit> ::= {_DIGITS}
        """

    @staticmethod
    def get_sql_grammar() -> str:
        """Get SQL grammar (simplified SELECT statements)."""
        return f"""
        <query> ::= "SELECT " <columns> " FROM " <table> [<where>] [<order>] ";"
        <columns> ::= "*" | <column> {{", " <column>}}
        <column> ::= <identifier>
        <table> ::= <identifier>
        <where> ::= " WHERE " <condition> {{(" AND " | " OR ") <condition>}}
        <condition> ::= <column> " " <operator> " " <value>
        <operator> ::= "=" | ">" | "<" | ">=" | "<=" | "!=" | "LIKE"
        <value> ::= <number> | "'" {{<letter> | <digit> | " "}} "'"
        <order> ::= " ORDER BY " <column> [" ASC" | " DESC"]
        <identifier> ::= <letter> {{<letter> | <digit> | "_"}}
        <number> ::= <digit>+
        <letter> ::= {_LOWER}
        <digit> ::= {_DIGITS}
        """

    @staticmethod
    def get_url_grammar() -> str:
        """Get URL grammar."""
        return f"""
        <url> ::= <scheme> "://" <host> [":" <port>] [<path>] ["?" <query>] ["#" <label>]
        <scheme> ::= "http" | "https" | "ftp" | "file"
        <host> ::= <label> {{"." <label>}} | <octet> "." <octet> "." <octet> "." <octet>
        <octet> ::= <digit> | <digit> <digit> | "1" <digit> <digit>
        <port> ::= <digit>+
        <path> ::= ("/" <label>)+
        <query> ::= <param> {{"&" <param>}}
        <param> ::= <label> "=" <label>
        <label> ::= <letter> {{<letter> | <digit> | "-"}}
        <letter> ::= {_LOWER}
        <digit> ::= {_DIGITS}
        """

    @staticmethod
    def get_arithmetic_grammar() -> str:
        """Get arithmetic expression grammar."""
        return f"""
        <expr> ::= <term> | <expr> "+" <term> | <expr> "-" <term>
        <term> ::= <factor> | <term> "*" <factor> | <term> "/" <factor>
        <factor> ::= <number> | "(" <expr> ")" | "-" <factor>
        <number> ::= <digit> {{<digit>}} ["." <digit>+]
        <digit> ::= {_DIGITS}
        """

    @staticmethod
    def get_csv_grammar() -> str:
        """Get CSV grammar."""
        return f"""
        <csv> ::= <record> {{"\\n" <record>}}
        <record> ::= <field> {{"," <field>}}
        <field> ::= {{<letter> | <digit> | " "}} | '"' {{<letter> | <digit> | "," | " "}} '"'
        <letter> ::= {_LOWER}
        <digit> ::= {_DIGITS}
        """

    @staticmethod
    def get_json_dict_grammar() -> Dict[str, List[Any]]:
        """Get JSON grammar as a dictionary grammar with EBNF operators."""
        return {
            "<start>": ["<assoc>"],
            "<value>": ["<assoc>", "<list>", "<bool>", "<string>", "<int>"],
            "<assoc>": ["{(<string>: <value>, )*<string>: <value>}"],
            "<list>": ["[(<value>, )*<value>]"],
            "<bool>": ["true", "false"],
            "<string>": ['"<char>+"'],
            "<char>": ["a", "b", "c", "d"],
            "<int>": ["<onenine><digit>*", ("0", {"weight": 0.5})],
            "<onenine>": list("123456789"),
            "<digit>": list("0123456789"),
        }

    @staticmethod
    def get_grammar(name: str) -> str:
        """
        Get grammar text by name.

        Args:
            name: Grammar name (json, xml, sql, url, arithmetic, csv)

        Returns:
            Grammar text

        Raises:
            KeyError: for unknown or non-text grammars
        """
        grammars = _TEXT_GRAMMARS
        if name.lower() not in grammars:
            raise KeyError(f"Unknown grammar: {name}. Available: {list(grammars.keys())}")

        return grammars[name.lower()]()

    @staticmethod
    def load(name: str) -> Grammar:
        """
        Build a validated Grammar for a built-in grammar.

        Raises:
            KeyError: for unknown grammar names
        """
        key = name.lower()
        if key in _DICT_GRAMMARS:
            return load_dict_grammar(_DICT_GRAMMARS[key]())
        return parse_grammar(BuiltinGrammars.get_grammar(key))

    @staticmethod
    def list_grammars() -> List[str]:
        """List available built-in grammars."""
        return list(_TEXT_GRAMMARS) + list(_DICT_GRAMMARS)


_TEXT_GRAMMARS: Dict[str, Callable[[], str]] = {
    'json': BuiltinGrammars.get_json_grammar,
    'xml': BuiltinGrammars.get_xml_grammar,
    'sql': BuiltinGrammars.get_sql_grammar,
    'url': BuiltinGrammars.get_url_grammar,
    'arithmetic': BuiltinGrammars.get_arithmetic_grammar,
    'csv': BuiltinGrammars.get_csv_grammar,
}

_DICT_GRAMMARS: Dict[str, Callable[[], Dict[str, List[Any]]]] = {
    'json-ebnf': BuiltinGrammars.get_json_dict_grammar,
}
