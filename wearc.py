"""
WeaR Lang Stage-0 compiler: translates WeaR Lang (.wr) programs to C.

PROGRAM     -> STATEMENT* EOF

STATEMENT   -> VAR IDENTIFIER '=' EXPR
             | PRINT EXPR
             | WHILE '(' EXPR ')' BLOCK
             | IF '(' EXPR ')' BLOCK (ELSE (IF_STATEMENT | BLOCK))?
             | FUNCTION IDENTIFIER '(' (IDENTIFIER (',' IDENTIFIER)*)? ')' BLOCK
             | RETURN EXPR
             | WRITE_FILE '(' EXPR ',' EXPR ')'
             | READ_FILE '(' EXPR ')'
             | IDENTIFIER '=' EXPR
             | IDENTIFIER '(' (EXPR (',' EXPR)*)? ')'

BLOCK       -> '{' STATEMENT* '}'

EXPR        -> PART*
PART        -> INTEGER | STRING | IDENTIFIER | CALL | BUILTIN
             | '(' EXPR ')' | OPERATOR

Statements end at a NEWLINE; ';' is tolerated and ignored.
"""


import argparse
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from wear_runtime import RUNTIME_SIGNATURES, WEAR_RUNTIME


DEFAULT_OUTPUT = "output.c"
DEFAULT_CC = "gcc"
CC_FLAGS = ["-O2"]
INDENT = "    "
HEADER_COMMENT = "/* Generated by WeaR Lang Stage-0 Compiler */\n"


#token definitions
class TokenType(Enum):
    # keywords
    VAR = "VAR"
    PRINT = "PRINT"
    WHILE = "WHILE"
    IF = "IF"
    ELSE = "ELSE"
    FUNCTION = "FUNCTION"
    RETURN = "RETURN"
    READ_FILE = "READ_FILE"
    WRITE_FILE = "WRITE_FILE"
    STREQ = "STREQ"
    STRLEN = "STRLEN"
    CHAR_AT = "CHAR_AT"
    IS_QUOTE = "IS_QUOTE"
    QUOTE_CHAR = "QUOTE_CHAR"
    IS_NEWLINE = "IS_NEWLINE"
    NEWLINE_CHAR = "NEWLINE_CHAR"

    # literals
    INTEGER = "INTEGER"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"

    # operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    EQUAL = "EQUAL"
    LESS = "LESS"
    GREATER = "GREATER"
    LESS_EQUAL = "LESS_EQUAL"
    GREATER_EQUAL = "GREATER_EQUAL"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    NOT_EQUAL = "NOT_EQUAL"

    # delimiters
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    SEMICOLON = "SEMICOLON"
    COMMA = "COMMA"
    NEWLINE = "NEWLINE"

    EOF = "EOF"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Token:
    #represents single token
    type: TokenType
    value: str
    index: int
    line: int
    column: int

    def pos_str(self) -> str:
        return f"line {self.line}, col {self.column} (idx {self.index})"


# Indonesian spelling first, English alias second
KEYWORDS = {
    "var": TokenType.VAR,
    "cetak": TokenType.PRINT,
    "selama": TokenType.WHILE,
    "jika": TokenType.IF,
    "lainnya": TokenType.ELSE,
    "fungsi": TokenType.FUNCTION,
    "kembalikan": TokenType.RETURN,
    "baca_file": TokenType.READ_FILE,
    "tulis_file": TokenType.WRITE_FILE,
    "sama": TokenType.STREQ,
    "panjang": TokenType.STRLEN,

    "print": TokenType.PRINT,
    "while": TokenType.WHILE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "function": TokenType.FUNCTION,
    "return": TokenType.RETURN,
    "read_file": TokenType.READ_FILE,
    "write_file": TokenType.WRITE_FILE,
    "streq": TokenType.STREQ,
    "strlen": TokenType.STRLEN,

    # runtime character helpers share one spelling in both languages
    "char_at": TokenType.CHAR_AT,
    "is_quote": TokenType.IS_QUOTE,
    "quote_char": TokenType.QUOTE_CHAR,
    "is_newline": TokenType.IS_NEWLINE,
    "newline_char": TokenType.NEWLINE_CHAR,
}


def keyword_spellings() -> Dict[str, List[str]]:
    """Group the keyword table by kind: {"PRINT": ["cetak", "print"], ...}"""
    grouped: Dict[str, List[str]] = {}
    for spelling, kind in KEYWORDS.items():
        grouped.setdefault(kind.value, []).append(spelling)
    return grouped


SYMBOLS = {
    "==": TokenType.EQUAL_EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.EQUAL,
    "<": TokenType.LESS,
    ">": TokenType.GREATER,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
}


# =============================================================================
# COMPILER DIAGNOSTICS
# =============================================================================

@dataclass
class CompileError:
    code: str                 # e.g., "SYN001", "LEX001"
    message: str              # human-friendly error
    index: int
    line: int
    column: int
    token_value: str = ""
    context: str = ""         # source line holding the token

    def format(self) -> str:
        loc = f"line {self.line}, col {self.column} (idx {self.index})"
        val = f" '{self.token_value}'" if self.token_value else ""
        return f"[{self.code}] {loc}: {self.message}{val}"

    def pointer(self) -> str:
        """Source line with a caret under the offending column."""
        if not self.context:
            return ""
        gutter = f"   {self.line} | "
        padding = " " * (len(gutter) + self.column - 1)
        return f"{gutter}{self.context}\n{padding}^"


class ErrorReporter:
    def __init__(self, source: str = ""):
        self.source = source
        self.lines = source.split("\n")
        self.errors: List[CompileError] = []
        self.warnings: List[CompileError] = []

    def _make(self, code: str, message: str, token: Token) -> CompileError:
        context = ""
        if self.source and 0 < token.line <= len(self.lines):
            context = self.lines[token.line - 1].rstrip("\r")
        value = "end of file" if token.type == TokenType.EOF else token.value
        return CompileError(
            code=code,
            message=message,
            index=token.index,
            line=token.line,
            column=token.column,
            token_value=value,
            context=context
        )

    def add(self, code: str, message: str, token: Token) -> CompileError:
        error = self._make(code, message, token)
        self.errors.append(error)
        return error

    def warn(self, code: str, message: str, token: Token) -> CompileError:
        warning = self._make(code, message, token)
        self.warnings.append(warning)
        return warning

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print(self, file=None):
        if not self.errors and not self.warnings:
            return
        print("\n" + "-" * 70, file=file)
        print("DIAGNOSTICS", file=file)
        print("-" * 70, file=file)
        for e in self.errors + self.warnings:
            print("  " + e.format(), file=file)
            if e.context:
                print(e.pointer(), file=file)


class WearSyntaxError(Exception):
    """A mandatory token was missing; translation stops at the first one."""

    def __init__(self, error: CompileError, token: Token):
        super().__init__(error.format())
        self.error = error
        self.token = token

    @property
    def line(self) -> int:
        return self.error.line

    @property
    def column(self) -> int:
        return self.error.column


# =============================================================================
# REGEX TOKEN SPEC (Formal token definitions)
# =============================================================================

TOKEN_SPECS = [
    ("NEWLINE",     r"\n"),
    ("SKIP",        r"[ \t\r]+"),
    ("COMMENT",     r"//[^\n]*"),
    # \" is an escaped quote; a missing closing quote runs to end of input
    ("STRING",      r'"(?:\\"|[^"])*"?'),
    ("INTEGER",     r"[0-9]+"),
    ("IDENTIFIER",  r"[A-Za-z_][A-Za-z0-9_]*"),
    ("SYMBOL",      r"==|!=|<=|>=|[-+*/=<>(){}\[\];,]"),
    ("UNKNOWN",     r"."),
]

MASTER_RE = re.compile("|".join(
    f"(?P<{name}>{pattern})" for name, pattern in TOKEN_SPECS
))

STRING_BODY_RE = re.compile(r'"((?:\\"|[^"])*)')


#=============================================================================
# PHASE 1: LEXICAL ANALYSIS
#=============================================================================

class Lexer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

        # position tracking
        self.line = 1
        self.column = 1

    def _make_token(self, token_type: TokenType, value: str,
                    start_index: int, start_line: int, start_col: int) -> Token:
        return Token(
            type=token_type,
            value=value,
            index=start_index,
            line=start_line,
            column=start_col
        )

    def _advance_span(self, span: str):
        # update line/column per character, string literals included
        for ch in span:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(span)

    def get_next_token(self) -> Token:
        while self.pos < len(self.text):
            start_index = self.pos
            start_line = self.line
            start_col = self.column

            m = MASTER_RE.match(self.text, self.pos)
            kind = m.lastgroup
            raw = m.group(kind)
            self._advance_span(raw)

            if kind in ("SKIP", "COMMENT"):
                continue

            if kind == "NEWLINE":
                ttype, value = TokenType.NEWLINE, "\\n"
            elif kind == "STRING":
                # only \" is resolved here; \n stays a two-character escape
                body = STRING_BODY_RE.match(raw).group(1)
                ttype, value = TokenType.STRING, body.replace('\\"', '"')
            elif kind == "INTEGER":
                ttype, value = TokenType.INTEGER, raw
            elif kind == "IDENTIFIER":
                ttype, value = KEYWORDS.get(raw, TokenType.IDENTIFIER), raw
            elif kind == "SYMBOL":
                ttype, value = SYMBOLS[raw], raw
            else:
                ttype, value = TokenType.UNKNOWN, raw

            return self._make_token(ttype, value, start_index, start_line, start_col)

        return self._make_token(
            TokenType.EOF, "", self.pos, self.line, self.column
        )


def tokenize(source: str) -> List[Token]:
    """Scan the whole source; the list always ends with exactly one EOF token."""
    lexer = Lexer(source)
    tokens = []
    while True:
        token = lexer.get_next_token()
        tokens.append(token)
        if token.type == TokenType.EOF:
            return tokens


#=============================================================================
# PHASE 2: TYPE INFERENCE SUPPORT
#=============================================================================

class Kind(Enum):
    INTEGER = "INTEGER"
    TEXT = "TEXT"
    UNKNOWN = "UNKNOWN"   # operator fragments


@dataclass
class ExprResult:
    """C fragment for (part of) an expression plus its inferred kind"""
    code: str
    kind: Kind


C_TYPES = {
    Kind.INTEGER: "int",
    Kind.TEXT: "char*",
}


class TypeTable:
    """
    Variable name -> Kind, one flat table for the whole translation unit.

    Function bodies write into the same table as top-level code, so a name
    declared inside a function is visible (with its kind) everywhere after.
    Names never declared are treated as INTEGER.
    """
    def __init__(self):
        self.entries: Dict[str, Kind] = {}

    def declare(self, name: str, kind: Kind):
        self.entries[name] = kind

    def lookup(self, name: str) -> Kind:
        return self.entries.get(name, Kind.INTEGER)

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)


# token -> runtime function; arity and result kind come from RUNTIME_SIGNATURES
BUILTINS: Dict[TokenType, str] = {
    TokenType.READ_FILE: "__wear_read_file",
    TokenType.STREQ: "__wear_streq",
    TokenType.STRLEN: "__wear_strlen",
    TokenType.CHAR_AT: "__wear_char_at",
    TokenType.IS_QUOTE: "__wear_is_quote",
    TokenType.QUOTE_CHAR: "__wear_quote_char",
    TokenType.IS_NEWLINE: "__wear_is_newline",
    TokenType.NEWLINE_CHAR: "__wear_newline_char",
}

RESULT_KINDS = {
    "s": Kind.TEXT,
    "i": Kind.INTEGER,
}


def builtin_signature(token_type: TokenType) -> Tuple[str, int, Kind]:
    c_name = BUILTINS[token_type]
    params, result = RUNTIME_SIGNATURES[c_name]
    return c_name, len(params), RESULT_KINDS[result]


OPERATORS = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.LESS: "<",
    TokenType.GREATER: ">",
    TokenType.LESS_EQUAL: "<=",
    TokenType.GREATER_EQUAL: ">=",
    TokenType.EQUAL_EQUAL: "==",
    TokenType.NOT_EQUAL: "!=",
}

# (left kind, right kind) -> runtime call used when folding a '+' chain
CONCAT_CALLS = {
    (Kind.TEXT, Kind.TEXT): "__wear_concat",
    (Kind.TEXT, Kind.INTEGER): "__wear_concat_str_int",
    (Kind.INTEGER, Kind.TEXT): "__wear_concat_int_str",
}

EXPRESSION_STOPS = {
    TokenType.RPAREN,
    TokenType.LBRACE,
    TokenType.RBRACE,
    TokenType.COMMA,
    TokenType.SEMICOLON,
    TokenType.NEWLINE,
    TokenType.EOF,
}


def c_string(value: str) -> str:
    # the scanner unescapes \" so it has to be escaped again for C
    return '"' + value.replace('"', '\\"') + '"'


def _is_plus(part: ExprResult) -> bool:
    return part.kind == Kind.UNKNOWN and part.code == "+"


def _join(parts: List[ExprResult]) -> ExprResult:
    kind = Kind.INTEGER
    for part in parts:
        if part.kind == Kind.TEXT:
            kind = Kind.TEXT
    return ExprResult(" ".join(part.code for part in parts), kind)


#=============================================================================
# PHASE 3: TRANSLATION (PARSING FUSED WITH C EMISSION)
#=============================================================================

class CodeGenerator:
    """
    Single left-to-right pass over the tokens that emits C as each construct
    is recognized.

    Emission goes to the buffer on top of an explicit target stack: the main
    body by default, a fresh buffer while a function body is being read.
    Finished functions are kept in declaration order and placed before main.
    """

    def __init__(self, tokens: List[Token], reporter: Optional[ErrorReporter] = None,
                 debug: bool = False):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(Token(
                TokenType.EOF, "",
                last.index + len(last.value) if last else 0,
                last.line if last else 1,
                last.column + len(last.value) if last else 1,
            ))
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.debug = debug
        self.pos = 0

        self.types = TypeTable()
        self.main_output: List[str] = []
        self.functions: List[str] = []
        self.function_names: List[str] = []
        self._targets: List[List[str]] = [self.main_output]
        self.indent_level = 1

        self._statements = {
            TokenType.VAR: self.generate_var_decl,
            TokenType.PRINT: self.generate_print,
            TokenType.WHILE: self.generate_while,
            TokenType.IF: self.generate_if,
            TokenType.FUNCTION: self.generate_function_decl,
            TokenType.RETURN: self.generate_return,
            TokenType.WRITE_FILE: self.generate_write_file,
            TokenType.READ_FILE: self.generate_read_file,
            TokenType.IDENTIFIER: self.generate_identifier_statement,
        }

    # -------------------------------
    # token cursor
    # -------------------------------
    def current(self) -> Token:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else self.tokens[-1]

    def peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else self.tokens[-1]

    def advance(self) -> Token:
        tok = self.current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def check(self, token_type: TokenType) -> bool:
        return self.current().type == token_type

    def match(self, token_type: TokenType) -> bool:
        if self.check(token_type):
            self.advance()
            return True
        return False

    def error(self, message: str, token: Optional[Token] = None):
        tok = token if token is not None else self.current()
        error = self.reporter.add("SYN001", message, tok)
        if self.debug:
            print(f"[ERROR SYN001] {message} at {tok.pos_str()} value='{tok.value}'")
        raise WearSyntaxError(error, tok)

    def expect(self, token_type: TokenType, message: str) -> Token:
        if self.debug:
            print(f"[CODEGEN] expect(): expected={token_type.value}, got={self.current()}")
        if not self.check(token_type):
            self.error(message)
        return self.advance()

    # -------------------------------
    # emission
    # -------------------------------
    def emit_line(self, code: str):
        self._targets[-1].append(INDENT * self.indent_level + code + "\n")

    # -------------------------------
    # expressions
    # -------------------------------
    def generate_expression(self) -> ExprResult:
        """
        Scan parts until a token that ends the expression, then decide
        between a '+' concatenation chain and plain operator emission.
        """
        parts: List[ExprResult] = []

        while True:
            tok = self.current()
            if tok.type in EXPRESSION_STOPS:
                break

            if tok.type == TokenType.STRING:
                parts.append(ExprResult(c_string(tok.value), Kind.TEXT))
                self.advance()
            elif tok.type == TokenType.INTEGER:
                parts.append(ExprResult(tok.value, Kind.INTEGER))
                self.advance()
            elif tok.type in BUILTINS:
                parts.append(self.generate_builtin())
            elif tok.type == TokenType.IDENTIFIER:
                parts.append(self.generate_reference())
            elif tok.type in OPERATORS:
                parts.append(ExprResult(OPERATORS[tok.type], Kind.UNKNOWN))
                self.advance()
            elif tok.type == TokenType.LPAREN:
                # nested group: its own scan, one part with the inner kind
                self.advance()
                inner = self.generate_expression()
                self.expect(TokenType.RPAREN, "Expected ')' to close '('")
                parts.append(ExprResult(f"({inner.code})", inner.kind))
            else:
                break

        has_text = any(p.kind == Kind.TEXT for p in parts)
        has_plus = any(_is_plus(p) for p in parts)

        if has_text and has_plus and len(parts) >= 3:
            result = self.build_concat(parts)
        else:
            result = _join(parts)

        if self.debug:
            print(f"[CODEGEN] expression -> {result.code} ({result.kind.value})")
        return result

    def build_concat(self, parts: List[ExprResult]) -> ExprResult:
        """Left-fold the '+'-separated operands into runtime concat calls."""
        operands: List[ExprResult] = []
        run: List[ExprResult] = []
        for part in parts:
            if _is_plus(part):
                if run:
                    operands.append(_join(run))
                run = []
            else:
                run.append(part)
        if run:
            operands.append(_join(run))

        if not operands:
            return ExprResult('""', Kind.TEXT)

        if len(operands) == 1:
            return operands[0]

        result = operands[0]
        for operand in operands[1:]:
            call = CONCAT_CALLS.get((result.kind, operand.kind))
            if call is None:
                # int + int stays arithmetic
                result = ExprResult(f"({result.code} + {operand.code})", Kind.INTEGER)
            else:
                result = ExprResult(f"{call}({result.code}, {operand.code})", Kind.TEXT)

        return ExprResult(result.code, Kind.TEXT)

    def generate_builtin(self) -> ExprResult:
        tok = self.advance()
        c_name, arity, kind = builtin_signature(tok.type)

        self.expect(TokenType.LPAREN, f"Expected '(' after '{tok.value}'")
        args = []
        for i in range(arity):
            if i > 0:
                self.expect(TokenType.COMMA, "Expected ',' between arguments")
            args.append(self.generate_expression().code)
        self.expect(TokenType.RPAREN, f"Expected ')' to close '{tok.value}' call")

        return ExprResult(f"{c_name}({', '.join(args)})", kind)

    def generate_call_args(self) -> str:
        # the '(' is already consumed
        args = []
        while not self.check(TokenType.RPAREN) and not self.check(TokenType.EOF):
            if args:
                self.expect(TokenType.COMMA, "Expected ',' between arguments")
            args.append(self.generate_expression().code)
        self.expect(TokenType.RPAREN, "Expected ')' after arguments")
        return ", ".join(args)

    def generate_reference(self) -> ExprResult:
        name = self.advance().value

        if self.match(TokenType.LPAREN):
            # user functions are assumed to return int
            return ExprResult(f"{name}({self.generate_call_args()})", Kind.INTEGER)

        return ExprResult(name, self.types.lookup(name))

    # -------------------------------
    # statements
    # -------------------------------
    def generate_var_decl(self):
        self.advance()  # skip 'var'

        name = self.expect(TokenType.IDENTIFIER, "Expected variable name after 'var'").value
        self.expect(TokenType.EQUAL, "Expected '=' after variable name")

        expr = self.generate_expression()
        kind = Kind.TEXT if expr.kind == Kind.TEXT else Kind.INTEGER
        self.emit_line(f"{C_TYPES[kind]} {name} = {expr.code};")
        self.types.declare(name, kind)

    def generate_print(self):
        self.advance()  # skip 'cetak'

        expr = self.generate_expression()
        if expr.kind == Kind.TEXT:
            self.emit_line(f"__wear_print_str({expr.code});")
        else:
            self.emit_line(f"__wear_print_int({expr.code});")

    def generate_block(self, description: str):
        self.expect(TokenType.LBRACE, f"Expected '{{' to start {description}")
        self.indent_level += 1

        while not self.check(TokenType.RBRACE) and not self.check(TokenType.EOF):
            self.generate_statement()

        self.indent_level -= 1
        self.expect(TokenType.RBRACE, f"Expected '}}' to end {description}")

    def generate_condition(self, keyword: Token) -> str:
        self.expect(TokenType.LPAREN, f"Expected '(' after '{keyword.value}'")
        condition = self.generate_expression()
        self.expect(TokenType.RPAREN, "Expected ')' after condition")
        return condition.code

    def generate_while(self):
        keyword = self.advance()
        condition = self.generate_condition(keyword)

        self.emit_line(f"while ({condition}) {{")
        self.generate_block("while body")
        self.emit_line("}")

    def generate_branch(self, head: str):
        keyword = self.advance()
        condition = self.generate_condition(keyword)

        self.emit_line(f"{head} ({condition}) {{")
        self.generate_block("if body")
        self.emit_line("}")

    def generate_if(self):
        self.generate_branch("if")

        # else-if links are consumed iteratively
        while self._else_follows():
            self.advance()  # skip 'lainnya'
            if not self.check(TokenType.IF):
                self.emit_line("else {")
                self.generate_block("else body")
                self.emit_line("}")
                return
            self.generate_branch("else if")

    def _else_follows(self) -> bool:
        # 'lainnya' may sit on the line after the closing brace
        offset = 0
        while self.peek(offset).type == TokenType.NEWLINE:
            offset += 1
        if self.peek(offset).type != TokenType.ELSE:
            return False
        self.pos += offset
        return True

    def generate_function_decl(self):
        keyword = self.advance()

        name = self.expect(
            TokenType.IDENTIFIER, f"Expected function name after '{keyword.value}'"
        ).value
        self.expect(TokenType.LPAREN, "Expected '(' after function name")

        params = []
        while not self.check(TokenType.RPAREN) and not self.check(TokenType.EOF):
            if params:
                self.expect(TokenType.COMMA, "Expected ',' between parameters")
            params.append(self.expect(TokenType.IDENTIFIER, "Expected parameter name").value)

        self.expect(TokenType.RPAREN, "Expected ')' after parameters")

        # parameters carry no annotation, so they are all char*
        signature = ", ".join(f"char* {p}" for p in params)
        self.function_names.append(name)
        if self.debug:
            print(f"[CODEGEN] function {name}({', '.join(params)})")

        body = [f"int {name}({signature}) {{\n"]
        saved_indent = self.indent_level
        self._targets.append(body)
        self.indent_level = 0

        self.generate_block("function body")

        self._targets.pop()
        self.indent_level = saved_indent
        body.append("}\n\n")
        self.functions.append("".join(body))

    def generate_return(self):
        self.advance()  # skip 'kembalikan'

        expr = self.generate_expression()
        if expr.code:
            self.emit_line(f"return {expr.code};")
        else:
            self.emit_line("return;")

    def generate_write_file(self):
        keyword = self.advance()

        self.expect(TokenType.LPAREN, f"Expected '(' after '{keyword.value}'")
        filename = self.generate_expression()
        self.expect(TokenType.COMMA, "Expected ',' between arguments")
        content = self.generate_expression()
        self.expect(TokenType.RPAREN, f"Expected ')' to close '{keyword.value}' call")

        self.emit_line(f"__wear_write_file({filename.code}, {content.code});")

    def generate_read_file(self):
        # result discarded
        call = self.generate_builtin()
        self.emit_line(f"{call.code};")

    def generate_identifier_statement(self):
        tok = self.advance()

        if self.match(TokenType.EQUAL):
            # reassignment keeps the kind fixed by the declaration
            expr = self.generate_expression()
            self.emit_line(f"{tok.value} = {expr.code};")
        elif self.match(TokenType.LPAREN):
            self.emit_line(f"{tok.value}({self.generate_call_args()});")
        else:
            self.reporter.warn("SYN006", "Identifier used as a statement has no effect", tok)

    def skip_token(self):
        tok = self.advance()
        if tok.type == TokenType.UNKNOWN:
            self.reporter.warn("LEX001", "Illegal character skipped", tok)
        if self.debug:
            print(f"[CODEGEN] skipped {tok.type.value} '{tok.value}' at {tok.pos_str()}")

    def generate_statement(self):
        while self.check(TokenType.NEWLINE):
            self.advance()

        if self.check(TokenType.RBRACE) or self.check(TokenType.EOF):
            return

        tok = self.current()
        handler = self._statements.get(tok.type)
        if handler is None:
            self.skip_token()
            return

        if self.debug:
            print(f"[CODEGEN] statement {tok.type.value} at {tok.pos_str()}")
        handler()

    def run(self):
        """Translate every top-level statement into the emission buffers."""
        try:
            while not self.check(TokenType.EOF):
                if self.check(TokenType.RBRACE):
                    self.reporter.warn("SYN005", "Unmatched '}' skipped", self.advance())
                    continue
                self.generate_statement()
        except RecursionError:
            self.error("Blocks nested too deeply")

    # -------------------------------
    # output assembly
    # -------------------------------
    def assemble(self) -> str:
        output = [HEADER_COMMENT, WEAR_RUNTIME]

        if self.functions:
            output.append("// User-defined functions\n")
            output.extend(self.functions)

        output.append("int main(int argc, char* argv[]) {\n")
        output.extend(self.main_output)
        output.append("\n    return 0;\n")
        output.append("}\n")
        return "".join(output)

    def generate(self) -> str:
        self.run()
        return self.assemble()


def translate(tokens: List[Token], reporter: Optional[ErrorReporter] = None,
              debug: bool = False) -> str:
    """Translate a token list into a complete C document.

    Raises WearSyntaxError on the first missing mandatory token; nothing is
    returned in that case.
    """
    return CodeGenerator(tokens, reporter=reporter, debug=debug).generate()


#=============================================================================
# PIPELINE
#=============================================================================

class Translator:
    """
    Runs the phases for one source text and collects the results
    """
    def __init__(self, debug: bool = False):
        self.debug = debug

    def translate(self, source: str) -> dict:
        """
        Main translation function
        Returns: dict with the C code, tokens, type table, functions and warnings
        Raises: WearSyntaxError
        """
        reporter = ErrorReporter(source)
        if self.debug:
            print("\n" + "="*70)
            print("DEBUG MODE - COMPILATION PROCESS")
            print("="*70)
            print(f"Length: {len(source)} characters")

        # Phase 1: Lexical Analysis
        if self.debug:
            print("\n" + "-"*70)
            print("PHASE 1: LEXICAL ANALYSIS (Tokenization)")
            print("-"*70)

        tokens = tokenize(source)

        if self.debug:
            for token_num, token in enumerate(tokens):
                print(f"  Token {token_num:3d}: {token.type.value:15s} | "
                      f"Value: '{token.value}' | Pos: {token.pos_str()}")
            print(f"\n  Total tokens: {len(tokens) - 1} (excluding EOF)")

        # Phase 2: Translation
        if self.debug:
            print("\n" + "-"*70)
            print("PHASE 2: TRANSLATION (Parsing & C Emission)")
            print("-"*70)

        codegen = CodeGenerator(tokens, reporter=reporter, debug=self.debug)
        try:
            codegen.run()
        except WearSyntaxError as e:
            if self.debug:
                print(f"\n  SYNTAX ERROR: {e}")
                reporter.print()
            raise

        if self.debug:
            print("\n  Type table:")
            for name, kind in codegen.types.entries.items():
                print(f"    {name:20s} {kind.value}")
            if codegen.function_names:
                print(f"\n  Functions: {', '.join(codegen.function_names)}")
            reporter.print()

        # Phase 3: Output assembly
        if self.debug:
            print("\n" + "-"*70)
            print("PHASE 3: OUTPUT ASSEMBLY")
            print("-"*70)

        c_code = codegen.assemble()

        if self.debug:
            print(f"  Functions: {len(codegen.functions)}")
            print(f"  Main statements: {len(codegen.main_output)}")
            print(f"  Output length: {len(c_code)} characters")
            print("\n" + "="*70)
            print("COMPILATION COMPLETE")
            print("="*70 + "\n")

        return {
            'source': source,
            'c_code': c_code,
            'main': "".join(codegen.main_output),
            'functions': "".join(codegen.functions),
            'function_names': list(codegen.function_names),
            'types': dict(codegen.types.entries),
            'tokens': tokens,
            'warnings': list(reporter.warnings),
        }


#=============================================================================
# MAIN INTERFACE
#=============================================================================

def report_error(error: CompileError, file=None):
    file = file if file is not None else sys.stderr
    print(f"Error: {error.format()}", file=file)
    if error.context:
        print(error.pointer(), file=file)


def executable_name(output_path: str) -> str:
    exe, ext = os.path.splitext(output_path)
    if os.name == "nt":
        exe += ".exe"
    elif not ext:
        # keep the executable distinct from the C file
        exe += ".out"
    return exe


def compile_c(c_path: str, cc: str = DEFAULT_CC) -> Optional[str]:
    """Build c_path with the external C compiler; returns the executable path or None."""
    exe = executable_name(c_path)
    cmd = [cc] + CC_FLAGS + ["-o", exe, c_path]
    print(f"[WeaR Compiler] Compiling: {' '.join(cmd)}")

    try:
        completed = subprocess.run(cmd)
    except FileNotFoundError:
        print(f"[WeaR Compiler] C compiler '{cc}' not found", file=sys.stderr)
        return None

    if completed.returncode != 0:
        print("[WeaR Compiler] C compilation failed", file=sys.stderr)
        return None

    print(f"[WeaR Compiler] Built: {exe}")
    return exe


def compile_file(args) -> int:
    print(f"[WeaR Compiler] Reading: {args.input}")
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            source = f.read()
    except OSError:
        print(f"Error: Cannot open file '{args.input}'", file=sys.stderr)
        return 1

    print("[WeaR Compiler] Translating...")
    try:
        result = Translator(debug=args.debug).translate(source)
    except WearSyntaxError as e:
        report_error(e.error)
        return 1

    for warning in result['warnings']:
        print(f"Warning: {warning.format()}", file=sys.stderr)

    try:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result['c_code'])
    except OSError:
        print(f"Error: Cannot write to file '{args.output}'", file=sys.stderr)
        return 1
    print(f"[WeaR Compiler] Generated: {args.output}")

    if not (args.compile or args.run):
        return 0

    exe = compile_c(args.output, cc=args.cc)
    if exe is None:
        return 1

    if args.run:
        print(f"[WeaR Compiler] Running: {exe}")
        print("-" * 40)
        return subprocess.run([os.path.abspath(exe)]).returncode

    return 0


def interactive(debug: bool = False) -> int:
    """
    Line-by-line session. Every accepted line is appended to the session
    program and the whole program is translated again; only the C emitted
    for the new line is shown. An error at end of input means an unfinished
    block, so further lines are collected until it closes.
    """
    print("=" * 70)
    print("WEAR LANG STAGE-0 COMPILER - INTERACTIVE MODE")
    print("=" * 70)
    print("Commands:")
    print("  <code>     - Translate a line of WeaR Lang")
    print("  show       - Print the complete C program")
    print("  reset      - Forget the session")
    print("  debug on   - Enable debug mode")
    print("  debug off  - Disable debug mode")
    print("  quit       - Exit program")
    print("=" * 70)

    session: List[str] = []
    pending: List[str] = []
    shown_main = ""
    shown_functions = ""
    shown_warnings = 0
    c_code = translate(tokenize(""))

    while True:
        try:
            line = input("...> " if pending else "wear> ")
        except EOFError:
            print()
            return 0

        command = line.strip().lower()
        if not pending:
            if command in ['quit', 'exit', 'q']:
                print("Goodbye!")
                return 0
            if command == 'debug on':
                debug = True
                print("Debug mode enabled")
                continue
            if command == 'debug off':
                debug = False
                print("Debug mode disabled")
                continue
            if command == 'show':
                print(c_code)
                continue
            if command == 'reset':
                session = []
                shown_main = shown_functions = ""
                shown_warnings = 0
                c_code = translate(tokenize(""))
                print("Session cleared")
                continue
            if not command:
                continue

        candidate = session + pending + [line]
        try:
            result = Translator(debug=debug).translate("\n".join(candidate) + "\n")
        except WearSyntaxError as e:
            if e.token.type == TokenType.EOF:
                pending.append(line)
                continue
            report_error(e.error, file=sys.stdout)
            pending = []
            continue

        session = candidate
        pending = []
        c_code = result['c_code']

        new_functions = result['functions'][len(shown_functions):]
        new_main = result['main'][len(shown_main):]
        shown_functions, shown_main = result['functions'], result['main']
        if new_functions:
            print(new_functions.rstrip("\n"))
        if new_main:
            print(new_main.rstrip("\n"))
        for warning in result['warnings'][shown_warnings:]:
            print(f"Warning: {warning.format()}")
        shown_warnings = len(result['warnings'])


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wearc",
        description="WeaR Lang Stage-0 Compiler (Transpiler to C)")
    parser.add_argument("input", nargs="?",
                        help="Input .wr file (omit for interactive mode)")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT,
                        help=f"Output C file (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--compile", action="store_true",
                        help="Compile generated C code with the C compiler")
    parser.add_argument("--run", action="store_true",
                        help="Compile and run the program")
    parser.add_argument("--cc", default=DEFAULT_CC,
                        help=f"C compiler to invoke (default: {DEFAULT_CC})")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="Print every compilation phase")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main command-line interface"""
    args = build_arg_parser().parse_args(argv)

    if args.input is None:
        return interactive(debug=args.debug)

    return compile_file(args)


if __name__ == "__main__":
    sys.exit(main())
