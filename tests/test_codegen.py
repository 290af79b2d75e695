from wearc import (
    CodeGenerator,
    ErrorReporter,
    HEADER_COMMENT,
    Kind,
    TypeTable,
    translate,
    tokenize,
)
from wear_runtime import WEAR_RUNTIME


def generate(source):
    codegen = CodeGenerator(tokenize(source), reporter=ErrorReporter(source))
    codegen.run()
    return codegen


def main_lines(source):
    return [line.strip() for line in "".join(generate(source).main_output).splitlines()]


# -------------------------------
# kind inference
# -------------------------------

def test_text_plus_integer_declaration() -> None:
    codegen = generate('var x = "a" + 1\ncetak x')
    assert codegen.main_output == [
        '    char* x = __wear_concat_str_int("a", 1);\n',
        '    __wear_print_str(x);\n',
    ]
    assert codegen.types.lookup("x") == Kind.TEXT


def test_integer_addition_declaration() -> None:
    codegen = generate("var y = 1 + 2\ncetak y")
    assert codegen.main_output == [
        "    int y = 1 + 2;\n",
        "    __wear_print_int(y);\n",
    ]
    assert codegen.types.lookup("y") == Kind.INTEGER


def test_text_literal_declaration() -> None:
    codegen = generate('var s = "solo"')
    assert main_lines('var s = "solo"') == ['char* s = "solo";']
    assert codegen.types.lookup("s") == Kind.TEXT


def test_reassignment_keeps_declared_kind() -> None:
    codegen = generate('var x = 1\nx = "a"\ncetak x')
    assert main_lines('var x = 1\nx = "a"\ncetak x') == [
        "int x = 1;",
        'x = "a";',
        "__wear_print_int(x);",
    ]
    assert codegen.types.lookup("x") == Kind.INTEGER


def test_redeclaration_records_latest_kind() -> None:
    assert generate('var x = 1\nvar x = "a"').types.lookup("x") == Kind.TEXT


def test_undeclared_reference_defaults_to_integer() -> None:
    codegen = generate("cetak nope")
    assert main_lines("cetak nope") == ["__wear_print_int(nope);"]
    assert "nope" not in codegen.types
    assert codegen.reporter.errors == []


def test_type_table_default() -> None:
    table = TypeTable()
    assert table.lookup("missing") == Kind.INTEGER
    table.declare("s", Kind.TEXT)
    assert table.lookup("s") == Kind.TEXT
    assert len(table) == 1


def test_text_variable_joins_concatenation() -> None:
    assert main_lines('var nama = "Dunia"\ncetak "Halo " + nama') == [
        'char* nama = "Dunia";',
        '__wear_print_str(__wear_concat("Halo ", nama));',
    ]


# -------------------------------
# concatenation chains
# -------------------------------

def test_chain_folds_left_to_right() -> None:
    assert main_lines('cetak "a" + "b" + 1 + "c"') == [
        '__wear_print_str(__wear_concat(__wear_concat_str_int(__wear_concat("a", "b"), 1), "c"));'
    ]


def test_leading_integers_add_before_concatenation() -> None:
    assert main_lines('cetak 1 + 2 + "c"') == [
        '__wear_print_str(__wear_concat_int_str((1 + 2), "c"));'
    ]


def test_operand_with_other_operators_stays_together() -> None:
    assert main_lines('var s = "n=" + n * 2') == [
        'char* s = __wear_concat_str_int("n=", n * 2);'
    ]


def test_parenthesized_group_keeps_inner_kind() -> None:
    assert main_lines('var s = ("a" + 1) + "b"') == [
        'char* s = __wear_concat((__wear_concat_str_int("a", 1)), "b");'
    ]


def test_parenthesized_arithmetic() -> None:
    assert main_lines("var z = (1 + 2) * 3") == ["int z = (1 + 2) * 3;"]


def test_chain_without_operands_is_empty_text() -> None:
    empty = generate("").build_concat([])
    assert (empty.code, empty.kind) == ('""', Kind.TEXT)


def test_chain_with_one_operand_is_unchanged() -> None:
    result = CodeGenerator(tokenize('"a" + +')).generate_expression()
    assert (result.code, result.kind) == ('"a"', Kind.TEXT)


def test_two_parts_are_not_folded() -> None:
    result = CodeGenerator(tokenize('"only" +')).generate_expression()
    assert result.code == '"only" +'


def test_empty_operand_runs_are_dropped() -> None:
    result = CodeGenerator(tokenize('"a" + + 1')).generate_expression()
    assert result.code == '__wear_concat_str_int("a", 1)'
    assert result.kind == Kind.TEXT


# -------------------------------
# calls and builtins
# -------------------------------

def test_function_call_result_is_integer() -> None:
    source = 'var r = f("x")\ncetak r\ncetak "r=" + f(1, 2)'
    assert main_lines(source) == [
        'int r = f("x");',
        "__wear_print_int(r);",
        '__wear_print_str(__wear_concat_str_int("r=", f(1, 2)));',
    ]


def test_builtins_translate_to_runtime_calls() -> None:
    source = "\n".join([
        'var t = baca_file("in.txt")',
        'var e = sama(t, "b")',
        "var n = panjang(t)",
        "var c = char_at(t, 0)",
        "var q = quote_char()",
        "var nl = newline_char()",
        "var iq = is_quote(c)",
        "var inl = is_newline(c)",
    ])
    codegen = generate(source)
    assert main_lines(source) == [
        'char* t = __wear_read_file("in.txt");',
        'int e = __wear_streq(t, "b");',
        "int n = __wear_strlen(t);",
        "char* c = __wear_char_at(t, 0);",
        "char* q = __wear_quote_char();",
        "char* nl = __wear_newline_char();",
        "int iq = __wear_is_quote(c);",
        "int inl = __wear_is_newline(c);",
    ]
    assert codegen.types.entries == {
        "t": Kind.TEXT,
        "e": Kind.INTEGER,
        "n": Kind.INTEGER,
        "c": Kind.TEXT,
        "q": Kind.TEXT,
        "nl": Kind.TEXT,
        "iq": Kind.INTEGER,
        "inl": Kind.INTEGER,
    }


def test_english_builtin_aliases() -> None:
    assert main_lines('var a = streq("x", "y") + strlen("abc")') == [
        'int a = __wear_streq("x", "y") + __wear_strlen("abc");'
    ]


def test_builtin_inside_concatenation() -> None:
    assert main_lines('cetak "c=" + char_at(s, 1)') == [
        '__wear_print_str(__wear_concat("c=", __wear_char_at(s, 1)));'
    ]


def test_write_file_statement() -> None:
    assert main_lines('tulis_file("out.txt", "data" + 1)') == [
        '__wear_write_file("out.txt", __wear_concat_str_int("data", 1));'
    ]


def test_read_file_statement_discards_result() -> None:
    assert main_lines('baca_file("x.txt")') == ['__wear_read_file("x.txt");']


def test_call_statement() -> None:
    assert main_lines('f(1, "a")\ng()') == ['f(1, "a");', "g();"]


# -------------------------------
# blocks
# -------------------------------

def test_while_loop() -> None:
    codegen = generate("var i = 0\nselama (i < 3) {\n    cetak i\n    i = i + 1\n}")
    assert codegen.main_output == [
        "    int i = 0;\n",
        "    while (i < 3) {\n",
        "        __wear_print_int(i);\n",
        "        i = i + 1;\n",
        "    }\n",
    ]


def test_empty_while_body() -> None:
    assert generate("selama (1) {}").main_output == [
        "    while (1) {\n",
        "    }\n",
    ]


def test_if_else_if_else_chain() -> None:
    source = "\n".join([
        "jika (x > 0) {",
        '    cetak "pos"',
        "} lainnya jika (x < 0) {",
        '    cetak "neg"',
        "} lainnya jika (x == 0) {",
        '    cetak "zero"',
        "} lainnya {",
        '    cetak "?"',
        "}",
    ])
    assert generate(source).main_output == [
        "    if (x > 0) {\n",
        '        __wear_print_str("pos");\n',
        "    }\n",
        "    else if (x < 0) {\n",
        '        __wear_print_str("neg");\n',
        "    }\n",
        "    else if (x == 0) {\n",
        '        __wear_print_str("zero");\n',
        "    }\n",
        "    else {\n",
        '        __wear_print_str("?");\n',
        "    }\n",
    ]


def test_else_on_following_line() -> None:
    assert main_lines("if (a) {\n    print 1\n}\nelse {\n    print 2\n}") == [
        "if (a) {",
        "__wear_print_int(1);",
        "}",
        "else {",
        "__wear_print_int(2);",
        "}",
    ]


def test_nested_blocks_indent() -> None:
    source = "jika (a) {\n    selama (b) {\n        jika (c) {\n            cetak 1\n        }\n    }\n}"
    assert generate(source).main_output == [
        "    if (a) {\n",
        "        while (b) {\n",
        "            if (c) {\n",
        "                __wear_print_int(1);\n",
        "            }\n",
        "        }\n",
        "    }\n",
    ]


# -------------------------------
# functions
# -------------------------------

def test_function_declaration() -> None:
    codegen = generate('fungsi sapa(nama, salam) {\n    cetak "hi"\n    kembalikan 0\n}')
    assert codegen.functions == [
        "int sapa(char* nama, char* salam) {\n"
        '    __wear_print_str("hi");\n'
        "    return 0;\n"
        "}\n\n"
    ]
    assert codegen.main_output == []
    assert codegen.function_names == ["sapa"]


def test_function_without_parameters_and_bare_return() -> None:
    codegen = generate("function f() {\n    return\n}")
    assert codegen.functions == ["int f() {\n    return;\n}\n\n"]


def test_function_body_indent_restarts() -> None:
    codegen = generate("jika (a) {\n    fungsi f() {\n        cetak 1\n    }\n    cetak 2\n}")
    assert codegen.functions == ["int f() {\n    __wear_print_int(1);\n}\n\n"]
    assert codegen.main_output == [
        "    if (a) {\n",
        "        __wear_print_int(2);\n",
        "    }\n",
    ]


def test_nested_function_is_completed_first() -> None:
    codegen = generate("fungsi luar() {\n    fungsi dalam() {\n        cetak 1\n    }\n    dalam()\n}")
    assert codegen.function_names == ["luar", "dalam"]
    assert codegen.functions[0].startswith("int dalam() {")
    assert codegen.functions[1] == "int luar() {\n    dalam();\n}\n\n"


def test_parameters_are_not_recorded_as_text() -> None:
    codegen = generate("fungsi f(p) {\n    cetak p\n}")
    assert "__wear_print_int(p);" in codegen.functions[0]


def test_declarations_inside_functions_share_the_table() -> None:
    codegen = generate('fungsi f() {\n    var s = "x"\n}\ncetak s')
    assert codegen.main_output == ["    __wear_print_str(s);\n"]


def test_functions_precede_main_in_declaration_order() -> None:
    output = translate(tokenize("fungsi f() {\n}\ncetak 1\nfungsi g() {\n}\n"))
    assert output.index("// User-defined functions") < output.index("int f()")
    assert output.index("int f()") < output.index("int g()")
    assert output.index("int g()") < output.index("int main(")
    main_body = output[output.index("int main("):]
    assert "__wear_print_int(1);" in main_body


# -------------------------------
# tolerated input
# -------------------------------

def test_semicolons_are_ignored() -> None:
    assert main_lines("cetak 1; cetak 2;") == [
        "__wear_print_int(1);",
        "__wear_print_int(2);",
    ]


def test_escaped_quote_is_escaped_again_for_c() -> None:
    assert main_lines(r'cetak "say \"hi\""') == [r'__wear_print_str("say \"hi\"");']


def test_newline_escape_passes_through() -> None:
    assert main_lines(r'cetak "a\nb"') == [r'__wear_print_str("a\nb");']


def test_unknown_character_skipped_with_warning() -> None:
    codegen = generate("@\ncetak 1")
    assert main_lines("@\ncetak 1") == ["__wear_print_int(1);"]
    assert [w.code for w in codegen.reporter.warnings] == ["LEX001"]
    assert codegen.reporter.warnings[0].token_value == "@"


def test_stray_closing_brace_skipped_with_warning() -> None:
    codegen = generate("}\ncetak 1")
    assert codegen.main_output == ["    __wear_print_int(1);\n"]
    assert [w.code for w in codegen.reporter.warnings] == ["SYN005"]


def test_bare_identifier_statement_warns() -> None:
    codegen = generate("x\ncetak 1")
    assert codegen.main_output == ["    __wear_print_int(1);\n"]
    assert [w.code for w in codegen.reporter.warnings] == ["SYN006"]


# -------------------------------
# output assembly
# -------------------------------

def test_output_document_layout() -> None:
    output = translate(tokenize("cetak 1\n"))
    assert output.startswith(HEADER_COMMENT + WEAR_RUNTIME)
    assert "// User-defined functions" not in output
    assert output.endswith(
        "int main(int argc, char* argv[]) {\n"
        "    __wear_print_int(1);\n"
        "\n    return 0;\n"
        "}\n"
    )


def test_empty_program() -> None:
    assert translate(tokenize("")).endswith(
        "int main(int argc, char* argv[]) {\n\n    return 0;\n}\n"
    )


def test_token_list_without_eof_is_accepted() -> None:
    tokens = tokenize("cetak 1")[:-1]
    assert "__wear_print_int(1);" in translate(tokens)
    assert translate([]).endswith("    return 0;\n}\n")


def test_long_else_if_chain() -> None:
    links = 1200
    source = "jika (x == 0) {\n    cetak 0\n}"
    source += "".join(
        f" lainnya jika (x == {i}) {{\n    cetak {i}\n}}" for i in range(1, links + 1)
    )
    source += " lainnya {\n    cetak 99\n}\n"

    lines = main_lines(source)
    assert lines[0] == "if (x == 0) {"
    assert lines.count("else if (x == 1) {") == 1
    assert sum(line.startswith("else if (") for line in lines) == links
    assert f"else if (x == {links}) {{" in lines
    assert lines[-3:] == ["else {", "__wear_print_int(99);", "}"]
