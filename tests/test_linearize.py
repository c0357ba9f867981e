from ctcleaner.linearize import (
    Marker,
    linearize_asm_field,
    linearize_lua_field,
    linearize_script,
)


def test_lua_lines_merged_markers_kept():
    out = linearize_script("{$lua}\nline1\nline2\n{$asm}", False)
    assert out == "{$lua}\nline1 line2\n{$asm}"


def test_markers_are_case_insensitive():
    assert linearize_script("{$LUA}\na\nb") == "{$LUA}\na b"
    assert linearize_script("{$lua}\na\n{$Asm}\nnop") == "{$lua}\na\n{$Asm}\nnop"


def test_line_endings_normalized_and_lines_trimmed():
    assert linearize_script("  {$lua}\r\n   a  \r\n b\r\n") == "{$lua}\na b"


def test_asm_only_text_untouched():
    text = "{$asm}\nmov eax,1\nret"
    assert linearize_script(text) == text


def test_asm_line_before_lua_block_kept():
    out = linearize_script("{$asm}\nnop\n{$lua}\nx\ny")
    assert out == "{$asm}\nnop\n{$lua}\nx y"


def test_sections_stay_on_their_own_lines():
    text = "[ENABLE]\n{$lua}\na\nb\n[DISABLE]\n{$lua}\nc\nd"
    assert linearize_script(text) == "[ENABLE]\n{$lua}\na b\n[DISABLE]\n{$lua}\nc d"


def test_line_break_inside_string_kept():
    out = linearize_script('{$lua}\nprint("a\nb")\nx')
    assert out == '{$lua}\nprint("a\nb") x'


def test_multiline_literal_copied_through():
    out = linearize_script("{$lua}\ns = [[one\ntwo]]\nx")
    assert out == "{$lua}\ns = [[one\ntwo]] x"


def test_comment_wrapped_before_merge():
    out = linearize_script("{$lua}\n-- a comment\nnext", True)
    assert out == "{$lua}\n--[[ a comment]] next"


def test_block_comment_not_wrapped_again():
    assert linearize_script("--[[ x]]\ny", True) == "--[[ x]] y"


def test_short_comment_at_end_left_alone():
    assert linearize_script("a\n--x", True) == "a --x"


def test_state_does_not_leak_between_calls():
    linearize_script('{$lua}\n"unbalanced\nquote', True)
    assert linearize_script("{$lua}\na\nb") == "{$lua}\na b"


def test_lua_field_double_pass():
    text = "local a = 1 -- one\nprint(a)"
    assert linearize_lua_field(text) == "local a = 1 --[[ one]] print(a)"


def test_double_pass_is_stable():
    once = linearize_script("{$lua}\nline1\nline2\n{$asm}", False)
    assert linearize_lua_field(once) == once
    assert linearize_asm_field(once) == once


def test_asm_field_with_lua_block():
    text = "[ENABLE]\n{$lua}\nlocal a = 1\nprint(a)\n{$asm}\nnop\n[DISABLE]\n"
    assert linearize_asm_field(text) == (
        "[ENABLE]\n{$lua}\nlocal a = 1 print(a)\n{$asm}\nnop\n[DISABLE]"
    )


def test_marker_matching():
    assert Marker("{$lua}", case_sensitive=False).at("x{$LuA}", 1)
    assert not Marker("[[").at("[", 0)
    assert not Marker("--").at("-x", 0)
