from ctcleaner.repair import repair_close_tags, repair_delimiters, repair_open_tags


def test_close_tag_added_after_value():
    assert repair_delimiters("<tag value") == "<tag value>"


def test_close_tag_goes_before_trailing_whitespace():
    assert repair_close_tags("<tag value  ") == "<tag value>  "
    assert repair_close_tags("<a>\n<b\n</a>") == "<a>\n<b>\n</a>"


def test_close_tag_before_final_newline():
    assert repair_delimiters("<tag value\n") == "<tag value>\n"


def test_open_tag_added_at_start_of_text():
    assert repair_delimiters("tag>rest<next>") == "<tag>rest<next>"


def test_open_tag_added_after_leading_whitespace():
    assert repair_open_tags("<a>\nb>\n</a>") == "<a>\n<b>\n</a>"


def test_well_formed_text_untouched():
    xml = '<CheatTable><ID x="1">5</ID><Empty/></CheatTable>'
    assert repair_delimiters(xml) == xml


def test_repair_is_idempotent():
    for text in ("<tag value", "tag>rest<next>", "<a>\n<b\n</a>", "<a>\nb>\n</a>"):
        once = repair_delimiters(text)
        assert repair_delimiters(once) == once
