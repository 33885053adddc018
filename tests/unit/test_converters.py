"""
转换器单元测试：裸词规则、JSON、YAML-lite、TOML 与分发。

TOON 编码器单独见 test_toon.py。
"""

from __future__ import annotations

import json

import pytest

from token_studio.convert import (
    ConvertOptions,
    FormatKind,
    convert_all_formats,
    convert_format,
    is_bare_word,
    to_minified_json,
    to_pretty_json,
    to_toml,
    to_yaml_lite,
)
from token_studio.errors import ConverterError


# === 裸词规则 ===


class TestBareWord:
    """Token 感知模式的裸词判定。"""

    @pytest.mark.parametrize("value", ["hello_world-1", "abc", "A1", "123", "-", "snake_case"])
    def test_eligible(self, value: str) -> None:
        assert is_bare_word(value)

    @pytest.mark.parametrize(
        "value",
        ["true", "null", "off", "TRUE", "Null", "Yes", "no", "ON", "~", ""],
    )
    def test_reserved_words_not_eligible(self, value: str) -> None:
        assert not is_bare_word(value)

    @pytest.mark.parametrize("value", ["hello world", "a:b", "é", "a.b", "x/y", "tab\there"])
    def test_other_characters_not_eligible(self, value: str) -> None:
        assert not is_bare_word(value)


# === JSON ===


class TestJsonFormat:
    """pretty / minified JSON 测试。"""

    def test_pretty_two_space_indent(self) -> None:
        assert to_pretty_json({"a": [1, 2]}) == '{\n  "a": [\n    1,\n    2\n  ]\n}'

    def test_minified_has_no_whitespace(self) -> None:
        assert to_minified_json({"a": [1, {"b": "c d"}]}) == '{"a":[1,{"b":"c d"}]}'

    def test_non_ascii_kept(self) -> None:
        assert to_minified_json({"名": "é"}) == '{"名":"é"}'

    @pytest.mark.parametrize(
        "value",
        [
            {"users": [{"id": 1, "name": "Alice Smith"}], "ok": True, "none": None},
            [1, 2.5, -3, "x y", {"nested": {"deep": []}}],
            "plain string",
            42,
            None,
            {"é": "中文", "emoji": "😀"},
        ],
    )
    @pytest.mark.parametrize("token_aware", [False, True])
    def test_minified_round_trip(self, value: object, token_aware: bool) -> None:
        assert json.loads(to_minified_json(value, token_aware=token_aware)) == value

    def test_token_aware_strips_quotes_of_bare_values(self) -> None:
        value = {"name": "alice", "role": "admin user", "flag": "true", "n": 1}
        assert (
            to_minified_json(value, token_aware=True)
            == '{"name":alice,"role":"admin user","flag":"true","n":1}'
        )

    def test_token_aware_keeps_keys_quoted(self) -> None:
        assert to_pretty_json({"key": "value"}, token_aware=True) == '{\n  "key": value\n}'

    def test_token_aware_in_arrays(self) -> None:
        assert to_minified_json(["a", "b c", "d"], token_aware=True) == '[a,"b c",d]'

    def test_token_aware_root_string(self) -> None:
        assert to_minified_json("word", token_aware=True) == "word"

    def test_token_aware_private_use_text_stays_quoted(self) -> None:
        value = {"k": "\ue000ab\ue000", "\ue000ab\ue000": 1, "w": "ok"}
        assert (
            to_minified_json(value, token_aware=True)
            == '{"k":"\ue000ab\ue000","\ue000ab\ue000":1,"w":ok}'
        )

    def test_token_aware_bare_key_stays_quoted(self) -> None:
        assert to_minified_json({"ab": "ab"}, token_aware=True) == '{"ab":ab}'


# === YAML-lite ===


class TestYamlLite:
    """YAML-lite 渲染测试。"""

    def test_nested_object(self) -> None:
        assert to_yaml_lite({"a": {"b": 1}}) == "a:\n  b: 1"

    def test_empty_array_value(self) -> None:
        assert to_yaml_lite({"a": []}) == "a: []"

    def test_empty_root_array(self) -> None:
        assert to_yaml_lite([]) == "[]"

    def test_empty_object(self) -> None:
        assert to_yaml_lite({}) == "{}"
        assert to_yaml_lite({"a": {}}) == "a: {}"

    def test_scalars(self) -> None:
        assert to_yaml_lite(None) == "null"
        assert to_yaml_lite(True) == "true"
        assert to_yaml_lite(1.5) == "1.5"
        assert to_yaml_lite("x") == '"x"'

    def test_strings_quoted_unless_token_aware(self) -> None:
        value = {"name": "alice", "note": "hi there"}
        assert to_yaml_lite(value) == 'name: "alice"\nnote: "hi there"'
        assert to_yaml_lite(value, token_aware=True) == 'name: alice\nnote: "hi there"'

    def test_array_of_scalars(self) -> None:
        assert to_yaml_lite({"tags": ["a", 1, None]}) == 'tags:\n  - "a"\n  - 1\n  - null'

    def test_array_of_objects(self) -> None:
        value = {"users": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]}
        expected = 'users:\n  - id: 1\n    name: "A"\n  - id: 2\n    name: "B"'
        assert to_yaml_lite(value) == expected

    def test_nested_arrays(self) -> None:
        assert to_yaml_lite([[1, 2], []]) == "- - 1\n  - 2\n- []"

    def test_unsafe_keys_quoted(self) -> None:
        assert to_yaml_lite({"a:b": 1, "": 2, "ok": 3}) == '"a:b": 1\n"": 2\nok: 3'


# === TOML ===


class TestToml:
    """TOML 风格渲染测试。"""

    def test_flat_table(self) -> None:
        assert to_toml({"name": "x", "n": 1, "ok": False}) == 'name = "x"\nn = 1\nok = false'

    def test_subtable(self) -> None:
        value = {"title": "t", "owner": {"name": "Tom", "age": 3}}
        assert to_toml(value) == 'title = "t"\n\n[owner]\nname = "Tom"\nage = 3'

    def test_nested_subtables_skip_empty_headers(self) -> None:
        assert to_toml({"a": {"b": {"c": 1}}}) == "[a.b]\nc = 1"

    def test_array_of_tables(self) -> None:
        value = {"users": [{"id": 1}, {"id": 2, "tags": ["x"]}]}
        expected = '[[users]]\nid = 1\n\n[[users]]\nid = 2\ntags = ["x"]'
        assert to_toml(value) == expected

    def test_mixed_array_inline(self) -> None:
        assert to_toml({"v": [1, {"a": 1}, []]}) == "v = [1, { a = 1 }, []]"

    def test_empty_containers(self) -> None:
        assert to_toml({"e": {}, "l": []}) == "e = {}\nl = []"
        assert to_toml({}) == ""

    def test_null_and_root_scalar(self) -> None:
        assert to_toml({"x": None}) == "x = null"
        assert to_toml([1, 2]) == "value = [1, 2]"
        assert to_toml("s") == 'value = "s"'

    def test_quoted_keys(self) -> None:
        assert to_toml({"a b": 1, "c.d": 2}) == '"a b" = 1\n"c.d" = 2'

    def test_token_aware_bare_words(self) -> None:
        value = {"name": "alice", "flag": "on", "note": "a b"}
        assert to_toml(value, token_aware=True) == 'name = alice\nflag = "on"\nnote = "a b"'

    def test_scalars_before_subtables(self) -> None:
        value = {"sub": {"k": 1}, "top": 2}
        assert to_toml(value) == "top = 2\n\n[sub]\nk = 1"


# === 分发 ===


class TestDispatch:
    """convert_format / convert_all_formats 测试。"""

    def test_all_formats_in_declared_order(self) -> None:
        outputs = convert_all_formats({"a": 1})
        assert list(outputs) == list(FormatKind)
        assert outputs[FormatKind.MINIFIED] == '{"a":1}'
        assert outputs[FormatKind.YAML] == "a: 1"
        assert outputs[FormatKind.TOON] == "a: 1"
        assert outputs[FormatKind.TOML] == "a = 1"

    def test_options_forwarded(self) -> None:
        options = ConvertOptions(token_aware=True, toon_delimiter="|")
        assert convert_format(FormatKind.TOON, {"t": ["a", "b"]}, options) == "t[2|]: a|b"
        assert convert_format("minified", {"t": "a"}, options) == '{"t":a}'

    def test_default_options(self) -> None:
        assert convert_format(FormatKind.PRETTY, [1]) == "[\n  1\n]"

    def test_unknown_format(self) -> None:
        with pytest.raises(ConverterError) as exc_info:
            convert_format("xml", {"a": 1})
        assert exc_info.value.format_kind == "xml"
