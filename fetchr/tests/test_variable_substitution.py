"""
Property-based tests for {{variable}} resolution.

Covers extraction, dict substitution, interpolation against an environment
and resolution of a whole request draft.
"""

from hypothesis import given, strategies as st, settings

from fetchr.schemas.draft import FormField, KeyValue, RequestDraft
from fetchr.schemas.environment import EnvironmentRecord, EnvironmentVariable, serialize_variables
from fetchr.services.variable_substitution import (
    extract_variables,
    find_undefined,
    interpolate,
    resolve_draft,
    substitute,
)


# Strategy for generating valid variable names (alphanumeric + underscore)
variable_name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"),
    min_size=1,
    max_size=20,
).filter(lambda s: s[0].isalpha() or s[0] == "_")  # Must start with letter or underscore

# Values and surrounding text never contain braces, so they cannot form tokens
brace_free_text = st.text(max_size=40).filter(lambda s: "{" not in s and "}" not in s)


def make_environment(pairs: list[tuple[str, str]], env_id: str = "env-1") -> EnvironmentRecord:
    variables = [EnvironmentVariable(key=k, value=v) for k, v in pairs]
    return EnvironmentRecord(id=env_id, name="Test", variables=serialize_variables(variables), is_active=True)


class TestVariableExtraction:

    @given(var_names=st.lists(variable_name_strategy, min_size=1, max_size=5, unique=True))
    @settings(max_examples=100)
    def test_extracts_all_variables_from_template(self, var_names: list[str]):
        template = " ".join("{{" + name + "}}" for name in var_names)

        assert extract_variables(template) == var_names

    @given(text=st.text(min_size=0, max_size=100).filter(lambda s: "{{" not in s))
    @settings(max_examples=100)
    def test_returns_empty_for_no_placeholders(self, text: str):
        assert extract_variables(text) == []

    def test_names_are_trimmed(self):
        assert extract_variables("{{ host }}/{{id}}") == ["host", "id"]


class TestSubstitution:

    @given(var_name=variable_name_strategy, var_value=brace_free_text)
    @settings(max_examples=100)
    def test_defined_variable_is_replaced(self, var_name: str, var_value: str):
        result, unmatched = substitute("{{" + var_name + "}}", {var_name: var_value})

        assert result == var_value
        assert unmatched == []

    @given(
        var_name=variable_name_strategy,
        var_value=brace_free_text,
        prefix=brace_free_text,
        suffix=brace_free_text,
    )
    @settings(max_examples=100)
    def test_substitution_preserves_surrounding_text(self, var_name: str, var_value: str, prefix: str, suffix: str):
        template = prefix + "{{" + var_name + "}}" + suffix

        result, unmatched = substitute(template, {var_name: var_value})

        assert result == prefix + var_value + suffix
        assert unmatched == []

    @given(undefined_vars=st.lists(variable_name_strategy, min_size=1, max_size=5, unique=True))
    @settings(max_examples=100)
    def test_undefined_variables_are_preserved_and_reported(self, undefined_vars: list[str]):
        template = " ".join("{{" + name + "}}" for name in undefined_vars)

        result, unmatched = substitute(template, {})

        assert result == template
        assert unmatched == undefined_vars

    def test_every_occurrence_is_replaced(self):
        result, _ = substitute("{{a}}-{{a}}-{{ a }}", {"a": "x"})

        assert result == "x-x-x"

    def test_substituted_values_are_not_rescanned(self):
        result, unmatched = substitute("{{a}}", {"a": "{{b}}", "b": "nope"})

        assert result == "{{b}}"
        assert unmatched == []


class TestInterpolate:

    @given(text=st.text(max_size=60))
    @settings(max_examples=100)
    def test_no_environment_returns_input(self, text: str):
        assert interpolate(text, None) == text

    def test_missing_key_leaves_token_in_place(self):
        env = make_environment([("host", "api.example.com")])

        assert interpolate("{{missing}}", env) == "{{missing}}"

    def test_present_key_is_resolved(self):
        env = make_environment([("host", "api.example.com")])

        assert interpolate("https://{{host}}/x", env) == "https://api.example.com/x"

    def test_first_variable_with_a_key_wins(self):
        env = make_environment([("host", "first"), ("host", "second")])

        assert interpolate("{{host}}", env) == "first"

    def test_malformed_variables_count_as_empty(self):
        env = EnvironmentRecord(id="bad", name="Bad", variables="{not json", is_active=True)

        assert interpolate("{{host}}", env) == "{{host}}"

    def test_wrongly_shaped_variables_are_skipped(self):
        env = EnvironmentRecord(
            id="odd", name="Odd", is_active=True,
            variables='[{"value": "no key"}, {"key": "host", "value": "ok"}, 3]',
        )

        assert interpolate("{{host}}", env) == "ok"


class TestResolveDraft:

    def _draft(self) -> RequestDraft:
        return RequestDraft(
            method="POST",
            url="{{host}}/login",
            headers=[
                KeyValue(key="X-Token", value="{{token}}"),
                KeyValue(key="X-Off", value="{{token}}", enabled=False),
            ],
            body='{"user": "{{user}}"}',
            body_type="json",
            form_data=[
                FormField(key="a", value="{{user}}"),
                FormField(key="b", value="{{user}}", enabled=False),
            ],
        )

    def test_resolves_url_enabled_headers_and_body(self):
        env = make_environment([("host", "https://h"), ("token", "t0k"), ("user", "bob")])

        resolved = resolve_draft(self._draft(), env)

        assert resolved.url == "https://h/login"
        assert resolved.headers[0].value == "t0k"
        assert resolved.headers[1].value == "{{token}}"
        assert resolved.body == '{"user": "bob"}'
        assert resolved.form_data[0].value == "bob"
        assert resolved.form_data[1].value == "{{user}}"

    def test_stored_draft_is_not_mutated(self):
        env = make_environment([("host", "https://h"), ("token", "t0k"), ("user", "bob")])
        draft = self._draft()
        before = draft.model_dump()

        resolve_draft(draft, env)

        assert draft.model_dump() == before

    def test_body_is_left_alone_without_body_type(self):
        env = make_environment([("user", "bob")])
        draft = RequestDraft(body="{{user}}", body_type="none")

        assert resolve_draft(draft, env).body == "{{user}}"

    def test_find_undefined_lists_unresolved_names_once(self):
        env = make_environment([("host", "https://h")])
        draft = self._draft()

        assert find_undefined(draft, env) == ["token", "user"]
