"""Unit tests for signed assignment links and custom-field substitution."""

import base64
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from app.components.assignments.custom_fields import replace_custom_fields
from app.components.assignments.errors import AssignmentURLError
from app.components.assignments.url_signing import generate_assignment_url, validate_assignment_url

SECRET = "unit-test-secret"
EXPIRES = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


def _b64(value):
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def _params(url):
    query = parse_qs(urlparse(url).query)
    return {key: values[0] for key, values in query.items()}


class TestSignedLinks:

    def test_url_shape(self):
        url = generate_assignment_url("abc", "jdoe", EXPIRES, base_url="https://app.example.com/", secret=SECRET)
        parsed = urlparse(url)
        assert parsed.scheme == "https"
        assert parsed.path == "/assignment/abc"
        assert set(_params(url)) == {"u", "e", "t"}

    def test_round_trip(self):
        url = generate_assignment_url("abc", "jdoe@example.com", EXPIRES, base_url="https://app", secret=SECRET)
        link = validate_assignment_url("abc", secret=SECRET, now=EXPIRES - timedelta(days=1), **_params(url))
        assert link.username == "jdoe@example.com"
        assert link.expires == EXPIRES

    def test_link_is_bound_to_assignment(self):
        url = generate_assignment_url("abc", "jdoe", EXPIRES, base_url="https://app", secret=SECRET)
        with pytest.raises(AssignmentURLError, match="Invalid assignment URL token"):
            validate_assignment_url("other", secret=SECRET, now=EXPIRES - timedelta(days=1), **_params(url))

    def test_wrong_secret_rejected(self):
        url = generate_assignment_url("abc", "jdoe", EXPIRES, base_url="https://app", secret=SECRET)
        with pytest.raises(AssignmentURLError):
            validate_assignment_url("abc", secret="other-secret", now=EXPIRES - timedelta(days=1), **_params(url))

    def test_expired_link_rejected(self):
        url = generate_assignment_url("abc", "jdoe", EXPIRES, base_url="https://app", secret=SECRET)
        with pytest.raises(AssignmentURLError, match="expired"):
            validate_assignment_url("abc", secret=SECRET, now=EXPIRES + timedelta(seconds=1), **_params(url))

    def test_missing_and_garbled_parameters(self):
        with pytest.raises(AssignmentURLError, match="Missing"):
            validate_assignment_url("abc", u=None, e="x", t="y", secret=SECRET)
        with pytest.raises(AssignmentURLError, match="Invalid URL format"):
            validate_assignment_url("abc", u="%%%", e="###", t="!!!", secret=SECRET)
        with pytest.raises(AssignmentURLError, match="Invalid assignment URL token"):
            validate_assignment_url(
                "abc",
                u=_b64("jdoe"),
                e=_b64(EXPIRES.isoformat()),
                t=_b64("\u00e9"),
                secret=SECRET,
                now=EXPIRES - timedelta(days=1),
            )


class TestCustomFields:

    def test_placeholders_replaced_case_insensitively(self):
        custom = {"type": ["name", "role"], "value": ["Jane Doe", "manager"]}
        text = "How well does [Name] work with their [role]?"
        assert replace_custom_fields(text, custom) == "How well does Jane Doe work with their manager?"

    def test_self_role_turns_name_into_yourself(self):
        custom = {"type": ["name", "role"], "value": ["Jane Doe", "Self"]}
        assert replace_custom_fields("Rate [name] on delegation.", custom) == "Rate yourself on delegation."

    def test_missing_values_blank_the_placeholder(self):
        custom = {"type": ["name", "team"], "value": ["Jane"]}
        assert replace_custom_fields("[name] / [team]", custom) == "Jane / "

    def test_no_custom_fields_is_identity(self):
        assert replace_custom_fields("Rate [name].", None) == "Rate [name]."
        assert replace_custom_fields(None, {"type": ["name"], "value": ["x"]}) is None

    def test_values_are_not_treated_as_regex_templates(self):
        custom = {"type": ["name"], "value": [r"\1 Smith"]}
        assert replace_custom_fields("[name]", custom) == r"\1 Smith"
