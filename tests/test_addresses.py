"""Tests for mailbox address parsing."""

import pytest

from labeller.errors import MalformedAddress
from labeller.rules import Address, parse_address, parse_address_list, split_address_list


class TestParseAddress:
    """Tests for parse_address."""

    def test_strips_display_name(self):
        """Test that the display name is dropped."""
        result = parse_address('"Bob Smith" <bob.smith@example.com>')
        assert tuple(result) == ("bob.smith@example.com", "bob.smith", "example.com")

    def test_bare_address(self):
        """Test an address without a display name."""
        result = parse_address("a@x.com")
        assert result == Address(full="a@x.com", local_part="a", domain="x.com")

    def test_unquoted_display_name(self):
        """Test an unquoted display name in front of angle brackets."""
        result = parse_address("Steve Kemp <steve@steve.org.uk>")
        assert result.full == "steve@steve.org.uk"
        assert result.local_part == "steve"
        assert result.domain == "steve.org.uk"

    def test_case_is_preserved(self):
        """Test that the address is returned as written."""
        assert parse_address("Bob@Example.COM").domain == "Example.COM"

    def test_no_at_sign(self):
        """Test that a value without @ is malformed."""
        with pytest.raises(MalformedAddress):
            parse_address("undisclosed-recipients")

    def test_empty(self):
        """Test that an empty value is malformed."""
        with pytest.raises(MalformedAddress):
            parse_address("")

    def test_missing_domain(self):
        """Test that an address with nothing after @ is malformed."""
        with pytest.raises(MalformedAddress) as excinfo:
            parse_address("bob@")
        assert excinfo.value.value == "bob@"

    def test_two_at_signs(self):
        """Test that a value with two @ signs is not one mailbox."""
        with pytest.raises(MalformedAddress):
            parse_address("a@b@c.com")

    def test_display_name_without_brackets(self):
        """Test that a quoted name glued to the address is rejected."""
        with pytest.raises(MalformedAddress):
            parse_address('"x" y@z.com')


class TestParseAddressList:
    """Tests for parse_address_list."""

    def test_multiple_recipients_in_order(self):
        """Test that recipients come back in header order."""
        addresses, errors = parse_address_list("b@y.com, Carol <c@z.com>")
        assert [a.full for a in addresses] == ["b@y.com", "c@z.com"]
        assert [a.domain for a in addresses] == ["y.com", "z.com"]
        assert errors == []

    def test_comma_inside_quoted_name(self):
        """Test that a quoted display name with a comma stays one recipient."""
        addresses, errors = parse_address_list('"Smith, Bob" <bob@example.com>, d@w.org')
        assert [a.full for a in addresses] == ["bob@example.com", "d@w.org"]
        assert errors == []

    def test_malformed_entry_is_reported_not_raised(self):
        """Test that one bad entry does not lose the others."""
        addresses, errors = parse_address_list("nobody, c@z.com")
        assert [a.full for a in addresses] == ["c@z.com"]
        assert len(errors) == 1
        assert isinstance(errors[0], MalformedAddress)

    def test_bad_entry_keeps_its_neighbours(self):
        """Test that a malformed mailbox beside a valid one drops only itself."""
        addresses, errors = parse_address_list("b@y.com, a@b@c.com")
        assert [a.full for a in addresses] == ["b@y.com"]
        assert len(errors) == 1
        assert errors[0].value == "a@b@c.com"

    def test_empty_entries_ignored(self):
        """Test that stray commas do not produce errors."""
        addresses, errors = parse_address_list("b@y.com, , c@z.com,")
        assert [a.full for a in addresses] == ["b@y.com", "c@z.com"]
        assert errors == []


class TestSplitAddressList:
    """Tests for split_address_list."""

    def test_plain_commas(self):
        """Test splitting on top-level commas."""
        assert split_address_list("a@x.com,b@y.com , c@z.com") == ["a@x.com", "b@y.com", "c@z.com"]

    def test_quoted_and_commented_commas(self):
        """Test that commas in quotes, brackets and comments do not split."""
        value = '"Smith, Bob" <bob@example.com>, d@w.org (Dee, ops), "a \\" , b" <e@v.net>'
        assert split_address_list(value) == [
            '"Smith, Bob" <bob@example.com>',
            "d@w.org (Dee, ops)",
            '"a \\" , b" <e@v.net>',
        ]
