"""Tests for the properties and XML readers."""

import io

import pytest

from nproperty import PropertiesReader, SourceUnreadableError, XmlReader


class TestPropertiesReader:
    """The Java `.properties` text format."""

    def test_separators(self):
        """Test the equals, colon and whitespace separators."""
        properties = PropertiesReader().loads("a=1\nb : 2\nc 3\nd=\ne\n")

        assert properties == {"a": "1", "b": "2", "c": "3", "d": "", "e": ""}

    def test_comments_and_blank_lines(self):
        """Test that comments and blank lines are skipped."""
        text = "# comment\n  ! another comment\n\n   \nkey=value\n"

        assert PropertiesReader().loads(text) == {"key": "value"}

    def test_line_continuation(self):
        """Test that a trailing backslash continues the logical line."""
        text = "list = a;\\\n       b;\\\n       c\nnext=1\n"

        assert PropertiesReader().loads(text) == {"list": "a;b;c", "next": "1"}

    def test_even_backslashes_do_not_continue(self):
        """Test that an even number of trailing backslashes does not continue."""
        assert PropertiesReader().loads("path=a\\\\\nnext=1") == {
            "path": "a\\",
            "next": "1",
        }

    def test_escapes(self):
        """Test the character escapes in keys and values."""
        text = "tab=a\\tb\nunicode=\\u0041BC\nj\\=k=v\nspace\\ key=x\n"

        assert PropertiesReader().loads(text) == {
            "tab": "a\tb",
            "unicode": "ABC",
            "j=k": "v",
            "space key": "x",
        }

    def test_surrogate_pair_escape(self):
        """Test that a \\uXXXX surrogate pair decodes to a single character."""
        properties = PropertiesReader().loads("smile=\\uD83D\\uDE00\n")

        assert properties == {"smile": "\U0001f600"}
        assert len(properties["smile"]) == 1

    def test_trailing_whitespace_is_kept(self):
        """Test that trailing whitespace in values is kept."""
        assert PropertiesReader().loads("key=value  ") == {"key": "value  "}

    def test_line_endings_and_duplicates(self):
        """Test mixed line endings and that the last duplicate wins."""
        assert PropertiesReader().loads("a=1\r\nb=2\ra=3") == {"a": "3", "b": "2"}

    def test_malformed_unicode_escape(self):
        """Test that a malformed unicode escape raises SourceUnreadableError."""
        with pytest.raises(SourceUnreadableError):
            PropertiesReader().loads("key=\\u12")

    def test_binary_stream(self):
        """Test reading a binary stream."""
        stream = io.BytesIO("name=Grüße".encode("utf-8"))

        assert PropertiesReader()(stream, encoding="utf-8") == {"name": "Grüße"}

    def test_undecodable_stream(self):
        """Test that undecodable bytes raise SourceUnreadableError."""
        stream = io.BytesIO(b"name=\xff\xfe")

        with pytest.raises(SourceUnreadableError):
            PropertiesReader()(stream, encoding="utf-8")


class TestXmlReader:
    """The Java XML property format."""

    def test_entries(self):
        """Test reading entry elements into a mapping."""
        document = (
            "<properties><comment>ignored</comment>"
            '<entry key="a">1</entry><entry key="empty"/></properties>'
        )

        assert XmlReader().loads(document) == {"a": "1", "empty": ""}

    def test_wrong_root(self):
        """Test that a document with the wrong root is rejected."""
        with pytest.raises(SourceUnreadableError):
            XmlReader().loads('<config><entry key="a">1</entry></config>')

    def test_entry_without_key(self):
        """Test that an entry without a key is rejected."""
        with pytest.raises(SourceUnreadableError):
            XmlReader().loads("<properties><entry>1</entry></properties>")

    def test_explicit_encoding(self):
        """Test that an explicit encoding overrides the declaration."""
        stream = io.BytesIO('<properties><entry key="a">é</entry></properties>'.encode("latin-1"))

        assert XmlReader()(stream, encoding="latin-1") == {"a": "é"}
