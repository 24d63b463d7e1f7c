from specialresource.yamlscan import YAMLScanner, split_documents


def test_two_documents():
    assert split_documents(b"a: 1\n---\nb: 2\n") == [b"a: 1\n", b"b: 2\n"]


def test_leading_separator_stays_with_document():
    docs = split_documents(b"---\na: 1\n---\nb: 2\n")
    assert docs == [b"---\na: 1\n", b"b: 2\n"]


def test_separator_with_trailing_whitespace():
    assert split_documents(b"a: 1\n---   \nb: 2\n") == [b"a: 1\n", b"b: 2\n"]


def test_dashes_followed_by_text_are_not_separator():
    data = b"a: 1\n---foo\nb: 2\n"
    assert split_documents(data) == [data]


def test_missing_final_newline_is_added():
    assert split_documents(b"a: 1") == [b"a: 1\n"]


def test_empty_input():
    assert split_documents(b"") == []


def test_crlf_line_endings():
    assert split_documents(b"a: 1\r\n---\r\nb: 2\r\n") == [b"a: 1\n", b"b: 2\n"]


def test_str_input():
    assert split_documents("a: 1\n---\nb: 2\n") == [b"a: 1\n", b"b: 2\n"]


def test_scanner_is_reiterable():
    scanner = YAMLScanner(b"a: 1\n---\nb: 2\n---\nc: 3\n")
    first = list(scanner)
    assert first == list(scanner)
    assert len(first) == 3


def test_content_preserved():
    docs = split_documents(b"x: 1\ny: 2\n---\nz: 3\n")
    assert b"".join(docs) == b"x: 1\ny: 2\nz: 3\n"