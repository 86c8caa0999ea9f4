from csvbatch.engines.null_recognizer import NullRecognizer


def test_disabled_by_empty_token():
    nulls = NullRecognizer("")
    assert not nulls.enabled
    assert not nulls.is_null("")
    assert not nulls.is_null("null")


def test_exact_match_only():
    nulls = NullRecognizer("null")
    assert nulls.enabled
    assert nulls.is_null("null")
    assert not nulls.is_null("NULL")
    assert not nulls.is_null(" null")
    assert not nulls.is_null("")


def test_custom_token():
    nulls = NullRecognizer("\\N")
    assert nulls.is_null("\\N")
