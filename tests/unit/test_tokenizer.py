from app.similarity.tokenizer import tokenize


class TestTokenize:
    def test_lowercases_and_splits_on_punctuation(self) -> None:
        assert tokenize("Hello, WORLD! Connection-Refused") == frozenset(
            {"hello", "world", "connection", "refused"}
        )

    def test_drops_tokens_shorter_than_three(self) -> None:
        assert tokenize("an of the db io") == frozenset({"the"})

    def test_duplicates_collapse(self) -> None:
        assert tokenize("retry retry RETRY") == frozenset({"retry"})

    def test_underscore_is_part_of_a_word(self) -> None:
        assert tokenize("null_pointer raised") == frozenset({"null_pointer", "raised"})

    def test_redaction_tags_reduce_to_common_token(self) -> None:
        assert tokenize("[REDACTED:IP] down") == frozenset({"redacted", "down"})

    def test_empty_text(self) -> None:
        assert tokenize("") == frozenset()

    def test_only_short_tokens(self) -> None:
        assert tokenize("a b c 1 22") == frozenset()

    def test_returns_frozenset(self) -> None:
        assert isinstance(tokenize("some words here"), frozenset)
