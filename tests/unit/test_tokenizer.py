from tendermatch.matching.tokenizer import normalize_text, token_set, tokenize


class TestTokenize:
    def test_lowercases_and_splits_on_non_word(self) -> None:
        assert tokenize("Road-Paving, Riyadh!") == ["road", "paving", "riyadh"]

    def test_drops_short_tokens_and_stop_words(self) -> None:
        assert tokenize("Supply of IT equipment to a ministry") == [
            "supply",
            "it",
            "equipment",
            "ministry",
        ]

    def test_drops_arabic_stop_words(self) -> None:
        assert tokenize("صيانة في المباني") == ["صيانة", "المباني"]

    def test_strips_diacritics_and_tatweel(self) -> None:
        assert normalize_text("تَطْوِيـــر") == "تطوير"

    def test_keeps_duplicates_in_order(self) -> None:
        assert tokenize("cable cable fiber") == ["cable", "cable", "fiber"]

    def test_token_set(self) -> None:
        assert token_set("cable cable fiber") == frozenset({"cable", "fiber"})

    def test_empty_text(self) -> None:
        assert tokenize("") == []
