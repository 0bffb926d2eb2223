"""
Unit tests for the session code generator.
"""

import random

import pytest

from ystp.core.mnemonic import MnemonicGenerator, mnemonic
from ystp.core.words import WORDS


class TestMnemonicGenerator:
    """Code generation from the fixed word list."""

    def test_default_code_has_five_words(self):
        code = mnemonic()
        words = code.split("-")

        assert len(words) == 5
        assert all(word in WORDS for word in words)

    def test_custom_count_and_separator(self):
        generator = MnemonicGenerator(word_count=3, separator="_", rng=random.Random(7))

        words = generator.generate().split("_")

        assert len(words) == 3
        assert all(word in WORDS for word in words)

    def test_seeded_generators_agree(self):
        first = MnemonicGenerator(rng=random.Random(42))
        second = MnemonicGenerator(rng=random.Random(42))

        assert [first.generate() for _ in range(5)] == [second.generate() for _ in range(5)]

    def test_sampling_is_with_replacement(self):
        generator = MnemonicGenerator(words=["only"], word_count=4)

        assert generator.generate() == "only-only-only-only"

    def test_every_word_is_reachable(self):
        words = ["red", "green", "blue"]
        generator = MnemonicGenerator(words=words, word_count=1, rng=random.Random(3))

        seen = {generator.generate() for _ in range(200)}

        assert seen == set(words)

    def test_empty_word_list_is_rejected(self):
        with pytest.raises(ValueError):
            MnemonicGenerator(words=[])

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_word_count_is_rejected(self, count):
        with pytest.raises(ValueError):
            MnemonicGenerator(word_count=count)

    def test_word_list_is_clean(self):
        assert len(WORDS) == len(set(WORDS))
        assert all(word.isalpha() and word.islower() for word in WORDS)
