"""Tests for quantization detection and ranking."""

from __future__ import annotations

import pytest

from model_scout.catalog.quantization import (
    UNKNOWN_TAG,
    classify,
    describe,
    known_tags,
    sort_by_priority,
)
from model_scout.types import ArtifactFile


class TestClassify:
    """Tag detection from filenames."""

    @pytest.mark.parametrize(
        ("filename", "tag"),
        [
            ("gemma-3-1b-it.Q8_0.gguf", "Q8_0"),
            ("Qwen2.5-7B-Instruct-Q4_K_M.gguf", "Q4_K_M"),
            ("model-q4_k_s.gguf", "Q4_K_S"),
            ("model.F16.gguf", "F16"),
            ("model-fp16.gguf", "F16"),
            ("model-BF16.gguf", "BF16"),
            ("model-f32.gguf", "F32"),
            ("model-IQ4_XS.gguf", "IQ4_XS"),
            ("model-Q6_K.gguf", "Q6_K"),
            ("model-Q4_K_XL.gguf", "Q4_K_XL"),
            ("model-UD-Q4_K_XL.gguf", "UD-Q4_K_XL"),
            ("model-UD-IQ1_S.gguf", "UD-IQ1_S"),
            ("model-Q2_K.gguf", "Q2_K"),
            ("model-IQ3_M.gguf", "IQ3_M"),
            ("model-IQ3_S.gguf", "IQ3_S"),
            ("model-IQ3_XS.gguf", "IQ3_XS"),
            ("model-IQ3_XXS.gguf", "IQ3_XXS"),
            ("model-IQ2_S.gguf", "IQ2_S"),
            ("model-IQ2_XS.gguf", "IQ2_XS"),
            ("model-Q3_K.gguf", "Q3_K"),
            ("model-Q4_K.gguf", "Q4_K"),
            ("model-Q5_K.gguf", "Q5_K"),
        ],
    )
    def test_recognized(self, filename, tag):
        assert classify(filename).tag == tag

    def test_case_insensitive(self):
        assert classify("MODEL-q5_k_m.GGUF") == classify("model-Q5_K_M.gguf")

    def test_unknown(self):
        tag, rank = classify("readme-model.gguf")
        assert tag == UNKNOWN_TAG
        assert rank == max(classify(f"x-{t}.gguf").rank for t in known_tags())

    def test_unpacks_as_pair(self):
        tag, rank = classify("m.Q8_0.gguf")
        assert (tag, rank) == ("Q8_0", classify("m.Q8_0.gguf").rank)

    def test_deterministic(self):
        assert classify("m.Q4_0.gguf") == classify("m.Q4_0.gguf")

    def test_ud_marker_without_dynamic_variant(self):
        """``UD-`` only applies to families that have a dynamic variant."""
        assert classify("model-UD-Q4_K_M.gguf").tag == "Q4_K_M"


class TestRankOrder:
    """Higher-bit variants sort ahead of more aggressively quantized ones."""

    @pytest.mark.parametrize("eight_bit", ["m.Q8_0.gguf", "m.Q8_K_XL.gguf"])
    @pytest.mark.parametrize(
        "four_bit", ["m.Q4_K_M.gguf", "m.Q4_0.gguf", "m.IQ4_XS.gguf", "m.Q4_K_L.gguf"]
    )
    def test_eight_bit_beats_four_bit(self, eight_bit, four_bit):
        assert classify(eight_bit).rank < classify(four_bit).rank

    def test_float_before_integer(self):
        assert classify("m.F16.gguf").rank < classify("m.Q8_0.gguf").rank
        assert classify("m.F32.gguf").rank < classify("m.F16.gguf").rank

    def test_bits_descending(self):
        names = ["m.Q6_K.gguf", "m.Q5_K_M.gguf", "m.Q4_K_M.gguf", "m.Q3_K_M.gguf", "m.Q2_K.gguf"]
        ranks = [classify(n).rank for n in names]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    def test_unknown_is_last(self):
        unknown = classify("mystery.gguf").rank
        for tag in known_tags():
            if tag != UNKNOWN_TAG:
                assert classify(f"m.{tag}.gguf").rank < unknown

    def test_dynamic_ahead_of_plain(self):
        assert classify("m-UD-Q4_K_XL.gguf").rank < classify("m-Q4_K_XL.gguf").rank

    @pytest.mark.parametrize(
        "family",
        [
            ["m.IQ3_M.gguf", "m.IQ3_S.gguf", "m.IQ3_XS.gguf", "m.IQ3_XXS.gguf"],
            ["m.IQ2_M.gguf", "m.IQ2_S.gguf", "m.IQ2_XS.gguf", "m.IQ2_XXS.gguf"],
        ],
    )
    def test_importance_sizes_descending(self, family):
        ranks = [classify(n).rank for n in family]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    @pytest.mark.parametrize(
        ("plain", "medium", "small"),
        [
            ("m.Q5_K.gguf", "m.Q5_K_M.gguf", "m.Q5_K_S.gguf"),
            ("m.Q4_K.gguf", "m.Q4_K_M.gguf", "m.Q4_K_S.gguf"),
            ("m.Q3_K.gguf", "m.Q3_K_M.gguf", "m.Q3_K_S.gguf"),
        ],
    )
    def test_plain_k_quant_sits_with_medium(self, plain, medium, small):
        assert classify(medium).rank < classify(plain).rank < classify(small).rank

    def test_three_bit_ahead_of_two_bit(self):
        assert classify("m.IQ3_XS.gguf").rank < classify("m.Q2_K.gguf").rank
        assert classify("m.IQ2_XS.gguf").rank < classify("m.IQ1_M.gguf").rank


class TestDescribe:
    def test_known(self):
        assert "8-bit" in describe("Q8_0")

    def test_unknown_falls_back(self):
        assert describe("Q9_Z") == describe(UNKNOWN_TAG)


class TestSortByPriority:
    @staticmethod
    def _file(name: str) -> ArtifactFile:
        tag, rank = classify(name)
        return ArtifactFile(filename=name, quantization_tag=tag, priority_rank=rank)

    def test_sorted_ascending(self):
        files = [self._file(n) for n in ["a.Q2_K.gguf", "a.F16.gguf", "a.Q4_K_M.gguf"]]
        assert [f.filename for f in sort_by_priority(files)] == [
            "a.F16.gguf",
            "a.Q4_K_M.gguf",
            "a.Q2_K.gguf",
        ]

    def test_stable_on_ties(self):
        files = [self._file(n) for n in ["b.gguf", "a.Q8_0.gguf", "a.gguf", "c.gguf"]]
        assert [f.filename for f in sort_by_priority(files)] == [
            "a.Q8_0.gguf",
            "b.gguf",
            "a.gguf",
            "c.gguf",
        ]
