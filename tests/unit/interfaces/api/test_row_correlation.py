"""行号关联单元测试"""

import pytest

from vault_gateway.domain.exceptions import UpstreamError
from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.interfaces.api.services.row_correlation import (
    correlate_detokenize,
    correlate_tokenize,
    split_rows,
    zip_rows,
)


class TestSplitAndZip:
    def test_split_keeps_order(self) -> None:
        assert split_rows([(7, "a"), (0, "b")]) == ([7, 0], ["a", "b"])

    def test_zip_preserves_original_row_numbers(self) -> None:
        """测试：行号不连续、无序时按位置配回"""
        assert zip_rows([7, 0, 42], ["x", "y", "z"]) == [[7, "x"], [0, "y"], [42, "z"]]

    def test_length_mismatch_is_upstream_error(self) -> None:
        with pytest.raises(UpstreamError, match="returned 1 results for 2 rows"):
            zip_rows([0, 1], ["x"])


class TestCorrelateTokenize:
    def test_token_taken_from_column(self) -> None:
        result = BatchResult(
            data=[
                {"skyflow_id": "id-1", "email": "tok-1"},
                {"skyflow_id": "id-2", "email": "tok-2"},
            ]
        )

        assert correlate_tokenize([5, 3], result, "email") == [[5, "tok-1"], [3, "tok-2"]]


class TestCorrelateDetokenize:
    def test_positional_when_all_tokens_resolved(self) -> None:
        result = BatchResult(data=[{"token": "t1", "value": "a"}, {"token": "t2", "value": "b"}])

        assert correlate_detokenize([9, 1], ["t1", "t2"], result) == [[9, "a"], [1, "b"]]

    def test_failed_tokens_become_null(self) -> None:
        """测试：部分 token 失败时按 token 关联，失败行返回 None"""
        result = BatchResult(
            data=[{"token": "t1", "value": "a"}, {"token": "t3", "value": "c"}],
            errors=[{"token": "t2", "error": "Token not found"}],
        )

        assert correlate_detokenize([4, 8, 15], ["t1", "t2", "t3"], result) == [
            [4, "a"],
            [8, None],
            [15, "c"],
        ]
