"""行号关联 - 行索引格式与逐条结果之间的转换

输入 [[rowNumber, value], ...] 去掉行号后按原顺序交给用例，
用例按输入顺序返回结果，再把结果按位置重新配上原始行号。
行号可以不连续、无序，决定后端调用顺序的是行在数组中的位置，而不是行号的值。
"""

from collections.abc import Sequence
from typing import Any

from vault_gateway.domain.exceptions import UpstreamError
from vault_gateway.domain.value_objects.batch_result import BatchResult


def split_rows(rows: Sequence[tuple[Any, Any]]) -> tuple[list[Any], list[Any]]:
    """拆成 (行号列表, 值列表)，顺序不变"""
    return [row[0] for row in rows], [row[1] for row in rows]


def zip_rows(row_numbers: Sequence[Any], results: Sequence[Any]) -> list[list[Any]]:
    """按位置把结果配回原始行号"""
    if len(row_numbers) != len(results):
        raise UpstreamError(
            f"Vault returned {len(results)} results for {len(row_numbers)} rows"
        )
    return [[row_number, result] for row_number, result in zip(row_numbers, results)]


def correlate_tokenize(
    row_numbers: Sequence[Any], result: BatchResult, column_name: str
) -> list[list[Any]]:
    """tokenize 结果：每条插入记录取 column_name 列的 token"""
    tokens = [record.get(column_name) for record in result.data]
    return zip_rows(row_numbers, tokens)


def correlate_detokenize(
    row_numbers: Sequence[Any], tokens: Sequence[str], result: BatchResult
) -> list[list[Any]]:
    """detokenize 结果

    结果数与行数一致时按位置关联；行级错误使结果变少时按 token 关联，
    失败 token 所在的行返回 None，保证输出行号与输入行号一一对应。
    """
    if len(result.data) == len(tokens):
        return zip_rows(row_numbers, [record.get("value") for record in result.data])

    values = {record.get("token"): record.get("value") for record in result.data}
    return [[row_number, values.get(token)] for row_number, token in zip(row_numbers, tokens)]
