"""请求校验 - 在调度前检查每个操作的输入形态

所有函数都是纯函数：不访问后端、不修改输入，失败时抛出带可读信息的 ValidationError。
校验通过后返回提取出的有效载荷，供 Use Case 直接使用。

注意：不在本地校验 SQL 形态，SELECT-only 与行数限制由后端负责。
"""

from typing import Any

from vault_gateway.domain.exceptions import ValidationError
from vault_gateway.domain.value_objects.redaction_type import RedactionType


def require_object(body: Any, name: str = "request body") -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ValidationError(f"Invalid {name}: must be a JSON object")
    return body


def _require_array(body: dict[str, Any], field: str) -> list[Any]:
    value = body.get(field)
    if not isinstance(value, list):
        raise ValidationError(f"Missing or invalid field: {field} (must be array)")
    if not value:
        raise ValidationError(f"{field} array cannot be empty")
    return value


def _options(body: dict[str, Any]) -> dict[str, Any]:
    options = body.get("options")
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ValidationError("Invalid field: options (must be object)")
    return options


def _check_columns(record: dict[str, Any], label: str) -> None:
    for column in record:
        if not isinstance(column, str) or not column.strip():
            raise ValidationError(f"{label} contains an empty column name")


def validate_records(body: dict[str, Any]) -> list[dict[str, Any]]:
    """tokenize 的 records：非空数组，每条是非空键值映射，且列名在请求内一致"""
    records = _require_array(body, "records")
    expected: set[str] | None = None
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError(f"records[{index}] must be an object with column names as keys")
        if not record:
            raise ValidationError(
                f"records[{index}] cannot be empty - must contain at least one column"
            )
        _check_columns(record, f"records[{index}]")
        if expected is None:
            expected = set(record)
        elif set(record) != expected:
            raise ValidationError(f"records[{index}] columns must match the columns of records[0]")
    return records


def parse_upsert_option(options: dict[str, Any]) -> str | None:
    """upsert 选项：字符串，或字符串数组（只使用第一个元素，SDK 只支持单列 upsert）"""
    upsert = options.get("upsert")
    if upsert is None or upsert == "" or upsert == []:
        return None
    if isinstance(upsert, str):
        return upsert
    if isinstance(upsert, list) and all(isinstance(col, str) and col for col in upsert):
        return upsert[0]
    raise ValidationError("Invalid option: upsert (must be a column name or array of column names)")


def validate_tokenize_request(body: Any) -> tuple[list[dict[str, Any]], str | None]:
    """校验 tokenize 请求，返回 (records, upsert_column)"""
    body = require_object(body)
    records = validate_records(body)
    return records, parse_upsert_option(_options(body))


def validate_tokenize_byot_request(body: Any) -> list[dict[str, Any]]:
    """校验 tokenize-byot 请求：每条记录的 fields 与 tokens 都是非空映射且列名完全一致"""
    body = require_object(body)
    records = _require_array(body, "records")
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError(f"records[{index}] must be an object with 'fields' and 'tokens'")
        fields = record.get("fields")
        tokens = record.get("tokens")
        if not isinstance(fields, dict):
            raise ValidationError(f"records[{index}] must have 'fields' object with column values")
        if not isinstance(tokens, dict):
            raise ValidationError(
                f"records[{index}] must have 'tokens' object with custom token values"
            )
        if not fields:
            raise ValidationError(f"records[{index}].fields cannot be empty")
        if not tokens:
            raise ValidationError(f"records[{index}].tokens cannot be empty")
        _check_columns(fields, f"records[{index}].fields")
        if sorted(fields) != sorted(tokens):
            raise ValidationError(
                f"records[{index}] fields and tokens must have matching column names"
            )
    return records


def parse_redaction_type(value: Any) -> RedactionType | None:
    """脱敏模式：缺省（None / 空串）返回 None，交由后端治理策略决定"""
    if value is None or value == "":
        return None
    if isinstance(value, str) and value in RedactionType.values():
        return RedactionType(value)
    raise ValidationError(
        f"Invalid redactionType: {value}. Must be one of: {', '.join(RedactionType.values())}, "
        "or omit for governance-controlled redaction"
    )


def validate_detokenize_request(body: Any) -> tuple[list[str], RedactionType | None]:
    """校验 detokenize 请求，返回 (tokens, redaction_type)"""
    body = require_object(body)
    tokens = _require_array(body, "tokens")
    for index, token in enumerate(tokens):
        if not isinstance(token, str) or not token:
            raise ValidationError(f"tokens[{index}] must be a non-empty string")
    return tokens, parse_redaction_type(_options(body).get("redactionType"))


def validate_query_request(body: Any) -> str:
    body = require_object(body)
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        raise ValidationError("Missing or invalid field: query (must be non-empty string)")
    return query


def validate_rows(body: Any) -> list[tuple[Any, Any]]:
    """校验行索引格式 {"data": [[rowNumber, value], ...]}，返回 (行号, 值) 列表

    行号只要求是整数，不要求连续或有序。
    """
    body = require_object(body)
    rows = body.get("data")
    if not isinstance(rows, list) or not rows:
        raise ValidationError("Invalid request: data array is empty or missing")
    pairs: list[tuple[Any, Any]] = []
    for index, row in enumerate(rows):
        if not isinstance(row, list) or len(row) < 2:
            raise ValidationError(f"data[{index}] must be a [rowNumber, value] pair")
        row_number = row[0]
        if isinstance(row_number, bool) or not isinstance(row_number, int):
            raise ValidationError(f"data[{index}] row number must be an integer")
        pairs.append((row_number, row[1]))
    return pairs
