"""行索引端点集成测试

POST /processSnowflake：
- 请求 {"data": [[rowNumber, value], ...]}，所有自定义请求头带 sf-custom- 前缀
- 响应 {"data": [[rowNumber, result], ...]}，行号与输入一一对应
- 失败 {"error": {...}}
"""

import pytest
from fastapi.testclient import TestClient

from vault_gateway.infrastructure.adapters.vault_stub_adapter import StubVaultClientFactory

PREFIX = "sf-custom-"


def row_headers(operation: str, **extra: str) -> dict[str, str]:
    headers = {
        "X-Skyflow-Operation": operation,
        "X-Skyflow-Cluster-ID": "cluster-1",
        "X-Skyflow-Vault-ID": "vault-1",
        **extra,
    }
    return {f"{PREFIX}{name}": value for name, value in headers.items()}


def tokenize_rows(client: TestClient, rows: list) -> list:
    response = client.post(
        "/processSnowflake",
        headers=row_headers(
            "tokenize", **{"X-Skyflow-Table": "users", "X-Skyflow-Column-Name": "email"}
        ),
        json={"data": rows},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


class TestRowIndexedTokenize:
    """测试 tokenize"""

    def test_out_of_order_row_numbers_preserved(self, client: TestClient):
        """测试: 行号不连续且无序，输出行号与输入一致"""
        rows = [[7, "a@x.com"], [0, "b@x.com"], [42, "c@x.com"]]

        data = tokenize_rows(client, rows)

        assert [row[0] for row in data] == [7, 0, 42]
        assert all(isinstance(row[1], str) and row[1].startswith("tok-") for row in data)

    def test_backend_called_in_array_order(
        self, client: TestClient, stub_factory: StubVaultClientFactory
    ):
        tokenize_rows(client, [[3, "c@x.com"], [1, "a@x.com"]])

        backend = stub_factory.created["cluster-1:vault-1:PROD"]
        assert backend.calls_for("insert")[0]["records"] == [
            {"email": "c@x.com"},
            {"email": "a@x.com"},
        ]

    def test_subpath_accepted(self, client: TestClient):
        response = client.post(
            "/processSnowflake/tokenize/users",
            headers=row_headers(
                "tokenize", **{"X-Skyflow-Table": "users", "X-Skyflow-Column-Name": "email"}
            ),
            json={"data": [[0, "a@x.com"]]},
        )

        assert response.status_code == 200

    @pytest.mark.parametrize(
        ("extra", "message"),
        [
            ({"X-Skyflow-Column-Name": "email"}, "X-Skyflow-Table (required for tokenize)"),
            ({"X-Skyflow-Table": "users"}, "X-Skyflow-Column-Name (required for tokenize)"),
        ],
    )
    def test_missing_tokenize_headers(self, client: TestClient, extra: dict, message: str):
        response = client.post(
            "/processSnowflake", headers=row_headers("tokenize", **extra), json={"data": [[0, "a"]]}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["type"] == "ConfigError"
        assert message in body["error"]["message"]
        assert "success" not in body


class TestRowIndexedDetokenize:
    """测试 detokenize"""

    def test_round_trip_with_non_contiguous_rows(self, client: TestClient):
        tokens = tokenize_rows(client, [[10, "a@x.com"], [2, "b@x.com"]])

        response = client.post(
            "/processSnowflake",
            headers=row_headers("detokenize"),
            json={"data": [[5, tokens[1][1]], [99, tokens[0][1]]]},
        )

        assert response.status_code == 200
        assert response.json() == {"data": [[5, "b@x.com"], [99, "a@x.com"]]}

    def test_failed_token_returns_null_for_its_row(self, client: TestClient):
        tokens = tokenize_rows(client, [[0, "a@x.com"]])

        response = client.post(
            "/processSnowflake",
            headers=row_headers("detokenize"),
            json={"data": [[1, "tok-unknown"], [2, tokens[0][1]]]},
        )

        assert response.status_code == 200
        assert response.json()["data"] == [[1, None], [2, "a@x.com"]]

    def test_optional_redaction_header(self, client: TestClient):
        tokens = tokenize_rows(client, [[0, "123456789"]])

        response = client.post(
            "/processSnowflake",
            headers=row_headers("detokenize", **{"X-Skyflow-Redaction-Type": "REDACTED"}),
            json={"data": [[0, tokens[0][1]]]},
        )

        assert response.json()["data"] == [[0, "*REDACTED*"]]


class TestRowIndexedErrors:
    """测试错误响应"""

    def test_unprefixed_headers_not_recognised(self, client: TestClient):
        response = client.post(
            "/processSnowflake",
            headers={
                "X-Skyflow-Operation": "tokenize",
                "X-Skyflow-Cluster-ID": "cluster-1",
                "X-Skyflow-Vault-ID": "vault-1",
            },
            json={"data": [[0, "a"]]},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing required header: X-Skyflow-Cluster-ID"

    @pytest.mark.parametrize("operation", ["query", "tokenize-byot"])
    def test_unsupported_operation(self, client: TestClient, operation: str):
        response = client.post(
            "/processSnowflake", headers=row_headers(operation), json={"data": [[0, "a"]]}
        )

        assert response.status_code == 400
        assert f"Unknown operation: {operation}" in response.json()["error"]["message"]

    @pytest.mark.parametrize("body", [{}, {"data": []}, {"data": [["x", "a"]]}])
    def test_malformed_rows(self, client: TestClient, body: dict):
        response = client.post("/processSnowflake", headers=row_headers("detokenize"), json=body)

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValidationError"

    @pytest.mark.parametrize(
        ("headers", "message"),
        [
            (
                {f"{PREFIX}X-Skyflow-Operation": "detokenize", f"{PREFIX}X-Skyflow-Vault-ID": "v1"},
                "Missing required header: X-Skyflow-Cluster-ID",
            ),
            (row_headers("query"), "Unknown operation: query"),
            (
                row_headers("tokenize", **{"X-Skyflow-Table": "users"}),
                "X-Skyflow-Column-Name (required for tokenize)",
            ),
        ],
    )
    def test_header_errors_reported_before_body_errors(
        self, client: TestClient, headers: dict, message: str
    ):
        """测试：请求头与请求体同时有误时，先报告 ConfigError（与 /process 一致）"""
        response = client.post("/processSnowflake", headers=headers, json={"data": []})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "ConfigError"
        assert message in error["message"]
