"""Test the FastAPI application built by create_app."""
from pathlib import Path

from fastapi.testclient import TestClient
import pytest

from arithmetic_api.common.evaluator import ExpressionEvaluator
from arithmetic_api.server.app import EXAMPLE_EXPRESSION, create_app
from arithmetic_api.server.config import ServerConfig


@pytest.fixture
def client() -> TestClient:
    """Test client that returns 500 responses instead of re-raising server errors."""
    return TestClient(create_app(), raise_server_exceptions=False)


@pytest.mark.parametrize(
    "action,v1,v2,expected",
    [
        ("add", "2", "3", 5.0),
        ("subtract", "2", "3", -1.0),
        ("multiply", "2.5", "4", 10.0),
        ("divide", "7", "2", 3.5),
        ("power", "2", "10", 1024.0),
        ("root", "27", "3", 27 ** (1 / 3)),
    ],
)
def test_direct_endpoints(client: TestClient, action: str, v1: str, v2: str, expected: float) -> None:
    """Each direct endpoint echoes its operands and returns the result."""
    response = client.get(f"/api/{action}", params={"v1": v1, "v2": v2})
    assert response.status_code == 200
    assert response.json() == {"action": action, "v1": float(v1), "v2": float(v2), "result": expected}


@pytest.mark.parametrize(
    "params",
    [
        {"v1": "abc", "v2": "1"},
        {"v1": "1", "v2": ""},
        {"v1": "1"},
        {},
        {"v1": "nan", "v2": "1"},
        {"v1": "1", "v2": "inf"},
        {"v1": "1_000", "v2": "1"},     # Python-only digit grouping
        {"v1": "3abc", "v2": "1"},
        {"v1": "0x10", "v2": "1"},
        {"v1": "1e400", "v2": "1"},     # Overflows to infinity
    ],
)
def test_direct_endpoint_invalid_parameters(client: TestClient, params: dict) -> None:
    """Missing or non-numeric operands are rejected with a 400."""
    response = client.get("/api/add", params=params)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid parameters. Both v1 and v2 must be valid numbers."}


def test_divide_by_zero_endpoint(client: TestClient) -> None:
    """GET /api/divide with v2=0 is a 400."""
    response = client.get("/api/divide", params={"v1": "5", "v2": "0"})
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot divide by zero."}


def test_root_zero_degree_endpoint(client: TestClient) -> None:
    """GET /api/root with v2=0 is a 400."""
    response = client.get("/api/root", params={"v1": "8", "v2": "0"})
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot extract root with degree zero."}


@pytest.mark.parametrize(
    "action,v1,v2",
    [
        ("power", "10", "400"),     # Overflow
        ("root", "-8", "3"),        # Negative base, fractional exponent
        ("multiply", "1e308", "10"),
    ],
)
def test_direct_endpoint_non_finite_result(client: TestClient, action: str, v1: str, v2: str) -> None:
    """Results that JSON cannot carry are reported as errors."""
    response = client.get(f"/api/{action}", params={"v1": v1, "v2": v2})
    assert response.status_code == 400
    assert response.json() == {"error": "Non-numeric value encountered."}


def test_calculate_example(client: TestClient) -> None:
    """POST /api/calculate evaluates the discovery example to 129."""
    response = client.post("/api/calculate", json=EXAMPLE_EXPRESSION)
    assert response.status_code == 200
    assert response.json() == {"action": "calculate", "result": 129.0}


def test_calculate_bare_number(client: TestClient) -> None:
    """A bare number is a valid expression."""
    response = client.post("/api/calculate", json=42)
    assert response.status_code == 200
    assert response.json()["result"] == 42.0


@pytest.mark.parametrize(
    "body,message",
    [
        ({"op": "divide", "args": [5, 0]}, "Cannot divide by zero."),
        ({"op": "root", "args": [5, 0]}, "Cannot extract root with degree zero."),
        ({"op": "add", "args": [{"op": "power", "args": [10, 400]}, 1]}, "Non-numeric value encountered."),
        ({"op": "power", "args": [10, 400]}, "Non-numeric value encountered."),
        ("abc", "Invalid node: must be a number or { op, args }."),
        ({"op": "add", "args": []}, '"add" requires at least one argument.'),
        ({"op": "add", "args": 3}, '"add" requires "args" to be a list of arguments.'),
    ],
)
def test_calculate_errors(client: TestClient, body, message: str) -> None:
    """Validation and evaluation failures are 400 responses carrying the message."""
    response = client.post("/api/calculate", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_calculate_unsupported_operator(client: TestClient) -> None:
    """The unsupported operator message lists the supported names."""
    response = client.post("/api/calculate", json={"op": "foo", "args": [1]})
    assert response.status_code == 400
    assert "Supported: add, subtract, multiply, divide, power, root" in response.json()["error"]


def test_calculate_missing_body(client: TestClient) -> None:
    """An empty body is reported as a missing expression."""
    response = client.post("/api/calculate", content=b"")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing the expression in POST body."}


def test_calculate_malformed_json(client: TestClient) -> None:
    """A body that is not JSON is a 400."""
    response = client.post(
        "/api/calculate", content=b"{op: add", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON in POST body."}


def test_calculate_depth_limit() -> None:
    """The configured max_depth bounds the nesting of expressions."""
    client = TestClient(create_app(ServerConfig(max_depth=2)))
    body = {"op": "add", "args": [{"op": "add", "args": [{"op": "add", "args": [1]}]}]}
    response = client.post("/api/calculate", json=body)
    assert response.status_code == 400
    assert "deeper than 2" in response.json()["error"]


def test_index(client: TestClient) -> None:
    """GET /api/ lists every endpoint and an example expression."""
    response = client.get("/api/")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Math Operations API"
    assert len(body["endpoints"]) == 7
    assert "GET /api/root?v1=<number>&v2=<degree>" in body["endpoints"]
    assert body["example_expression"] == EXAMPLE_EXPRESSION


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/modulo"),
        ("GET", "/nothing/here"),
        ("POST", "/api/add"),
        ("GET", "/api/calculate"),
    ],
)
def test_unknown_route(client: TestClient, method: str, path: str) -> None:
    """Unknown routes and wrong methods get the not-found error."""
    response = client.request(method, path)
    assert response.status_code == 404
    assert response.json() == {"error": "This endpoint does not exists."}


def test_internal_error(client: TestClient, monkeypatch) -> None:
    """Unexpected exceptions become a generic 500."""

    def boom(node):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(ExpressionEvaluator, "evaluate", staticmethod(boom))

    response = client.post("/api/calculate", json={"op": "add", "args": [1, 2]})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error."}


def test_static_files(tmp_path: Path) -> None:
    """A configured static directory is served at '/' next to the API."""
    (tmp_path / "index.html").write_text("<h1>Calculator</h1>")
    client = TestClient(create_app(ServerConfig(static_dir=tmp_path)))

    response = client.get("/")
    assert response.status_code == 200
    assert "Calculator" in response.text

    # API routes still take precedence
    assert client.get("/api/add", params={"v1": 1, "v2": 1}).json()["result"] == 2.0

    missing = client.get("/missing.js")
    assert missing.status_code == 404
    assert missing.json() == {"error": "This endpoint does not exists."}


@pytest.mark.parametrize(
    "v1,expected",
    [(".5", 0.5), ("+2", 2.0), ("-2e3", -2000.0), ("1.", 1.0), ("6.02E23", 6.02e23)],
)
def test_direct_endpoint_number_notation(client: TestClient, v1: str, expected: float) -> None:
    """Operands accept plain decimal and exponent notation."""
    response = client.get("/api/add", params={"v1": v1, "v2": "0"})
    assert response.status_code == 200
    assert response.json()["v1"] == expected


def test_calculate_body_too_deep_to_decode(client: TestClient) -> None:
    """A body nested beyond what the JSON decoder can follow is a depth error, not a 500."""
    response = client.post("/api/calculate", content=b"[" * 100000 + b"]" * 100000)
    assert response.status_code == 400
    assert "deeper than 64" in response.json()["error"]
