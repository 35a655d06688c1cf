"""Tests for mapping program errors to HTTP responses."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from solders.pubkey import Pubkey

from cpdex.api.endpoints import get_program
from cpdex.api.main import app
from cpdex.errors import CalculationOverflow, InvalidVault, PoolNotFound
from cpdex.program import DexProgram


def quote_payload() -> dict:
    return {
        "pool": str(Pubkey.new_unique()),
        "source_mint": str(Pubkey.new_unique()),
        "amount_in": "100",
    }


class TestErrorResponses:
    """Engine errors become 400/404 with name, code and detail."""

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (InvalidVault("vault mismatch"), 400),
            (CalculationOverflow("too big"), 400),
            (PoolNotFound("no pool"), 404),
        ],
    )
    def test_status_and_body(self, error: Exception, status_code: int) -> None:
        mock_program = MagicMock(spec=DexProgram)
        mock_program.quote.side_effect = error
        app.dependency_overrides[get_program] = lambda: mock_program

        try:
            client = TestClient(app)
            response = client.post("/quote", json=quote_payload())

            assert response.status_code == status_code
            assert response.json() == {
                "error": type(error).__name__,
                "code": error.code,
                "detail": error.args[0],
            }
        finally:
            app.dependency_overrides.clear()

    def test_slippage_above_range_rejected(self) -> None:
        mock_program = MagicMock(spec=DexProgram)
        app.dependency_overrides[get_program] = lambda: mock_program

        try:
            client = TestClient(app)
            response = client.post("/quote", json={**quote_payload(), "slippage_bps": 10_001})

            assert response.status_code == 422
            mock_program.quote.assert_not_called()
        finally:
            app.dependency_overrides.clear()
