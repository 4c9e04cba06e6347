"""
Tests for the calculation API endpoints.
"""

from decimal import Decimal

D = Decimal


class TestHealth:
    """Test service health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPrimitiveEndpoints:
    """Test sqrt, ln and pow endpoints."""

    def test_sqrt(self, client):
        response = client.post("/api/calculate/sqrt", json={"x": "16"})
        assert response.status_code == 200
        assert abs(D(str(response.json()["result"])) - D(4)) < D("1e-10")

    def test_sqrt_negative_is_zero(self, client):
        response = client.post("/api/calculate/sqrt", json={"x": "-4"})
        assert response.status_code == 200
        assert D(str(response.json()["result"])) == 0

    def test_ln(self, client):
        response = client.post("/api/calculate/ln", json={"x": "1"})
        assert response.status_code == 200
        assert D(str(response.json()["result"])) == 0

    def test_pow(self, client):
        response = client.post("/api/calculate/pow", json={"base": "4", "exponent": "0.5"})
        assert response.status_code == 200
        assert abs(D(str(response.json()["result"])) - D(2)) < D("1e-20")

    def test_pow_invalid(self, client):
        response = client.post("/api/calculate/pow", json={"base": "-8", "exponent": "0.5"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"

    def test_pow_overflow_is_bad_request(self, client):
        response = client.post(
            "/api/calculate/pow", json={"base": "10", "exponent": "10000000"}
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"


class TestNPVEndpoint:
    """Test NPV endpoint."""

    def test_npv_zero_rate(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={"rate": "0", "cash_flows": ["-100", "50", "50", "50"]},
        )
        assert response.status_code == 200
        assert D(str(response.json()["npv"])) == D(50)

    def test_npv_with_dates(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={
                "rate": "0.10",
                "cash_flows": ["-1000", "1464.1"],
                "dates": ["2020-01-01", "2024-01-01"],
            },
        )
        assert response.status_code == 200
        assert D(str(response.json()["npv"])) == 0

    def test_npv_mismatched_dates(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={"rate": "0.10", "cash_flows": ["-1000", "500"], "dates": ["2020-01-01"]},
        )
        assert response.status_code == 400

    def test_npv_empty_dates_are_not_ignored(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={"rate": "0.10", "cash_flows": ["-1000", "500"], "dates": []},
        )
        assert response.status_code == 400

    def test_npv_invalid_rate(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={"rate": "-1", "cash_flows": ["-100", "110"]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_rate"


class TestIRREndpoint:
    """Test IRR and XIRR endpoints."""

    def test_irr(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": ["-1000", "400", "400", "400"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert abs(D(str(data["irr"])) - D("0.0970")) < D("0.001")
        assert D(str(data["multiple"])) == D("1.2")
        assert D(str(data["profit"])) == D(200)

    def test_irr_with_dates(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={
                "cash_flows": ["-1000", "1464.1"],
                "dates": ["2020-01-01", "2024-01-01"],
            },
        )
        assert response.status_code == 200
        assert abs(D(str(response.json()["irr"])) - D("0.10")) < D("1e-6")

    def test_irr_insufficient_data(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": ["-100"]})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "insufficient_data"

    def test_irr_no_convergence(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": ["1000", "-1"]})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "convergence_failure"
        assert detail["solver"] == "IRR"
        assert detail["iterations"] == 100
        assert D(detail["last_residual"]) == D(900)

    def test_xirr(self, client):
        response = client.post(
            "/api/calculate/xirr",
            json={
                "flows": [
                    {"date": "2025-01-01", "amount": "-100"},
                    {"date": "2026-01-01", "amount": "50", "label": "distribution"},
                    {"date": "2027-01-01", "amount": "60"},
                ],
                "guess": "0.05",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert D(0) < D(str(data["xirr"])) < D("0.20")
        assert data["iterations"] >= 1

    def test_xirr_non_positive_guess(self, client):
        response = client.post(
            "/api/calculate/xirr",
            json={
                "flows": [
                    {"date": "2025-01-01", "amount": "-100"},
                    {"date": "2026-01-01", "amount": "110"},
                ],
                "guess": "-2",
            },
        )
        assert response.status_code == 422
        assert response.json()["detail"]["iterations"] == 0


class TestTimeValueEndpoints:
    """Test PV, FV and PMT endpoints."""

    def test_pmt(self, client):
        response = client.post(
            "/api/calculate/tvm/pmt",
            json={"rate": "0", "nper": 10, "present_value": "1000"},
        )
        assert response.status_code == 200
        assert D(str(response.json()["result"])) == D(-100)

    def test_pmt_zero_periods(self, client):
        response = client.post(
            "/api/calculate/tvm/pmt",
            json={"rate": "0.05", "nper": 0, "present_value": "1000"},
        )
        assert response.status_code == 400

    def test_pv(self, client):
        response = client.post(
            "/api/calculate/tvm/pv",
            json={"rate": "0.08", "nper": 10, "pmt": "-100"},
        )
        assert response.status_code == 200
        assert abs(D(str(response.json()["result"])) - D("671.01")) < D("0.01")

    def test_fv(self, client):
        response = client.post(
            "/api/calculate/tvm/fv",
            json={"rate": "0", "nper": 5, "pmt": "-100", "present_value": "-1000"},
        )
        assert response.status_code == 200
        assert D(str(response.json()["result"])) == D(1500)
