"""Tests for the formula, rollup and property API endpoints."""

from basebridge.api.routes import router


def test_routes_registered():
    """Test that all endpoints are registered."""
    route_paths = [route.path for route in router.routes]

    assert "/formulas/check" in route_paths
    assert "/formulas/translate" in route_paths
    assert "/rollups/compile" in route_paths
    assert "/rollups/functions" in route_paths
    assert "/properties/map" in route_paths
    assert "/health" in route_paths


class TestFormulaEndpoints:
    """Test formula checking and translation."""

    def test_check_convertible(self, test_client):
        """Test checking a convertible formula."""
        response = test_client.post("/api/formulas/check", json={"expression": 'round(prop("A"))'})

        assert response.status_code == 200
        data = response.json()
        assert data["convertible"] is True
        assert data["blocking_function"] is None

    def test_check_blocked(self, test_client):
        """Test checking a formula with a denied function."""
        response = test_client.post("/api/formulas/check", json={"expression": 'sqrt(prop("A"))'})

        assert response.status_code == 200
        data = response.json()
        assert data["convertible"] is False
        assert data["blocking_function"] == "sqrt"

    def test_translate_success(self, test_client):
        """Test translating a formula."""
        response = test_client.post(
            "/api/formulas/translate", json={"expression": 'ref("Price") * ref("Quantity")'}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["formula"] == "(Price * Quantity)"

    def test_translate_failure_is_a_result(self, test_client):
        """Test that untranslatable formulas are reported, not errors."""
        response = test_client.post("/api/formulas/translate", json={"expression": 'sqrt(ref("Area"))'})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["formula"] is None
        assert data["original"] == 'sqrt(ref("Area"))'

    def test_translate_with_schema(self, test_client, sample_schema):
        """Test placeholder resolution through the request schema."""
        response = test_client.post(
            "/api/formulas/translate",
            json={
                "expression": sample_schema["Total"]["formula"]["expression"],
                "properties": sample_schema,
            },
        )

        assert response.status_code == 200
        assert response.json()["formula"] == "(Price * Quantity)"

    def test_translate_requires_expression(self, test_client):
        """Test that a missing expression is a validation error."""
        response = test_client.post("/api/formulas/translate", json={})

        assert response.status_code == 422


class TestRollupEndpoints:
    """Test rollup compilation."""

    def test_compile_count(self, test_client):
        """Test compiling a count rollup."""
        response = test_client.post(
            "/api/rollups/compile", json={"function": "count", "relation_property": "Tasks"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["formula"] == 'note["Tasks"].length'

    def test_compile_unknown(self, test_client):
        """Test that unknown rollups are reported as unsuccessful."""
        response = test_client.post(
            "/api/rollups/compile", json={"function": "median", "relation_property": "Tasks"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["formula"] is None
        assert "median" in data["error"]

    def test_list_functions(self, test_client):
        """Test listing supported rollup functions."""
        response = test_client.get("/api/rollups/functions")

        assert response.status_code == 200
        functions = {item["name"]: item["requires_target"] for item in response.json()["functions"]}
        assert functions["count"] is False
        assert functions["earliest_date"] is True


class TestPropertyEndpoints:
    """Test property schema mapping."""

    def test_map_properties(self, test_client, sample_schema):
        """Test mapping a schema."""
        response = test_client.post(
            "/api/properties/map", json={"properties": sample_schema, "strategy": "hybrid"}
        )

        assert response.status_code == 200
        data = response.json()
        formula_keys = [entry["key"] for entry in data["formulas"]]
        assert "formula.Total" in formula_keys
        assert "formula.Task Count" in formula_keys
        assert data["title_property_name"] == "Name"

    def test_unknown_strategy(self, test_client, sample_schema):
        """Test that an unknown strategy is a bad request."""
        response = test_client.post(
            "/api/properties/map", json={"properties": sample_schema, "strategy": "sometimes"}
        )

        assert response.status_code == 400
        assert "sometimes" in response.json()["detail"]
