"""
Tests for API endpoints.
"""

import pytest


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_check(self, client):
        """Health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRecomputeAPI:
    """Test the stateless recompute endpoint."""

    def test_recompute_mortgage(self, client, mortgage_snapshot):
        response = client.post(
            "/api/calculate/recompute",
            json={"snapshot": mortgage_snapshot.to_storage()},
        )
        assert response.status_code == 200
        data = response.json()

        derived = data["derived"]
        assert derived["costOfFinance"] == 78375
        assert derived["totalProjectCosts"] == 88875
        assert derived["monthlyMortgagePayment"] == pytest.approx(937.5)
        assert derived["yieldPercent"] == pytest.approx(8)
        assert derived["roce"] == pytest.approx(6690 / 88875 * 100)
        assert derived["roceUnbounded"] is False
        assert derived["totalReturn"] is None

        snapshot = data["snapshot"]
        assert snapshot["purchaseFinance"]["deposit"] == "75000"
        assert snapshot["initialCosts"]["stampDutyAmount"] == "9000"

    def test_numbers_accepted_as_json_numbers(self, client):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": {
                    "purchaseType": "cash",
                    "purchaseFinance": {"purchasePrice": 250000},
                    "initialCosts": {"legal": 1500},
                }
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["snapshot"]["purchaseFinance"]["purchasePrice"] == "250000"
        assert data["derived"]["totalProjectCosts"] == 251500

    def test_empty_snapshot(self, client):
        """A blank calculator evaluates to zeros."""
        response = client.post("/api/calculate/recompute", json={"snapshot": {}})
        assert response.status_code == 200
        derived = response.json()["derived"]
        assert derived["totalProjectCosts"] == 0
        assert derived["roce"] == 0

    def test_overflowing_amounts(self, client):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": {
                    "purchaseFinance": {"purchasePrice": "1e308", "ltv": "50", "productFee": "300"},
                    "initialCosts": {"stampDutyPercent": "500"},
                }
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["snapshot"]["initialCosts"]["stampDutyAmount"] == "0"
        assert data["derived"]["totalProjectCosts"] == 0

    def test_recompute_with_amount_edit(self, client, mortgage_snapshot):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": mortgage_snapshot.to_storage(),
                "edit": {"pair": "ltv", "amount": "240000"},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert float(data["snapshot"]["purchaseFinance"]["ltv"]) == pytest.approx(80)
        assert data["snapshot"]["purchaseFinance"]["loanAmount"] == "240000"
        assert data["derived"]["depositAmount"] == pytest.approx(60000)

    def test_edit_requires_one_side(self, client, mortgage_snapshot):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": mortgage_snapshot.to_storage(),
                "edit": {"pair": "ltv", "percent": 70, "amount": 210000},
            },
        )
        assert response.status_code == 400

    def test_unknown_pair(self, client, mortgage_snapshot):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": mortgage_snapshot.to_storage(),
                "edit": {"pair": "councilTax", "percent": 1},
            },
        )
        assert response.status_code == 422

    def test_invalid_purchase_type(self, client):
        response = client.post(
            "/api/calculate/recompute",
            json={"snapshot": {"purchaseType": "lease-option"}},
        )
        assert response.status_code == 422

    def test_policy_override(self, client):
        """Refinance surplus reported as unbounded ROCE on request."""
        snapshot = {
            "purchaseType": "cash",
            "exitStrategy": "refinance-rent",
            "purchaseFinance": {"purchasePrice": "100000"},
            "refurbItems": [{"id": 1, "amount": "20000"}],
            "refinanceDetails": {"expectedGDV": "200000", "newLoanLTV": "75"},
            "monthlyIncome": {"rent1": "1500"},
        }
        response = client.post(
            "/api/calculate/recompute",
            json={"snapshot": snapshot, "policy": {"refinanceRoce": "unbounded_on_surplus"}},
        )
        assert response.status_code == 200
        derived = response.json()["derived"]
        assert derived["roce"] is None
        assert derived["roceUnbounded"] is True
        assert derived["refinanceSurplus"] is True

        response = client.post("/api/calculate/recompute", json={"snapshot": snapshot})
        derived = response.json()["derived"]
        assert derived["roceUnbounded"] is False
        assert derived["roce"] == pytest.approx(1500 * 12 / 30000 * 100)

    def test_sale_policy_override(self, client, bridging_snapshot):
        response = client.post(
            "/api/calculate/recompute",
            json={
                "snapshot": bridging_snapshot.to_storage(),
                "policy": {"saleProfit": "net_of_project_costs"},
            },
        )
        assert response.status_code == 200
        assert response.json()["derived"]["totalReturn"] == pytest.approx(190800)


class TestPercentLinkAPI:
    """Test the percentage/amount link endpoint."""

    def test_percent_to_amount(self, client):
        response = client.post(
            "/api/calculate/percent-link", json={"base": 300000, "percent": 3}
        )
        assert response.status_code == 200
        assert response.json() == {"percent": 3, "amount": 9000}

    def test_amount_to_percent(self, client):
        response = client.post(
            "/api/calculate/percent-link", json={"base": 300000, "amount": 9000}
        )
        assert response.status_code == 200
        assert response.json()["percent"] == pytest.approx(3)

    def test_zero_base(self, client):
        response = client.post(
            "/api/calculate/percent-link", json={"base": 0, "amount": 9000}
        )
        assert response.json() == {"percent": 0, "amount": 9000}

    def test_tiny_base(self, client):
        response = client.post(
            "/api/calculate/percent-link", json={"base": 1e-320, "amount": 1000}
        )
        assert response.status_code == 200
        assert response.json() == {"percent": 0, "amount": 1000}

    def test_requires_exactly_one_side(self, client):
        response = client.post("/api/calculate/percent-link", json={"base": 300000})
        assert response.status_code == 400


class TestExitStrategiesAPI:
    """Test exit strategy availability."""

    @pytest.mark.parametrize(
        "purchase_type,expected",
        [
            ("mortgage", ["just-rent"]),
            ("bridging", ["refinance-rent", "flip-sell"]),
            ("cash", ["just-rent", "refinance-rent", "flip-sell"]),
        ],
    )
    def test_exit_strategies(self, client, purchase_type, expected):
        response = client.get(
            "/api/calculate/exit-strategies", params={"purchase_type": purchase_type}
        )
        assert response.status_code == 200
        assert response.json()["exitStrategies"] == expected

    def test_invalid_purchase_type(self, client):
        response = client.get(
            "/api/calculate/exit-strategies", params={"purchase_type": "barter"}
        )
        assert response.status_code == 422


class TestCalculatorStoreAPI:
    """Test stored calculator endpoints."""

    def test_get_missing(self, client):
        response = client.get("/api/calculator/100023336956")
        assert response.status_code == 404

    def test_save_and_get(self, client, mortgage_snapshot):
        response = client.put(
            "/api/calculator/100023336956", json=mortgage_snapshot.to_storage()
        )
        assert response.status_code == 200
        assert response.json()["derived"]["totalProjectCosts"] == 88875

        response = client.get("/api/calculator/100023336956")
        assert response.status_code == 200
        data = response.json()
        assert data["uprn"] == "100023336956"
        assert data["lastUpdated"] is not None
        assert data["data"]["purchaseType"] == "mortgage"
        # Stored with derived amounts filled in
        assert data["data"]["purchaseFinance"]["loanAmount"] == "225000"
        assert data["derived"]["netAnnualIncome"] == pytest.approx(6690)

    def test_save_replaces(self, client, mortgage_snapshot):
        client.put("/api/calculator/1", json=mortgage_snapshot.to_storage())
        client.put("/api/calculator/1", json={"purchaseType": "cash"})

        data = client.get("/api/calculator/1").json()
        assert data["data"]["purchaseType"] == "cash"
        assert data["data"]["purchaseFinance"]["purchasePrice"] == ""

    def test_delete(self, client, mortgage_snapshot):
        client.put("/api/calculator/1", json=mortgage_snapshot.to_storage())

        response = client.delete("/api/calculator/1")
        assert response.json() == {"deleted": True}
        assert client.get("/api/calculator/1").status_code == 404

        response = client.delete("/api/calculator/1")
        assert response.json() == {"deleted": False}

    def test_reset_seeds_purchase_price(self, client, mortgage_snapshot):
        client.put("/api/calculator/1", json=mortgage_snapshot.to_storage())

        response = client.post("/api/calculator/1/reset", json={"purchasePrice": 250000})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["purchaseFinance"]["purchasePrice"] == "250000"
        assert data["propertyValue"] == "250000"
        assert data["purchaseFinance"]["ltv"] == ""
        assert data["exitStrategy"] is None
        assert len(data["refurbItems"]) == 1
        assert data["fundingSources"][0]["name"] == "Personal"

    def test_reset_without_price(self, client):
        response = client.post("/api/calculator/2/reset")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["purchaseFinance"]["purchasePrice"] == ""
        assert data["purchaseType"] == "mortgage"

    def test_backfill(self, client, mortgage_snapshot):
        client.put("/api/calculator/1", json=mortgage_snapshot.to_storage())

        response = client.post(
            "/api/calculator/backfill",
            json={"uprns": ["1", "2", "3"], "purchasePrices": {"2": 180000}},
        )
        assert response.status_code == 200
        assert response.json() == {"processed": 3, "created": ["2", "3"]}

        # Existing data is left alone
        data = client.get("/api/calculator/1").json()["data"]
        assert data["purchaseFinance"]["purchasePrice"] == "300000"
        data = client.get("/api/calculator/2").json()["data"]
        assert data["purchaseFinance"]["purchasePrice"] == "180000"


class TestPurchaseTypeAPI:
    """Test purchase type changes and exit strategy coercion."""

    def test_mortgage_forces_rent(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.put(
            "/api/calculator/1/purchase-type", json={"purchaseType": "mortgage"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["purchaseType"] == "mortgage"
        assert data["exitStrategy"] == "just-rent"

    def test_bridging_turns_rent_into_refinance(self, client, mortgage_snapshot):
        client.put("/api/calculator/1", json=mortgage_snapshot.to_storage())

        response = client.put(
            "/api/calculator/1/purchase-type", json={"purchaseType": "bridging"}
        )
        assert response.json()["data"]["exitStrategy"] == "refinance-rent"

    def test_cash_keeps_strategy(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.put(
            "/api/calculator/1/purchase-type", json={"purchaseType": "cash"}
        )
        assert response.json()["data"]["exitStrategy"] == "flip-sell"

    def test_missing_calculator(self, client):
        response = client.put(
            "/api/calculator/404/purchase-type", json={"purchaseType": "cash"}
        )
        assert response.status_code == 404


class TestLineItemsAPI:
    """Test refurbishment item and funding source editing."""

    def test_add_refurb_item(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.post(
            "/api/calculator/1/refurb-items", json={"description": "Roof", "amount": 5000}
        )
        assert response.status_code == 201
        data = response.json()
        assert data["itemId"] == 2
        assert data["data"]["refurbItems"][-1] == {
            "id": 2,
            "description": "Roof",
            "amount": "5000",
        }
        assert data["derived"]["totalRefurbCosts"] == 35000

    def test_add_blank_funding_source(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.post("/api/calculator/1/funding-sources")
        assert response.status_code == 201
        assert response.json()["itemId"] == 2
        assert len(response.json()["data"]["fundingSources"]) == 2

    def test_add_unknown_field(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.post("/api/calculator/1/refurb-items", json={"colour": "red"})
        assert response.status_code == 400

    def test_update_item(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.patch(
            "/api/calculator/1/funding-sources/1",
            json={"field": "interestRate", "value": 12},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["data"]["fundingSources"][0]["interestRate"] == "12"
        assert data["derived"]["totalFundingInterest"] == pytest.approx(6192)

    def test_add_invalid_value(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.post("/api/calculator/1/refurb-items", json={"amount": {"gbp": 1}})
        assert response.status_code == 400

    def test_update_invalid_value(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.patch(
            "/api/calculator/1/refurb-items/1", json={"field": "amount", "value": [1, 2]}
        )
        assert response.status_code == 400
        # Stored data is unchanged
        data = client.get("/api/calculator/1").json()["data"]
        assert data["refurbItems"][0]["amount"] == "30000"

    def test_update_missing_item(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.patch(
            "/api/calculator/1/refurb-items/9", json={"field": "amount", "value": 1}
        )
        assert response.status_code == 400

    def test_cannot_remove_last_item(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.delete("/api/calculator/1/refurb-items/1")
        assert response.status_code == 400

    def test_removed_ids_not_reused(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())
        client.post("/api/calculator/1/refurb-items", json={"amount": 100})
        client.post("/api/calculator/1/refurb-items", json={"amount": 200})

        response = client.delete("/api/calculator/1/refurb-items/3")
        assert response.status_code == 200
        assert [item["id"] for item in response.json()["data"]["refurbItems"]] == [1, 2]

        response = client.post("/api/calculator/1/refurb-items")
        assert response.json()["itemId"] == 4

    def test_unknown_kind(self, client, bridging_snapshot):
        client.put("/api/calculator/1", json=bridging_snapshot.to_storage())

        response = client.post("/api/calculator/1/rooms")
        assert response.status_code == 422
