"""
Unit Tests - Product Performance Quadrant
"""
from datetime import datetime

import pytest

from factories import item, make_snapshot, order
from tyre_analytics.analytics.insights import (
    Quadrant,
    classify_quadrant,
    compute_product_insights,
)


class TestClassifyQuadrant:
    """Tests for classify_quadrant"""

    @pytest.mark.parametrize("growth,margin,expected", [
        (50, 40, Quadrant.STAR),
        (50, 10, Quadrant.QUESTION_MARK),
        (-5, 40, Quadrant.CASH_COW),
        (-5, 10, Quadrant.DOG),
        (0, 30, Quadrant.DOG),
    ])
    def test_quadrants(self, growth, margin, expected):
        assert classify_quadrant(growth, margin, growth_median=0, margin_median=30) is expected


class TestProductInsights:
    """Tests for compute_product_insights"""

    def test_store_insights(self, store_snapshot):
        insights = compute_product_insights(store_snapshot)
        by_product = {i.product_id: i for i in insights}

        assert [i.product_id for i in insights] == [1, 2, 3, 4]
        assert by_product[1].quadrant == "dog"
        assert by_product[2].quadrant == "cash_cow"
        assert by_product[3].quadrant == "cash_cow"
        assert by_product[4].quadrant == "dog"
        assert by_product[2].recommendation == "maintain"
        assert by_product[4].recommendation == "consider_discontinuing"

    def test_growth_rates(self, store_snapshot):
        by_product = {i.product_id: i for i in compute_product_insights(store_snapshot)}

        assert by_product[1].is_new is True
        assert by_product[1].growth_rate == 0.0
        assert by_product[2].growth_rate == 0.0
        assert by_product[2].is_new is False
        assert by_product[4].growth_rate == -100.0
        assert by_product[4].current_revenue == 0.0
        assert by_product[4].previous_revenue == 14000.0

    def test_margin_basis(self, store_snapshot):
        by_product = {i.product_id: i for i in compute_product_insights(store_snapshot)}

        assert by_product[1].profit_margin == 30.0
        assert by_product[1].margin_basis == "cost"
        # No cost on file: percentile rank of the price
        assert by_product[3].profit_margin == 100.0
        assert by_product[3].margin_basis == "price_rank"

    def test_growing_high_margin_product_is_star(self):
        products = [
            {"product_id": 1, "name": "A", "brand": "Toyo", "category": "Summer", "price": 5000, "unit_cost": 2500, "stock": 10},
            {"product_id": 2, "name": "B", "brand": "Toyo", "category": "Summer", "price": 5000, "unit_cost": 4500, "stock": 10},
        ]
        orders = [
            order(1, 1, 10000, datetime(2026, 2, 1)),
            order(2, 1, 20000, datetime(2026, 3, 1)),
            order(3, 1, 5000, datetime(2026, 2, 1)),
            order(4, 1, 5000, datetime(2026, 3, 1)),
        ]
        order_items = [item(1, 1, 2, 5000), item(2, 1, 4, 5000), item(3, 2, 1, 5000), item(4, 2, 1, 5000)]
        snapshot = make_snapshot(orders=orders, order_items=order_items, products=products)

        by_product = {i.product_id: i for i in compute_product_insights(snapshot)}

        assert by_product[1].growth_rate == 100.0
        assert by_product[1].quadrant == "star"
        assert by_product[1].recommendation == "invest"
        assert by_product[2].quadrant == "dog"

    def test_products_without_sales_are_skipped(self, empty_snapshot):
        assert compute_product_insights(empty_snapshot) == []
