"""Tests for lm_order domain dataclasses."""

import pytest

from src.lm_order.domain.models import DeliveryAddress, Order, OrderItem


class TestOrderItem:
    def test_line_total(self) -> None:
        assert OrderItem("p-1", "Rice 5kg", 25000, 2).line_total == 50000

    def test_snapshot_is_frozen(self) -> None:
        item = OrderItem("p-1", "Rice 5kg", 25000, 2)
        with pytest.raises(AttributeError):
            item.price = 1  # type: ignore[misc]

    def test_from_dict_coerces_types(self) -> None:
        item = OrderItem.from_dict(
            {"product_id": 42, "name": "Dal", "price": "1500", "quantity": "3"}
        )
        assert item == OrderItem("42", "Dal", 1500, 3, None)


class TestDeliveryAddress:
    def test_from_dict_fills_missing_optional_fields(self) -> None:
        addr = DeliveryAddress.from_dict(
            {"name": "Asha", "phone": "98765", "address": "12 MG Road"}
        )
        assert addr.city == ""
        assert addr.latitude is None

    def test_to_dict_keeps_every_field(self) -> None:
        addr = DeliveryAddress("Asha", "98765", "12 MG Road", "Pune", "411001", 18.5, 73.8)
        assert DeliveryAddress.from_dict(addr.to_dict()) == addr


def test_compute_total_sums_lines() -> None:
    items = [OrderItem("p-1", "Rice", 25000, 2), OrderItem("p-2", "Oil", 18000, 1)]
    assert Order.compute_total(items) == 68000
    assert Order.compute_total([]) == 0
