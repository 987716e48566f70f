import pytest

from services.ordering.app.aggregate import compute_order_total_price


def priced_item(value, unit="LKR"):
    return {"itemPrice": [{"price": {"taxIncludedAmount": {"unit": unit, "value": value}}}]}


def test_sums_tax_included_amounts_across_items():
    total = compute_order_total_price([priced_item(2500), priced_item(1500)])

    assert total["@type"] == "OrderPrice"
    assert total["priceType"] == "total"
    price = total["price"]
    assert price["taxIncludedAmount"] == {"unit": "LKR", "value": 4000}
    assert price["dutyFreeAmount"] == {"unit": "LKR", "value": 3478}
    assert price["taxRate"] == 15


def test_currency_is_taken_from_last_price():
    total = compute_order_total_price([priced_item(100, "USD"), priced_item(15, "EUR")])
    assert total["price"]["taxIncludedAmount"]["unit"] == "EUR"
    assert total["price"]["dutyFreeAmount"]["value"] == 100


def test_half_values_round_up():
    # 1.15 * 2.5 = 2.875 → 2.5 → 3
    assert compute_order_total_price([priced_item(2.875)])["price"]["dutyFreeAmount"]["value"] == 3


def test_missing_value_counts_as_zero():
    items = [
        {"itemPrice": [{"price": {"taxIncludedAmount": {"unit": "USD"}}}]},
        priced_item(115, "USD"),
    ]
    assert compute_order_total_price(items)["price"]["taxIncludedAmount"]["value"] == 115


def test_numeric_strings_are_summed_and_junk_is_skipped():
    items = [
        priced_item("100"),
        priced_item("15.0"),
        priced_item("abc"),
        priced_item({"amount": 5}),
        priced_item("Infinity"),
        {"itemPrice": [{"price": {"taxIncludedAmount": "115"}}]},
    ]
    price = compute_order_total_price(items)["price"]
    assert price["taxIncludedAmount"]["value"] == 115
    assert price["dutyFreeAmount"]["value"] == 100


@pytest.mark.parametrize(
    "items",
    [
        None,
        "items",
        [],
        [{"id": "1"}],
        [{"itemPrice": []}],
        [priced_item(0)],
        [priced_item(100), priced_item(-100)],
    ],
)
def test_no_total_when_nothing_to_sum(items):
    assert compute_order_total_price(items) is None
