"""Unit tests for the cart signature."""

import itertools

from storefront.domain.model.cart import LineItem
from storefront.domain.model.value_objects import Quantity
from storefront.domain.service.cart_signature import cart_signature
from tests.fakes import make_product


def _line(pid, qty, vid=None, customized=False):
    return LineItem(
        product=make_product(pid, f"P{pid}"),
        quantity=Quantity(qty),
        variation_id=vid,
        customized=customized,
    )


class TestCartSignature:

    def test_format(self):
        items = [_line(12, 2, 34), _line(5, 1)]
        assert cart_signature(items) == "5-0-1|12-34-2"

    def test_empty(self):
        assert cart_signature([]) == ""

    def test_order_independent(self):
        items = [_line(3, 1), _line(1, 2, 7), _line(1, 1, 8), _line(2, 5)]
        expected = cart_signature(items)
        for permutation in itertools.permutations(items):
            assert cart_signature(list(permutation)) == expected

    def test_ties_on_product_id_are_stable(self):
        a = [_line(1, 2), _line(1, 1, customized=True)]
        b = list(reversed(a))
        assert cart_signature(a) == cart_signature(b)

    def test_quantity_change_changes_signature(self):
        assert cart_signature([_line(1, 1)]) != cart_signature([_line(1, 2)])
