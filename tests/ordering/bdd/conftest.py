"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.errors import StorefrontError


@pytest.fixture()
def context():
    return {}


@given(parsers.cfparse('a product "{name}" with {stock:d} units in stock'), target_fixture="product_id")
def _(make_product, name, stock):
    return make_product(name=name, stock=stock)


@then(parsers.cfparse('the order status is "{status}"'))
def _(context, load_order, status):
    assert load_order(context["order_id"]).status == status


@then(parsers.cfparse("the product has {stock:d} units in stock"))
def _(product_id, load_product, stock):
    assert load_product(product_id).stock == stock


@then("the request is rejected")
def _(context):
    assert isinstance(context.get("error"), StorefrontError)
