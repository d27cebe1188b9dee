"""Pytest configuration and fixtures for schemapack tests."""

import sys
import textwrap
import uuid
from pathlib import Path

import pytest
from pydantic import BaseModel


class Address(BaseModel):
    street: str
    city: str


class User(BaseModel):
    name: str
    age: int | None = None
    address: Address


class Order(BaseModel):
    id: int
    buyer: User
    seller: User


class TreeNode(BaseModel):
    label: str
    children: list["TreeNode"] = []


@pytest.fixture
def address_model():
    return Address


@pytest.fixture
def user_model():
    return User


@pytest.fixture
def order_model():
    return Order


@pytest.fixture
def tree_model():
    return TreeNode


@pytest.fixture
def models():
    """Two models sharing a nested definition."""
    return {"User": User, "Order": Order}


MODELS_SOURCE = '''
from pydantic import BaseModel


class Item(BaseModel):
    sku: str
    quantity: int = 1


class Cart(BaseModel):
    items: list[Item]
    coupon: str | None = None


MODELS = {"Item": Item, "Cart": Cart}


def get_models():
    return {"Item": Item}


NOT_A_MAPPING = ["Item"]


class Opaque:
    pass


UNCONVERTIBLE = {"Item": Item, "Opaque": Opaque}
'''


@pytest.fixture
def model_module(tmp_path: Path, monkeypatch):
    """Write an importable module defining MODELS and return its name."""
    module_name = f"sample_models_{uuid.uuid4().hex[:8]}"
    (tmp_path / f"{module_name}.py").write_text(textwrap.dedent(MODELS_SOURCE), encoding="utf-8")

    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.chdir(tmp_path)

    yield module_name

    sys.modules.pop(module_name, None)
