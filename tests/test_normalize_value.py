import dataclasses
import enum
import threading
import types
import uuid
from datetime import date, datetime, time
from decimal import Decimal

import pytest
from pydantic import BaseModel, ConfigDict

from model_sidekick import SensitiveValue, normalize_value


class Status(str, enum.Enum):
    ACTIVE = "active"
    BANNED = "banned"


class Priority(enum.IntEnum):
    LOW = 1
    HIGH = 3


class Point(BaseModel):
    x: int
    y: int


@dataclasses.dataclass
class Money:
    amount: int
    currency: str


class Slug:
    def __init__(self, text):
        self.text = text

    def __str__(self):
        return self.text.lower().replace(" ", "-")


class Versioned:
    def __json__(self):
        return Priority.HIGH


class Profile:
    def __init__(self, name, age):
        self.name = name
        self.age = age
        self._cache = {}


@dataclasses.dataclass
class Job:
    name: str
    lock: object


class Odd:
    def __repr__(self):
        return "Odd()"


class Wrapper(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    payload: Odd


@pytest.mark.parametrize(
    "value,expected",
    [
        (Status.ACTIVE, "active"),
        (Priority.HIGH, 3),
    ],
)
def test_backed_enum_returns_backing_scalar(value, expected):
    assert normalize_value(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (Slug("Hello World"), "hello-world"),
        (Decimal("1.50"), "1.50"),
        (uuid.UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
        (datetime(2024, 1, 1, 10, 0), "2024-01-01T10:00:00"),
        (date(2024, 1, 1), "2024-01-01"),
        (time(9, 30), "09:30:00"),
    ],
)
def test_text_renderable_values_use_their_text(value, expected):
    assert normalize_value(value) == expected


def test_pydantic_model_is_serialized_then_encoded():
    assert normalize_value(Point(x=1, y=2)) == '{"x": 1, "y": 2}'


def test_dataclass_is_serialized_then_encoded():
    assert normalize_value(Money(500, "EUR")) == '{"amount": 500, "currency": "EUR"}'


def test_json_hook_is_unwrapped_one_level_then_checked_again():
    # __json__ yields an enum; the enum check still applies to the unwrapped value
    assert normalize_value(Versioned()) == 3


def test_collections_become_json_text():
    assert normalize_value({"a": 1, "b": [1, 2]}) == '{"a": 1, "b": [1, 2]}'
    assert normalize_value([1, "two", None]) == '[1, "two", null]'
    assert normalize_value(("x", "y")) == '["x", "y"]'


def test_nested_rich_values_are_encoded_with_the_same_rules():
    value = {"at": datetime(2024, 1, 1, 10, 0), "status": Status.BANNED, "tags": {"b", "a"}}
    assert normalize_value(value) == '{"at": "2024-01-01T10:00:00", "status": "banned", "tags": ["a", "b"]}'


def test_unencodable_composite_is_returned_unchanged():
    payload = {"raw": b"\x00\x01"}
    assert normalize_value(payload) is payload

    lone = object()
    assert normalize_value(lone) is lone


def test_plain_objects_encode_their_public_attributes():
    assert normalize_value(types.SimpleNamespace(a=1)) == '{"a": 1}'
    assert normalize_value(Profile("Ann", 30)) == '{"name": "Ann", "age": 30}'
    assert normalize_value({"owner": Profile("Bob", 41)}) == '{"owner": {"name": "Bob", "age": 41}}'


def test_dataclass_that_cannot_be_copied_does_not_raise():
    job = Job("nightly", threading.Lock())
    assert normalize_value(job) is job


def test_pydantic_model_that_cannot_be_dumped_does_not_raise():
    # dumping fails, so the model falls through to its own text rendering
    assert normalize_value(Wrapper(payload=Odd())) == "payload=Odd()"


def test_self_referencing_object_does_not_raise():
    node = types.SimpleNamespace()
    node.parent = node
    assert normalize_value(node) is node


def test_circular_structure_does_not_raise():
    loop = []
    loop.append(loop)
    assert normalize_value(loop) is loop


@pytest.mark.parametrize("value", [None, 0, 42, 1.5, True, False, "plain", b"bytes"])
def test_scalars_pass_through(value):
    assert normalize_value(value) is value


def test_sensitive_value_normalizes_to_mask():
    assert normalize_value(SensitiveValue("hunter2")) == "********"
