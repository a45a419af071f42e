from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import unittest

from google.api_core.datetime_helpers import DatetimeWithNanoseconds
from google.cloud import firestore

from typestore.codec import unwrap_data, wrap_data
from typestore.errors import EncodingError
from typestore.model import collection, ref
from typestore.values import DELETE, SERVER_TIMESTAMP, array_remove, array_union, increment


@dataclass(eq=False)
class FakeCollectionRef:
    client: FakeFirestoreClient
    path: str

    def document(self, document_id: str) -> firestore.DocumentReference:
        return firestore.DocumentReference(*self.path.split("/"), document_id, client=self.client)


@dataclass(eq=False)
class FakeFirestoreClient:
    db: dict[str, dict] = field(default_factory=dict)

    def collection(self, name: str) -> FakeCollectionRef:
        return FakeCollectionRef(client=self, path=name)


users = collection("users")


class UnwrapDataTest(unittest.TestCase):
    def test_scalars_pass_through(self) -> None:
        client = FakeFirestoreClient()
        moment = datetime(2026, 2, 12, 9, 30, tzinfo=timezone.utc)
        point = firestore.GeoPoint(35.68, 139.76)

        for value in ("text", 1, 2.5, True, None, b"raw", moment, point):
            self.assertIs(unwrap_data(value, client), value)

    def test_nested_containers_are_mapped(self) -> None:
        client = FakeFirestoreClient()
        data = {"tags": ("a", "b"), "meta": {"scores": [1, {"deep": None}]}}

        self.assertEqual(
            unwrap_data(data, client),
            {"tags": ["a", "b"], "meta": {"scores": [1, {"deep": None}]}},
        )

    def test_reference_becomes_native_pointer(self) -> None:
        client = FakeFirestoreClient()
        converted = unwrap_data({"owner": ref(users, "sasha")}, client)

        owner = converted["owner"]
        self.assertIsInstance(owner, firestore.DocumentReference)
        self.assertEqual(owner.path, "users/sasha")
        self.assertEqual(owner, client.collection("users").document("sasha"))

    def test_sentinels_become_firestore_transforms(self) -> None:
        client = FakeFirestoreClient()
        converted = unwrap_data(
            {
                "removed": DELETE,
                "updatedAt": SERVER_TIMESTAMP,
                "count": increment(2),
                "tags": array_union("x", "y"),
                "old": array_remove("z"),
            },
            client,
        )

        self.assertIs(converted["removed"], firestore.DELETE_FIELD)
        self.assertIs(converted["updatedAt"], firestore.SERVER_TIMESTAMP)
        self.assertEqual(converted["count"], firestore.Increment(2))
        self.assertEqual(converted["tags"], firestore.ArrayUnion(["x", "y"]))
        self.assertEqual(converted["old"], firestore.ArrayRemove(["z"]))

    def test_array_union_items_are_unwrapped(self) -> None:
        client = FakeFirestoreClient()
        converted = unwrap_data(array_union(ref(users, "ed")), client)

        self.assertEqual(converted.values, [client.collection("users").document("ed")])

    def test_plain_string_is_not_a_sentinel(self) -> None:
        client = FakeFirestoreClient()
        self.assertEqual(unwrap_data({"status": "DELETE"}, client), {"status": "DELETE"})

    def test_unsupported_type_raises(self) -> None:
        client = FakeFirestoreClient()
        with self.assertRaises(EncodingError) as ctx:
            unwrap_data({"meta": {"tags": {"a"}}}, client)
        self.assertIn("meta.tags", str(ctx.exception))

    def test_non_string_key_raises(self) -> None:
        with self.assertRaises(EncodingError):
            unwrap_data({1: "one"}, FakeFirestoreClient())

    def test_empty_array_transform_raises(self) -> None:
        with self.assertRaises(EncodingError):
            unwrap_data({"tags": array_union()}, FakeFirestoreClient())

    def test_increment_requires_number(self) -> None:
        with self.assertRaises(EncodingError):
            increment(True)
        with self.assertRaises(EncodingError):
            increment("1")  # type: ignore[arg-type]

    def test_cyclic_value_raises(self) -> None:
        data: dict = {"name": "loop"}
        data["self"] = data
        with self.assertRaises(EncodingError):
            unwrap_data(data, FakeFirestoreClient())

    def test_shared_subvalue_is_not_a_cycle(self) -> None:
        shared = {"x": 1}
        converted = unwrap_data({"a": shared, "b": [shared, shared]}, FakeFirestoreClient())
        self.assertEqual(converted, {"a": {"x": 1}, "b": [{"x": 1}, {"x": 1}]})


class WrapDataTest(unittest.TestCase):
    def test_native_pointer_becomes_reference(self) -> None:
        client = FakeFirestoreClient()
        native = firestore.DocumentReference("orgs", "acme", "users", "sasha", client=client)

        wrapped = wrap_data({"owner": native})

        self.assertEqual(wrapped["owner"], ref(collection("orgs/acme/users"), "sasha"))

    def test_datetime_with_nanoseconds_becomes_datetime(self) -> None:
        stored = DatetimeWithNanoseconds(2026, 2, 12, 9, 30, 1, 250000, tzinfo=timezone.utc)

        wrapped = wrap_data([stored])

        self.assertIs(type(wrapped[0]), datetime)
        self.assertEqual(wrapped[0], datetime(2026, 2, 12, 9, 30, 1, 250000, tzinfo=timezone.utc))

    def test_nanoseconds_are_truncated_to_microseconds(self) -> None:
        stored = DatetimeWithNanoseconds(2026, 2, 12, 9, 30, 1, nanosecond=123456789, tzinfo=timezone.utc)

        wrapped = wrap_data(stored)

        self.assertIs(type(wrapped), datetime)
        self.assertEqual(wrapped.microsecond, 123456)
        self.assertEqual(wrapped, datetime(2026, 2, 12, 9, 30, 1, 123456, tzinfo=timezone.utc))

    def test_round_trip_is_lossless(self) -> None:
        client = FakeFirestoreClient()
        samples = [
            None,
            "text",
            0,
            -3.25,
            False,
            b"\x00\x01",
            datetime(2026, 2, 12, tzinfo=timezone.utc),
            firestore.GeoPoint(-33.87, 151.21),
            [],
            {},
            [1, "two", [3.0, None]],
            {"name": "Sasha", "meta": {"tags": ["a"], "score": 1.5}},
            {"owner": client.collection("users").document("sasha"), "posts": [client.collection("posts").document("p1")]},
        ]

        for value in samples:
            with self.subTest(value=value):
                self.assertEqual(unwrap_data(wrap_data(value), client), value)


if __name__ == "__main__":
    unittest.main()
