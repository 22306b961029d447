"""Serialization: values round-trip without carrying their collaborator.

Only the record fields and the locator key are written. After loading, the
value resolves again through whatever is bound under the key at that time.
"""

from __future__ import annotations

import pickle
from dataclasses import dataclass

from deferref import DeferredValue, registry
from deferref.serialization import dumps, loads


class PhotoService:
    def __init__(self, bucket: str) -> None:
        self.bucket = bucket

    def compute(self, user_id: int) -> str:
        return f"{self.bucket}/photo-{user_id}.jpg"


@dataclass(frozen=True, slots=True, kw_only=True)
class User(DeferredValue):
    name: str


def main() -> None:
    registry.bind("photos", PhotoService(bucket="s3://secret-bucket"))

    user = User(id=1, name="ann", locator_key="photos")
    payload = dumps(user)
    print(f"json={payload.decode()}")  # => json={"id":1,"locator_key":"photos","name":"ann"}
    print(f"leaks_bucket={b'secret-bucket' in pickle.dumps(user)}")  # => leaks_bucket=False

    registry.bind("photos", PhotoService(bucket="s3://other-bucket"))
    restored = loads(User, payload)
    print(f"equal={restored == user}")  # => equal=True
    print(f"photo={restored.resolve()}")  # => photo=s3://other-bucket/photo-1.jpg

    cached = loads(User, dumps(restored))
    print(f"cached_resolved={cached.is_resolved}")  # => cached_resolved=True


if __name__ == "__main__":
    main()
