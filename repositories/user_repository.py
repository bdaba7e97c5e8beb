"""
UserRepository — the credential store backed by the `users` collection.

Every OTP write is a single-document atomic update. Consuming a code is a
compare-and-swap: the update only matches while the stored code hash and
expiry are still the ones the caller checked, so a concurrent consumer or a
concurrent re-issue turns it into a no-op.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument

from schemas.models.user import OtpField, OtpState, UserDoc
from shared.logging import get_logger

log = get_logger(__name__)


def _object_id(user_id: str | ObjectId) -> Optional[ObjectId]:
    if isinstance(user_id, ObjectId):
        return user_id
    if ObjectId.is_valid(user_id):
        return ObjectId(user_id)
    return None


class UserRepository:
    def __init__(self, collection) -> None:
        # AsyncCollection from pymongo's async API
        self._col = collection

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("email", ASCENDING)], unique=True)

    async def find_by_id(self, user_id: str | ObjectId) -> Optional[UserDoc]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return UserDoc.from_mongo(await self._col.find_one({"_id": oid}))

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"email": email}))

    async def create(self, user: UserDoc) -> ObjectId:
        """Insert *user*. Raises pymongo DuplicateKeyError if the email exists."""
        result = await self._col.insert_one(user.to_mongo())
        return result.inserted_id

    async def set_otp(
        self,
        user_id: str | ObjectId,
        field: OtpField,
        otp: OtpState,
        *,
        require_unverified: bool = False,
    ) -> Optional[UserDoc]:
        """Replace the pending code in *field*; returns the updated user.

        Returns None when no document matched (unknown user, or already
        verified when *require_unverified* is set).
        """
        oid = _object_id(user_id)
        if oid is None:
            return None
        query: dict[str, Any] = {"_id": oid}
        if require_unverified:
            query["verified"] = False
        doc = await self._col.find_one_and_update(
            query,
            {
                "$set": {
                    field: otp.model_dump(),
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return UserDoc.from_mongo(doc)

    async def consume_otp(
        self,
        user_id: str | ObjectId,
        field: OtpField,
        expected: OtpState,
        effect: Mapping[str, Any],
    ) -> bool:
        """Clear *field* and apply *effect* in one update, iff *expected* is still pending.

        Returns True when this call consumed the code.
        """
        oid = _object_id(user_id)
        if oid is None:
            return False
        result = await self._col.update_one(
            {
                "_id": oid,
                f"{field}.code_hash": expected.code_hash,
                f"{field}.expires_at": expected.expires_at,
            },
            {
                "$set": {**effect, "updated_at": datetime.now(timezone.utc)},
                "$unset": {field: ""},
            },
        )
        if result.modified_count != 1:
            log.warning("otp_consume_conflict", user_id=str(oid), field=field)
            return False
        return True
