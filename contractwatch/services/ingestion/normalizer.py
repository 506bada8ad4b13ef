import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple
from contractwatch.exceptions import RecordUpsertFailure

logger = logging.getLogger(__name__)

# Contracts Finder item field -> ContractRecord column
TEXT_FIELDS = {
    "parentId": "parent_id",
    "noticeIdentifier": "notice_identifier",
    "title": "title",
    "description": "description",
    "cpvDescription": "cpv_description",
    "cpvDescriptionExpanded": "cpv_description_expanded",
    "awardedSupplier": "awarded_supplier",
    "postcode": "postcode",
    "coordinates": "coordinates",
    "noticeType": "notice_type",
    "noticeStatus": "notice_status",
    "organisationName": "organisation_name",
    "sector": "sector",
    "cpvCodes": "cpv_codes",
    "cpvCodesExtended": "cpv_codes_extended",
    "region": "region",
    "regionText": "region_text",
}

DATE_FIELDS = {
    "publishedDate": "published_date",
    "deadlineDate": "deadline_date",
    "awardedDate": "awarded_date",
    "approachMarketDate": "approach_market_date",
    "lastNotifableUpdate": "last_notifable_update",
    "start": "start_date",
    "end": "end_date",
}

MONEY_FIELDS = {
    "valueLow": "value_low",
    "valueHigh": "value_high",
    "awardedValue": "awarded_value",
}

BOOL_FIELDS = {
    "isSubNotice": "is_sub_notice",
    "isSuitableForSme": "is_suitable_for_sme",
    "isSuitableForVco": "is_suitable_for_vco",
}


class Normalizer:

    def map_notice(self, notice: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Maps one `noticeList` entry to (item_id, column values) for the store.
        Every feed column is present in the result so an update fully
        overwrites the previous sighting.
        """
        item = notice.get("item") if isinstance(notice, dict) else None
        if not isinstance(item, dict):
            raise RecordUpsertFailure("Notice has no item payload")

        item_id = item.get("id")
        if not item_id:
            raise RecordUpsertFailure("Notice item has no id", details={"title": item.get("title")})
        item_id = str(item_id)

        fields: Dict[str, Any] = {}
        for src, col in TEXT_FIELDS.items():
            value = item.get(src)
            fields[col] = str(value) if value is not None else None

        for src, col in DATE_FIELDS.items():
            fields[col] = self._parse_date(item.get(src))

        for src, col in MONEY_FIELDS.items():
            fields[col] = self._parse_money(item_id, src, item.get(src))

        for src, col in BOOL_FIELDS.items():
            value = item.get(src)
            fields[col] = bool(value) if value is not None else None

        fields["raw_json"] = item
        return item_id, fields

    def _parse_date(self, value: Any) -> Optional[datetime]:
        if not value:
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable date value: {value!r}")
            return None

    def _parse_money(self, item_id: str, field_name: str, value: Any) -> Optional[Decimal]:
        if value is None or value == "":
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise RecordUpsertFailure(
                f"Invalid {field_name} value {value!r}", item_id=item_id
            ) from e
