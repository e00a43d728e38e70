"""
Catalog Import Validator

Checks admin-supplied JSON before it replaces a whole collection.
"""

import json
from typing import Any

from pydantic import ValidationError

from showroom.common.logging_setup import get_service_logger
from showroom.common.models import CaseStudy, Product

logger = get_service_logger("sync.validator")

# Field that must be present on the first element, besides "id"
TITLE_FIELDS = {
    "products": "name",
    "cases": "title",
}

MODELS = {
    "products": Product,
    "cases": CaseStudy,
}


class CatalogValidator:
    """Validates import payloads for products and cases"""

    def validate(self, collection: str, payload: Any) -> tuple[list, list[str]]:
        """
        Validate an import payload.

        Args:
            collection: "products" or "cases"
            payload: JSON text or already decoded data

        Returns:
            Tuple of (parsed items, list of error messages)
        """
        if collection not in MODELS:
            raise ValueError(f"Unknown collection: {collection}")

        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                return [], [f"Invalid JSON: {e.msg} (line {e.lineno})"]

        if not isinstance(payload, list):
            return [], ["Imported data must be an array"]

        errors: list[str] = []
        title_field = TITLE_FIELDS[collection]

        # Shape check on the first entry catches pasting the wrong file
        if payload:
            first = payload[0]
            if not isinstance(first, dict) or not first.get("id") or not first.get(title_field):
                errors.append(f"Missing required fields (id, {title_field})")
                return [], errors

        model = MODELS[collection]
        items = []
        seen_ids: set[str] = set()
        for index, entry in enumerate(payload):
            try:
                item = model.model_validate(entry)
            except ValidationError as e:
                first_error = e.errors()[0]
                location = ".".join(str(part) for part in first_error["loc"])
                errors.append(f"Item {index}: {location or 'entry'} {first_error['msg']}")
                continue

            if not item.id:
                errors.append(f"Item {index}: id must not be empty")
                continue
            if item.id in seen_ids:
                errors.append(f"Item {index}: duplicate id {item.id!r}")
                continue
            seen_ids.add(item.id)
            items.append(item)

        if errors:
            logger.warning(
                f"Import validation failed: {len(errors)} errors",
                extra={"collection": collection, "errors": errors},
            )
            return [], errors

        logger.debug(f"Import validation passed: {len(items)} {collection}")
        return items, []
