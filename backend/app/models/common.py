"""Common types shared across all models."""

import hashlib
import json
import re
import unicodedata
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimal internally, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """Wire model with camelCase aliases; snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def slugify(name: str) -> str:
    """Lowercase ASCII slug with runs of other characters replaced by '-'.

    Examples:
        >>> slugify("Côte d'Azur")
        'cote-d-azur'
        >>> slugify("  New  York ")
        'new-york'
    """
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")
    return slug or "destination"


def payload_digest(payload: Any) -> str:
    """SHA-256 hex digest of a JSON-serializable payload in canonical form."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
