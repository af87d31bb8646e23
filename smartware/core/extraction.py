# =========================================================
# DOCUMENT EXTRACTION (GEMINI)
#
# Sends an invoice / delivery note image to Gemini and returns
# the line items it reads. Never touches the ledger: callers
# review the items first, then post them as stock entries.
# =========================================================

import base64
import json
import logging
from datetime import date
from decimal import Decimal

import requests
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from smartware.core.config import settings

logger = logging.getLogger("smartware")


EXTRACTION_PROMPT = """You are an inventory auditor who must be 100% accurate.
TASK: extract the line items from the attached invoice or goods receipt/issue note.
RULES:
1. Read every line item carefully.
2. name: the full product name, never abbreviated.
3. quantity: the actual quantity of each line item.
4. sku: if no explicit code is printed, derive one from the name's initials (e.g. 'Bao Khi Khang' -> 'BKK').
5. lot: very important, look for markers such as Lot, Lô, No.
6. expiryDate: format YYYY-MM-DD.
Reason step by step before returning the JSON."""

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "sku": {"type": "STRING"},
            "name": {"type": "STRING"},
            "quantity": {"type": "NUMBER"},
            "category": {"type": "STRING"},
            "price": {"type": "NUMBER"},
            "cost": {"type": "NUMBER"},
            "lot": {"type": "STRING"},
            "expiryDate": {"type": "STRING"},
        },
        "required": ["name", "quantity"],
    },
}


class ExtractedItem(BaseModel):
    sku: str | None = None
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    cost: Decimal | None = Field(default=None, ge=0)
    lot: str | None = None
    expiry_date: date | None = Field(default=None, alias="expiryDate")

    model_config = {"populate_by_name": True}

    @field_validator("sku", "category", "lot", "expiry_date", mode="before")
    @classmethod
    def _blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


_items_adapter = TypeAdapter(list[ExtractedItem])


# =========================================================
# ERRORS
# =========================================================
class ExtractionError(Exception):
    pass


class ExtractionAuthError(ExtractionError):
    """API key missing or rejected; the user has to pick a key again."""


class ExtractionServiceError(ExtractionError):
    pass


class MalformedExtractionError(ExtractionError):
    pass


class EmptyExtractionError(ExtractionError):
    pass


# =========================================================
# CLIENT
# =========================================================
def _build_payload(document: bytes, mime_type: str) -> dict:
    return {
        "contents": [{
            "parts": [
                {"text": EXTRACTION_PROMPT},
                {
                    "inline_data": {
                        "mime_type": mime_type,
                        "data": base64.b64encode(document).decode("ascii"),
                    }
                },
            ]
        }],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
            "thinkingConfig": {"thinkingBudget": settings.GEMINI_THINKING_BUDGET},
        },
    }


def _response_text(data: dict) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise MalformedExtractionError("Response has no candidate content")

    return "".join(part.get("text", "") for part in parts if not part.get("thought"))


def parse_items(text: str) -> list[ExtractedItem]:
    try:
        raw = json.loads(text or "[]")
    except ValueError:
        raise MalformedExtractionError("Model output is not valid JSON")

    try:
        items = _items_adapter.validate_python(raw)
    except ValidationError as e:
        raise MalformedExtractionError(f"Model output has invalid items: {e.error_count()} errors")

    if not items:
        raise EmptyExtractionError("No products found in the document")

    return items


def extract_items(document: bytes, mime_type: str) -> list[ExtractedItem]:
    if not settings.GEMINI_API_KEY:
        raise ExtractionAuthError("GEMINI_API_KEY not configured")

    url = f"{settings.GEMINI_API_URL}/models/{settings.GEMINI_MODEL}:generateContent"
    headers = {
        "x-goog-api-key": settings.GEMINI_API_KEY,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            url,
            json=_build_payload(document, mime_type),
            headers=headers,
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"Gemini connection error: {str(e)}")
        raise ExtractionServiceError("Unable to connect to extraction service")

    if response.status_code != 200:
        if response.status_code in (401, 403, 404) or "Requested entity was not found" in response.text:
            logger.error(f"Gemini rejected API key. Status: {response.status_code}")
            raise ExtractionAuthError("Extraction service rejected the API key")

        logger.error(
            f"Gemini request failed. Status: {response.status_code}, Body: {response.text}"
        )
        raise ExtractionServiceError("Extraction request failed")

    try:
        data = response.json()
    except ValueError:
        logger.error("Gemini returned invalid JSON")
        raise MalformedExtractionError("Invalid response from extraction service")

    items = parse_items(_response_text(data))
    logger.info(f"Extracted {len(items)} items from {mime_type} document")
    return items
