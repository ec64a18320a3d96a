# docintel/state/processing.py
"""
Simulated AI processing of uploaded files.

No OCR or extraction really happens: the results below are placeholders.
They are only attached to the stored record when SIMULATE_AI_PROCESSING is
enabled; otherwise upload just accounts for the simulated token spend.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from docintel.schemas.state import DocumentFile

UPLOAD_TOKENS = {"qwen": 150}
DEFAULT_UPLOAD_TOKENS = 100

CHAT_TOKENS = {"qwen": 75}
DEFAULT_CHAT_TOKENS = 50

FALLBACK_ENGINE = "openai"


def upload_tokens(engine: Optional[str]) -> int:
    return UPLOAD_TOKENS.get(engine or FALLBACK_ENGINE, DEFAULT_UPLOAD_TOKENS)


def chat_tokens(engine: Optional[str]) -> int:
    return CHAT_TOKENS.get(engine or FALLBACK_ENGINE, DEFAULT_CHAT_TOKENS)


@dataclass
class ProcessingResult:
    tokens: int
    category: str
    ocr_text: Optional[str] = None
    extracted_data: Optional[Dict[str, Any]] = None
    extra_tags: List[str] = field(default_factory=list)

    def apply(self, file: DocumentFile) -> DocumentFile:
        return file.model_copy(update={
            "ocr_text": self.ocr_text or file.ocr_text,
            "extracted_data": self.extracted_data or file.extracted_data,
            "category": self.category,
            "tags": [*file.tags, *self.extra_tags],
        })


def simulate_ai_processing(file: DocumentFile) -> ProcessingResult:
    if file.ai_engine != "qwen":
        return ProcessingResult(tokens=upload_tokens(file.ai_engine), category="General Document")

    return ProcessingResult(
        tokens=upload_tokens(file.ai_engine),
        category="Business Document",
        ocr_text=(
            f"OCR extracted text from {file.name}. This document contains structured information "
            "including dates, names, and key data points that have been processed using "
            "Qwen-VL's advanced vision capabilities."
        ),
        extracted_data={
            "names": ["John Smith", "Sarah Johnson"],
            "dates": ["2024-01-15", "2024-02-01"],
            "amounts": ["$5,000.00", "$2,500.00"],
            "categories": ["Financial", "Business"],
        },
        extra_tags=["ocr-processed", "qwen-analyzed"],
    )
