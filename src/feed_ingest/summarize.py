"""Article summarization through the HuggingFace Inference API."""

import logging
import os
from typing import Optional, Protocol

import requests
from dotenv import load_dotenv

from feed_ingest.config import DEFAULT_SUMMARIZE_URL

load_dotenv()

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    def summarize(self, text: str) -> Optional[str]:
        ...


class HuggingFaceSummarizer:
    """Abstractive summaries from a hosted BART model.

    Failures never propagate: any error is logged and yields None.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        model_url: str = DEFAULT_SUMMARIZE_URL,
        max_input_chars: int = 1500,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_token = api_token or os.environ.get("HUGGING_FACE_TOKEN")
        if not self.api_token:
            logger.warning("HUGGING_FACE_TOKEN not set; summarization requests will be unauthenticated")
        self.model_url = model_url
        self.max_input_chars = max_input_chars
        self.timeout = timeout
        self.session = session or requests.Session()

    def summarize(self, text: str) -> Optional[str]:
        if not text or not text.strip():
            return None

        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        try:
            response = self.session.post(
                self.model_url,
                json={"inputs": text[: self.max_input_chars]},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Summarization failed: %s", e)
            return None

        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            summary = payload[0].get("summary_text")
            if isinstance(summary, str) and summary.strip():
                return summary.strip()
        logger.warning("Summarization response had no summary_text")
        return None
